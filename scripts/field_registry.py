#!/usr/bin/env python3
"""
Field Registry

Declarative table of the measurements scraped from each observation row.
Each FieldDescriptor binds:
- a CSS locator for the value cell within the row (compiled once)
- a field name used in error messages and logs
- the MeasurementKind slot it fills on StationRecord
- the gauge family the value is published to

Build the registry once at startup with build_field_registry() and pass it
to the extractor and synchronizer. It is never mutated afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

import soupsieve
from prometheus_client import Gauge

from metric_store import MetricStore

STATION_NAME_LOCATOR = "td.meteoSI-th"


class MeasurementKind(Enum):
    """Measurements reported per station."""
    TEMPERATURE = "temperature"
    RELATIVE_HUMIDITY = "relative_humidity"
    WIND_AVERAGE = "wind_average"
    WIND_MAX = "wind_max"
    RAINFALL = "rainfall"
    SOLAR_RADIATION = "solar_radiation"
    SNOW_DEPTH = "snow_depth"


# (kind, field name, locator, metric name, help text)
FIELD_DEFINITIONS = [
    (MeasurementKind.TEMPERATURE, "temperature", "td.t",
     "arso_temperature", "Air temperature (°C)"),
    (MeasurementKind.RELATIVE_HUMIDITY, "relative humidity", "td.rh",
     "arso_relative_humidity", "Relative humidity (%)"),
    (MeasurementKind.WIND_AVERAGE, "average wind", "td.ffavg_val",
     "arso_wind_average", "Average wind speed (km/h)"),
    (MeasurementKind.WIND_MAX, "max wind", "td.ffmax_val",
     "arso_wind_max", "Maximum wind gust (km/h)"),
    (MeasurementKind.RAINFALL, "rainfall", "td.rr_val",
     "arso_rainfall", "Accumulated precipitation (mm)"),
    (MeasurementKind.SOLAR_RADIATION, "solar radiation", "td.gSunRadavg",
     "arso_solar_radiation", "Average global solar radiation (W/m2)"),
    (MeasurementKind.SNOW_DEPTH, "snow depth", "td.snow",
     "arso_snow_depth", "Total snow depth (cm)"),
]


@dataclass
class StationRecord:
    """One station's measurements from a single refresh cycle.

    A value of None means the station does not currently report that
    measurement. It is never the same thing as 0.
    """
    name: str
    values: dict = field(default_factory=lambda: {kind: None for kind in MeasurementKind})

    def get(self, kind: MeasurementKind) -> Optional[float]:
        """Return the measurement, or None if unknown."""
        return self.values.get(kind)

    def set(self, kind: MeasurementKind, value: Optional[float]):
        """Store a measurement (None marks it unknown)."""
        self.values[kind] = value


@dataclass(frozen=True)
class FieldDescriptor:
    """Binding of one measurement to its locator, record slot and gauge family."""
    kind: MeasurementKind
    name: str
    locator: str
    metric_name: str
    family: Gauge = field(compare=False)
    selector: soupsieve.SoupSieve = field(compare=False, repr=False)


@dataclass(frozen=True)
class FieldRegistry:
    """Ordered, read-only collection of field descriptors."""
    descriptors: tuple
    station_selector: soupsieve.SoupSieve = field(repr=False)

    def __post_init__(self):
        seen = set()
        for descriptor in self.descriptors:
            if descriptor.locator in seen:
                raise ValueError(f"Duplicate locator {descriptor.locator!r} "
                                 f"for field {descriptor.name}")
            seen.add(descriptor.locator)

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self.descriptors)

    def __len__(self) -> int:
        return len(self.descriptors)

    def descriptor(self, kind: MeasurementKind) -> FieldDescriptor:
        """Look up the descriptor for a measurement kind."""
        for descriptor in self.descriptors:
            if descriptor.kind is kind:
                return descriptor
        raise KeyError(kind)


def build_field_registry(store: MetricStore) -> FieldRegistry:
    """Compile all locators and register their gauge families in the store."""
    descriptors = tuple(
        FieldDescriptor(
            kind=kind,
            name=name,
            locator=locator,
            metric_name=metric_name,
            family=store.family(metric_name, documentation),
            selector=soupsieve.compile(locator),
        )
        for kind, name, locator, metric_name, documentation in FIELD_DEFINITIONS
    )
    return FieldRegistry(
        descriptors=descriptors,
        station_selector=soupsieve.compile(STATION_NAME_LOCATOR),
    )
