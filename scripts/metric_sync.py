#!/usr/bin/env python3
"""
Metric Synchronizer

Mirrors one cycle's StationRecords into the metric store:
- watchlisted station, known value   -> series set to the value
- watchlisted station, unknown value -> series removed (no stale readings)
- station not on the watchlist       -> ignored entirely
- watchlisted station missing from the page -> all its series removed

Only call this once every row has been extracted, so a failed cycle
never leaves the store half-updated.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from field_registry import FieldRegistry, StationRecord
from metric_store import MetricStore

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """What one synchronization pass changed."""
    stations_published: int = 0
    series_set: int = 0
    series_removed: int = 0
    missing_stations: list = field(default_factory=list)


def apply_record(record: StationRecord, registry: FieldRegistry,
                 store: MetricStore, result: SyncResult):
    """Write every measurement of one record to the store."""
    for descriptor in registry:
        value = record.get(descriptor.kind)
        if value is None:
            if store.remove(descriptor.family, record.name):
                result.series_removed += 1
        else:
            store.set(descriptor.family, record.name, value)
            result.series_set += 1


def remove_station(station: str, registry: FieldRegistry,
                   store: MetricStore, result: SyncResult):
    """Drop every series published for a station."""
    for descriptor in registry:
        if store.remove(descriptor.family, station):
            result.series_removed += 1


def synchronize(
    records: Iterable[StationRecord],
    watchlist: Iterable[str],
    registry: FieldRegistry,
    store: MetricStore,
    remove_missing: bool = True
) -> SyncResult:
    """Publish watchlisted records and drop series that are no longer reported.

    Args:
        records: All records extracted this cycle
        watchlist: Station names to publish
        registry: Field registry the records were extracted with
        store: Metric store to update
        remove_missing: Also drop series of watchlisted stations absent from the page

    Returns:
        SyncResult with counts of what changed
    """
    watched = frozenset(watchlist)
    result = SyncResult()
    seen = set()

    for record in records:
        seen.add(record.name)
        if record.name not in watched:
            continue
        apply_record(record, registry, store, result)
        result.stations_published += 1

    result.missing_stations = sorted(watched - seen)
    for station in result.missing_stations:
        logger.warning("Watchlisted station %s not found in document", station)
        if remove_missing:
            remove_station(station, registry, store, result)

    logger.info("Published %d/%d watchlisted stations (%d series set, %d removed)",
                result.stations_published, len(watched),
                result.series_set, result.series_removed)
    return result
