#!/usr/bin/env python3
"""
Tests for metric_sync module.

Tests cover watchlist filtering, removal of unknown measurements and
idempotence of repeated application.
"""

from field_registry import MeasurementKind, StationRecord
from metric_sync import SyncResult, synchronize


def make_record(name, **values):
    record = StationRecord(name=name)
    for kind_value, value in values.items():
        record.set(MeasurementKind(kind_value), value)
    return record


class TestSynchronize:
    """Tests for synchronize function."""

    def test_present_values_set(self, registry, store, sample_value):
        """Known values should be published for watchlisted stations."""
        record = make_record("Ljubljana", temperature=5.2, relative_humidity=80.0)
        result = synchronize([record], ["Ljubljana"], registry, store)
        assert sample_value("arso_temperature", "Ljubljana") == 5.2
        assert sample_value("arso_relative_humidity", "Ljubljana") == 80.0
        assert result.stations_published == 1
        assert result.series_set == 2
        assert result.series_removed == 0

    def test_unknown_value_removes_series(self, registry, store, sample_value):
        """An unknown value should remove a previously published series."""
        synchronize([make_record("Ljubljana", temperature=5.2)], ["Ljubljana"], registry, store)
        assert sample_value("arso_temperature", "Ljubljana") == 5.2

        synchronize([make_record("Ljubljana", temperature=None)], ["Ljubljana"], registry, store)
        assert sample_value("arso_temperature", "Ljubljana") is None

    def test_unwatched_station_ignored(self, registry, store, sample_value):
        """Stations outside the watchlist should never be published."""
        records = [make_record("Ljubljana", temperature=5.2),
                   make_record("Maribor", temperature=3.1)]
        result = synchronize(records, ["Ljubljana"], registry, store)
        assert sample_value("arso_temperature", "Maribor") is None
        assert result.stations_published == 1

    def test_unwatched_station_series_untouched(self, registry, store, sample_value):
        """Existing series of unwatched stations should not be removed."""
        temperature = registry.descriptor(MeasurementKind.TEMPERATURE).family
        store.set(temperature, "Maribor", 9.9)
        synchronize([make_record("Maribor", temperature=None)], ["Ljubljana"],
                    registry, store)
        assert sample_value("arso_temperature", "Maribor") == 9.9

    def test_idempotent(self, registry, store):
        """Applying the same record twice should equal applying it once."""
        record = make_record("Ljubljana", temperature=5.2, snow_depth=12.0)
        synchronize([record], ["Ljubljana"], registry, store)
        once = store.render()
        synchronize([record], ["Ljubljana"], registry, store)
        assert store.render() == once

    def test_missing_station_removed(self, registry, store, sample_value):
        """A watchlisted station absent from the page should lose its series."""
        synchronize([make_record("Koper", temperature=15.0)], ["Koper"], registry, store)
        result = synchronize([], ["Koper"], registry, store)
        assert sample_value("arso_temperature", "Koper") is None
        assert result.missing_stations == ["Koper"]
        assert result.series_removed == 1

    def test_missing_station_kept_when_disabled(self, registry, store, sample_value):
        """With remove_missing=False stale series should be left alone."""
        synchronize([make_record("Koper", temperature=15.0)], ["Koper"], registry, store)
        result = synchronize([], ["Koper"], registry, store, remove_missing=False)
        assert sample_value("arso_temperature", "Koper") == 15.0
        assert result.missing_stations == ["Koper"]

    def test_empty_watchlist(self, registry, store):
        """An empty watchlist should publish nothing."""
        result = synchronize([make_record("Koper", temperature=1.0)], [], registry, store)
        assert result == SyncResult()
        assert b'city=' not in store.render()

    def test_all_fields_published(self, registry, store, sample_value):
        """Every measurement kind should map to its own family."""
        record = make_record("Kredarica", **{kind.value: float(i)
                                             for i, kind in enumerate(MeasurementKind)})
        synchronize([record], ["Kredarica"], registry, store)
        for i, descriptor in enumerate(registry):
            assert sample_value(descriptor.metric_name, "Kredarica") == float(i)
