#!/usr/bin/env python3
"""
Metric Store

In-memory gauge families keyed by station name, backed by a private
prometheus_client registry so several stores can coexist (tests) without
clashing in the process-wide default registry.

Every family carries a single `city` label. Updates to an individual series
are atomic (prometheus_client locks per metric), which is all the /metrics
readers need while the refresh thread writes.
"""

import logging
from typing import Optional, Set

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Gauge, generate_latest

STATION_LABEL = "city"

logger = logging.getLogger(__name__)


class MetricStore:
    """Current gauge values per (family, station), renderable as exposition text."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()
        self._families: dict[str, Gauge] = {}
        # Stations published per family, written only through set/remove
        self._published: dict[str, Set[str]] = {}

    def family(self, name: str, documentation: str) -> Gauge:
        """Register a station-labeled gauge family, or return the existing one."""
        if name not in self._families:
            self._families[name] = Gauge(
                name, documentation, [STATION_LABEL], registry=self.registry
            )
            self._published[name] = set()
        return self._families[name]

    def set(self, family: Gauge, station: str, value: float):
        """Overwrite the series for a station."""
        family.labels(station).set(value)
        self._published_in(family).add(station)

    def remove(self, family: Gauge, station: str) -> bool:
        """Drop the series for a station; no-op if it is not published.

        Returns:
            True if a series was removed
        """
        published = self._published_in(family)
        if station not in published:
            return False
        family.remove(station)
        published.discard(station)
        logger.debug("Removed series for %s", station)
        return True

    def _published_in(self, family: Gauge) -> Set[str]:
        return self._published.setdefault(family.describe()[0].name, set())

    def stations(self, family: Gauge) -> Set[str]:
        """Station names that currently have a series in the family."""
        names = set()
        for metric in family.collect():
            for sample in metric.samples:
                if STATION_LABEL in sample.labels:
                    names.add(sample.labels[STATION_LABEL])
        return names

    def render(self) -> bytes:
        """Snapshot of every current series in Prometheus text format."""
        return generate_latest(self.registry)
