#!/usr/bin/env python3
"""
Cycle Metrics - self-monitoring for refresh cycles.

Tracks each fetch/parse/publish pass and exposes its outcome next to the
weather series on /metrics.

Usage:
    monitor = RefreshMonitor(store)

    with monitor.track_cycle(expected_stations=len(watchlist)) as cycle:
        cycle.report_time = parse_timestamp(doc)
        ...
        cycle.stations_published = result.stations_published

Key features:
- Fail-safe: if updating the monitoring series fails, the cycle is unaffected
- Automatic timing (start/end times captured)
- Automatic status (success/failed) from whether an exception escaped
- Exceptions are recorded but never suppressed
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from prometheus_client import Counter, Gauge

from metric_store import MetricStore

logger = logging.getLogger(__name__)


class RefreshMonitor:
    """Registers the refresh self-monitoring series in a store (once per store)."""

    def __init__(self, store: MetricStore):
        self.cycles = Counter(
            "arso_refresh_cycles", "Refresh cycles by outcome",
            ["status"], registry=store.registry
        )
        self.duration = Gauge(
            "arso_refresh_duration_seconds", "Duration of the last refresh cycle",
            registry=store.registry
        )
        self.last_success = Gauge(
            "arso_refresh_last_success_timestamp_seconds",
            "Unix time of the last successful refresh cycle",
            registry=store.registry
        )
        self.stations_published = Gauge(
            "arso_refresh_stations_published",
            "Watchlisted stations published by the last successful cycle",
            registry=store.registry
        )
        self.last_cycle: Optional["CycleMetrics"] = None

    def track_cycle(self, expected_stations: Optional[int] = None) -> "CycleMetrics":
        """Create a context manager for one refresh cycle."""
        return CycleMetrics(monitor=self, expected_stations=expected_stations)


@dataclass
class CycleMetrics:  # pylint: disable=too-many-instance-attributes
    """
    Context manager for tracking one refresh cycle.

    Fail-safe design: publishing is wrapped in try/except. If it fails, a
    warning is logged and the cycle's own result or exception stands.
    """
    monitor: RefreshMonitor = field(repr=False)
    expected_stations: Optional[int] = None

    run_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: str = "running"
    error_message: Optional[str] = None
    error_type: Optional[str] = None
    report_time: Optional[str] = None
    stations_published: int = 0
    duration: Optional[float] = None
    _started: float = field(default=0.0, repr=False)

    def __enter__(self):
        """Start timing on context entry."""
        self.start_time = datetime.now(timezone.utc).isoformat()
        self._started = time.monotonic()
        logger.info("Refresh cycle %s starting", self.run_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Finalize metrics on context exit."""
        self.end_time = datetime.now(timezone.utc).isoformat()
        self.duration = time.monotonic() - self._started

        if exc_type is not None:
            self.status = "failed"
            self.error_message = str(exc_val)
            self.error_type = exc_type.__name__
        else:
            self.status = "success"
            if self.expected_stations and self.stations_published < self.expected_stations:
                logger.warning("Refresh cycle %s published %d/%d watchlisted stations",
                               self.run_id, self.stations_published, self.expected_stations)

        logger.info("Refresh cycle %s %s in %.2fs", self.run_id, self.status, self.duration)
        self._safe_publish()
        self.monitor.last_cycle = self
        return False  # Don't suppress exceptions

    def _safe_publish(self):
        """Update the monitoring series, failing silently on error."""
        try:
            self.monitor.cycles.labels(self.status).inc()
            self.monitor.duration.set(self.duration)
            if self.status == "success":
                self.monitor.last_success.set_to_current_time()
                self.monitor.stations_published.set(self.stations_published)
        except (ValueError, TypeError) as e:
            logger.warning("Failed to publish refresh metrics: %s", e)
