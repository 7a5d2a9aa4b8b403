#!/usr/bin/env python3
"""
ARSO Weather Exporter

Scrapes the ARSO (Slovenian Environment Agency) latest observations page
every 10 minutes and publishes the watchlisted stations' measurements as
Prometheus gauges.

Usage:
    python arso_exporter.py                         # Serve on :9336 with settings.json
    python arso_exporter.py --config my.json        # Custom settings file
    python arso_exporter.py --once                  # One refresh cycle, print metrics, exit

Endpoints:
- GET /         banner
- GET /metrics  Prometheus text exposition (HTTP 500 if rendering fails)

Published families (label `city`):
- arso_temperature, arso_relative_humidity, arso_wind_average, arso_wind_max,
  arso_rainfall, arso_solar_radiation, arso_snow_depth
"""

import argparse
import functools
import logging
import sys
import threading
import time
from pathlib import Path
from typing import Callable, Iterable, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse, Response

from arso_errors import ArsoError
from arso_fetch import fetch_document
from arso_parser import enumerate_rows, parse_document, parse_timestamp
from cycle_metrics import RefreshMonitor
from exporter_config import SETTINGS_PATH, load_settings
from field_registry import FieldRegistry, build_field_registry
from metric_store import MetricStore
from metric_sync import SyncResult, synchronize
from record_extractor import extract_records

BANNER = "Try /metrics\r\n"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

logger = logging.getLogger(__name__)


# ============================================================================
# Refresh Cycle
# ============================================================================

def run_cycle(
    registry: FieldRegistry,
    store: MetricStore,
    watchlist: Iterable[str],
    monitor: RefreshMonitor,
    fetch: Callable[[], bytes] = fetch_document
) -> SyncResult:
    """Fetch, parse, extract and publish one snapshot.

    Any ArsoError propagates before the store is touched, leaving the
    previous cycle's series as they were.
    """
    watched = frozenset(watchlist)

    with monitor.track_cycle(expected_stations=len(watched)) as cycle:
        doc = parse_document(fetch())

        cycle.report_time = parse_timestamp(doc)
        logger.info("Current timestamp: %s", cycle.report_time)

        records = extract_records(enumerate_rows(doc), registry)
        logger.info("Extracted %d station records", len(records))

        result = synchronize(records, watched, registry, store)
        cycle.stations_published = result.stations_published

    return result


# ============================================================================
# Scheduler
# ============================================================================

class RefreshScheduler:
    """Runs the refresh cycle on a fixed interval in a background thread.

    The first cycle runs immediately. Cycles never overlap: if one takes
    longer than the interval, the next one simply starts late.
    """

    def __init__(self, cycle: Callable[[], object], interval: float):
        self.cycle = cycle
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def run_once(self) -> bool:
        """Run one cycle, logging failures. Returns True on success."""
        try:
            self.cycle()
            return True
        except ArsoError as e:
            logger.error("Refresh failed: %s", e)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected error during refresh")
        return False

    def _loop(self):
        while not self._stop.is_set():
            started = time.monotonic()
            self.run_once()
            elapsed = time.monotonic() - started
            self._stop.wait(max(0.0, self.interval - elapsed))

    def start(self):
        """Start the background thread (no-op if already running)."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="arso-refresh", daemon=True)
        self._thread.start()
        logger.info("Refresh scheduler started (every %ss)", self.interval)

    def stop(self, timeout: Optional[float] = None):
        """Signal the thread to stop and wait for the current cycle to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()


# ============================================================================
# HTTP
# ============================================================================

def create_app(store: MetricStore) -> FastAPI:
    """Build the read-only HTTP app serving the store's exposition."""
    app = FastAPI(title="ARSO Weather Exporter", docs_url=None, redoc_url=None)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return BANNER

    @app.get("/metrics")
    def metrics():
        try:
            body = store.render()
        except Exception as e:  # pylint: disable=broad-except
            logger.exception("Failed to render metrics")
            return PlainTextResponse(f"Failed to render metrics: {e}\r\n", status_code=500)
        return Response(content=body, media_type=store.content_type)

    return app


# ============================================================================
# Main
# ============================================================================

def setup_logging(level: str = "INFO", log_file: Optional[Path] = None):
    """Configure root logging for the exporter process."""
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)


def main(argv: Optional[list] = None) -> int:
    """Parse arguments, load settings, start the refresh thread and serve."""
    parser = argparse.ArgumentParser(
        description='Export ARSO weather station observations as Prometheus metrics',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          Serve with scripts/settings.json
  %(prog)s --config my.json         Use a different settings file
  %(prog)s --once                   Refresh once and print the exposition
        """
    )
    parser.add_argument('--config', type=Path, default=SETTINGS_PATH,
                        help=f'Settings file (default: {SETTINGS_PATH.name})')
    parser.add_argument('--once', action='store_true',
                        help='Run a single refresh cycle, print metrics and exit')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: INFO)')
    parser.add_argument('--log-file', type=Path,
                        help='Also write logs to this file')
    args = parser.parse_args(argv)

    setup_logging(args.log_level, args.log_file)
    logger.info("=" * 50)
    logger.info("ARSO Weather Exporter starting")

    try:
        settings = load_settings(args.config)
    except ValueError as e:
        logger.error("%s", e)
        return 1

    logger.info("Watching %d stations: %s", len(settings.cities), ", ".join(settings.cities))

    store = MetricStore()
    registry = build_field_registry(store)
    monitor = RefreshMonitor(store)
    fetch = functools.partial(
        fetch_document,
        url=settings.url,
        timeout=settings.timeout_seconds,
        max_retries=settings.fetch_retries,
    )
    cycle = functools.partial(run_cycle, registry, store, settings.watchlist, monitor, fetch)
    scheduler = RefreshScheduler(cycle, settings.interval_seconds)

    if args.once:
        ok = scheduler.run_once()
        sys.stdout.write(store.render().decode('utf-8'))
        return 0 if ok else 1

    scheduler.start()
    try:
        uvicorn.run(create_app(store), host=settings.host, port=settings.port, log_level="info")
    finally:
        scheduler.stop(timeout=5)

    return 0


if __name__ == "__main__":
    sys.exit(main())
