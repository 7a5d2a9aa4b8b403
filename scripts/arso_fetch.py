#!/usr/bin/env python3
"""
ARSO Document Fetcher

Downloads the latest automatic station observations page from ARSO
(Slovenian Environment Agency). One GET per attempt, bounded by a timeout,
with a small number of retries for transport errors.
"""

import logging
import time
from typing import Optional

import requests

from arso_errors import ArsoConnectionError

ARSO_URL = (
    "https://meteo.arso.gov.si/uploads/probase/www/observ/surface/text/sl/"
    "observationAms_si_latest.html"
)

FETCH_TIMEOUT_SEC = 30
FETCH_MAX_RETRIES = 3
FETCH_RETRY_DELAY_SEC = 5

HEADERS = {
    'User-Agent': 'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
}

logger = logging.getLogger(__name__)


def fetch_document(
    url: str = ARSO_URL,
    timeout: float = FETCH_TIMEOUT_SEC,
    max_retries: int = FETCH_MAX_RETRIES,
    retry_delay: float = FETCH_RETRY_DELAY_SEC,
    session: Optional[requests.Session] = None
) -> bytes:
    """Fetch the observation page and return its raw body.

    Args:
        url: Page to fetch
        timeout: Per-attempt request timeout in seconds
        max_retries: Total number of attempts
        retry_delay: Seconds between attempts
        session: Optional requests session (defaults to module-level requests)

    Returns:
        Undecoded response body; the page declares its own charset

    Raises:
        ArsoConnectionError: If every attempt failed
    """
    getter = session.get if session is not None else requests.get
    last_error: Optional[Exception] = None

    for attempt in range(1, max_retries + 1):
        try:
            response = getter(url, headers=HEADERS, timeout=timeout)
            response.raise_for_status()
            logger.debug("Fetched %d bytes from %s", len(response.content), url)
            return response.content
        except requests.exceptions.RequestException as e:
            last_error = e
            if attempt < max_retries:
                logger.warning(
                    "Fetch of %s failed (attempt %d/%d), retrying in %ss: %s",
                    url, attempt, max_retries, retry_delay, e
                )
                time.sleep(retry_delay)
            else:
                logger.error("Fetch of %s failed after %d attempts: %s",
                             url, max_retries, e)

    if last_error is None:
        raise ArsoConnectionError(f"no attempts made for {url}")
    raise ArsoConnectionError(str(last_error)) from last_error
