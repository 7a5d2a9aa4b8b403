#!/usr/bin/env python3
"""
ARSO Exporter Errors

Both error kinds abort the current refresh cycle before any series is touched:
- ArsoConnectionError: the observation page could not be fetched
- ArsoParseError: the page no longer has the expected structure

A non-numeric value cell is NOT an error (it becomes an unknown measurement).
"""


class ArsoError(Exception):
    """Base class for refresh cycle failures."""

    prefix = "ARSO error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def __str__(self):
        return f"{self.prefix}: {self.detail}"


class ArsoConnectionError(ArsoError):
    """Transport failure reaching the document source."""

    prefix = "Connection error"


class ArsoParseError(ArsoError):
    """Structural failure in the fetched document."""

    prefix = "Parsing error"
