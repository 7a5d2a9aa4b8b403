#!/usr/bin/env python3
"""
Record Extractor

Turns observation rows into StationRecords using the field registry.

A missing cell means the page layout changed, which fails the whole cycle.
A present cell with non-numeric text (ARSO prints "-" for stations without
that sensor) is an unknown measurement, not an error.
"""

import logging
from typing import Iterable, Optional

from bs4 import Tag

from arso_errors import ArsoParseError
from field_registry import FieldRegistry, StationRecord

logger = logging.getLogger(__name__)


def parse_value(text: str) -> Optional[float]:
    """Parse a value cell's text, returning None if it is not a number."""
    try:
        return float(text.strip())
    except ValueError:
        return None


def extract_record(row: Tag, registry: FieldRegistry) -> StationRecord:
    """Build one StationRecord from an observation row.

    Raises:
        ArsoParseError: If the station name cell or any field's cell is missing
    """
    name_cell = registry.station_selector.select_one(row)
    if name_cell is None:
        raise ArsoParseError("Station name column not found")

    record = StationRecord(name=name_cell.get_text(strip=True))

    for descriptor in registry:
        cell = descriptor.selector.select_one(row)
        if cell is None:
            raise ArsoParseError(
                f"{descriptor.name.capitalize()} field not found for {record.name}"
            )
        value = parse_value(cell.get_text())
        if value is None:
            logger.debug("%s: %s unknown (%r)", record.name, descriptor.name,
                         cell.get_text(strip=True))
        record.set(descriptor.kind, value)

    return record


def extract_records(rows: Iterable[Tag], registry: FieldRegistry) -> list[StationRecord]:
    """Extract every row; the first failure propagates and nothing is returned."""
    return [extract_record(row, registry) for row in rows]
