#!/usr/bin/env python3
"""
ARSO Document Parser

Turns the observation page into a BeautifulSoup tree, reads the report
timestamp from the table header and lists the observation rows.

Page layout (relevant parts only):
    <table class="meteoSI-table">
      <thead><tr><th class="meteoSI-header">18.10.2026 12:30 CEST</th>...</tr></thead>
      <tbody>
        <tr><td class="meteoSI-th">Ljubljana</td><td class="t">5.2</td>...</tr>
      </tbody>
    </table>
"""

import logging
from typing import Union

import soupsieve
from bs4 import BeautifulSoup, Tag

from arso_errors import ArsoParseError

# Compiled once, reused for every cycle
TIMESTAMP_SELECTOR = soupsieve.compile("th.meteoSI-header")
ROW_SELECTOR = soupsieve.compile("table.meteoSI-table > tbody > tr")

logger = logging.getLogger(__name__)


def parse_document(content: Union[bytes, str]) -> BeautifulSoup:
    """Parse the page into a queryable tree.

    Bytes are decoded using the page's own <meta charset>.
    """
    return BeautifulSoup(content, 'html.parser')


def parse_timestamp(doc: BeautifulSoup) -> str:
    """Return the report timestamp text from the table header.

    Raises:
        ArsoParseError: If the header cell is missing
    """
    cell = TIMESTAMP_SELECTOR.select_one(doc)
    if cell is None:
        raise ArsoParseError("Datetime not found")
    return cell.get_text(strip=True)


def enumerate_rows(doc: BeautifulSoup) -> list[Tag]:
    """Return every observation row, in document order.

    Rows are not filtered beyond the structural pattern, so any non-data
    row inside the table body is passed through to extraction unchanged.
    """
    rows = ROW_SELECTOR.select(doc)
    logger.debug("Found %d observation rows", len(rows))
    return rows
