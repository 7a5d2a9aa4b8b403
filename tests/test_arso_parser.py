#!/usr/bin/env python3
"""
Tests for arso_parser module.

Tests cover timestamp extraction and row enumeration on small pages.
"""

import pytest

from arso_errors import ArsoParseError
from arso_parser import enumerate_rows, parse_document, parse_timestamp


class TestParseTimestamp:
    """Tests for parse_timestamp function."""

    def test_timestamp_found(self, make_document, make_row):
        """Should return the header cell text."""
        doc = parse_document(make_document([make_row()], timestamp="2024-01-01 12:00"))
        assert parse_timestamp(doc) == "2024-01-01 12:00"

    def test_timestamp_whitespace_stripped(self, make_document):
        """Should strip surrounding whitespace."""
        doc = parse_document(make_document([], timestamp="\n  18.10.2026 12:30 CEST  \n"))
        assert parse_timestamp(doc) == "18.10.2026 12:30 CEST"

    def test_timestamp_missing(self, make_document, make_row):
        """Should raise a parse error when the header cell is absent."""
        doc = parse_document(make_document([make_row()], timestamp=None))
        with pytest.raises(ArsoParseError, match="Datetime not found"):
            parse_timestamp(doc)

    def test_empty_document(self):
        """Should raise a parse error on an empty page."""
        with pytest.raises(ArsoParseError):
            parse_timestamp(parse_document(""))


class TestEnumerateRows:
    """Tests for enumerate_rows function."""

    def test_rows_in_document_order(self, make_document, make_row):
        """Should return rows in the order they appear."""
        doc = parse_document(make_document([
            make_row("Ljubljana"), make_row("Maribor"), make_row("Koper"),
        ]))
        rows = enumerate_rows(doc)
        names = [row.find('td', class_='meteoSI-th').get_text() for row in rows]
        assert names == ["Ljubljana", "Maribor", "Koper"]

    def test_header_rows_excluded(self, make_document, make_row):
        """Rows in <thead> do not match the body row pattern."""
        doc = parse_document(make_document([make_row()]))
        assert len(enumerate_rows(doc)) == 1

    def test_rows_outside_table_ignored(self, make_row):
        """Rows of other tables are not observation rows."""
        html = (f'<table class="legend"><tbody>{make_row("Legenda")}</tbody></table>'
                f'<table class="meteoSI-table"><tbody>{make_row("Koper")}</tbody></table>')
        assert len(enumerate_rows(parse_document(html))) == 1

    def test_no_table(self):
        """Should return an empty list when the table is missing."""
        assert enumerate_rows(parse_document("<html><body></body></html>")) == []

    def test_non_data_rows_passed_through(self, make_document):
        """Non-data rows in the body are returned unchanged."""
        doc = parse_document(make_document(['<tr><td colspan="9">Opomba</td></tr>']))
        assert len(enumerate_rows(doc)) == 1
