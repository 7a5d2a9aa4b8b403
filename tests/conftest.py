"""
Shared fixtures for exporter tests.

Puts scripts/ on the import path and provides builders for small
observation pages shaped like the ARSO table.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

from field_registry import build_field_registry  # noqa: E402
from metric_store import MetricStore  # noqa: E402

# Field name -> value cell class on the ARSO page
CELL_CLASSES = {
    'temperature': 't',
    'relative_humidity': 'rh',
    'wind_average': 'ffavg_val',
    'wind_max': 'ffmax_val',
    'rainfall': 'rr_val',
    'solar_radiation': 'gSunRadavg',
    'snow_depth': 'snow',
}


def build_row(name="Ljubljana", missing=(), **values):
    """Build one <tr>; fields not given read "-", fields in `missing` get no cell."""
    cells = []
    if name is not None:
        cells.append(f'<td class="meteoSI-th">{name}</td>')
    cells.append('<td class="nn_icon_wwsyn_icon"></td>')
    for field_name, css_class in CELL_CLASSES.items():
        if field_name in missing:
            continue
        cells.append(f'<td class="{css_class}">{values.get(field_name, "-")}</td>')
    return f"<tr>{''.join(cells)}</tr>"


def build_document(rows, timestamp="2024-01-01 12:00"):
    """Wrap rows in a page with the observation table and its header."""
    header = (f'<th class="meteoSI-header">{timestamp}</th>'
              if timestamp is not None else '<th>Postaja</th>')
    return f"""<html><head><meta charset="utf-8"><title>ARSO</title></head><body>
<table class="meteoSI-table">
<thead><tr>{header}</tr></thead>
<tbody>
{''.join(rows)}
</tbody>
</table>
</body></html>"""


@pytest.fixture
def make_row():
    return build_row


@pytest.fixture
def make_document():
    return build_document


@pytest.fixture
def store():
    """Fresh store with its own prometheus registry."""
    return MetricStore()


@pytest.fixture
def registry(store):
    return build_field_registry(store)


@pytest.fixture
def sample_value(store):
    """Read one published value (None if the series does not exist)."""
    def _get(metric_name, station):
        return store.registry.get_sample_value(metric_name, {'city': station})
    return _get
