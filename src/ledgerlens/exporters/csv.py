"""
CSV exporter.

One header row, then one line per record. Each record carries a ``section``
column (``summary``, ``timeSeries``/``history``, ``categories``...); columns
a section does not use are left empty. Quoting of embedded commas, quotes and
newlines is handled by pandas.
"""

from __future__ import annotations

import pandas as pd
from pydantic import BaseModel

from ledgerlens.exporters.rows import ExportOptions, flatten_report, stringify


def render_csv(report: BaseModel, options: ExportOptions | None = None) -> str:
    """Render a report as CSV text."""
    rows = flatten_report(report, options)
    records = [{key: stringify(value) for key, value in record.items()} for record in rows.to_records()]

    if not records:
        return "section\n"

    frame = pd.DataFrame.from_records(records).fillna("")
    return frame.to_csv(index=False, lineterminator="\n")
