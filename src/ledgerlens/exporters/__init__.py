"""Exporters package — flatten reports and serialize them to CSV or JSON."""
from __future__ import annotations

from datetime import date

from pydantic import BaseModel

from ledgerlens.exporters.csv import render_csv
from ledgerlens.exporters.json import render_json
from ledgerlens.exporters.rows import ExportOptions, ExportRows, flatten_report

__all__ = [
    "ExportOptions",
    "ExportRows",
    "export_filename",
    "flatten_report",
    "render_csv",
    "render_json",
    "render_export",
]


def export_filename(product: str, report_type: str, on: date | None = None, fmt: str = "csv") -> str:
    """``<product>-<reportType>-report-<YYYY-MM-DD>.<ext>``."""
    day = on or date.today()
    return f"{product}-{report_type}-report-{day.isoformat()}.{fmt}"


def render_export(report: BaseModel, options: ExportOptions, report_type: str | None = None) -> str:
    """Serialize a report in the format named by ``options``."""
    if options.format == "json":
        return render_json(report, options, report_type=report_type)
    return render_csv(report, options)
