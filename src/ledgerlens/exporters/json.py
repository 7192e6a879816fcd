"""
JSON exporter.

Pretty-printed document with the export timestamp, the options that
produced it and one key per included section.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

from ledgerlens.exporters.rows import ExportOptions, flatten_report


def render_json(
    report: BaseModel,
    options: ExportOptions | None = None,
    report_type: str | None = None,
    exported_at: datetime | None = None,
) -> str:
    """Render a report as a JSON export document."""
    opts = options or ExportOptions(format="json")
    rows = flatten_report(report, opts)
    stamp = exported_at or datetime.now(timezone.utc)

    document: dict[str, Any] = {
        "reportType": report_type,
        "exportedAt": stamp.isoformat(),
        "options": {
            "format": opts.format,
            "includeSummary": opts.include_summary,
            "includeTimeSeries": opts.include_time_series,
            "includeCategories": opts.include_categories,
        },
    }
    for name, section in rows.sections():
        document[name] = section

    return json.dumps(document, indent=2, ensure_ascii=False)
