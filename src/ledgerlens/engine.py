"""
LedgerLens — Main entry point.

The LedgerLens class ties configuration, snapshot loading, the report
assembler and the exporters together for callers that do not want to wire
the analyzers by hand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from ledgerlens.analyzers.budget import BudgetEvaluator
from ledgerlens.analyzers.periods import Granularity
from ledgerlens.analyzers.reports import ReportAssembler
from ledgerlens.config import LedgerLensConfig
from ledgerlens.exporters import ExportOptions, export_filename, render_export
from ledgerlens.models.financial import FinanceSnapshot
from ledgerlens.models.report import ReportType
from ledgerlens.snapshot import load_snapshot

logger = logging.getLogger("ledgerlens")


@dataclass
class LedgerLens:
    """Top-level facade for the analytics engine.

    Usage::

        from ledgerlens import LedgerLens

        lens = LedgerLens.from_config("ledgerlens.yaml")
        snapshot = lens.load("snapshot.yaml")
        summary = lens.report("spending", snapshot)
        path = lens.export(summary, "spending")

    Every report call is independent; several may run side by side for one
    page load since none of them share state.
    """

    config: LedgerLensConfig = field(default_factory=LedgerLensConfig)
    assembler: ReportAssembler = field(default_factory=ReportAssembler)

    @classmethod
    def from_config(cls, config_path: str | None = None, **overrides: Any) -> LedgerLens:
        """Create a LedgerLens instance from a config file or keyword arguments."""
        config = LedgerLensConfig.load(config_path, **overrides)
        assembler = ReportAssembler(budget_evaluator=BudgetEvaluator(currency=config.currency))
        return cls(config=config, assembler=assembler)

    def load(self, path: str | Path) -> FinanceSnapshot:
        """Load a snapshot file (YAML, JSON or transactions CSV)."""
        return load_snapshot(path)

    def report(
        self,
        report_type: ReportType | str,
        snapshot: FinanceSnapshot,
        *,
        start: date | None = None,
        end: date | None = None,
        granularity: Granularity | str | None = None,
        today: date | None = None,
        **kwargs: Any,
    ) -> Any:
        """Build a report using the configured default granularity."""
        return self.assembler.build(
            report_type,
            snapshot,
            start=start,
            end=end,
            granularity=Granularity(granularity or self.config.default_granularity),
            today=today,
            **kwargs,
        )

    def export_options(self, **overrides: Any) -> ExportOptions:
        """Export options from config, with per-call overrides."""
        data = self.config.export.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return ExportOptions.model_validate(data)

    def export(
        self,
        report: BaseModel,
        report_type: ReportType | str,
        options: ExportOptions | None = None,
        *,
        output_dir: str | Path | None = None,
        on: date | None = None,
    ) -> Path:
        """Serialize a report and write it to ``output_dir``.

        Returns:
            Path of the written file.
        """
        opts = options or self.export_options()
        type_name = ReportType(report_type).value
        content = render_export(report, opts, report_type=type_name)

        directory = Path(output_dir or self.config.output_dir)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / export_filename(self.config.product_name, type_name, on, opts.format)
        path.write_text(content, encoding="utf-8")

        logger.info(f"Exported {type_name} report to {path}")
        return path
