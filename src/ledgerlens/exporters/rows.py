"""
Report flattening — turn a typed report into plain row records.

Every report becomes up to three sections: a ``summary`` (metric/value
pairs), a time series (``timeSeries`` or ``history``) and category-level
rows (``categories``, ``accounts``, ``goals`` or ``transactions``). The source report is
never modified.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from pydantic import BaseModel, Field

from ledgerlens.models.report import (
    AccountSummary,
    BudgetPerformanceReport,
    CategoryReport,
    CustomReport,
    DashboardSummary,
    GoalSummary,
    IncomeExpenseSummary,
    NetWorthReport,
)


class ExportOptions(BaseModel):
    """What to include in an export and in which format."""

    format: str = Field(default="csv", pattern="^(csv|json)$")
    include_summary: bool = True
    include_time_series: bool = True
    include_categories: bool = True


@dataclass
class ExportRows:
    """Flattened sections of one report."""

    summary: list[dict[str, Any]] = field(default_factory=list)
    time_series: list[dict[str, Any]] = field(default_factory=list)
    categories: list[dict[str, Any]] = field(default_factory=list)
    time_series_label: str = "timeSeries"
    categories_label: str = "categories"

    def sections(self) -> list[tuple[str, list[dict[str, Any]]]]:
        """Non-empty sections in export order."""
        ordered = [
            ("summary", self.summary),
            (self.time_series_label, self.time_series),
            (self.categories_label, self.categories),
        ]
        return [(name, rows) for name, rows in ordered if rows]

    def to_records(self) -> list[dict[str, Any]]:
        """All rows, each tagged with its ``section``."""
        records = []
        for name, rows in self.sections():
            for row in rows:
                records.append({"section": name, **row})
        return records


def _summary(**metrics: Any) -> list[dict[str, Any]]:
    return [{"metric": name, "value": value} for name, value in metrics.items()]


def _dump(items: list[BaseModel]) -> list[dict[str, Any]]:
    return [item.model_dump(mode="json") for item in items]


def flatten_report(report: BaseModel, options: ExportOptions | None = None) -> ExportRows:
    """
    Flatten a report into export rows.

    Args:
        report: Any LedgerLens report model.
        options: Section switches; all sections by default.

    Returns:
        ExportRows with the requested sections filled.

    Raises:
        ValueError: If the report type is not exportable.
    """
    opts = options or ExportOptions()
    rows = ExportRows()

    if isinstance(report, IncomeExpenseSummary):
        rows.summary = _summary(
            period_start=report.period_start.isoformat(),
            period_end=report.period_end.isoformat(),
            total_income=report.total_income,
            total_expenses=report.total_expenses,
            net_cash_flow=report.net_cash_flow,
            savings_rate=report.savings_rate,
        )
        rows.time_series = _dump(report.time_series)
        rows.categories = [
            {"type": "income", **row} for row in _dump(report.income_by_category)
        ] + [
            {"type": "expense", **row} for row in _dump(report.expenses_by_category)
        ]

    elif isinstance(report, NetWorthReport):
        rows.summary = _summary(
            current_net_worth=report.current_net_worth,
            total_assets=report.total_assets,
            total_liabilities=report.total_liabilities,
            change_amount=report.change_amount,
            change_percentage=report.change_percentage,
        )
        rows.time_series = _dump(report.time_series)
        rows.time_series_label = "history"

    elif isinstance(report, AccountSummary):
        rows.summary = _summary(
            net_worth=report.net_worth,
            total_assets=report.total_assets,
            total_liabilities=report.total_liabilities,
        )
        rows.categories = _dump(report.accounts)
        rows.categories_label = "accounts"

    elif isinstance(report, DashboardSummary):
        rows.summary = _summary(
            period_start=report.period_start.isoformat(),
            period_end=report.period_end.isoformat(),
            net_worth=report.net_worth,
            net_worth_change=report.net_worth_change,
            net_worth_change_percentage=report.net_worth_change_percentage,
            monthly_income=report.monthly_income,
            monthly_income_change=report.monthly_income_change,
            monthly_income_change_percentage=report.monthly_income_change_percentage,
            monthly_expenses=report.monthly_expenses,
            monthly_expenses_change=report.monthly_expenses_change,
            monthly_expenses_change_percentage=report.monthly_expenses_change_percentage,
            savings_rate=report.savings_rate,
            savings_rate_change=report.savings_rate_change,
        )
        rows.time_series = _dump(report.cash_flow)
        rows.categories = _dump(report.expense_breakdown)

    elif isinstance(report, BudgetPerformanceReport):
        rows.summary = _summary(
            budget_name=report.budget_name,
            start_date=report.start_date.isoformat(),
            end_date=report.end_date.isoformat(),
            total_budgeted=report.total_budgeted,
            total_spent=report.total_spent,
            remaining_budget=report.remaining_budget,
            over_budget_amount=report.over_budget_amount,
            projected_total=report.trends.projected_total,
        )
        rows.categories = _dump(report.categories)

    elif isinstance(report, GoalSummary):
        rows.summary = _summary(
            total_target=report.total_target,
            total_saved=report.total_saved,
            overall_progress=report.overall_progress,
        )
        rows.categories = _dump(report.goals)
        rows.categories_label = "goals"

    elif isinstance(report, CategoryReport):
        rows.summary = _summary(
            category_name=report.category_name,
            total_spent=report.total_spent,
            average_per_period=report.average_per_period,
            previous_period_comparison=report.previous_period_comparison,
        )
        rows.time_series = _dump(report.time_series)
        rows.categories = _dump(report.transactions)
        rows.categories_label = "transactions"

    elif isinstance(report, CustomReport):
        rows.summary = _summary(
            title=report.title,
            total_amount=report.summary.total_amount,
            compare_amount=report.summary.compare_amount,
            change_percentage=report.summary.change_percentage,
        )
        data = [dict(row) for row in report.data]
        if data and "category_id" in data[0]:
            rows.categories = data
        else:
            rows.time_series = data

    else:
        raise ValueError(f"Cannot export report of type {type(report).__name__}")

    if not opts.include_summary:
        rows.summary = []
    if not opts.include_time_series:
        rows.time_series = []
    if not opts.include_categories:
        rows.categories = []
    return rows


def stringify(value: Any) -> str:
    """Render a cell value for CSV output."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ";".join(stringify(v) for v in value)
    return str(value)
