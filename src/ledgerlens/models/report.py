"""
Report models — the typed results handed to the presentation layer.

Every report can be dumped with ``to_dict()`` / ``to_json()`` and flattened
for CSV/JSON export through ``ledgerlens.exporters``.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ReportType(str, Enum):
    """Report kinds the assembler can build."""

    SPENDING = "spending"
    INCOME = "income"
    NET_WORTH = "net_worth"
    CATEGORY = "category"
    CUSTOM = "custom"
    ACCOUNTS = "accounts"
    DASHBOARD = "dashboard"


class BudgetStatus(str, Enum):
    """Per-category budget classification."""

    UNDER = "under"
    ON_TRACK = "on_track"  # spending pace ahead of time pace, not yet over
    OVER = "over"


class GoalScheduleStatus(str, Enum):
    """Whether a goal keeps up with its timeline."""

    ON_TRACK = "on_track"
    BEHIND_SCHEDULE = "behind_schedule"
    COMPLETED = "completed"


class _Report(BaseModel):
    """Shared serialization helpers."""

    def to_dict(self) -> dict[str, Any]:
        """Export report as dictionary."""
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        """Export report as JSON."""
        return self.model_dump_json(indent=2)


class CategoryAmount(BaseModel):
    """One slice of a category breakdown."""

    category_id: str
    category_name: str
    amount: float
    percentage: float = Field(description="Share of the type's total, one decimal")
    color: str | None = None


class CategoryDelta(BaseModel):
    """Current vs previous period amount for a category."""

    category_id: str
    category_name: str
    current: float
    previous: float
    delta: float
    change_percentage: float = 0.0


class CashFlowPoint(BaseModel):
    """Income and expenses for one bucket."""

    period: str  # "2025-04", "2025-W14", "2025-Q2"
    start: date
    end: date
    income: float = 0.0
    expenses: float = 0.0
    net: float = 0.0
    transaction_count: int = 0


class AmountPoint(BaseModel):
    """A single-amount bucket (category and custom report series)."""

    period: str
    amount: float = 0.0


class IncomeExpenseSummary(_Report):
    """Income/expense totals, breakdowns and time series for a range."""

    period_start: date
    period_end: date
    granularity: str
    total_income: float = 0.0
    total_expenses: float = 0.0
    net_cash_flow: float = 0.0
    savings_rate: float = Field(default=0.0, description="Net cash flow as a percent of income")
    income_by_category: list[CategoryAmount] = Field(default_factory=list)
    expenses_by_category: list[CategoryAmount] = Field(default_factory=list)
    time_series: list[CashFlowPoint] = Field(default_factory=list)

    # Filled when a previous-period snapshot was supplied
    previous_total_income: float | None = None
    previous_total_expenses: float | None = None
    income_deltas: list[CategoryDelta] = Field(default_factory=list)
    expense_deltas: list[CategoryDelta] = Field(default_factory=list)

    @property
    def largest_expense(self) -> CategoryAmount | None:
        return self.expenses_by_category[0] if self.expenses_by_category else None


class NetWorthPoint(BaseModel):
    """Net worth at one bucket boundary."""

    period: str
    date: date
    assets: float = 0.0
    liabilities: float = 0.0
    net_worth: float = 0.0


class NetWorthReport(_Report):
    """Current net worth plus its history."""

    current_net_worth: float = 0.0
    total_assets: float = 0.0
    total_liabilities: float = 0.0
    change_amount: float = 0.0
    change_percentage: float = 0.0
    time_series: list[NetWorthPoint] = Field(default_factory=list)


class AccountChange(BaseModel):
    """Balance movement of one account over a period."""

    account_id: str
    name: str
    type: str
    balance: float
    currency: str
    change_amount: float = 0.0
    change_percentage: float = 0.0


class AccountSummary(_Report):
    """Assets, liabilities and per-account changes."""

    net_worth: float = 0.0
    total_assets: float = 0.0
    total_liabilities: float = 0.0
    accounts: list[AccountChange] = Field(default_factory=list)


class BudgetCategoryPerformance(BaseModel):
    """Actual vs allocated for one budget category."""

    category_id: str
    category_name: str
    budgeted: float
    spent: float
    remaining: float
    percent_used: float
    status: BudgetStatus


class BudgetTrends(BaseModel):
    """Spending pace for the whole budget."""

    elapsed_percentage: float = 0.0
    days_remaining: int = 0
    daily_average: float = 0.0
    projected_total: float = 0.0
    will_exceed_budget: bool = False


class BudgetAlert(BaseModel):
    """An alert about a budget category or the budget as a whole."""

    category_id: str | None = None
    alert_type: str
    message: str
    severity: str  # "info", "warning", "critical"


class BudgetPerformanceReport(_Report):
    """Budget vs actual for the active budget."""

    budget_id: str | None = None
    budget_name: str = ""
    start_date: date
    end_date: date
    total_budgeted: float = 0.0
    total_spent: float = 0.0
    remaining_budget: float = 0.0
    over_budget_amount: float = 0.0
    categories: list[BudgetCategoryPerformance] = Field(default_factory=list)
    trends: BudgetTrends = Field(default_factory=BudgetTrends)
    alerts: list[BudgetAlert] = Field(default_factory=list)

    @property
    def over_budget_count(self) -> int:
        return sum(1 for c in self.categories if c.status == BudgetStatus.OVER)


class GoalProgress(_Report):
    """Derived progress figures for a single goal."""

    goal_id: str | None = None
    name: str = ""
    lifecycle_status: str = "active"
    target_amount: float
    current_amount: float
    remaining_amount: float = 0.0
    progress_percentage: float = 0.0
    elapsed_time_percentage: float = 0.0
    status: GoalScheduleStatus = GoalScheduleStatus.ON_TRACK
    monthly_contribution: float | None = None
    projected_completion: date | None = None
    days_remaining: int = 0


class GoalSummary(_Report):
    """All goals with aggregate progress."""

    goals: list[GoalProgress] = Field(default_factory=list)
    total_target: float = 0.0
    total_saved: float = 0.0
    overall_progress: float = 0.0

    @property
    def behind_schedule(self) -> list[GoalProgress]:
        return [g for g in self.goals if g.status == GoalScheduleStatus.BEHIND_SCHEDULE]


class CategoryTransaction(BaseModel):
    """A transaction row in a category report."""

    id: str | None = None
    date: date
    description: str = ""
    amount: float


class CategoryReport(_Report):
    """Spending detail for one category."""

    category_id: str
    category_name: str
    period_start: date
    period_end: date
    total_spent: float = 0.0
    previous_total_spent: float = 0.0
    average_per_period: float = 0.0
    previous_period_comparison: float = Field(default=0.0, description="Percent change vs previous period")
    time_series: list[AmountPoint] = Field(default_factory=list)
    transactions: list[CategoryTransaction] = Field(default_factory=list)


class CustomReportRequest(BaseModel):
    """Parameters of a user-defined report."""

    title: str = "Custom Report"
    type: ReportType = ReportType.SPENDING
    timeframe: str = Field(default="month", pattern="^(week|month|quarter|year|custom)$")
    start_date: date | None = None
    end_date: date | None = None
    category_ids: list[str] = Field(default_factory=list)
    account_ids: list[str] = Field(default_factory=list)
    compare_with_previous: bool = False
    group_by: str = Field(default="day", pattern="^(day|week|month|category)$")


class CustomReportSummary(BaseModel):
    total_amount: float = 0.0
    compare_amount: float | None = None
    change_percentage: float | None = None


class CustomReport(_Report):
    """Result of a ``CustomReportRequest``."""

    title: str
    report_type: ReportType
    period_start: date
    period_end: date
    summary: CustomReportSummary = Field(default_factory=CustomReportSummary)
    data: list[dict[str, Any]] = Field(default_factory=list)
    filters: dict[str, Any] = Field(default_factory=dict)


class RecentTransaction(BaseModel):
    """A transaction row on the dashboard."""

    id: str | None = None
    date: date
    description: str = ""
    amount: float
    type: str
    category_id: str | None = None
    category_name: str = ""
    account_id: str | None = None


class DashboardSummary(_Report):
    """Month-at-a-glance composite: this month vs last, plus the usual panels.

    Change percentages are 0 when the previous value is 0.
    """

    period_start: date
    period_end: date
    net_worth: float = 0.0
    net_worth_change: float = 0.0
    net_worth_change_percentage: float = 0.0
    monthly_income: float = 0.0
    monthly_income_change: float = 0.0
    monthly_income_change_percentage: float = 0.0
    monthly_expenses: float = 0.0
    monthly_expenses_change: float = 0.0
    monthly_expenses_change_percentage: float = 0.0
    savings_rate: float = 0.0
    savings_rate_change: float = 0.0
    cash_flow: list[CashFlowPoint] = Field(default_factory=list)
    expense_breakdown: list[CategoryAmount] = Field(default_factory=list)
    recent_transactions: list[RecentTransaction] = Field(default_factory=list)
    budget: BudgetPerformanceReport | None = None
    goals: list[GoalProgress] = Field(default_factory=list)
