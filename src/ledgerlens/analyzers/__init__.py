"""
LedgerLens analyzers — pure computation modules.

Bucketing, aggregation, net worth, budgets and goals. Every engine works on
snapshots passed in by the caller and never reads global state.
"""

from ledgerlens.analyzers.periods import (
    Bucket,
    Granularity,
    add_months,
    bucket_key,
    build_buckets,
    assign_buckets,
    previous_range,
    resolve_range,
    elapsed_percentage,
)
from ledgerlens.analyzers.aggregator import (
    CashFlowAggregator,
    CashFlowTotals,
    period_change,
    summarize_cash_flow,
)
from ledgerlens.analyzers.networth import NetWorthCalculator
from ledgerlens.analyzers.budget import (
    BudgetEvaluator,
    BUDGET_STATUS_RULES,
    classify_budget,
    evaluate_budget,
)
from ledgerlens.analyzers.goals import (
    GoalTracker,
    GOAL_STATUS_RULES,
    BEHIND_SCHEDULE_SLACK,
    MONTHLY_MULTIPLIERS,
    projected_completion,
    should_auto_complete,
    track_goal,
    transition_goal,
)
from ledgerlens.analyzers.reports import ReportAssembler

__all__ = [
    # Periods
    "Bucket",
    "Granularity",
    "add_months",
    "bucket_key",
    "build_buckets",
    "assign_buckets",
    "previous_range",
    "resolve_range",
    "elapsed_percentage",
    # Aggregation
    "CashFlowAggregator",
    "CashFlowTotals",
    "period_change",
    "summarize_cash_flow",
    # Net worth
    "NetWorthCalculator",
    # Budgets
    "BudgetEvaluator",
    "BUDGET_STATUS_RULES",
    "classify_budget",
    "evaluate_budget",
    # Goals
    "GoalTracker",
    "GOAL_STATUS_RULES",
    "BEHIND_SCHEDULE_SLACK",
    "MONTHLY_MULTIPLIERS",
    "projected_completion",
    "should_auto_complete",
    "track_goal",
    "transition_goal",
    # Reports
    "ReportAssembler",
]
