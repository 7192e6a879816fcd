"""
Budget Evaluator — compare actual category spend against allocations.

For the active budget, each category gets spent / remaining / percent used
and a status from an ordered rule list (first match wins):

1. ``over``     — percent used reached 100.
2. ``on_track`` — spending pace has caught up with time pace (cautionary).
3. ``under``    — everything else.

Totals, a spending-pace projection and alerts roll up from the categories.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Callable, Iterable

from ledgerlens.analyzers.periods import elapsed_percentage
from ledgerlens.formatting import format_currency
from ledgerlens.models.report import (
    BudgetAlert,
    BudgetCategoryPerformance,
    BudgetPerformanceReport,
    BudgetStatus,
    BudgetTrends,
)

if TYPE_CHECKING:
    from ledgerlens.models.financial import Budget, Category, Transaction

logger = logging.getLogger("ledgerlens.analyzers.budget")


@dataclass(frozen=True)
class SpendPace:
    """Inputs to status classification for one category."""

    spent: float
    allocated: float
    percent_used: float
    elapsed_percentage: float


StatusRule = tuple[BudgetStatus, Callable[[SpendPace], bool]]

BUDGET_STATUS_RULES: list[StatusRule] = [
    (BudgetStatus.OVER, lambda p: p.percent_used >= 100),
    (BudgetStatus.ON_TRACK, lambda p: p.percent_used >= p.elapsed_percentage),
]
BUDGET_STATUS_DEFAULT = BudgetStatus.UNDER


def classify_budget(pace: SpendPace, rules: list[StatusRule] | None = None) -> BudgetStatus:
    """Return the status of the first matching rule."""
    for status, matches in rules or BUDGET_STATUS_RULES:
        if matches(pace):
            return status
    return BUDGET_STATUS_DEFAULT


def percent_used(spent: float, allocated: float) -> float:
    """``spent / allocated * 100``.

    A zero allocation with any spending counts as fully used (100) so it is
    reported as over; zero allocation with no spending is 0.
    """
    if allocated == 0:
        return 100.0 if spent > 0 else 0.0
    return spent / allocated * 100


class BudgetEvaluator:
    """
    Evaluate a budget against the transactions in its window.

    Example usage:
        evaluator = BudgetEvaluator()
        report = evaluator.evaluate(budget, transactions, categories, today=date(2025, 4, 15))
        for row in report.categories:
            print(f"{row.category_name}: {row.percent_used:.0f}% ({row.status.value})")
    """

    def __init__(self, rules: list[StatusRule] | None = None, currency: str = "USD"):
        self.rules = rules or BUDGET_STATUS_RULES
        self.currency = currency

    def spent_by_category(
        self,
        budget: Budget,
        transactions: Iterable[Transaction],
    ) -> dict[str, float]:
        """Sum expense amounts per category inside the budget window."""
        spent: dict[str, float] = defaultdict(float)
        for txn in transactions:
            if not txn.is_expense or not txn.category_id:
                continue
            if txn.date < budget.start_date or txn.date > budget.end_date:
                continue
            spent[txn.category_id] += txn.amount
        return dict(spent)

    def evaluate(
        self,
        budget: Budget,
        transactions: Iterable[Transaction],
        categories: Iterable[Category] | None = None,
        today: date | None = None,
    ) -> BudgetPerformanceReport:
        """
        Build the budget-performance report.

        Args:
            budget: The budget to evaluate.
            transactions: Transactions (filtered to the budget window here).
            categories: Category records for display names.
            today: Evaluation date for time-pace math.

        Returns:
            BudgetPerformanceReport with per-category status, totals and trends.
        """
        ref = today or date.today()
        names = {c.id: c.name for c in (categories or [])}
        spent_map = self.spent_by_category(budget, transactions)
        elapsed = elapsed_percentage(budget.start_date, budget.end_date, ref)

        rows: list[BudgetCategoryPerformance] = []
        total_spent = 0.0
        over_amount = 0.0

        for alloc in budget.categories:
            spent = spent_map.get(alloc.category_id, 0.0)
            used = percent_used(spent, alloc.allocated)
            status = classify_budget(
                SpendPace(spent=spent, allocated=alloc.allocated, percent_used=used, elapsed_percentage=elapsed),
                self.rules,
            )
            rows.append(
                BudgetCategoryPerformance(
                    category_id=alloc.category_id,
                    category_name=alloc.name or names.get(alloc.category_id, alloc.category_id),
                    budgeted=alloc.allocated,
                    spent=spent,
                    remaining=alloc.allocated - spent,
                    percent_used=used,
                    status=status,
                )
            )
            total_spent += spent
            over_amount += max(0.0, spent - alloc.allocated)

        rows.sort(key=lambda r: -r.percent_used)

        total_budgeted = budget.total_allocated
        trends = self._trends(budget, total_spent, total_budgeted, ref, elapsed)

        report = BudgetPerformanceReport(
            budget_id=budget.id,
            budget_name=budget.name,
            start_date=budget.start_date,
            end_date=budget.end_date,
            total_budgeted=total_budgeted,
            total_spent=total_spent,
            remaining_budget=max(0.0, total_budgeted - total_spent),
            over_budget_amount=over_amount,
            categories=rows,
            trends=trends,
        )
        report.alerts = self._generate_alerts(report)

        logger.info(
            f"Evaluated budget {budget.name}: {format_currency(total_spent, self.currency)} of "
            f"{format_currency(total_budgeted, self.currency)} "
            f"({report.over_budget_count} over)"
        )
        return report

    @staticmethod
    def _trends(
        budget: Budget,
        total_spent: float,
        total_budgeted: float,
        ref: date,
        elapsed: float,
    ) -> BudgetTrends:
        """Project the end-of-period total from the daily spending rate."""
        total_days = (budget.end_date - budget.start_date).days
        elapsed_days = min(total_days, max(0, (ref - budget.start_date).days))
        remaining_days = max(0, total_days - elapsed_days)

        daily_avg = total_spent / elapsed_days if elapsed_days > 0 else 0.0
        projected = total_spent + daily_avg * remaining_days

        return BudgetTrends(
            elapsed_percentage=elapsed,
            days_remaining=remaining_days,
            daily_average=daily_avg,
            projected_total=projected,
            will_exceed_budget=projected > total_budgeted,
        )

    def _generate_alerts(self, report: BudgetPerformanceReport) -> list[BudgetAlert]:
        """Generate alerts for over-budget categories and the projection."""
        alerts = []

        for row in report.categories:
            if row.status != BudgetStatus.OVER:
                continue
            alerts.append(BudgetAlert(
                category_id=row.category_id,
                alert_type="exceeded",
                message=(
                    f"{row.category_name} is over budget by {format_currency(max(0.0, -row.remaining), self.currency)} "
                    f"({row.percent_used:.0f}% used)"
                ),
                severity="critical",
            ))

        if report.trends.will_exceed_budget and report.over_budget_amount == 0:
            overage = report.trends.projected_total - report.total_budgeted
            alerts.append(BudgetAlert(
                alert_type="projection",
                message=f"Projected to exceed budget by {format_currency(overage, self.currency)} at current rate",
                severity="warning",
            ))

        return alerts


# Convenience functions
def evaluate_budget(
    budget: Budget,
    transactions: list[Transaction],
    today: date | None = None,
) -> BudgetPerformanceReport:
    """Quick budget check without category names."""
    return BudgetEvaluator().evaluate(budget, transactions, today=today)
