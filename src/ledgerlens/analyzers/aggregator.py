"""
Cash-Flow Aggregator — sums, shares and deltas over a transaction set.

Produces:
1. **Totals** — income, expenses, net cash flow and savings rate.
2. **Time series** — income/expenses per bucket, empty buckets included.
3. **Category breakdown** — amount and percentage per category, largest first.
4. **Comparison deltas** — per-category current vs previous period.

Transfers never count as income or expense; they net to zero across accounts.
Pure arithmetic over snapshots; no I/O.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from ledgerlens.analyzers.periods import Bucket, Granularity, assign_buckets
from ledgerlens.models.financial import (
    UNCATEGORIZED_ID,
    UNCATEGORIZED_NAME,
    Category,
    TransactionType,
)
from ledgerlens.models.report import CashFlowPoint, CategoryAmount, CategoryDelta

if TYPE_CHECKING:
    from ledgerlens.models.financial import Transaction

logger = logging.getLogger("ledgerlens.analyzers.aggregator")


@dataclass
class CashFlowTotals:
    """Overall income/expense figures for a transaction set."""

    total_income: float = 0.0
    total_expenses: float = 0.0
    net_cash_flow: float = 0.0
    savings_rate: float = 0.0  # percent of income kept
    transaction_count: int = 0


def ratio_percent(part: float, whole: float) -> float:
    """``part / whole * 100``, or 0 when ``whole`` is 0."""
    if whole == 0:
        return 0.0
    return part / whole * 100


class CashFlowAggregator:
    """Aggregate transactions into totals, series and category breakdowns.

    Usage::

        aggregator = CashFlowAggregator(categories)
        totals = aggregator.totals(transactions)
        breakdown = aggregator.category_breakdown(transactions, TransactionType.EXPENSE)

    Categories are passed in explicitly; the aggregator never looks them up.
    """

    def __init__(self, categories: Iterable[Category] | None = None, *, rollup_parents: bool = False):
        self.categories: dict[str, Category] = {c.id: c for c in (categories or [])}
        self.rollup_parents = rollup_parents

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def totals(self, transactions: Iterable[Transaction]) -> CashFlowTotals:
        """Sum income and expenses; transfers are ignored."""
        income = 0.0
        expenses = 0.0
        count = 0

        for txn in transactions:
            if txn.type == TransactionType.INCOME:
                income += txn.amount
            elif txn.type == TransactionType.EXPENSE:
                expenses += txn.amount
            else:
                continue
            count += 1

        net = income - expenses
        return CashFlowTotals(
            total_income=income,
            total_expenses=expenses,
            net_cash_flow=net,
            savings_rate=ratio_percent(net, income),
            transaction_count=count,
        )

    # ------------------------------------------------------------------
    # Time series
    # ------------------------------------------------------------------

    def time_series(
        self,
        transactions: Iterable[Transaction],
        buckets: list[Bucket],
        granularity: Granularity,
    ) -> list[CashFlowPoint]:
        """Income and expenses per bucket, in bucket order."""
        grouped = assign_buckets(transactions, buckets, granularity)
        series: list[CashFlowPoint] = []

        for bucket in buckets:
            totals = self.totals(grouped.get(bucket.key, []))
            series.append(
                CashFlowPoint(
                    period=bucket.key,
                    start=bucket.start,
                    end=bucket.end,
                    income=totals.total_income,
                    expenses=totals.total_expenses,
                    net=totals.net_cash_flow,
                    transaction_count=totals.transaction_count,
                )
            )

        return series

    # ------------------------------------------------------------------
    # Category breakdown
    # ------------------------------------------------------------------

    def resolve_category(self, category_id: str | None) -> tuple[str, str, str | None]:
        """Map a transaction's category to ``(id, name, color)``.

        Unknown, inactive or missing categories map to Uncategorized. With
        ``rollup_parents`` a child category reports under its parent.
        """
        category = self.categories.get(category_id) if category_id else None
        if category is None or not category.is_active:
            return UNCATEGORIZED_ID, UNCATEGORIZED_NAME, None

        if self.rollup_parents and category.parent_id:
            parent = self.categories.get(category.parent_id)
            if parent is not None and parent.is_active:
                category = parent

        return category.id, category.name, category.color

    def sum_by_category(
        self,
        transactions: Iterable[Transaction],
        txn_type: TransactionType,
    ) -> dict[str, float]:
        """Raw per-category sums for one transaction type."""
        sums: dict[str, float] = defaultdict(float)
        for txn in transactions:
            if txn.type != txn_type:
                continue
            cat_id, _, _ = self.resolve_category(txn.category_id)
            sums[cat_id] += txn.amount
        return dict(sums)

    def category_breakdown(
        self,
        transactions: Iterable[Transaction],
        txn_type: TransactionType = TransactionType.EXPENSE,
    ) -> list[CategoryAmount]:
        """
        Break a transaction type down by category.

        Args:
            transactions: Transactions to group.
            txn_type: INCOME or EXPENSE.

        Returns:
            CategoryAmount rows sorted by amount descending. Percentages are
            shares of the type's total, rounded to one decimal.
        """
        sums = self.sum_by_category(transactions, txn_type)
        total = sum(sums.values())

        rows = []
        for cat_id, amount in sums.items():
            _, name, color = self._describe(cat_id)
            rows.append(
                CategoryAmount(
                    category_id=cat_id,
                    category_name=name,
                    amount=amount,
                    percentage=round(ratio_percent(amount, total), 1),
                    color=color,
                )
            )

        rows.sort(key=lambda r: (-r.amount, r.category_name))
        return rows

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def compare(
        self,
        current: Iterable[Transaction],
        previous: Iterable[Transaction],
        txn_type: TransactionType = TransactionType.EXPENSE,
    ) -> list[CategoryDelta]:
        """Per-category ``current - previous`` over the union of categories.

        The sign is left to the presentation layer ("increased by" vs
        "decreased by").
        """
        now = self.sum_by_category(current, txn_type)
        before = self.sum_by_category(previous, txn_type)

        deltas = []
        for cat_id in sorted(set(now) | set(before)):
            cur = now.get(cat_id, 0.0)
            prev = before.get(cat_id, 0.0)
            delta, pct = period_change(cur, prev)
            deltas.append(
                CategoryDelta(
                    category_id=cat_id,
                    category_name=self._describe(cat_id)[1],
                    current=cur,
                    previous=prev,
                    delta=delta,
                    change_percentage=pct,
                )
            )

        deltas.sort(key=lambda d: (-abs(d.delta), d.category_name))
        return deltas

    def _describe(self, cat_id: str) -> tuple[str, str, str | None]:
        if cat_id == UNCATEGORIZED_ID:
            return UNCATEGORIZED_ID, UNCATEGORIZED_NAME, None
        category = self.categories[cat_id]
        return category.id, category.name, category.color


def period_change(current: float, previous: float) -> tuple[float, float]:
    """Return ``(delta, percent change)``; percent is 0 for a zero baseline."""
    delta = current - previous
    if previous == 0:
        return delta, 0.0
    return delta, delta / abs(previous) * 100


# Convenience functions
def summarize_cash_flow(transactions: list[Transaction]) -> CashFlowTotals:
    """Quick totals without category data."""
    return CashFlowAggregator().totals(transactions)
