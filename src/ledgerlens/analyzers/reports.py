"""
Report Assembler — compose the engines into typed reports.

Each method takes explicit snapshots and parameters and returns one of the
report models in ``ledgerlens.models.report``. ``build()`` dispatches on
``ReportType`` for callers that pick the report at runtime.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Iterable

from ledgerlens.analyzers.aggregator import CashFlowAggregator, period_change
from ledgerlens.analyzers.budget import BudgetEvaluator
from ledgerlens.analyzers.goals import GoalTracker
from ledgerlens.analyzers.networth import NetWorthCalculator
from ledgerlens.analyzers.periods import (
    Bucket,
    Granularity,
    add_months,
    assign_buckets,
    bucket_end,
    build_buckets,
    resolve_range,
)
from ledgerlens.models.financial import (
    Account,
    BalanceSnapshot,
    Budget,
    Category,
    FinanceSnapshot,
    Goal,
    GoalStatus,
    Transaction,
    TransactionType,
)
from ledgerlens.models.report import (
    AccountSummary,
    AmountPoint,
    BudgetPerformanceReport,
    CategoryReport,
    CategoryTransaction,
    CustomReport,
    CustomReportRequest,
    CustomReportSummary,
    DashboardSummary,
    GoalSummary,
    IncomeExpenseSummary,
    NetWorthReport,
    RecentTransaction,
    ReportType,
)

logger = logging.getLogger("ledgerlens.analyzers.reports")

# Approximate length of one period unit, for per-period averages.
PERIOD_DAYS: dict[Granularity, int] = {
    Granularity.DAY: 1,
    Granularity.WEEK: 7,
    Granularity.MONTH: 30,
    Granularity.QUARTER: 90,
    Granularity.YEAR: 365,
}

# Dashboard panel sizes
DASHBOARD_MONTHS = 6
TOP_EXPENSE_CATEGORIES = 6
RECENT_TRANSACTIONS = 5
TOP_GOALS = 3


class ReportAssembler:
    """Build every LedgerLens report from explicit inputs.

    Usage::

        assembler = ReportAssembler()
        summary = assembler.income_expense_summary(
            transactions, categories, date(2025, 4, 1), date(2025, 4, 30),
        )
        print(summary.savings_rate)

    All inputs are read-only; the same inputs always produce the same report.
    """

    def __init__(
        self,
        *,
        budget_evaluator: BudgetEvaluator | None = None,
        goal_tracker: GoalTracker | None = None,
        net_worth_calculator: NetWorthCalculator | None = None,
    ) -> None:
        self.budget_evaluator = budget_evaluator or BudgetEvaluator()
        self.goal_tracker = goal_tracker or GoalTracker()
        self.net_worth_calculator = net_worth_calculator or NetWorthCalculator()

    # ------------------------------------------------------------------
    # Core reports
    # ------------------------------------------------------------------

    def income_expense_summary(
        self,
        transactions: list[Transaction],
        categories: Iterable[Category],
        start: date,
        end: date,
        granularity: Granularity = Granularity.MONTH,
        *,
        previous_transactions: list[Transaction] | None = None,
        rollup_parents: bool = False,
    ) -> IncomeExpenseSummary:
        """
        Totals, category breakdowns and a continuous time series.

        Args:
            transactions: Transactions already limited to ``[start, end]``.
            categories: Category records for names and grouping.
            start: First day of the report.
            end: Last day of the report.
            granularity: Bucket size for the time series.
            previous_transactions: Optional comparison-period transactions.
            rollup_parents: Report child categories under their parent.

        Returns:
            IncomeExpenseSummary.
        """
        granularity = Granularity(granularity)
        aggregator = CashFlowAggregator(categories, rollup_parents=rollup_parents)
        buckets = build_buckets(start, end, granularity)
        totals = aggregator.totals(transactions)

        summary = IncomeExpenseSummary(
            period_start=start,
            period_end=end,
            granularity=granularity.value,
            total_income=totals.total_income,
            total_expenses=totals.total_expenses,
            net_cash_flow=totals.net_cash_flow,
            savings_rate=totals.savings_rate,
            income_by_category=aggregator.category_breakdown(transactions, TransactionType.INCOME),
            expenses_by_category=aggregator.category_breakdown(transactions, TransactionType.EXPENSE),
            time_series=aggregator.time_series(transactions, buckets, granularity),
        )

        if previous_transactions is not None:
            previous = aggregator.totals(previous_transactions)
            summary.previous_total_income = previous.total_income
            summary.previous_total_expenses = previous.total_expenses
            summary.income_deltas = aggregator.compare(
                transactions, previous_transactions, TransactionType.INCOME
            )
            summary.expense_deltas = aggregator.compare(
                transactions, previous_transactions, TransactionType.EXPENSE
            )

        logger.info(
            f"Income/expense summary {start} to {end}: {totals.transaction_count} transactions, "
            f"{len(buckets)} {granularity.value} buckets"
        )
        return summary

    def net_worth_report(
        self,
        accounts: list[Account],
        history: Iterable[BalanceSnapshot],
        start: date,
        end: date,
        granularity: Granularity = Granularity.MONTH,
    ) -> NetWorthReport:
        """Current net worth and its history across ``[start, end]``."""
        buckets = build_buckets(start, end, granularity)
        return self.net_worth_calculator.report(accounts, history, buckets)

    def account_summary(
        self,
        accounts: list[Account],
        transactions: Iterable[Transaction],
    ) -> AccountSummary:
        """Assets, liabilities and each account's movement over ``transactions``."""
        return self.net_worth_calculator.account_summary(accounts, transactions)

    def budget_performance(
        self,
        budget: Budget,
        transactions: Iterable[Transaction],
        categories: Iterable[Category] | None = None,
        today: date | None = None,
    ) -> BudgetPerformanceReport:
        """Budget vs actual for one budget."""
        return self.budget_evaluator.evaluate(budget, transactions, categories, today)

    def goal_progress(self, goals: Iterable[Goal], today: date | None = None) -> GoalSummary:
        """Progress of every goal."""
        return self.goal_tracker.summarize(goals, today)

    def category_report(
        self,
        category_id: str,
        transactions: Iterable[Transaction],
        categories: Iterable[Category],
        start: date,
        end: date,
        granularity: Granularity = Granularity.MONTH,
        *,
        previous_transactions: Iterable[Transaction] = (),
    ) -> CategoryReport:
        """
        Spending detail for a single category.

        Raises:
            ValueError: If ``category_id`` is not among ``categories``.
        """
        granularity = Granularity(granularity)
        lookup = {c.id: c for c in categories}
        category = lookup.get(category_id)
        if category is None:
            raise ValueError(f"Category not found: {category_id}")

        current = [t for t in transactions if t.is_expense and t.category_id == category_id]
        previous = [t for t in previous_transactions if t.is_expense and t.category_id == category_id]

        total = sum(t.amount for t in current)
        previous_total = sum(t.amount for t in previous)
        _, comparison = period_change(total, previous_total)

        units = max(1.0, (end - start).days / PERIOD_DAYS[granularity])
        buckets = build_buckets(start, end, granularity)

        return CategoryReport(
            category_id=category.id,
            category_name=category.name,
            period_start=start,
            period_end=end,
            total_spent=total,
            previous_total_spent=previous_total,
            average_per_period=total / units,
            previous_period_comparison=comparison,
            time_series=_amount_series(current, buckets, granularity),
            transactions=[
                CategoryTransaction(id=t.id, date=t.date, description=t.description, amount=t.amount)
                for t in sorted(current, key=lambda t: t.date, reverse=True)
            ],
        )

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def dashboard(self, snapshot: FinanceSnapshot, today: date | None = None) -> DashboardSummary:
        """
        This month at a glance, compared with last month.

        Transactions are drawn from both the current and previous lists of
        the snapshot and windowed by date here, so the snapshot should cover
        at least the last six months.

        Net worth change is measured against current net worth minus this
        month's net cash flow.
        """
        ref = today or date.today()
        month_start = ref.replace(day=1)
        month_end = bucket_end(ref, Granularity.MONTH)
        prev_start = add_months(month_start, -1)
        prev_end = month_start - timedelta(days=1)

        everything = list(snapshot.transactions) + list(snapshot.previous_transactions)
        current = [t for t in everything if month_start <= t.date <= month_end]
        previous = [t for t in everything if prev_start <= t.date <= prev_end]

        aggregator = CashFlowAggregator(snapshot.categories)
        this_month = aggregator.totals(current)
        last_month = aggregator.totals(previous)

        _, _, net_worth = self.net_worth_calculator.net_worth(snapshot.accounts)
        net_worth_change, net_worth_pct = period_change(net_worth, net_worth - this_month.net_cash_flow)
        income_change, income_pct = period_change(this_month.total_income, last_month.total_income)
        expense_change, expense_pct = period_change(this_month.total_expenses, last_month.total_expenses)

        buckets = build_buckets(add_months(month_start, -(DASHBOARD_MONTHS - 1)), month_end, Granularity.MONTH)

        recent = []
        for txn in sorted(everything, key=lambda t: t.date, reverse=True)[:RECENT_TRANSACTIONS]:
            _, category_name, _ = aggregator.resolve_category(txn.category_id)
            recent.append(RecentTransaction(
                id=txn.id,
                date=txn.date,
                description=txn.description,
                amount=txn.amount,
                type=txn.type.value,
                category_id=txn.category_id,
                category_name=category_name,
                account_id=txn.account_id,
            ))

        budget = snapshot.current_budget
        budget_report = None
        if budget is not None:
            budget_report = self.budget_performance(budget, everything, snapshot.categories, ref)

        active = [g for g in snapshot.goals if g.status == GoalStatus.ACTIVE]
        goals = self.goal_tracker.summarize(active, ref).goals[:TOP_GOALS]

        logger.info(
            f"Dashboard for {month_start:%Y-%m}: {this_month.transaction_count} transactions this month, "
            f"{last_month.transaction_count} last month"
        )
        return DashboardSummary(
            period_start=month_start,
            period_end=month_end,
            net_worth=net_worth,
            net_worth_change=net_worth_change,
            net_worth_change_percentage=net_worth_pct,
            monthly_income=this_month.total_income,
            monthly_income_change=income_change,
            monthly_income_change_percentage=income_pct,
            monthly_expenses=this_month.total_expenses,
            monthly_expenses_change=expense_change,
            monthly_expenses_change_percentage=expense_pct,
            savings_rate=this_month.savings_rate,
            savings_rate_change=this_month.savings_rate - last_month.savings_rate,
            cash_flow=aggregator.time_series(everything, buckets, Granularity.MONTH),
            expense_breakdown=aggregator.category_breakdown(current, TransactionType.EXPENSE)[
                :TOP_EXPENSE_CATEGORIES
            ],
            recent_transactions=recent,
            budget=budget_report,
            goals=goals,
        )

    # ------------------------------------------------------------------
    # Custom reports
    # ------------------------------------------------------------------

    def custom_report(
        self,
        request: CustomReportRequest,
        snapshot: FinanceSnapshot,
        today: date | None = None,
    ) -> CustomReport:
        """
        Build a user-defined report.

        Transactions are narrowed by the request's category and account
        filters; date limits remain the caller's job.

        Raises:
            ValueError: For an unsupported type, a category report without a
                category, or an incomplete custom timeframe.
        """
        start, end = resolve_range(request.timeframe, request.start_date, request.end_date, today)
        time_group = Granularity.MONTH if request.group_by == "category" else Granularity(request.group_by)

        filters: dict[str, Any] = {}
        if request.category_ids:
            filters["category_ids"] = list(request.category_ids)
        if request.account_ids:
            filters["account_ids"] = list(request.account_ids)

        current = _filter(snapshot.transactions, request.category_ids, request.account_ids)
        previous = _filter(snapshot.previous_transactions, request.category_ids, request.account_ids)

        if request.type in (ReportType.SPENDING, ReportType.INCOME):
            txn_type = TransactionType.EXPENSE if request.type == ReportType.SPENDING else TransactionType.INCOME
            selected = [t for t in current if t.type == txn_type]
            total = sum(t.amount for t in selected)
            compare = sum(t.amount for t in previous if t.type == txn_type)

            if request.group_by == "category":
                aggregator = CashFlowAggregator(snapshot.categories)
                data = [row.model_dump(mode="json") for row in aggregator.category_breakdown(selected, txn_type)]
            else:
                buckets = build_buckets(start, end, time_group)
                data = [p.model_dump(mode="json") for p in _amount_series(selected, buckets, time_group)]

        elif request.type == ReportType.NET_WORTH:
            buckets = build_buckets(start, end, time_group)
            points = self.net_worth_calculator.series(snapshot.accounts, snapshot.balance_history, buckets)
            data = [p.model_dump(mode="json") for p in points]
            total = points[-1].net_worth if points else 0.0
            compare = points[0].net_worth if points else 0.0

        elif request.type == ReportType.CATEGORY:
            if not request.category_ids:
                raise ValueError("At least one category ID is required for category reports")
            category_id = request.category_ids[0]
            selected = [t for t in current if t.is_expense and t.category_id == category_id]
            total = sum(t.amount for t in selected)
            compare = sum(t.amount for t in previous if t.is_expense and t.category_id == category_id)
            buckets = build_buckets(start, end, time_group)
            data = [p.model_dump(mode="json") for p in _amount_series(selected, buckets, time_group)]

        else:
            raise ValueError(f"Unsupported report type: {request.type.value}")

        summary = CustomReportSummary(total_amount=total)
        if request.compare_with_previous:
            _, change = period_change(total, compare)
            summary.compare_amount = compare
            summary.change_percentage = change

        return CustomReport(
            title=request.title,
            report_type=request.type,
            period_start=start,
            period_end=end,
            summary=summary,
            data=data,
            filters=filters,
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def build(
        self,
        report_type: ReportType | str,
        snapshot: FinanceSnapshot,
        *,
        start: date | None = None,
        end: date | None = None,
        granularity: Granularity = Granularity.MONTH,
        category_id: str | None = None,
        request: CustomReportRequest | None = None,
        today: date | None = None,
    ) -> Any:
        """
        Build a report keyed by type.

        ``spending`` and ``income`` yield an IncomeExpenseSummary,
        ``net_worth`` a NetWorthReport, ``category`` a CategoryReport when a
        category id is given and the current budget's performance otherwise,
        ``custom`` a CustomReport from ``request``, ``accounts`` an
        AccountSummary over the snapshot transactions and ``dashboard`` a
        DashboardSummary for the month containing ``today``.
        """
        report_type = ReportType(report_type)
        granularity = Granularity(granularity)
        ref = today or date.today()

        if report_type == ReportType.CUSTOM:
            if request is None:
                raise ValueError("A CustomReportRequest is required for custom reports")
            return self.custom_report(request, snapshot, ref)

        if report_type == ReportType.DASHBOARD:
            return self.dashboard(snapshot, ref)

        if report_type == ReportType.ACCOUNTS:
            return self.account_summary(snapshot.accounts, snapshot.transactions)

        if report_type == ReportType.CATEGORY and category_id is None:
            budget = snapshot.current_budget
            if budget is None:
                raise ValueError("No current budget found")
            return self.budget_performance(budget, snapshot.transactions, snapshot.categories, ref)

        start = start or snapshot.period_start
        end = end or snapshot.period_end
        if start is None or end is None:
            start, end = resolve_range(granularity_timeframe(granularity), start, end, ref)

        if report_type == ReportType.NET_WORTH:
            return self.net_worth_report(snapshot.accounts, snapshot.balance_history, start, end, granularity)

        if report_type == ReportType.CATEGORY:
            return self.category_report(
                category_id,
                snapshot.transactions,
                snapshot.categories,
                start,
                end,
                granularity,
                previous_transactions=snapshot.previous_transactions,
            )

        return self.income_expense_summary(
            snapshot.transactions,
            snapshot.categories,
            start,
            end,
            granularity,
            previous_transactions=snapshot.previous_transactions or None,
        )


def granularity_timeframe(granularity: Granularity) -> str:
    """Default look-back timeframe for a bucket size."""
    return {
        Granularity.DAY: "week",
        Granularity.WEEK: "month",
        Granularity.MONTH: "year",
        Granularity.QUARTER: "year",
        Granularity.YEAR: "year",
    }[Granularity(granularity)]


def _amount_series(
    transactions: Iterable[Transaction],
    buckets: list[Bucket],
    granularity: Granularity,
) -> list[AmountPoint]:
    grouped = assign_buckets(transactions, buckets, granularity)
    return [
        AmountPoint(period=b.key, amount=sum(t.amount for t in grouped.get(b.key, [])))
        for b in buckets
    ]


def _filter(
    transactions: Iterable[Transaction],
    category_ids: list[str],
    account_ids: list[str],
) -> list[Transaction]:
    selected = []
    for txn in transactions:
        if category_ids and txn.category_id not in category_ids:
            continue
        if account_ids and txn.account_id not in account_ids:
            continue
        selected.append(txn)
    return selected
