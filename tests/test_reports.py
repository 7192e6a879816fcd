"""Tests for the report assembler."""

from datetime import date

import pytest
from pydantic import ValidationError

from ledgerlens.analyzers.periods import Granularity
from ledgerlens.analyzers.reports import ReportAssembler, granularity_timeframe
from ledgerlens.models.financial import (
    Account,
    AccountType,
    BalanceSnapshot,
    Budget,
    BudgetCategory,
    Category,
    FinanceSnapshot,
    Goal,
    GoalStatus,
    Transaction,
    TransactionType,
)
from ledgerlens.models.report import (
    AccountSummary,
    BudgetPerformanceReport,
    CategoryReport,
    CustomReportRequest,
    DashboardSummary,
    GoalSummary,
    IncomeExpenseSummary,
    NetWorthReport,
    ReportType,
)

TODAY = date(2025, 4, 16)


def _txn(txn_type: TransactionType, amount: float, category_id: str, d: date, **kwargs) -> Transaction:
    return Transaction(date=d, amount=amount, type=txn_type, category_id=category_id, **kwargs)


@pytest.fixture
def snapshot() -> FinanceSnapshot:
    return FinanceSnapshot(
        transactions=[
            _txn(TransactionType.EXPENSE, 100, "catA", date(2025, 4, 1), id="t1", account_id="chk"),
            _txn(TransactionType.INCOME, 500, "catB", date(2025, 4, 2), id="t2", account_id="chk"),
            _txn(TransactionType.EXPENSE, 40, "catA", date(2025, 4, 20), id="t3", account_id="cc"),
        ],
        previous_transactions=[
            _txn(TransactionType.EXPENSE, 70, "catA", date(2025, 3, 10)),
            _txn(TransactionType.INCOME, 400, "catB", date(2025, 3, 2)),
        ],
        categories=[Category(id="catA", name="Groceries"), Category(id="catB", name="Salary")],
        accounts=[
            Account(id="chk", name="Checking", balance=2000.0),
            Account(id="cc", name="Card", balance=-500.0, type=AccountType.CREDIT),
        ],
        balance_history=[
            BalanceSnapshot(account_id="chk", as_of=date(2025, 4, 1), balance=1000.0),
            BalanceSnapshot(account_id="cc", as_of=date(2025, 4, 1), balance=-500.0),
        ],
        budgets=[
            Budget(
                name="April",
                start_date=date(2025, 4, 1),
                end_date=date(2025, 4, 30),
                categories=[BudgetCategory(category_id="catA", allocated=200.0)],
            )
        ],
        goals=[
            Goal(
                name="Fund",
                target_amount=1000,
                current_amount=400,
                start_date=date(2025, 1, 1),
                target_date=date(2025, 12, 31),
            )
        ],
        period_start=date(2025, 4, 1),
        period_end=date(2025, 4, 30),
    )


class TestIncomeExpenseSummary:
    def test_april_scenario(self) -> None:
        """Test the April income/expense scenario."""
        txns = [
            _txn(TransactionType.EXPENSE, 100, "catA", date(2025, 4, 1)),
            _txn(TransactionType.INCOME, 500, "catB", date(2025, 4, 2)),
        ]
        summary = ReportAssembler().income_expense_summary(
            txns, [], date(2025, 4, 1), date(2025, 4, 30), Granularity.MONTH
        )

        assert summary.total_income == 500
        assert summary.total_expenses == 100
        assert summary.net_cash_flow == 400
        assert summary.savings_rate == pytest.approx(80.0)
        assert len(summary.expenses_by_category) == 1
        assert summary.expenses_by_category[0].amount == 100
        assert summary.expenses_by_category[0].percentage == 100.0
        assert [p.period for p in summary.time_series] == ["2025-04"]
        assert summary.previous_total_income is None

    def test_previous_period_comparison(self, snapshot) -> None:
        """Test comparison against the previous period."""
        summary = ReportAssembler().income_expense_summary(
            snapshot.transactions,
            snapshot.categories,
            date(2025, 4, 1),
            date(2025, 4, 30),
            previous_transactions=snapshot.previous_transactions,
        )
        assert summary.previous_total_income == 400
        assert summary.previous_total_expenses == 70
        assert summary.expense_deltas[0].category_id == "catA"
        assert summary.expense_deltas[0].delta == 70
        assert summary.largest_expense.category_name == "Groceries"

    def test_weekly_series_is_continuous(self, snapshot) -> None:
        """Test the weekly series has no gaps."""
        summary = ReportAssembler().income_expense_summary(
            snapshot.transactions, snapshot.categories, date(2025, 4, 1), date(2025, 4, 30), "week"
        )
        assert summary.granularity == "week"
        assert len(summary.time_series) == 5
        assert sum(p.income for p in summary.time_series) == summary.total_income

    def test_same_input_same_report(self, snapshot) -> None:
        """Test identical input gives an identical report."""
        assembler = ReportAssembler()
        first = assembler.build("spending", snapshot, today=TODAY)
        second = assembler.build("spending", snapshot, today=TODAY)
        assert first.to_dict() == second.to_dict()


class TestCategoryReport:
    def test_category_detail(self, snapshot) -> None:
        """Test category detail report."""
        report = ReportAssembler().category_report(
            "catA",
            snapshot.transactions,
            snapshot.categories,
            date(2025, 4, 1),
            date(2025, 4, 30),
            previous_transactions=snapshot.previous_transactions,
        )
        assert report.category_name == "Groceries"
        assert report.total_spent == 140
        assert report.previous_total_spent == 70
        assert report.previous_period_comparison == pytest.approx(100.0)
        assert report.average_per_period == pytest.approx(140.0)
        assert [t.id for t in report.transactions] == ["t3", "t1"]

    def test_unknown_category_raises(self, snapshot) -> None:
        """Test an unknown category is rejected."""
        with pytest.raises(ValueError, match="Category not found: nope"):
            ReportAssembler().category_report(
                "nope", snapshot.transactions, snapshot.categories, date(2025, 4, 1), date(2025, 4, 30)
            )


class TestBuild:
    def test_spending(self, snapshot) -> None:
        """Test building a spending report."""
        report = ReportAssembler().build(ReportType.SPENDING, snapshot, today=TODAY)
        assert isinstance(report, IncomeExpenseSummary)
        assert report.period_start == date(2025, 4, 1)
        assert report.expense_deltas

    def test_net_worth(self, snapshot) -> None:
        """Test building a net worth report."""
        report = ReportAssembler().build("net_worth", snapshot, today=TODAY)
        assert isinstance(report, NetWorthReport)
        assert report.current_net_worth == 1500
        assert report.time_series[0].net_worth == 500
        assert report.change_amount == 1000
        assert report.change_percentage == pytest.approx(200.0)

    def test_category_without_id_uses_current_budget(self, snapshot) -> None:
        """Test category without an id falls back to the current budget."""
        report = ReportAssembler().build("category", snapshot, today=TODAY)
        assert isinstance(report, BudgetPerformanceReport)
        assert report.total_spent == 140

    def test_category_without_budget_raises(self, snapshot) -> None:
        """Test category without an id or a current budget."""
        snapshot.budgets = []
        with pytest.raises(ValueError, match="No current budget found"):
            ReportAssembler().build("category", snapshot, today=TODAY)

    def test_category_with_id(self, snapshot) -> None:
        """Test building a category report."""
        report = ReportAssembler().build("category", snapshot, category_id="catA", today=TODAY)
        assert isinstance(report, CategoryReport)

    def test_custom_requires_request(self, snapshot) -> None:
        """Test custom reports require a request."""
        with pytest.raises(ValueError, match="CustomReportRequest is required"):
            ReportAssembler().build("custom", snapshot, today=TODAY)

    def test_unknown_type_raises(self, snapshot) -> None:
        """Test an unknown report type is rejected."""
        with pytest.raises(ValueError):
            ReportAssembler().build("forecast", snapshot, today=TODAY)

    def test_range_from_timeframe_when_snapshot_has_none(self, snapshot) -> None:
        """Test the range comes from the timeframe when the snapshot has none."""
        snapshot.period_start = None
        snapshot.period_end = None
        report = ReportAssembler().build("spending", snapshot, granularity=Granularity.DAY, today=TODAY)
        assert report.period_end == TODAY
        assert report.period_start == date(2025, 4, 9)
        assert len(report.time_series) == 8

    def test_goal_progress(self, snapshot) -> None:
        """Test goal progress through the assembler."""
        summary = ReportAssembler().goal_progress(snapshot.goals, date(2025, 7, 1))
        assert isinstance(summary, GoalSummary)
        assert summary.goals[0].status.value == "behind_schedule"


class TestCustomReport:
    def test_spending_by_category_with_filters(self, snapshot) -> None:
        """Test spending by category with account filters."""
        request = CustomReportRequest(
            title="Card spending",
            type=ReportType.SPENDING,
            timeframe="custom",
            start_date=date(2025, 4, 1),
            end_date=date(2025, 4, 30),
            account_ids=["cc"],
            group_by="category",
        )
        report = ReportAssembler().custom_report(request, snapshot, TODAY)
        assert report.summary.total_amount == 40
        assert report.filters == {"account_ids": ["cc"]}
        assert report.data[0]["category_id"] == "catA"
        assert report.summary.compare_amount is None

    def test_daily_series_with_comparison(self, snapshot) -> None:
        """Test a daily income series with comparison."""
        request = CustomReportRequest(
            type=ReportType.INCOME,
            timeframe="custom",
            start_date=date(2025, 4, 1),
            end_date=date(2025, 4, 3),
            compare_with_previous=True,
        )
        report = ReportAssembler().custom_report(request, snapshot, TODAY)
        assert [row["period"] for row in report.data] == ["2025-04-01", "2025-04-02", "2025-04-03"]
        assert report.data[1]["amount"] == 500
        assert report.summary.compare_amount == 400
        assert report.summary.change_percentage == pytest.approx(25.0)

    def test_net_worth(self, snapshot) -> None:
        """Test a custom net worth report."""
        request = CustomReportRequest(type=ReportType.NET_WORTH, timeframe="month", group_by="week")
        report = ReportAssembler().custom_report(request, snapshot, TODAY)
        assert report.period_end == TODAY
        assert report.summary.total_amount == 500

    def test_category_requires_ids(self, snapshot) -> None:
        """Test category custom reports require category ids."""
        request = CustomReportRequest(type=ReportType.CATEGORY)
        with pytest.raises(ValueError, match="At least one category ID"):
            ReportAssembler().custom_report(request, snapshot, TODAY)

    def test_unsupported_type(self, snapshot) -> None:
        """Test unsupported custom report types."""
        request = CustomReportRequest(type=ReportType.CUSTOM)
        with pytest.raises(ValueError, match="Unsupported report type"):
            ReportAssembler().custom_report(request, snapshot, TODAY)

    def test_custom_timeframe_needs_dates(self, snapshot) -> None:
        """Test a custom timeframe needs both dates."""
        request = CustomReportRequest(timeframe="custom", start_date=date(2025, 4, 1))
        with pytest.raises(ValueError, match="required for custom"):
            ReportAssembler().custom_report(request, snapshot, TODAY)

    def test_unknown_timeframe_rejected(self) -> None:
        """Test an unknown timeframe fails validation instead of defaulting."""
        with pytest.raises(ValidationError):
            CustomReportRequest(timeframe="fortnight")


class TestAccountSummary:
    def test_per_account_movement(self, snapshot) -> None:
        """Test balance movement per account over the snapshot transactions."""
        summary = ReportAssembler().account_summary(snapshot.accounts, snapshot.transactions)
        assert isinstance(summary, AccountSummary)
        assert summary.net_worth == 1500
        assert summary.total_liabilities == 500
        by_id = {row.account_id: row for row in summary.accounts}
        assert by_id["chk"].change_amount == 400
        assert by_id["chk"].change_percentage == pytest.approx(25.0)
        assert by_id["cc"].change_amount == -40

    def test_build_dispatch(self, snapshot) -> None:
        """Test the accounts report type builds an account summary."""
        report = ReportAssembler().build(ReportType.ACCOUNTS, snapshot, today=TODAY)
        assert isinstance(report, AccountSummary)
        assert [row.name for row in report.accounts] == ["Checking", "Card"]


class TestDashboard:
    def test_month_over_month(self, snapshot) -> None:
        """Test this month's figures and their change against last month."""
        report = ReportAssembler().dashboard(snapshot, TODAY)
        assert isinstance(report, DashboardSummary)
        assert report.period_start == date(2025, 4, 1)
        assert report.period_end == date(2025, 4, 30)
        assert report.monthly_income == 500
        assert report.monthly_income_change == 100
        assert report.monthly_income_change_percentage == pytest.approx(25.0)
        assert report.monthly_expenses == 140
        assert report.monthly_expenses_change == 70
        assert report.monthly_expenses_change_percentage == pytest.approx(100.0)
        assert report.savings_rate == pytest.approx(72.0)
        assert report.savings_rate_change == pytest.approx(-10.5)

    def test_net_worth_change_from_net_flow(self, snapshot) -> None:
        """Test net worth change is measured against net worth minus this month's net flow."""
        report = ReportAssembler().dashboard(snapshot, TODAY)
        assert report.net_worth == 1500
        assert report.net_worth_change == 360
        assert report.net_worth_change_percentage == pytest.approx(360 / 1140 * 100)

    def test_panels(self, snapshot) -> None:
        """Test the cash flow, breakdown, recent, budget and goal panels."""
        report = ReportAssembler().dashboard(snapshot, TODAY)
        assert [p.period for p in report.cash_flow] == [
            "2024-11", "2024-12", "2025-01", "2025-02", "2025-03", "2025-04",
        ]
        assert report.cash_flow[-2].income == 400
        assert report.cash_flow[-1].expenses == 140
        assert [(c.category_name, c.amount) for c in report.expense_breakdown] == [("Groceries", 140)]
        assert [t.id for t in report.recent_transactions[:3]] == ["t3", "t2", "t1"]
        assert len(report.recent_transactions) == 5
        assert report.recent_transactions[0].category_name == "Groceries"
        assert report.recent_transactions[0].type == "expense"
        assert report.budget is not None
        assert report.budget.total_spent == 140
        assert [g.name for g in report.goals] == ["Fund"]

    def test_panel_limits(self) -> None:
        """Test top categories, recent transactions and goals are capped."""
        txns = [
            _txn(TransactionType.EXPENSE, 10 * (i + 1), f"c{i}", date(2025, 4, 1 + i), id=f"t{i}")
            for i in range(8)
        ]
        goals = [
            Goal(
                name=f"G{i}",
                target_amount=100,
                start_date=date(2025, 1, 1),
                target_date=date(2025, 12, 1 + i),
            )
            for i in range(4)
        ]
        goals.append(Goal(
            name="Paused",
            target_amount=100,
            priority=1,
            status=GoalStatus.PAUSED,
            start_date=date(2025, 1, 1),
            target_date=date(2025, 6, 1),
        ))
        categories = [Category(id=f"c{i}", name=f"Cat {i}") for i in range(8)]
        snapshot = FinanceSnapshot(transactions=txns, categories=categories, goals=goals)

        report = ReportAssembler().dashboard(snapshot, TODAY)
        assert len(report.expense_breakdown) == 6
        assert report.expense_breakdown[0].amount == 80
        assert [t.id for t in report.recent_transactions] == ["t7", "t6", "t5", "t4", "t3"]
        assert [g.name for g in report.goals] == ["G0", "G1", "G2"]
        assert report.budget is None

    def test_empty_previous_month(self) -> None:
        """Test change percentages are 0 when last month had nothing."""
        snapshot = FinanceSnapshot(
            transactions=[_txn(TransactionType.INCOME, 300, "pay", date(2025, 4, 3))],
            accounts=[Account(id="chk", balance=300.0)],
        )
        report = ReportAssembler().dashboard(snapshot, TODAY)
        assert report.monthly_income_change == 300
        assert report.monthly_income_change_percentage == 0.0
        assert report.net_worth == 300
        assert report.net_worth_change == 300
        assert report.net_worth_change_percentage == 0.0

    def test_build_dispatch(self, snapshot) -> None:
        """Test the dashboard report type uses today's month."""
        report = ReportAssembler().build("dashboard", snapshot, today=date(2025, 3, 20))
        assert isinstance(report, DashboardSummary)
        assert report.period_start == date(2025, 3, 1)
        assert report.monthly_income == 400


def test_granularity_timeframe() -> None:
    """Test default timeframe per granularity."""
    assert granularity_timeframe(Granularity.DAY) == "week"
    assert granularity_timeframe(Granularity.MONTH) == "year"
