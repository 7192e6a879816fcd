"""Tests for the net-worth calculator."""

from datetime import date

import pytest

from ledgerlens.analyzers.networth import NetWorthCalculator
from ledgerlens.analyzers.periods import Granularity, build_buckets
from ledgerlens.models.financial import (
    Account,
    AccountType,
    BalanceSnapshot,
    Transaction,
    TransactionType,
)


@pytest.fixture
def accounts():
    return [
        Account(id="chk", name="Checking", balance=1600.0, type=AccountType.CHECKING),
        Account(id="cc", name="Visa", balance=-200.0, type=AccountType.CREDIT),
        Account(id="hidden", name="Shared", balance=9999.0, include_in_net_worth=False),
    ]


@pytest.fixture
def history():
    return [
        BalanceSnapshot(account_id="chk", as_of=date(2025, 1, 15), balance=1000.0),
        BalanceSnapshot(account_id="chk", as_of=date(2025, 3, 10), balance=1500.0),
        BalanceSnapshot(account_id="cc", as_of=date(2025, 2, 1), balance=-200.0),
        BalanceSnapshot(account_id="hidden", as_of=date(2025, 1, 1), balance=5000.0),
    ]


class TestCurrentNetWorth:
    def test_liabilities_subtract(self, accounts) -> None:
        """Test liabilities subtract from net worth."""
        assets, liabilities, net = NetWorthCalculator().net_worth(accounts)
        assert assets == 1600
        assert liabilities == 200
        assert net == 1400

    def test_liability_sign_does_not_matter(self) -> None:
        """Test liability balances count by magnitude."""
        calc = NetWorthCalculator()
        owed_positive = [Account(id="loan", balance=300.0, type=AccountType.LOAN)]
        owed_negative = [Account(id="loan", balance=-300.0, type=AccountType.LOAN)]
        assert calc.net_worth(owed_positive) == calc.net_worth(owed_negative) == (0.0, 300.0, -300.0)

    def test_excluded_accounts_are_ignored(self) -> None:
        """Test excluded accounts are ignored."""
        accounts = [Account(id="a", balance=100.0, include_in_net_worth=False)]
        assert NetWorthCalculator().net_worth(accounts) == (0.0, 0.0, 0.0)

    def test_no_accounts(self) -> None:
        """Test net worth without accounts."""
        assert NetWorthCalculator().net_worth([]) == (0.0, 0.0, 0.0)


class TestSeries:
    def test_latest_snapshot_at_each_bucket_end(self, accounts, history) -> None:
        """Test each bucket uses the latest snapshot at its end."""
        buckets = build_buckets(date(2025, 1, 1), date(2025, 3, 31), Granularity.MONTH)
        points = NetWorthCalculator().series(accounts, history, buckets)

        assert [p.period for p in points] == ["2025-01", "2025-02", "2025-03"]
        assert [p.date for p in points] == [date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 31)]
        # Card has no snapshot before Feb 1, so it counts as 0 in January
        assert [p.net_worth for p in points] == [1000.0, 800.0, 1300.0]
        assert points[1].assets == 1000.0
        assert points[1].liabilities == 200.0

    def test_account_without_history_counts_as_zero(self, accounts) -> None:
        """Test an account without history counts as 0."""
        buckets = build_buckets(date(2025, 1, 1), date(2025, 2, 28), Granularity.MONTH)
        points = NetWorthCalculator().series(accounts, [], buckets)
        assert all(p.net_worth == 0 for p in points)


class TestReport:
    def test_change_relative_to_first_point(self, accounts, history) -> None:
        """Test change is measured from the first point."""
        buckets = build_buckets(date(2025, 1, 1), date(2025, 3, 31), Granularity.MONTH)
        report = NetWorthCalculator().report(accounts, history, buckets)

        assert report.current_net_worth == 1400
        assert report.total_assets == 1600
        assert report.total_liabilities == 200
        assert report.change_amount == 400
        assert report.change_percentage == pytest.approx(40.0)
        assert len(report.time_series) == 3

    def test_zero_baseline_gives_zero_percent(self, accounts) -> None:
        """Test a zero baseline gives a 0% change."""
        buckets = build_buckets(date(2025, 1, 1), date(2025, 1, 31), Granularity.MONTH)
        report = NetWorthCalculator().report(accounts, [], buckets)
        assert report.change_amount == 1400
        assert report.change_percentage == 0.0


class TestAccountSummary:
    def test_per_account_change(self) -> None:
        """Test per-account change over a period."""
        accounts = [Account(id="a1", name="Main", balance=1200.0)]
        txns = [
            Transaction(date=date(2025, 4, 1), amount=500, type=TransactionType.INCOME, account_id="a1"),
            Transaction(date=date(2025, 4, 2), amount=300, type=TransactionType.EXPENSE, account_id="a1"),
            Transaction(date=date(2025, 4, 3), amount=50, type=TransactionType.EXPENSE),
        ]
        summary = NetWorthCalculator().account_summary(accounts, txns)

        assert summary.net_worth == 1200
        row = summary.accounts[0]
        assert row.change_amount == 200
        assert row.change_percentage == pytest.approx(20.0)
        assert row.type == "checking"
