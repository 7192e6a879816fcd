"""
Net-Worth Calculator — assets minus liabilities, now and over time.

Current net worth comes straight from account balances. History is built from
balance snapshots supplied by the persistence layer: at each bucket boundary
every account contributes its latest known balance. Balances are never
reconstructed by replaying transactions.
"""

from __future__ import annotations

import bisect
import logging
from collections import defaultdict
from datetime import date
from typing import Iterable

from ledgerlens.analyzers.aggregator import period_change
from ledgerlens.analyzers.periods import Bucket
from ledgerlens.models.financial import Account, BalanceSnapshot, Transaction, TransactionType
from ledgerlens.models.report import AccountChange, AccountSummary, NetWorthPoint, NetWorthReport

logger = logging.getLogger("ledgerlens.analyzers.networth")


class NetWorthCalculator:
    """Compute net worth and its history.

    Liability accounts (credit, loan) subtract their balance magnitude; every
    other account adds its balance. Accounts flagged
    ``include_in_net_worth=False`` are ignored entirely.
    """

    @staticmethod
    def included(accounts: Iterable[Account]) -> list[Account]:
        return [a for a in accounts if a.include_in_net_worth]

    @staticmethod
    def split(balances: Iterable[tuple[Account, float]]) -> tuple[float, float]:
        """Sum ``(account, balance)`` pairs into ``(assets, liabilities)``."""
        assets = 0.0
        liabilities = 0.0
        for account, balance in balances:
            if account.is_liability:
                liabilities += abs(balance)
            else:
                assets += balance
        return assets, liabilities

    def net_worth(self, accounts: Iterable[Account]) -> tuple[float, float, float]:
        """Return ``(assets, liabilities, net_worth)`` for current balances."""
        included = self.included(accounts)
        assets, liabilities = self.split((a, a.balance) for a in included)
        return assets, liabilities, assets - liabilities

    def series(
        self,
        accounts: Iterable[Account],
        history: Iterable[BalanceSnapshot],
        buckets: list[Bucket],
    ) -> list[NetWorthPoint]:
        """
        Snapshot net worth at the end of each bucket.

        Args:
            accounts: Accounts (used for type and inclusion flag).
            history: Historical balances for those accounts.
            buckets: Bucket sequence; one point per bucket end.

        Returns:
            NetWorthPoints in bucket order.
        """
        included = self.included(accounts)
        timelines = self._timelines(history, {a.id for a in included})
        for account in included:
            if account.id not in timelines:
                logger.debug(f"No balance history for account {account.id}; counting it as 0")

        points: list[NetWorthPoint] = []
        for bucket in buckets:
            balances = [(a, self._balance_at(timelines.get(a.id), bucket.end)) for a in included]
            assets, liabilities = self.split(balances)
            points.append(
                NetWorthPoint(
                    period=bucket.key,
                    date=bucket.end,
                    assets=assets,
                    liabilities=liabilities,
                    net_worth=assets - liabilities,
                )
            )
        return points

    def report(
        self,
        accounts: list[Account],
        history: Iterable[BalanceSnapshot],
        buckets: list[Bucket],
    ) -> NetWorthReport:
        """Current net worth plus the change since the first series point."""
        assets, liabilities, current = self.net_worth(accounts)
        points = self.series(accounts, history, buckets)

        change_amount = 0.0
        change_pct = 0.0
        if points:
            change_amount, change_pct = period_change(current, points[0].net_worth)

        return NetWorthReport(
            current_net_worth=current,
            total_assets=assets,
            total_liabilities=liabilities,
            change_amount=change_amount,
            change_percentage=change_pct,
            time_series=points,
        )

    def account_summary(
        self,
        accounts: list[Account],
        transactions: Iterable[Transaction],
    ) -> AccountSummary:
        """
        Per-account balance movement over the transactions' period.

        Income adds to the account, expenses and outgoing transfers subtract.
        The change percentage is measured against the implied opening balance.
        """
        changes: dict[str, float] = defaultdict(float)
        for txn in transactions:
            if not txn.account_id:
                continue
            if txn.type == TransactionType.INCOME:
                changes[txn.account_id] += txn.amount
            else:
                changes[txn.account_id] -= txn.amount

        rows = []
        for account in accounts:
            change = changes.get(account.id, 0.0)
            opening = account.balance - change
            _, pct = period_change(account.balance, opening)
            rows.append(
                AccountChange(
                    account_id=account.id,
                    name=account.name,
                    type=account.type.value,
                    balance=account.balance,
                    currency=account.currency,
                    change_amount=change,
                    change_percentage=pct,
                )
            )

        assets, liabilities, net = self.net_worth(accounts)
        return AccountSummary(
            net_worth=net,
            total_assets=assets,
            total_liabilities=liabilities,
            accounts=rows,
        )

    @staticmethod
    def _timelines(
        history: Iterable[BalanceSnapshot],
        account_ids: set[str],
    ) -> dict[str, tuple[list[date], list[float]]]:
        by_account: dict[str, list[BalanceSnapshot]] = defaultdict(list)
        for snap in history:
            if snap.account_id in account_ids:
                by_account[snap.account_id].append(snap)

        timelines = {}
        for account_id, snaps in by_account.items():
            snaps.sort(key=lambda s: s.as_of)
            timelines[account_id] = ([s.as_of for s in snaps], [s.balance for s in snaps])
        return timelines

    @staticmethod
    def _balance_at(timeline: tuple[list[date], list[float]] | None, on: date) -> float:
        """Latest balance with ``as_of <= on``; 0 before the first snapshot."""
        if timeline is None:
            return 0.0
        dates, balances = timeline
        idx = bisect.bisect_right(dates, on)
        if idx == 0:
            return 0.0
        return balances[idx - 1]
