"""
Snapshot loading — read collaborator data from files.

LedgerLens normally receives snapshots from the application's persistence
layer. For the CLI and for offline analysis the same data can be loaded from:

- a YAML or JSON document shaped like ``FinanceSnapshot``;
- a bank-style CSV of transactions (columns detected by alias).
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

import pandas as pd
import yaml

from ledgerlens.models.financial import FinanceSnapshot, Transaction, TransactionType

logger = logging.getLogger("ledgerlens.snapshot")

# Common column name mappings
_COLUMN_ALIASES: dict[str, list[str]] = {
    "date": ["date", "transaction_date", "txn_date", "posted_date", "posting_date"],
    "amount": ["amount", "total", "value", "net_amount"],
    "type": ["type", "transaction_type", "kind"],
    "category_id": ["category_id", "category", "categoryid"],
    "account_id": ["account_id", "account", "accountid"],
    "description": ["description", "memo", "narrative", "details", "note"],
    "id": ["id", "transaction_id", "txn_id"],
}


def load_snapshot(path: str | Path) -> FinanceSnapshot:
    """Load a ``FinanceSnapshot`` from a YAML or JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If a record is malformed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    if path.suffix.lower() == ".csv":
        transactions = load_transactions_csv(path)
        snapshot = FinanceSnapshot(transactions=transactions, source=f"csv:{path.name}")
    else:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data: dict[str, Any] = json.load(f) or {}
            else:
                data = yaml.safe_load(f) or {}
        data.setdefault("source", f"file:{path.name}")
        snapshot = FinanceSnapshot.model_validate(data)

    if snapshot.transactions and (snapshot.period_start is None or snapshot.period_end is None):
        dates = [t.date for t in snapshot.transactions]
        snapshot.period_start = snapshot.period_start or min(dates)
        snapshot.period_end = snapshot.period_end or max(dates)

    logger.info(
        f"Loaded snapshot from {path.name}: {len(snapshot.transactions)} transactions, "
        f"{len(snapshot.accounts)} accounts, {len(snapshot.goals)} goals"
    )
    return snapshot


def load_transactions_csv(path: str | Path, *, encoding: str = "utf-8", delimiter: str = ",") -> list[Transaction]:
    """
    Parse a transactions CSV.

    Without a ``type`` column the sign of the amount decides: negative rows
    are expenses, positive rows income. Amounts are stored as magnitudes.
    Rows with an unparseable date or amount are skipped with a warning.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    df = pd.read_csv(path, encoding=encoding, delimiter=delimiter, dtype=str, keep_default_na=False)
    df.columns = df.columns.str.strip().str.lower()
    col_map = _detect_columns(df)

    if "date" not in col_map or "amount" not in col_map:
        raise ValueError(f"CSV {path.name} is missing required columns (date, amount)")

    transactions: list[Transaction] = []
    for index, row in df.iterrows():
        try:
            transactions.append(_parse_row(row, col_map))
        except ValueError as e:
            logger.warning(f"Skipping row {index + 2} of {path.name}: {e}")

    logger.info(f"Parsed {len(transactions)} transactions from {path.name}")
    return transactions


def _detect_columns(df: pd.DataFrame) -> dict[str, str]:
    """Auto-detect column mappings from the DataFrame."""
    col_map: dict[str, str] = {}
    df_cols = set(df.columns)

    for field, aliases in _COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in df_cols:
                col_map[field] = alias
                break

    return col_map


def _parse_row(row: pd.Series, col_map: dict[str, str]) -> Transaction:
    def cell(field: str) -> str:
        column = col_map.get(field)
        return str(row[column]).strip() if column else ""

    raw_date = cell("date")
    if not raw_date:
        raise ValueError("missing date")
    txn_date: date = pd.to_datetime(raw_date).date()

    amount = float(cell("amount").replace(",", "").replace("$", ""))

    raw_type = cell("type").lower()
    if raw_type in {t.value for t in TransactionType}:
        txn_type = TransactionType(raw_type)
    else:
        txn_type = TransactionType.EXPENSE if amount < 0 else TransactionType.INCOME

    return Transaction(
        id=cell("id") or None,
        date=txn_date,
        amount=abs(amount),
        type=txn_type,
        category_id=cell("category_id") or None,
        account_id=cell("account_id") or None,
        description=cell("description"),
    )
