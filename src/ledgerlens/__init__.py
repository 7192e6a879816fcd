"""
LedgerLens — personal-finance analytics engine.

Summaries. Net worth. Budgets. Goals.
Pure computations over snapshots your app already fetched.
"""

__version__ = "0.3.0"
__all__ = ["LedgerLens"]

from ledgerlens.engine import LedgerLens  # noqa: E402
