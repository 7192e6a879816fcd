"""
Financial data models — transactions, categories, accounts, budgets, goals.

These are read-only snapshots handed over by the persistence layer. Nothing
in LedgerLens mutates them.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

UNCATEGORIZED_ID = "uncategorized"
UNCATEGORIZED_NAME = "Uncategorized"


class TransactionType(str, Enum):
    """Core transaction types."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class Transaction(BaseModel):
    """A single financial transaction."""

    id: str | None = None
    date: date
    amount: float
    type: TransactionType
    category_id: str | None = None
    account_id: str | None = None
    status: str = "cleared"
    description: str = ""
    tags: list[str] = Field(default_factory=list)

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def is_transfer(self) -> bool:
        return self.type == TransactionType.TRANSFER


class Category(BaseModel):
    """A transaction category. One level of hierarchy via ``parent_id``."""

    id: str
    name: str
    color: str | None = None
    icon: str | None = None
    parent_id: str | None = None
    is_active: bool = True


class AccountType(str, Enum):
    """Account kinds. Credit and loan accounts are liabilities."""

    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    LOAN = "loan"
    INVESTMENT = "investment"
    CASH = "cash"
    OTHER = "other"


LIABILITY_TYPES = frozenset({AccountType.CREDIT, AccountType.LOAN})


class Account(BaseModel):
    """Current state of a financial account."""

    id: str
    name: str = ""
    balance: float
    type: AccountType = AccountType.CHECKING
    include_in_net_worth: bool = True
    currency: str = "USD"

    @property
    def is_liability(self) -> bool:
        return self.type in LIABILITY_TYPES


class BalanceSnapshot(BaseModel):
    """Point-in-time account balance, used to rebuild net-worth history."""

    account_id: str
    as_of: date
    balance: float


class BudgetCategory(BaseModel):
    """Allocation for one category inside a budget."""

    category_id: str
    allocated: float
    name: str | None = None


class Budget(BaseModel):
    """A budget covering a fixed window with per-category allocations."""

    id: str | None = None
    name: str = "Budget"
    start_date: date
    end_date: date
    categories: list[BudgetCategory] = Field(default_factory=list)
    is_current: bool = True

    @property
    def total_allocated(self) -> float:
        return sum(c.allocated for c in self.categories)


class GoalStatus(str, Enum):
    """Goal lifecycle states."""

    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class ContributionFrequency(str, Enum):
    """How often money is put toward a goal."""

    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class Contribution(BaseModel):
    """A recurring contribution schedule."""

    amount: float
    frequency: ContributionFrequency


class Goal(BaseModel):
    """A savings goal.

    Accepts either a nested ``contribution`` or the flat
    ``contribution_amount`` / ``contribution_frequency`` pair that storage
    layers usually hand over. A goal missing either half has no schedule.
    """

    id: str | None = None
    name: str = ""
    target_amount: float
    current_amount: float = Field(default=0.0, ge=0.0)
    start_date: date
    target_date: date
    priority: int = Field(default=2, ge=1, le=3)
    status: GoalStatus = GoalStatus.ACTIVE
    contribution: Contribution | None = None

    @model_validator(mode="before")
    @classmethod
    def _fold_contribution(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        amount = data.pop("contribution_amount", None)
        frequency = data.pop("contribution_frequency", None)
        if data.get("contribution") is None and amount is not None and frequency:
            data["contribution"] = {"amount": amount, "frequency": frequency}
        return data


class FinanceSnapshot(BaseModel):
    """Everything the analytics engine needs for one request.

    This is what the persistence layer (or ``ledgerlens.snapshot``) produces
    and the report assembler consumes.
    """

    transactions: list[Transaction] = Field(default_factory=list)
    previous_transactions: list[Transaction] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    accounts: list[Account] = Field(default_factory=list)
    balance_history: list[BalanceSnapshot] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)
    period_start: date | None = None
    period_end: date | None = None
    source: str = "unknown"

    @property
    def current_budget(self) -> Budget | None:
        for budget in self.budgets:
            if budget.is_current:
                return budget
        return None
