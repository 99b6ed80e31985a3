# budget_tracker/core/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional


@dataclass(frozen=True)
class Transaction:
    date: str
    description: str
    amount: Decimal
    account_id: Optional[str] = None


@dataclass
class BudgetCategory:
    name: str
    allocated_amount: Decimal
    spent_amount: Decimal = Decimal("0")
    transactions: List[Transaction] = field(default_factory=list)

    @property
    def remaining_amount(self) -> Decimal:
        return self.allocated_amount - self.spent_amount

    @property
    def over_budget(self) -> bool:
        return self.remaining_amount < 0


@dataclass(frozen=True)
class DateWindow:
    """Half-open interval ``[start, end)`` of API timestamps."""
    start: str
    end: str


@dataclass(frozen=True)
class ExpenseSummary:
    total_expenses: Decimal = Decimal("0")
    total_incoming: Decimal = Decimal("0")

    @property
    def net_position(self) -> Decimal:
        return self.total_incoming - self.total_expenses


@dataclass(frozen=True)
class Account:
    id: str
    display_name: str
    balance: Decimal
    currency_code: str
