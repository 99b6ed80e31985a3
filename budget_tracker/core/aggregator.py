# budget_tracker/core/aggregator.py
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Mapping, Optional

from budget_tracker.core.categorizer import DEFAULT_RULES, OTHER, categorize
from budget_tracker.core.models import BudgetCategory, Transaction

DEFAULT_BUDGETS: Dict[str, Decimal] = {
    "Groceries": Decimal("500"),
    "Transportation": Decimal("200"),
    "Entertainment": Decimal("150"),
    "Utilities": Decimal("300"),
    "Dining Out": Decimal("250"),
}


def default_categories(allocations: Optional[Mapping[str, object]] = None) -> List[BudgetCategory]:
    """Return a fresh catalog of empty categories in allocation order."""
    allocations = DEFAULT_BUDGETS if allocations is None else allocations
    catalog = []
    for name, amount in allocations.items():
        try:
            allocated = Decimal(str(amount))
        except InvalidOperation:
            raise ValueError(f"Allocated amount for '{name}' is not a number: {amount!r}")
        if not allocated.is_finite():
            raise ValueError(f"Allocated amount for '{name}' is not a number: {amount!r}")
        if allocated < 0:
            raise ValueError(f"Allocated amount for '{name}' must not be negative")
        catalog.append(BudgetCategory(name=str(name), allocated_amount=allocated))
    return catalog


def aggregate(
    transactions: Iterable[Transaction],
    categories: Iterable[BudgetCategory],
    rules=DEFAULT_RULES,
) -> List[BudgetCategory]:
    """
    Fold ``transactions`` into copies of ``categories``.

    Every transaction lands in exactly one category. Names missing from the
    catalog fall into "Other", which is created once (allocated 0) and kept
    last. The input catalog is left untouched.
    """
    working: Dict[str, BudgetCategory] = {}
    for cat in categories:
        working[cat.name] = BudgetCategory(
            name=cat.name,
            allocated_amount=cat.allocated_amount,
            spent_amount=cat.spent_amount,
            transactions=list(cat.transactions),
        )

    for tx in transactions:
        name = categorize(tx.description, rules)
        if name not in working:
            name = OTHER
        bucket = working.get(name)
        if bucket is None:
            bucket = working[OTHER] = BudgetCategory(name=OTHER, allocated_amount=Decimal("0"))
        bucket.spent_amount += abs(tx.amount)
        bucket.transactions.append(tx)

    return list(working.values())
