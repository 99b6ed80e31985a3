# budget_tracker/core/summary.py
from decimal import Decimal

from budget_tracker.core.models import ExpenseSummary


def summarize(transactions):
    """Total debits (as a positive number) and credits of ``transactions``."""
    expenses = Decimal("0")
    incoming = Decimal("0")
    for tx in transactions:
        if tx.amount < 0:
            expenses += abs(tx.amount)
        else:
            incoming += tx.amount
    return ExpenseSummary(total_expenses=expenses, total_incoming=incoming)
