from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import anyio

from budget_tracker.core.aggregator import aggregate
from budget_tracker.core.models import BudgetCategory, DateWindow, ExpenseSummary, Transaction
from budget_tracker.core.summary import summarize
from budget_tracker.exceptions import RemoteFetchError
from budget_tracker.loaders.up import UNKNOWN, TransactionStream

SETTLED = "SETTLED"


@dataclass
class MonthlyReport:
    window: DateWindow
    categories: List[BudgetCategory]
    summary: ExpenseSummary
    transactions: List[Transaction]


async def budget_report(loader, settings, window, status=None, account_id=None) -> List[BudgetCategory]:
    """Fetch the window's transactions and fold them into a fresh catalog."""
    txs = await loader.fetch_transactions(window, status=status, account_id=account_id)
    return aggregate(txs, settings.new_catalog(), settings.rules)


async def expense_report(loader, window, status=SETTLED, account_id=None):
    txs = await loader.fetch_transactions(
        window, status=status, account_id=account_id, default_text=UNKNOWN
    )
    return summarize(txs), txs


async def monthly_report(loader, settings, window, status=None, account_id=None, share=True) -> MonthlyReport:
    """Build the budget and the net position from one transaction stream.

    ``share=False`` re-fetches for the second consumer.
    """
    stream = TransactionStream(loader, window, status=status, account_id=account_id, share=share)
    deadline = getattr(loader, "fetch_deadline", None)
    try:
        with anyio.fail_after(deadline):
            categories = aggregate([tx async for tx in stream], settings.new_catalog(), settings.rules)
            txs = await stream.collect()
    except TimeoutError as exc:
        raise RemoteFetchError(f"Fetching transactions exceeded {deadline} seconds") from exc
    return MonthlyReport(window=window, categories=categories, summary=summarize(txs), transactions=txs)


async def settled_account_transactions(loader, window, account_id: Optional[str]) -> List[Transaction]:
    return await loader.fetch_transactions(
        window, status=SETTLED, account_id=account_id or "", default_text=UNKNOWN
    )
