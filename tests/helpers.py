from decimal import Decimal

from budget_tracker.core.models import Account
from budget_tracker.loaders.base import BaseLoader


class FakeLoader(BaseLoader):
    """In-memory transaction source recording each query."""

    def __init__(self, transactions=(), accounts=(), error=None):
        self.transactions = list(transactions)
        self.accounts = list(accounts)
        self.error = error
        self.calls = []

    async def iter_transactions(self, window, status=None, account_id=None, default_text=""):
        self.calls.append({
            "window": window,
            "status": status,
            "account_id": account_id,
            "default_text": default_text,
        })
        if self.error is not None:
            raise self.error
        for tx in self.transactions:
            if account_id is not None and tx.account_id != account_id:
                continue
            yield tx

    async def list_accounts(self):
        if self.error is not None:
            raise self.error
        return list(self.accounts)


def make_account(id="acc-1", name="Spending", balance="10.00", currency="AUD"):
    return Account(id=id, display_name=name, balance=Decimal(balance), currency_code=currency)
