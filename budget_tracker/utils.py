from datetime import datetime, timezone

from budget_tracker.core.models import DateWindow

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def current_month_window(now=None):
    """
    Return the [start, end) window covering the calendar month of ``now``
    (UTC). ``end`` is the first instant of the following month.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)

    start = datetime(now.year, now.month, 1)
    if now.month == 12:
        end = datetime(now.year + 1, 1, 1)
    else:
        end = datetime(now.year, now.month + 1, 1)
    return DateWindow(start=start.strftime(TIMESTAMP_FORMAT), end=end.strftime(TIMESTAMP_FORMAT))


def filter_transactions_by_account(transactions, account_id):
    """
    Return only those transactions linked to ``account_id``. Transactions
    without an account relationship never match.
    """
    return [tx for tx in transactions if tx.account_id is not None and tx.account_id == account_id]
