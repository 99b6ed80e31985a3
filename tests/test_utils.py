from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from budget_tracker.core.models import Transaction
from budget_tracker.utils import current_month_window, filter_transactions_by_account


def test_december_rolls_into_next_year():
    window = current_month_window(datetime(2024, 12, 15, tzinfo=timezone.utc))
    assert window.start == "2024-12-01T00:00:00Z"
    assert window.end == "2025-01-01T00:00:00Z"


def test_mid_year_month():
    window = current_month_window(datetime(2024, 2, 29, 23, 59, 59))
    assert window.start == "2024-02-01T00:00:00Z"
    assert window.end == "2024-03-01T00:00:00Z"


@pytest.mark.parametrize("month", range(1, 13))
def test_end_is_first_of_next_month(month):
    window = current_month_window(datetime(2023, month, 10, tzinfo=timezone.utc))
    start = datetime.strptime(window.start, "%Y-%m-%dT%H:%M:%SZ")
    end = datetime.strptime(window.end, "%Y-%m-%dT%H:%M:%SZ")
    assert end > start
    assert end.day == 1
    assert (end - timedelta(days=1)).month == month


def test_aware_datetime_is_converted_to_utc():
    # 05:00 on 1 March in Sydney is still February in UTC
    sydney = timezone(timedelta(hours=11))
    window = current_month_window(datetime(2024, 3, 1, 5, 0, tzinfo=sydney))
    assert window.start == "2024-02-01T00:00:00Z"
    assert window.end == "2024-03-01T00:00:00Z"


def test_defaults_to_now():
    window = current_month_window()
    assert window.start < window.end
    assert window.start.endswith("-01T00:00:00Z")


def test_filter_by_account_drops_unlinked():
    txs = [
        Transaction("d1", "a", Decimal("-1"), account_id="acc-1"),
        Transaction("d2", "b", Decimal("-2"), account_id="acc-2"),
        Transaction("d3", "c", Decimal("-3"), account_id=None),
    ]
    assert [tx.date for tx in filter_transactions_by_account(txs, "acc-1")] == ["d1"]
    assert filter_transactions_by_account(txs, "") == []
