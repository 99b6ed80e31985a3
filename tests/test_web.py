import json
import sys
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from budget_tracker import web
from budget_tracker.config import Settings
from budget_tracker.core.models import Transaction
from budget_tracker.exceptions import RemoteFetchError
from helpers import FakeLoader, make_account

NOW = datetime(2024, 12, 15, tzinfo=timezone.utc)


def _loader(**kwargs):
    kwargs.setdefault("transactions", [
        Transaction("2024-12-01", "Uber", Decimal("-25.00"), account_id="acc-1"),
        Transaction("2024-12-02", "Refund", Decimal("10.00"), account_id="acc-2"),
    ])
    kwargs.setdefault("accounts", [make_account("acc-1", "Spending", "99.10")])
    return FakeLoader(**kwargs)


def _dispatch(path, loader):
    return web.dispatch(path, Settings(token="t"), lambda settings: loader, now=NOW)


def test_landing_page_does_not_fetch():
    loader = _loader()
    status, content_type, body = _dispatch("/", loader)
    assert status == 200
    assert content_type == web.HTML
    assert "/budget" in body
    assert loader.calls == []


def test_budget_page():
    loader = _loader()
    status, _, body = _dispatch("/budget", loader)
    assert status == 200
    assert "Transportation" in body
    assert "Spent: $25.00" in body
    assert loader.calls[0]["window"].start == "2024-12-01T00:00:00Z"


def test_budget_api_serializes_decimals_as_strings():
    status, content_type, body = _dispatch("/api/budget", _loader())
    assert status == 200
    assert content_type == web.JSON
    payload = json.loads(body)
    assert payload["window"]["end"] == "2025-01-01T00:00:00Z"
    transport = next(c for c in payload["categories"] if c["name"] == "Transportation")
    assert transport["spent_amount"] == "25.00"
    assert transport["transactions"][0]["description"] == "Uber"
    assert payload["categories"][-1]["name"] == "Other"


def test_expenses_api():
    loader = _loader()
    status, _, body = _dispatch("/api/expenses", loader)
    assert status == 200
    assert json.loads(body) == {
        "total_expenses": "25.00",
        "total_incoming": "10.00",
        "net_position": "-15.00",
        "transactions": 2,
    }
    assert loader.calls[0]["status"] == "SETTLED"


def test_expenses_page():
    status, _, body = _dispatch("/expenses", _loader())
    assert status == 200
    assert "December 2024" in body


def test_accounts_and_balances_pages():
    status, _, body = _dispatch("/accounts", _loader())
    assert status == 200
    assert "Spending" in body

    status, _, body = _dispatch("/allbalances", _loader())
    assert "Balance: 99.10 AUD" in body

    loader = _loader()
    status, _, body = _dispatch("/balances?account_id=acc-2", loader)
    assert status == 200
    assert "10.00 AUD (Refund)" in body
    assert "Uber" not in body
    assert loader.calls[0]["account_id"] == "acc-2"


def test_remote_error_renders_failure_page():
    loader = _loader(error=RemoteFetchError("Failed to fetch transactions: denied", 401, "denied"))
    status, content_type, body = _dispatch("/budget", loader)
    assert status == 500
    assert content_type == web.HTML
    assert "Error Fetching Transactions" in body
    assert "denied" in body

    status, content_type, body = _dispatch("/api/budget", loader)
    assert status == 500
    assert json.loads(body) == {"error": "Failed to fetch transactions: denied"}


def test_unknown_path_is_404():
    assert _dispatch("/nope", _loader())[0] == 404
    status, _, body = _dispatch("/api/nope", _loader())
    assert status == 404
    assert json.loads(body) == {"error": "not found"}


def test_main_exits_before_binding_on_bad_budget(tmp_path, monkeypatch):
    config = tmp_path / "config.yaml"
    config.write_text("budgets:\n  Rent: lots\n")
    served = []
    monkeypatch.setenv("API_KEY", "tok")
    monkeypatch.setattr(web, "serve", lambda *args: served.append(args))
    monkeypatch.setattr(sys, "argv", ["upbudget-web", "--config", str(config)])

    with pytest.raises(SystemExit) as excinfo:
        web.main()
    assert excinfo.value.code == 1
    assert served == []
