from __future__ import annotations

import argparse
import json
import logging
import os
from datetime import datetime, timezone
from decimal import Decimal
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable
from urllib.parse import parse_qs, urlparse

import anyio

from budget_tracker.config import Settings, load_settings
from budget_tracker.exceptions import BudgetError, MissingSecretConfig, RemoteFetchError
from budget_tracker.loaders import get_loader
from budget_tracker.outputs.html_output import (
    render_accounts_page,
    render_all_balances_page,
    render_balances_page,
    render_budget_page,
    render_error_page,
    render_expenses_page,
    render_landing_page,
)
from budget_tracker.reports import budget_report, expense_report, settled_account_transactions
from budget_tracker.utils import current_month_window

logger = logging.getLogger(__name__)

HTML = "text/html; charset=utf-8"
JSON = "application/json"


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _json_body(payload: Any) -> str:
    return json.dumps(payload, default=_json_default)


def _category_payload(cat) -> dict:
    return {
        "name": cat.name,
        "allocated_amount": cat.allocated_amount,
        "spent_amount": cat.spent_amount,
        "remaining_amount": cat.remaining_amount,
        "over_budget": cat.over_budget,
        "transactions": [
            {"date": tx.date, "description": tx.description, "amount": tx.amount}
            for tx in cat.transactions
        ],
    }


def _get_param(query: dict[str, list[str]], key: str) -> str | None:
    values = query.get(key)
    return values[0] if values else None


def dispatch(
    raw_path: str,
    settings: Settings,
    loader_factory: Callable[[Settings], Any],
    now: datetime | None = None,
) -> tuple[int, str, str]:
    """Route one GET request and return ``(status, content type, body)``.

    Each call builds its own window, loader and catalog so concurrent
    requests share no state.
    """
    parsed = urlparse(raw_path)
    path = parsed.path
    query = parse_qs(parsed.query)
    now = now or datetime.now(timezone.utc)
    window = current_month_window(now)

    if path == "/":
        return 200, HTML, render_landing_page()

    loader = loader_factory(settings)
    try:
        if path == "/budget":
            categories = anyio.run(budget_report, loader, settings, window, settings.status_filter)
            return 200, HTML, render_budget_page(categories, window)

        if path == "/api/budget":
            categories = anyio.run(budget_report, loader, settings, window, settings.status_filter)
            payload = {
                "window": {"start": window.start, "end": window.end},
                "categories": [_category_payload(cat) for cat in categories],
            }
            return 200, JSON, _json_body(payload)

        if path == "/expenses":
            summary, txs = anyio.run(expense_report, loader, window)
            return 200, HTML, render_expenses_page(summary, txs, now)

        if path == "/api/expenses":
            summary, txs = anyio.run(expense_report, loader, window)
            payload = {
                "total_expenses": summary.total_expenses,
                "total_incoming": summary.total_incoming,
                "net_position": summary.net_position,
                "transactions": len(txs),
            }
            return 200, JSON, _json_body(payload)

        if path == "/accounts":
            return 200, HTML, render_accounts_page(anyio.run(loader.list_accounts))

        if path == "/allbalances":
            return 200, HTML, render_all_balances_page(anyio.run(loader.list_accounts))

        if path == "/balances":
            account_id = _get_param(query, "account_id") or ""
            txs = anyio.run(settled_account_transactions, loader, window, account_id)
            return 200, HTML, render_balances_page(account_id, txs)
    except RemoteFetchError as exc:
        logger.warning("Fetch for %s failed: %s", path, exc)
        if path.startswith("/api/"):
            return 500, JSON, _json_body({"error": str(exc)})
        return 500, HTML, render_error_page("Error Fetching Transactions", exc)

    if path.startswith("/api/"):
        return 404, JSON, _json_body({"error": "not found"})
    return 404, HTML, render_error_page("Not Found", f"No page at {path}")


class BudgetWebHandler(BaseHTTPRequestHandler):
    settings: Settings | None = None
    loader_factory: Callable[[Settings], Any] = staticmethod(
        lambda settings: get_loader(settings.config["loader"], settings)
    )

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)

    def do_GET(self) -> None:
        try:
            status, content_type, body = dispatch(self.path, self.settings, self.loader_factory)
        except BudgetError as exc:
            status, content_type, body = 500, HTML, render_error_page("Error", exc)
        self._send(status, content_type, body)

    def _send(self, status: int, content_type: str, body: str) -> None:
        payload = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Cache-Control", "no-store")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)


def make_server(settings: Settings, host: str, port: int) -> ThreadingHTTPServer:
    handler = type("BudgetWebHandler", (BudgetWebHandler,), {"settings": settings})
    return ThreadingHTTPServer((host, port), handler)


def serve(settings: Settings, host: str = "127.0.0.1", port: int = 8080) -> None:
    server = make_server(settings, host, port)
    logger.info("Budget web UI running at http://%s:%s", host, port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Up budget web pages")
    parser.add_argument("--config", dest="config_path", default="config.yaml", help="Path to config.yaml")
    parser.add_argument("--env-file", dest="env_file", default=None, help="Optional .env file with the API token")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8080, help="Port to bind (default: 8080)")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("UPBUDGET_LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper())

    try:
        settings = load_settings(args.config_path, args.env_file)
    except (MissingSecretConfig, ValueError) as exc:
        logger.error("Cannot start: %s", exc)
        raise SystemExit(1)
    serve(settings, args.host, args.port)


if __name__ == "__main__":
    main()
