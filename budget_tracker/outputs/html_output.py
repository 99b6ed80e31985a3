# budget_tracker/outputs/html_output.py

import os
from html import escape

from budget_tracker.outputs.base import BaseOutput

_BOOTSTRAP = "https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist"


def _page(title, body_parts):
    """Wrap body fragments in the shared Bootstrap page shell."""
    html_parts = [
        "<!DOCTYPE html>",
        "<html lang='en'><head><meta charset='UTF-8'>",
        "<meta name='viewport' content='width=device-width, initial-scale=1'>",
        f"<title>{escape(title)}</title>",
        f"<link rel='stylesheet' href='{_BOOTSTRAP}/css/bootstrap.min.css'>",
        "<style>.negative{color:red;}</style>",
        "</head><body><div class='container my-4'>",
        f"<h1 class='mb-4'>{escape(title)}</h1>",
    ]
    html_parts.extend(body_parts)
    html_parts.append("<p class='mt-4'><a href='/'>Home</a></p>")
    html_parts.append(f"<script src='{_BOOTSTRAP}/js/bootstrap.bundle.min.js'></script>")
    html_parts.append("</div></body></html>")
    return "\n".join(html_parts)


def _anchor(name):
    return escape(name.replace(" ", "-"))


def render_landing_page():
    links = [
        ("/budget", "Monthly budget"),
        ("/expenses", "Expenses this month"),
        ("/accounts", "Accounts"),
        ("/allbalances", "All balances"),
    ]
    items = "".join(
        f"<a class='list-group-item list-group-item-action' href='{href}'>{label}</a>"
        for href, label in links
    )
    return _page("Up Budget", [f"<div class='list-group'>{items}</div>"])


def render_budget_page(categories, window=None):
    parts = []
    if window is not None:
        parts.append(f"<p class='text-muted'>{escape(window.start)} to {escape(window.end)}</p>")

    for cat in categories:
        remaining_class = "text-danger" if cat.over_budget else "text-success"
        anchor = _anchor(cat.name)
        rows = "".join(
            f"<tr><td>{escape(tx.date)}</td><td>{escape(tx.description)}</td>"
            f"<td>{tx.amount:.2f}</td></tr>"
            for tx in cat.transactions
        )
        parts.append(
            "<div class='card mb-4'><div class='card-body'>"
            f"<h5 class='card-title'>{escape(cat.name)}</h5>"
            f"<p>Allocated: ${cat.allocated_amount:.2f}</p>"
            f"<p>Spent: ${cat.spent_amount:.2f}</p>"
            f"<p class='{remaining_class}'>Remaining: ${cat.remaining_amount:.2f}</p>"
            f"<button class='btn btn-primary' type='button' data-bs-toggle='collapse' "
            f"data-bs-target='#{anchor}' aria-controls='{anchor}'>View Transactions</button>"
            f"<div class='collapse mt-3' id='{anchor}'>"
            "<table class='table table-striped'><thead><tr><th>Date</th><th>Description</th>"
            f"<th>Amount</th></tr></thead><tbody>{rows}</tbody></table>"
            "</div></div></div>"
        )
    return _page("Budget Overview", parts)


def render_expenses_page(summary, transactions, now):
    items = "".join(
        f"<li class='list-group-item'>{escape(tx.date)} - Debit: Expenses {abs(tx.amount):.2f} AUD, "
        f"Credit: Account {abs(tx.amount):.2f} AUD</li>"
        for tx in transactions
    )
    net_class = "negative" if summary.net_position < 0 else ""
    parts = [
        f"<h2>{now.strftime('%B %Y')}</h2>",
        f"<p>Total expenses: <span class='negative'>{-summary.total_expenses:.2f} AUD</span></p>",
        f"<p>Total incoming: {summary.total_incoming:.2f} AUD</p>",
        f"<p>Net position: <span class='{net_class}'>{summary.net_position:.2f} AUD</span></p>",
        f"<ul class='list-group'>{items}</ul>",
    ]
    return _page("Expenses", parts)


def render_accounts_page(accounts):
    buttons = "".join(
        "<form action='/balances' method='get' style='display: inline-block; margin: 10px;'>"
        f"<input type='hidden' name='account_id' value='{escape(acc.id)}'>"
        f"<button class='btn btn-primary' type='submit'>{escape(acc.display_name)}</button>"
        "</form>"
        for acc in accounts
    )
    return _page("Accounts", [buttons or "<p>No accounts found.</p>"])


def render_balances_page(account_id, transactions):
    items = "".join(
        f"<li class='list-group-item'>{escape(tx.date)} - {abs(tx.amount):.2f} AUD "
        f"({escape(tx.description)})</li>"
        for tx in transactions
    )
    parts = [
        f"<h2>Account {escape(account_id)}</h2>",
        f"<ul class='list-group'>{items or '<li class=list-group-item>No settled transactions.</li>'}</ul>",
    ]
    return _page("Settled Transactions", parts)


def render_all_balances_page(accounts):
    items = "".join(
        f"<li class='list-group-item'>Account: {escape(acc.display_name)}, "
        f"Balance: {acc.balance:.2f} {escape(acc.currency_code)}</li>"
        for acc in accounts
    )
    return _page("Balances", [f"<ul class='list-group'>{items}</ul>"])


def render_error_page(title, message):
    return _page(title, [f"<div class='alert alert-danger'>{escape(str(message))}</div>"])


class HTMLOutput(BaseOutput):
    """Write the budget overview page to Budget<YYYY-MM>.html."""

    def __init__(self, config):
        self.config = config
        self.output_dir = config.get('output_dir', 'data')

    def write(self, categories, window):
        os.makedirs(self.output_dir, exist_ok=True)
        month = window.start[:7]
        out_path = os.path.join(self.output_dir, f"Budget{month}.html")
        with open(out_path, 'w', encoding='utf-8') as f:
            f.write(render_budget_page(categories, window))
        return f"Written {len(categories)} categories to {out_path}"
