import logging
import os

import anyio
import click

from budget_tracker.config import load_settings
from budget_tracker.exceptions import BudgetError, MissingSecretConfig
from budget_tracker.loaders import get_loader
from budget_tracker.outputs import get_output
from budget_tracker.outputs.text_output import format_expense_summary
from budget_tracker.reports import SETTLED, expense_report, monthly_report, settled_account_transactions
from budget_tracker.utils import current_month_window

logger = logging.getLogger(__name__)


def _settings(ctx):
    """Load settings once per invocation; a missing token aborts the command."""
    obj = ctx.find_root().obj
    if obj.get('settings') is None:
        try:
            obj['settings'] = load_settings(obj['config_path'], obj['env_file'])
        except MissingSecretConfig as e:
            raise click.ClickException(str(e))
        except ValueError as e:
            raise click.ClickException(f"Invalid configuration: {e}")
    return obj['settings']


def _loader(settings):
    return get_loader(settings.config['loader'], settings)


def _run(func, *args):
    try:
        return anyio.run(func, *args)
    except BudgetError as e:
        logger.debug("Command failed", exc_info=True)
        raise click.ClickException(str(e))


@click.group()
@click.option(
    '--config', 'config_path',
    default='config.yaml',
    type=click.Path(dir_okay=False),
    help='Path to config.yaml (defaults are used when it does not exist)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file containing the API token'
)
@click.option(
    '--log-level',
    default=lambda: os.environ.get('UPBUDGET_LOG_LEVEL', 'INFO'),
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    help='Logging level (env: UPBUDGET_LOG_LEVEL)'
)
@click.pass_context
def main(ctx, config_path, env_file, log_level):
    """
    Fetch this month's transactions from the Up API, sort them into budget
    categories and report spending against each allocation.
    """
    logging.basicConfig(level=log_level.upper())
    ctx.obj = {'config_path': config_path, 'env_file': env_file, 'settings': None}


@main.command()
@click.option(
    '--output', 'output_format',
    default='text',
    type=click.Choice(['text', 'csv', 'html']),
    help='Output target: text, csv, or html'
)
@click.option('--status', default=None, help='Only include transactions with this status (e.g. SETTLED)')
@click.option('--account', 'account_id', default=None, help='Only include transactions of this account id')
@click.option(
    '--summary/--no-summary',
    default=False,
    help='Also print total expenses, incoming and net position from the same fetch'
)
@click.pass_context
def budget(ctx, output_format, status, account_id, summary):
    """Show spending per budget category for the current month."""
    settings = _settings(ctx)
    window = current_month_window()
    status = status or settings.status_filter
    report = _run(monthly_report, _loader(settings), settings, window, status, account_id)

    outputter = get_output(output_format, settings.config)
    click.echo(outputter.write(report.categories, window))
    if summary:
        click.echo("")
        click.echo(format_expense_summary(report.summary))


@main.command()
@click.option('--status', default=SETTLED, show_default=True, help='Transaction status filter')
@click.option('--account', 'account_id', default=None, help='Only include transactions of this account id')
@click.pass_context
def expenses(ctx, status, account_id):
    """Show total expenses, incoming money and net position for the month."""
    settings = _settings(ctx)
    window = current_month_window()
    summary, txs = _run(expense_report, _loader(settings), window, status, account_id)
    click.echo(f"{len(txs)} transaction(s) between {window.start} and {window.end}")
    click.echo(format_expense_summary(summary))


@main.command()
@click.pass_context
def accounts(ctx):
    """List accounts with their balances."""
    settings = _settings(ctx)
    loader = _loader(settings)
    for acc in _run(loader.list_accounts):
        click.echo(f"{acc.id}  {acc.display_name}  {acc.balance:.2f} {acc.currency_code}")


@main.command()
@click.argument('account_id')
@click.pass_context
def balances(ctx, account_id):
    """List this month's settled transactions of ACCOUNT_ID."""
    settings = _settings(ctx)
    window = current_month_window()
    txs = _run(settled_account_transactions, _loader(settings), window, account_id)
    if not txs:
        click.echo("No settled transactions.")
    for tx in txs:
        click.echo(f"{tx.date} - {abs(tx.amount):.2f} AUD ({tx.description})")


@main.command()
@click.option('--host', default='127.0.0.1', show_default=True, help='Host to bind')
@click.option('--port', default=8080, show_default=True, type=int, help='Port to bind')
@click.pass_context
def serve(ctx, host, port):
    """Run the budget web pages."""
    from budget_tracker.web import serve as serve_web

    serve_web(_settings(ctx), host, port)
