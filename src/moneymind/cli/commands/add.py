"""Add transaction command."""

import click
from moneymind.domain.transaction import TransactionService
from moneymind.domain.account import AccountService
from moneymind.cli.account_resolution import resolve_account_or_exit
from moneymind.cli.error_handling import handle_domain_error
from moneymind.utils.date_parser import parse_date
from moneymind.utils.amount_parser import parse_amount


@click.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option(
    "--date",
    required=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option(
    "--amount", required=True, help="Transaction amount (e.g., 123.45 or -123.45)"
)
@click.option("--description", required=True, help="Transaction description")
@click.option("--reason", help="Payment reason as given by the bank")
@click.option("--category", help="Classification (free text)")
@click.option("--notes", help="Notes")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    date: str,
    amount: str,
    description: str,
    reason: str | None,
    category: str | None,
    notes: str | None,
):
    """Add a transaction manually.

    Examples:
        moneymind add --account 1 --date 2024-01-15 --amount -50.00 --description "Grocery store"
        moneymind add --account Checking --date today --amount 1000.00 --description "Salary" --category Income
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)
    account_service = AccountService(db)

    account_id = resolve_account_or_exit(ctx, account_service, account)
    account_obj = account_service.get_account(account_id)

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        transaction_id = transaction_service.create_transaction(
            account_id=account_id,
            date=txn_date,
            amount=txn_amount,
            description=description,
            reason=reason,
            notes=notes,
            category=category,
        )
        click.echo(f"Created transaction {transaction_id}")
        click.echo(f"  Account: {account_obj.name}")
        click.echo(f"  Date: {txn_date}")
        click.echo(f"  Amount: {txn_amount:,.2f}")
        click.echo(f"  Description: {description}")
        if category:
            click.echo(f"  Category: {category}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
