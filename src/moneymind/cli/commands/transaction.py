"""Transaction management commands."""

import click
from moneymind.domain.transaction import TransactionService
from moneymind.domain.account import AccountService
from moneymind.cli.account_resolution import resolve_account_or_exit
from moneymind.cli.error_handling import handle_domain_error
from moneymind.utils.date_parser import parse_date
from moneymind.utils.amount_parser import parse_amount


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--amount", help="Transaction amount (e.g., 123.45 or -123.45)")
@click.option("--description", help="Transaction description")
@click.option("--reason", help="Payment reason, or empty string to clear")
@click.option("--category", help="Classification, or empty string to clear")
@click.option("--notes", help="Notes, or empty string to clear")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    date: str | None,
    amount: str | None,
    description: str | None,
    reason: str | None,
    category: str | None,
    notes: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. Use --category "" to clear the category.

    Examples:
        moneymind transaction update 1 --amount -75.00
        moneymind transaction update 1 --category Groceries
        moneymind transaction update 1 --category ""  # Clear category
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    txn_date = None
    if date is not None:
        try:
            txn_date = parse_date(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    txn_amount = None
    if amount is not None:
        try:
            txn_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    try:
        transaction_service.update_transaction(
            transaction_id=transaction_id,
            date=txn_date,
            amount=txn_amount,
            description=description,
            reason=reason,
            notes=notes,
            category=category,
        )
        click.echo(f"Updated transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--account", help="Account name or ID")
@click.option("--unclassified", is_flag=True, help="Show only transactions without a category")
@click.option("--verbose", "-v", is_flag=True, help="Show all fields including reason and notes")
@click.pass_context
def list_transactions(
    ctx, start_date: str, end_date: str, account: str, unclassified: bool, verbose: bool
):
    """View transactions with optional filters, newest first.

    Account can be specified by name or ID.
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)

    start = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    end = None
    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, account_service, account)

    transactions = service.list_transactions(
        account_id=account_id, start_date=start, end_date=end
    )
    if unclassified:
        transactions = [t for t in transactions if not t.is_classified]

    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in account_service.list_accounts()}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    if verbose:
        click.echo("=" * 100)
        for txn in transactions:
            click.echo(f"\nTransaction ID: {txn.id}")
            click.echo(f"  Date: {txn.date}")
            click.echo(f"  Amount: {txn.amount:,.2f}")
            click.echo(f"  Account: {accounts.get(txn.account_id, 'Unknown')} (ID: {txn.account_id})")
            click.echo(f"  Description: {txn.description}")
            click.echo(f"  Category: {txn.category if txn.is_classified else 'Unclassified'}")
            if txn.reason:
                click.echo(f"  Reason: {txn.reason}")
            if txn.notes:
                click.echo(f"  Notes: {txn.notes}")
            click.echo(f"  Created: {txn.created_at}")
            if txn.modified_at:
                click.echo(f"  Modified: {txn.modified_at}")
            click.echo("-" * 100)
    else:
        click.echo("-" * 100)
        click.echo(
            f"{'ID':<6} {'Date':<12} {'Amount':>12} {'Account':<20} {'Category':<18} {'Description':<30}"
        )
        click.echo("-" * 100)
        for txn in transactions:
            account_name = accounts.get(txn.account_id, "Unknown")[:20]
            category_name = (txn.category or "")[:18]
            description = (txn.description or "")[:30]
            click.echo(
                f"{txn.id:<6} {str(txn.date):<12} {txn.amount:>12,.2f} {account_name:<20} "
                f"{category_name:<18} {description:<30}"
            )

    total_expenses = sum(txn.amount for txn in transactions if txn.amount < 0)
    total_income = sum(txn.amount for txn in transactions if txn.amount > 0)
    click.echo("-" * 100)
    click.echo(
        f"{'TOTAL':<6} Expenses: {abs(total_expenses):,.2f} | "
        f"Income: {total_income:,.2f} | Count: {len(transactions)}"
    )


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.pass_context
def delete_transaction(ctx, transaction_id: int) -> None:
    """Delete a transaction.

    Examples:
        moneymind transaction delete 1
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    txn = transaction_service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        transaction_service.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
