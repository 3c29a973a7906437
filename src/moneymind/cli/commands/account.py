"""Account management commands."""

import click
from moneymind.cli.account_resolution import resolve_account_or_exit
from moneymind.cli.error_handling import handle_domain_error
from moneymind.domain.account import AccountService
from moneymind.utils.amount_parser import parse_amount


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--initial-balance", default="0", help="Opening balance (e.g., 1500.00)")
@click.option("--icon", help="Icon (emoji) shown for the account")
@click.option("--color", help="Color as #RRGGBB")
@click.pass_context
def create_account(ctx, name: str, initial_balance: str, icon: str | None, color: str | None):
    """Create a new account.

    Examples:
        moneymind account create "Checking"
        moneymind account create "Savings" --initial-balance 2500.00 --icon "🏦"
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        balance = parse_amount(initial_balance)
    except ValueError as e:
        click.echo(f"Error: Invalid initial balance: {e}", err=True)
        ctx.exit(1)

    try:
        account_id = service.create_account(
            name=name, initial_balance=balance, icon=icon, color=color
        )
        click.echo(f"Created account '{name.strip()}' (ID: {account_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts with their current balance."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 70)
    for acc in accounts:
        balance = service.get_balance(acc.id)
        count = db.get_account_transaction_count(acc.id)
        click.echo(
            f"ID: {acc.id:3d} | {acc.icon or ' '} {acc.name:20s} | "
            f"Balance: {balance:>12,.2f} | Transactions: {count}"
        )


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--initial-balance", help="New opening balance")
@click.option("--icon", help="New icon")
@click.option("--color", help="New color as #RRGGBB")
@click.pass_context
def update_account(
    ctx,
    account: str,
    name: str | None,
    initial_balance: str | None,
    icon: str | None,
    color: str | None,
) -> None:
    """Update an account.

    ACCOUNT can be an account name or ID. Only the options given are changed.

    Examples:
        moneymind account update "Checking" --name "Main Checking"
        moneymind account update 1 --initial-balance 100.00
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    account_id = resolve_account_or_exit(ctx, service, account)

    balance = None
    if initial_balance is not None:
        try:
            balance = parse_amount(initial_balance)
        except ValueError as e:
            click.echo(f"Error: Invalid initial balance: {e}", err=True)
            ctx.exit(1)

    try:
        service.update_account(
            account_id=account_id,
            name=name,
            initial_balance=balance,
            icon=icon,
            color=color,
        )
        click.echo(f"Updated account {account_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def delete_account(ctx, account: str) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID.

    The account can only be deleted if it has no transactions. Use
    'transaction delete' to remove them first.

    Examples:
        moneymind account delete "Checking"
        moneymind account delete 1
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)

    transaction_count = db.get_account_transaction_count(account_id)
    if transaction_count > 0:
        click.echo(
            f"Error: Cannot delete account '{account_obj.name}': it has "
            f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}.",
            err=True,
        )
        click.echo("Please delete them first.", err=True)
        ctx.exit(1)

    if not click.confirm(f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
        click.echo(f"Deleted account '{account_obj.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
