"""Duplicate transaction commands."""

import click
from moneymind.domain.account import AccountService
from moneymind.domain.duplicates import DuplicateDetectionService
from moneymind.domain.entities import DuplicateDetectionResult
from moneymind.cli.account_resolution import resolve_account_or_exit
from moneymind.utils.date_parser import format_display_date


@click.group()
def duplicates_group():
    """Find and remove duplicate transactions."""
    pass


def _scan(ctx, account: str | None) -> DuplicateDetectionResult:
    db = ctx.obj["db"]

    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    result = DuplicateDetectionService(db).detect_duplicates(account_id=account_id)
    if not result.success:
        click.echo(f"Error: {result.message}", err=True)
        ctx.exit(1)
    return result


def _show_groups(result: DuplicateDetectionResult) -> None:
    click.echo(f"Scanned {result.total_transactions} transaction(s). {result.message}")
    for group in result.groups:
        click.echo(
            f"\nGroup #{group.group_id}: {format_display_date(group.date)} | "
            f"{group.amount:,.2f} | {group.description}"
        )
        for txn in group.transactions:
            marker = "keep  " if txn.id == group.selected_to_keep.id else "delete"
            click.echo(f"  [{marker}] ID {txn.id} (account {txn.account_id})")


@duplicates_group.command("scan")
@click.option("--account", help="Only scan this account (name or ID)")
@click.pass_context
def scan_duplicates(ctx, account: str | None) -> None:
    """List groups of exact duplicate transactions.

    Transactions are duplicates when they share the same day, the same
    amount and the same description (case and surrounding spaces ignored).
    The oldest entry of each group is kept.

    Examples:
        moneymind duplicates scan
        moneymind duplicates scan --account Checking
    """
    result = _scan(ctx, account)
    if not result.groups:
        click.echo("No duplicates found.")
        return
    _show_groups(result)


@duplicates_group.command("clean")
@click.option("--account", help="Only clean this account (name or ID)")
@click.option("--yes", "-y", is_flag=True, help="Delete without asking for confirmation")
@click.pass_context
def clean_duplicates(ctx, account: str | None, yes: bool) -> None:
    """Delete duplicate transactions, keeping one per group.

    Examples:
        moneymind duplicates clean --account Checking
        moneymind duplicates clean --yes
    """
    result = _scan(ctx, account)
    if not result.groups:
        click.echo("No duplicates found.")
        return
    _show_groups(result)

    if not yes and not click.confirm(f"\nDelete {result.total_duplicates} duplicate transaction(s)?"):
        click.echo("Deletion cancelled.")
        return

    deleted = DuplicateDetectionService(ctx.obj["db"]).delete_duplicates(result.groups)
    click.echo(f"Deleted {deleted} duplicate transaction(s)")
    if deleted < result.total_duplicates:
        click.echo(
            f"Error: {result.total_duplicates - deleted} duplicate(s) could not be deleted",
            err=True,
        )
        ctx.exit(1)


def register_commands(cli: click.Group) -> None:
    """Register duplicate commands with main CLI."""
    cli.add_command(duplicates_group, name="duplicates")
