"""Sync commands.

Accounts travel between devices as JSON snapshot files: ``sync export`` on
one device writes a snapshot, ``sync prepare`` and ``sync execute`` on the
other compare and apply it to the local ledger.
"""

import click
from moneymind.domain.account import AccountService
from moneymind.domain.entities import SyncDirection, SyncMode
from moneymind.domain.sync import SyncService, dump_snapshot, load_snapshot
from moneymind.cli.account_resolution import resolve_account_or_exit
from moneymind.cli.error_handling import handle_domain_error

MODE_CHOICE = click.Choice([m.value for m in SyncMode], case_sensitive=False)
DIRECTION_CHOICE = click.Choice([d.value for d in SyncDirection], case_sensitive=False)


@click.group()
def sync_group():
    """Synchronize accounts with another device."""
    pass


def _sync_service(ctx) -> SyncService:
    return SyncService(ctx.obj["db"], ctx.obj["backup"])


def _load_or_exit(ctx, snapshot: str):
    try:
        return load_snapshot(snapshot)
    except ValueError as e:
        handle_domain_error(ctx, e)


@sync_group.command("export")
@click.argument("accounts", nargs=-1, metavar="[ACCOUNT]...")
@click.option("--output", "-o", required=True, type=click.Path(dir_okay=False), help="Snapshot file to write")
@click.option("--target", type=int, help="Account ID on the other device to apply a single account to")
@click.pass_context
def export_snapshot(ctx, accounts: tuple[str, ...], output: str, target: int | None) -> None:
    """Export accounts to a snapshot file.

    Exports every account when none is given. Without --target the other
    device creates a new account from the snapshot.

    Examples:
        moneymind sync export --output snapshot.json
        moneymind sync export Checking --output checking.json --target 3
    """
    if target is not None and len(accounts) != 1:
        click.echo("Error: --target requires exactly one account", err=True)
        ctx.exit(1)

    service = _sync_service(ctx)
    account_service = AccountService(ctx.obj["db"])

    try:
        if accounts:
            account_ids = [resolve_account_or_exit(ctx, account_service, a) for a in accounts]
            snapshot = [service.export_account(account_ids[0], target_account_id=target)]
            snapshot += service.export_accounts(account_ids[1:])
        else:
            snapshot = service.export_accounts()
        dump_snapshot(snapshot, output)
    except (ValueError, OSError) as e:
        handle_domain_error(ctx, e)

    total = sum(a.transaction_count for a in snapshot)
    click.echo(f"Exported {len(snapshot)} account(s), {total} transaction(s) to {output}")


@sync_group.command("prepare")
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.option("--mode", required=True, type=MODE_CHOICE, help="How the snapshot would be applied")
@click.option(
    "--direction",
    type=DIRECTION_CHOICE,
    default=SyncDirection.DESKTOP_TO_MOBILE.value,
    show_default=True,
    help="Which device the snapshot comes from",
)
@click.pass_context
def prepare_sync(ctx, snapshot: str, mode: str, direction: str) -> None:
    """Compare a snapshot with the local ledger.

    Nothing is changed apart from a backup being taken.

    Examples:
        moneymind sync prepare snapshot.json --mode merge
    """
    accounts = _load_or_exit(ctx, snapshot)
    response = _sync_service(ctx).prepare(
        SyncDirection(direction.lower()), SyncMode(mode.lower()), accounts
    )

    if not response.success:
        click.echo(f"Error: {response.error}", err=True)
        ctx.exit(1)

    if response.backup_created:
        click.echo(f"Backup created: {response.backup_path}")
    else:
        click.echo("Warning: backup could not be created", err=True)

    click.echo(f"\n{'Account':<24} {'Source':>8} {'Src latest':<12} {'Dest':>8} {'Dest latest':<12}")
    click.echo("-" * 70)
    for c in response.comparisons:
        click.echo(
            f"{c.account_name[:24]:<24} {c.source_transaction_count:>8} {c.source_latest_date or '-':<12} "
            f"{c.dest_transaction_count:>8} {c.dest_latest_date or '-':<12}"
        )
        if c.has_warning:
            click.echo(f"  Warning: {c.warning_message}")

    if response.has_classification_warning:
        click.echo(
            f"\nWarning: {response.total_classified_transactions} classified transaction(s) will be lost"
        )
    if response.requires_confirmation:
        click.echo("\nConfirmation will be required to execute this sync.")


@sync_group.command("execute")
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.option("--mode", required=True, type=MODE_CHOICE, help="How the snapshot is applied")
@click.option(
    "--direction",
    type=DIRECTION_CHOICE,
    default=SyncDirection.DESKTOP_TO_MOBILE.value,
    show_default=True,
    help="Which device the snapshot comes from",
)
@click.option("--yes", "-y", is_flag=True, help="Confirm destructive modes without asking")
@click.pass_context
def execute_sync(ctx, snapshot: str, mode: str, direction: str, yes: bool) -> None:
    """Apply a snapshot to the local ledger.

    A backup is taken before anything is changed.

    Examples:
        moneymind sync execute snapshot.json --mode merge
        moneymind sync execute snapshot.json --mode replace --yes
    """
    sync_mode = SyncMode(mode.lower())
    accounts = _load_or_exit(ctx, snapshot)

    confirmed = True
    if sync_mode.is_destructive and not yes:
        confirmed = click.confirm(
            f"Mode '{sync_mode.value}' deletes existing transactions of {len(accounts)} account(s). Continue?"
        )
        if not confirmed:
            click.echo("Sync cancelled.")
            return

    response = _sync_service(ctx).execute(
        SyncDirection(direction.lower()), sync_mode, confirmed, accounts
    )
    if not response.success:
        click.echo(f"Error: {response.error}", err=True)
        ctx.exit(1)

    if response.backup_created:
        click.echo(f"Backup created: {response.backup_path}")
    else:
        click.echo("Warning: backup could not be created", err=True)

    for r in response.results:
        if r.status == "error":
            click.echo(f"  {r.account_name}: error - {r.error_message}")
        else:
            click.echo(
                f"  {r.account_name}: {r.status} (target {r.target_account_id}, "
                f"{r.previous_transaction_count} -> {r.new_transaction_count})"
            )
    click.echo(response.message)

    if any(r.status == "error" for r in response.results):
        ctx.exit(1)


def register_commands(cli: click.Group) -> None:
    """Register sync commands with main CLI."""
    cli.add_command(sync_group, name="sync")
