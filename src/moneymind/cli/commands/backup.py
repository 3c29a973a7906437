"""Backup commands."""

import click


@click.group()
def backup_group():
    """Manage ledger backups."""
    pass


@backup_group.command("create")
@click.option("--reason", default="manual", show_default=True, help="Reason recorded in the backup")
@click.pass_context
def create_backup(ctx, reason: str) -> None:
    """Back up the whole ledger."""
    result = ctx.obj["backup"].create_backup(reason=reason)
    if not result.success:
        click.echo(f"Error: Backup failed: {result.error}", err=True)
        ctx.exit(1)
    click.echo(f"Backup created: {result.path} ({result.total_size_bytes / 1024.0:.1f} KB)")


@backup_group.command("list")
@click.pass_context
def list_backups(ctx) -> None:
    """List backups, newest first."""
    backups = ctx.obj["backup"].list_backups()
    if not backups:
        click.echo("No backups found.")
        return

    click.echo("\nBackups:")
    click.echo("-" * 80)
    for info in backups:
        direction = f" ({info.sync_direction})" if info.sync_direction else ""
        click.echo(f"{info.created_at:%Y-%m-%d %H:%M:%S} | {info.reason}{direction}")
        click.echo(f"  {info.path}")
        for acc in info.accounts_backed_up:
            click.echo(
                f"  - {acc.name} (ID: {acc.id}): {acc.transaction_count} transaction(s), "
                f"latest {acc.latest_transaction or '-'}"
            )


@backup_group.command("restore")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--yes", "-y", is_flag=True, help="Restore without asking for confirmation")
@click.pass_context
def restore_backup(ctx, path: str, yes: bool) -> None:
    """Replace the ledger with a backup.

    Examples:
        moneymind backup restore ~/.moneymind/backups/moneymind_backup_20240105_101500_000000
    """
    if not yes and not click.confirm("This replaces the current ledger. Continue?"):
        click.echo("Restore cancelled.")
        return

    if not ctx.obj["backup"].restore_backup(path):
        click.echo(f"Error: Could not restore backup from {path}", err=True)
        ctx.exit(1)
    click.echo(f"Restored ledger from {path}")


@backup_group.command("cleanup")
@click.option("--keep", default=5, show_default=True, type=click.IntRange(min=0), help="Number of backups to keep")
@click.pass_context
def cleanup_backups(ctx, keep: int) -> None:
    """Delete old backups."""
    deleted = ctx.obj["backup"].cleanup_old_backups(keep_count=keep)
    click.echo(f"Deleted {deleted} old backup(s)")


def register_commands(cli: click.Group) -> None:
    """Register backup commands with main CLI."""
    cli.add_command(backup_group, name="backup")
