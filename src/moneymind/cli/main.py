"""Main CLI entry point."""

import click
from moneymind.backup.factories import create_backup_service
from moneymind.database.factories import create_sqlite_database
from moneymind.utils.logger import setup_logging

# Import and register all commands at module level
from moneymind.cli.commands import (
    account,
    add,
    transaction,
    duplicates,
    sync,
    backup,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides MONEYMIND_DB_PATH environment variable)",
    envvar="MONEYMIND_DB_PATH",
)
@click.option(
    "--backup-dir",
    type=click.Path(),
    help="Directory for ledger backups (defaults to 'backups' next to the database)",
    envvar="MONEYMIND_BACKUP_DIR",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Enable logging at this level",
    envvar="MONEYMIND_LOG_LEVEL",
)
@click.option(
    "--log-file",
    type=click.Path(),
    help="Also write logs to this rotating file",
    envvar="MONEYMIND_LOG_FILE",
)
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON")
@click.pass_context
def cli(
    ctx,
    db_path: str | None,
    backup_dir: str | None,
    log_level: str | None,
    log_file: str | None,
    json_logs: bool,
):
    """MoneyMind - Personal finance ledger.

    Keep per-account transaction ledgers, clean up duplicate transactions
    and synchronize accounts with another device through JSON snapshots.
    """
    ctx.ensure_object(dict)

    if log_level or log_file:
        setup_logging(
            log_level=log_level or "INFO",
            log_file_path=log_file,
            json_format=json_logs,
        )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["backup"] = create_backup_service(db, backup_dir=backup_dir)
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
duplicates.register_commands(cli)
sync.register_commands(cli)
backup.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
