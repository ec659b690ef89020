"""Backup export and import commands."""

from pathlib import Path

import click
from pocketledger.cli.account_resolution import get_ledger
from pocketledger.domain.backup import export_json, import_state


@click.group()
def backup_group():
    """Export or restore the ledger as JSON."""
    pass


@backup_group.command("export")
@click.argument("path", metavar="FILE", type=click.Path(dir_okay=False, path_type=Path), required=False)
@click.pass_context
def export_backup(ctx, path: Path | None):
    """Write a JSON backup to FILE, or to stdout when FILE is omitted.

    Examples:
        pocketledger backup export ledger-backup.json
    """
    ledger = get_ledger(ctx)
    payload = export_json(ledger.snapshot(), ledger.clock())
    if path is None:
        click.echo(payload)
        return
    path.write_text(payload, encoding="utf-8")
    click.echo(f"Exported backup to {path}")


@backup_group.command("import")
@click.argument("path", metavar="FILE", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def import_backup(ctx, path: Path, yes: bool):
    """Restore a JSON backup.

    Every section present in FILE replaces the current data; sections missing
    from FILE are kept. A malformed file changes nothing.
    """
    ledger = get_ledger(ctx)
    if not yes and not click.confirm("Importing replaces the current data. Continue?"):
        click.echo("Import cancelled.")
        return

    if not import_state(ledger, path.read_text(encoding="utf-8")):
        click.echo(f"Error: {path} is not a valid backup", err=True)
        ctx.exit(1)
    click.echo(f"Imported backup from {path}")


def register_commands(cli):
    """Register backup commands with main CLI."""
    cli.add_command(backup_group, name="backup")
