"""Bank export import command."""

from pathlib import Path

import click
from finwise.cli.error_handling import handle_domain_error
from finwise.domain.entities import BankFormat
from finwise.domain.errors import DomainError
from finwise.domain.transaction_import import TransactionImportService
from finwise.settings import ImportSettings


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--user", "user_id", required=True, type=int, help="User ID")
@click.option(
    "--bank",
    type=click.Choice([BankFormat.ING.value, BankFormat.REVOLUT.value]),
    help="Bank export format (detected from the file if omitted)",
)
@click.pass_context
def import_csv(ctx, csv_file: str, user_id: int, bank: str | None):
    """Import transactions from a bank CSV export."""
    db = ctx.obj["db"]
    settings = ImportSettings.from_env()
    service = TransactionImportService(db, settings)

    path = Path(csv_file)
    if path.stat().st_size > settings.max_file_bytes:
        click.echo("Error: File too large", err=True)
        ctx.exit(1)

    content = path.read_text(encoding="utf-8-sig", errors="replace")
    bank_format = BankFormat(bank) if bank else None

    try:
        parsed, result = service.import_statement(user_id, content, bank_format=bank_format)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nBank format: {parsed.bank_format.value}")
    if not parsed.format_detected:
        click.echo("  Warning: format not recognized, used fallback format", err=True)
    click.echo(f"  Parsed: {len(parsed.candidates)} of {parsed.lines} lines")
    if parsed.skipped:
        click.echo(f"  Skipped: {parsed.skipped} lines")
    if parsed.failed:
        click.echo(f"  Unparseable: {parsed.failed} lines")
        for error in parsed.errors:
            click.echo(f"    {error}", err=True)

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result.imported} transactions")
    click.echo(f"  Duplicates: {result.duplicates}")
    click.echo(f"  Failed: {result.failed}")
    click.echo(f"  Total: {result.total}")
    for error in result.errors:
        click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
