"""AI statement extraction command."""

from pathlib import Path

import click
from finwise.cli.error_handling import handle_domain_error
from finwise.domain.errors import DomainError
from finwise.domain.extraction import ExtractionService
from finwise.domain.transaction_import import AI_PDF_SOURCE, TransactionImportService
from finwise.openai_extractor import OpenAIExtractor
from finwise.settings import ImportSettings


@click.command("extract")
@click.argument("text_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--user", "user_id", type=int, help="User ID (required with --import)")
@click.option("--import", "do_import", is_flag=True, help="Import the extracted transactions")
@click.option("--model", help="OpenAI model (overrides FINWISE_OPENAI_MODEL)")
@click.pass_context
def extract_transactions(ctx, text_file: str, user_id: int | None, do_import: bool, model: str | None):
    """Extract transactions from statement text with an AI model.

    TEXT_FILE holds text copied or extracted from a PDF statement.
    """
    db = ctx.obj["db"]
    if do_import and user_id is None:
        click.echo("Error: --user is required with --import", err=True)
        ctx.exit(1)

    path = Path(text_file)
    text = path.read_text(encoding="utf-8", errors="replace")
    service = ExtractionService(OpenAIExtractor(model=model))
    settings = ImportSettings.from_env()

    try:
        if do_import:
            # Fail on an unknown user before calling the extraction service
            TransactionImportService(db, settings).user_service.require_user(user_id)
        extracted = service.extract(text, file_name=path.name)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nBank detected: {extracted.bank_detected}")
    click.echo(f"Summary: {extracted.summary}")
    click.echo(f"Transactions found: {len(extracted.transactions)}")

    if not do_import:
        for txn in extracted.transactions[:10]:
            click.echo(
                f"  {txn.get('date', '?')}  {str(txn.get('amount', '?')):>10}  "
                f"{txn.get('type', '?'):<8} {str(txn.get('description', ''))[:40]}"
            )
        return

    result = TransactionImportService(db, settings).import_transactions(
        user_id, extracted.transactions, AI_PDF_SOURCE
    )
    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result.imported} transactions")
    click.echo(f"  Duplicates: {result.duplicates}")
    click.echo(f"  Failed: {result.failed}")
    click.echo(f"  Total: {result.total}")


def register_commands(cli):
    """Register extract command with main CLI."""
    cli.add_command(extract_transactions)
