"""Transaction viewing commands."""

import click
from finwise.cli.error_handling import handle_domain_error
from finwise.domain.errors import InvalidDate, NotFoundError
from finwise.domain.user import UserService
from finwise.utils.date_parser import DateFormat, parse_date


@click.command("list")
@click.option("--user", "user_id", required=True, type=int, help="User ID")
@click.option("--start-date", help="Start date (YYYY-MM-DD)")
@click.option("--end-date", help="End date (YYYY-MM-DD)")
@click.pass_context
def list_transactions(ctx, user_id: int, start_date: str, end_date: str):
    """List a user's stored transactions."""
    db = ctx.obj["db"]

    try:
        UserService(db).get_user_or_raise(user_id)
    except NotFoundError as e:
        handle_domain_error(ctx, e)

    # Parse dates
    start = None
    if start_date:
        try:
            start = parse_date(start_date, DateFormat.ISO)
        except InvalidDate as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    end = None
    if end_date:
        try:
            end = parse_date(end_date, DateFormat.ISO)
        except InvalidDate as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    transactions = db.list_transactions(user_id, start_date=start, end_date=end)
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Amount':>12} {'Type':<9} {'Category':<14} {'Description':<40}"
    )
    click.echo("-" * 100)

    for txn in transactions:
        amount_str = f"€{txn.amount:,.2f}"
        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {amount_str:>12} {txn.type:<9} "
            f"{txn.category:<14} {txn.description[:40]:<40}"
        )


def register_commands(cli):
    """Register list command with main CLI."""
    cli.add_command(list_transactions)
