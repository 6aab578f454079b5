"""CLI error handling helpers."""

import click

from finwise.domain.errors import DomainError, Unauthorized
from finwise.logging_setup import get_logger

logger = get_logger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Print a domain error to stderr and exit with status 1.

    Unknown users get a hint pointing at ``user list``.
    """
    logger.debug("Command failed: %r", error)
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, Unauthorized):
        click.echo("Hint: run 'finwise user list' to see known user IDs", err=True)
    ctx.exit(1)
