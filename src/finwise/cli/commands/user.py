"""User management commands."""

import click
from finwise.cli.error_handling import handle_domain_error
from finwise.domain.errors import DomainError
from finwise.domain.user import UserService


@click.group()
def user_group():
    """Manage users."""
    pass


@user_group.command("create")
@click.argument("email")
@click.pass_context
def create_user(ctx, email: str):
    """Create a new user.

    Examples:
        finwise user create jane@example.com
    """
    db = ctx.obj["db"]
    service = UserService(db)

    try:
        user_id = service.create_user(email=email)
        click.echo(f"Created user '{email.strip().lower()}' (ID: {user_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@user_group.command("list")
@click.pass_context
def list_users(ctx):
    """List all users."""
    db = ctx.obj["db"]
    service = UserService(db)

    users = service.list_users()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\nUsers:")
    click.echo("-" * 60)
    for user in users:
        click.echo(f"ID: {user.id:3d} | {user.email}")


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
