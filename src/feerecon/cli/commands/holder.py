"""Account holder commands."""

import click

from feerecon.cli.error_handling import handle_domain_error
from feerecon.domain.errors import DomainError
from feerecon.domain.invoice import InvoiceService


@click.group()
def holder_group():
    """Manage account holders."""
    pass


@holder_group.command("add")
@click.argument("first_name")
@click.argument("last_name")
@click.option("--student-number", help="Student number")
@click.pass_context
def add_holder(ctx, first_name: str, last_name: str, student_number: str | None):
    """Add an account holder invoices can be billed to."""
    db = ctx.obj["db"]
    service = InvoiceService(db)

    try:
        holder_id = service.create_account_holder(first_name, last_name, student_number)
        click.echo(f"Created account holder '{first_name} {last_name}' (ID: {holder_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register holder commands with main CLI."""
    cli.add_command(holder_group, name="holder")
