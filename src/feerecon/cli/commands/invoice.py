"""Invoice ledger commands."""

import io

import click

from feerecon.cli.error_handling import handle_domain_error
from feerecon.domain.entities import InvoiceStatus
from feerecon.domain.errors import DomainError
from feerecon.domain.invoice import InvoiceService
from feerecon.utils.amount_parser import parse_amount
from feerecon.utils.date_parser import parse_date

STATUS_CHOICE = click.Choice([s.value for s in InvoiceStatus], case_sensitive=False)


def _status(value: str | None) -> InvoiceStatus | None:
    if value is None:
        return None
    return next(s for s in InvoiceStatus if s.value.lower() == value.lower())


@click.group()
def invoice_group():
    """Manage invoices."""
    pass


@invoice_group.command("add")
@click.argument("reference")
@click.argument("amount")
@click.option("--due", "due_date", required=True, help="Due date (YYYY-MM-DD or relative like 'today')")
@click.option("--holder", "holder_id", type=int, help="Account holder ID")
@click.pass_context
def add_invoice(ctx, reference: str, amount: str, due_date: str, holder_id: int | None):
    """Add an unpaid invoice.

    Examples:
        feerecon invoice add HAR149 2500.00 --due 2024-02-01 --holder 1
    """
    db = ctx.obj["db"]
    service = InvoiceService(db)

    try:
        amount_due = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)
        return
    try:
        due = parse_date(due_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)
        return

    try:
        invoice_id = service.create_invoice(
            reference_number=reference,
            amount_due=amount_due,
            due_date=due,
            account_holder_id=holder_id,
        )
        click.echo(f"Created invoice {reference.upper()} for {amount_due} (ID: {invoice_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@invoice_group.command("list")
@click.option("--status", type=STATUS_CHOICE, help="Only invoices with this status")
@click.pass_context
def list_invoices(ctx, status: str | None):
    """List invoices by due date."""
    db = ctx.obj["db"]
    service = InvoiceService(db)

    invoices = service.list_invoices(_status(status))
    if not invoices:
        click.echo("No invoices found.")
        return

    click.echo("\nInvoices:")
    click.echo("-" * 80)
    for inv in invoices:
        click.echo(
            f"{inv.reference_number:10s} | Due {inv.due_date} | {inv.status.value:8s} | "
            f"Amount {inv.amount_due:>10} | Paid {inv.amount_paid:>10} | "
            f"Outstanding {inv.outstanding_balance:>10}"
            + (f" | Overpaid {inv.overpaid_amount}" if inv.overpaid_amount else "")
        )


@invoice_group.command("export")
@click.option("--status", type=STATUS_CHOICE, help="Only invoices with this status")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file (defaults to stdout)")
@click.pass_context
def export_invoices(ctx, status: str | None, output: str | None):
    """Export invoices as CSV."""
    db = ctx.obj["db"]
    service = InvoiceService(db)

    if output is None:
        buffer = io.StringIO()
        service.export_csv(buffer, _status(status))
        click.echo(buffer.getvalue(), nl=False)
        return

    with open(output, "w", encoding="utf-8", newline="") as f:
        count = service.export_csv(f, _status(status))
    click.echo(f"Exported {count} invoices to {output}")


def register_commands(cli):
    """Register invoice commands with main CLI."""
    cli.add_command(invoice_group, name="invoice")
