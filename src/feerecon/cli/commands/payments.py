"""Recorded payment transaction commands."""

import click

from feerecon.cli.error_handling import handle_domain_error
from feerecon.domain.entities import ResultCategory
from feerecon.domain.errors import DomainError
from feerecon.domain.payment_history import DEFAULT_PAGE_SIZE, PaymentHistoryService
from feerecon.utils.date_parser import parse_date


@click.group()
def payments_group():
    """Browse recorded payment transactions."""
    pass


@payments_group.command("list")
@click.option("--status", type=click.Choice([c.value for c in ResultCategory]), help="Result category")
@click.option("--reference", help="Reference contains this text")
@click.option("--start-date", help="Earliest payment date")
@click.option("--end-date", help="Latest payment date")
@click.option("--limit", default=DEFAULT_PAGE_SIZE, show_default=True, help="Rows per page")
@click.option("--page", default=1, show_default=True, help="Page number")
@click.pass_context
def list_payments(
    ctx,
    status: str | None,
    reference: str | None,
    start_date: str | None,
    end_date: str | None,
    limit: int,
    page: int,
):
    """List recorded transactions, newest first."""
    db = ctx.obj["db"]
    service = PaymentHistoryService(db)

    start = end = None
    try:
        if start_date:
            start = parse_date(start_date)
        if end_date:
            end = parse_date(end_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)
        return

    try:
        result = service.list_transactions(
            status=status,
            reference=reference,
            start_date=start,
            end_date=end,
            page=page,
            limit=limit,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not result.records:
        click.echo("No transactions found.")
        return

    click.echo(f"\nTransactions (page {result.page} of {result.total_pages}, {result.total} total):")
    click.echo("-" * 80)
    for rec in result.records:
        line = (
            f"ID: {rec.id:4d} | {rec.payment_date} | {rec.reference_number:15s} | "
            f"{rec.amount:>10} | {rec.status.value}"
        )
        if rec.match_strategy:
            line += f" ({rec.match_strategy})"
        if rec.needs_review:
            line += " [review]"
        click.echo(line)


def register_commands(cli):
    """Register payments commands with main CLI."""
    cli.add_command(payments_group, name="payments")
