"""Upload activity commands."""

import click

from feerecon.domain.payment_history import PaymentHistoryService


@click.group()
def uploads_group():
    """Show statement upload activity."""
    pass


@uploads_group.command("list")
@click.option("--limit", type=int, default=20, show_default=True, help="Number of uploads to show")
@click.pass_context
def list_uploads(ctx, limit: int):
    """List recent statement uploads."""
    db = ctx.obj["db"]
    service = PaymentHistoryService(db)

    logs = service.list_uploads(limit=limit)
    if not logs:
        click.echo("No uploads found.")
        return

    click.echo("\nUploads:")
    click.echo("-" * 80)
    for log in logs:
        click.echo(
            f"{log.created_at:%Y-%m-%d %H:%M} | {log.filename:25s} | "
            f"processed {log.transactions_processed} | matched {log.matched_count} | "
            f"partial {log.partial_count} | overpaid {log.overpaid_count} | "
            f"unmatched {log.unmatched_count} | duplicates {log.duplicate_count} | "
            f"errors {log.error_count}"
        )


def register_commands(cli):
    """Register uploads commands with main CLI."""
    cli.add_command(uploads_group, name="uploads")
