"""Statement reconciliation command."""

import json
from pathlib import Path

import click

from feerecon.cli.commands.analyze import resolve_kind
from feerecon.cli.error_handling import handle_domain_error, parse_mapping_options
from feerecon.domain.entities import ColumnMapping, ResultCategory, SourceKind
from feerecon.domain.errors import DomainError
from feerecon.domain.statement_import import StatementImportService


@click.command("reconcile")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--kind", type=click.Choice([k.value for k in SourceKind]), help="Statement kind")
@click.option("--profile", help="Saved mapping profile to use")
@click.option(
    "--map",
    "mappings",
    multiple=True,
    metavar="ROLE=COLUMN",
    help="Column mapping, e.g. --map reference=Ref --map amount=Amount (repeatable)",
)
@click.option("--save-as", help="Save the mapping used as a named profile")
@click.option("--bank-name", help="Bank name stored with a saved profile")
@click.option("--default", "make_default", is_flag=True, help="Make the profile saved with --save-as the default")
@click.option("--user", "user_id", type=int, help="ID of the user running the upload")
@click.option("--json", "as_json", is_flag=True, help="Print full results as JSON")
@click.pass_context
def reconcile_statement(
    ctx,
    statement_file: str,
    kind: str | None,
    profile: str | None,
    mappings: tuple[str, ...],
    save_as: str | None,
    bank_name: str | None,
    make_default: bool,
    user_id: int | None,
    as_json: bool,
):
    """Match a statement's payments to open invoices and update balances.

    Without --profile or --map, a saved profile for the same headers is
    used, else the columns are detected automatically.

    Examples:
        feerecon reconcile statement.csv
        feerecon reconcile statement.csv --map reference=Ref --map amount=Amount --map date=Date
        feerecon reconcile statement.csv --profile "FNB export" --user 1
        feerecon reconcile statement.pdf
    """
    db = ctx.obj["db"]
    service = StatementImportService(db)
    source_kind = resolve_kind(ctx, statement_file, kind)

    if profile and mappings:
        click.echo("Error: --profile cannot be combined with --map", err=True)
        ctx.exit(1)
    if make_default and not save_as:
        click.echo("Error: --default requires --save-as", err=True)
        ctx.exit(1)

    try:
        mapping = ColumnMapping.from_roles(parse_mapping_options(ctx, mappings)) if mappings else None
        result = service.process_with_mapping(
            Path(statement_file).read_bytes(),
            source_kind,
            mapping=mapping,
            save_as=save_as,
            bank_name=bank_name,
            uploaded_by=user_id,
            profile=profile,
            filename=Path(statement_file).name,
            make_default=make_default,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    summary = result.summary()
    click.echo("\nReconciliation complete:")
    for category in ResultCategory:
        click.echo(f"  {category.value.capitalize():10s} {summary[category.value]}")
    click.echo(f"  Total      {summary['total_processed']}")
    if result.skipped_rows:
        click.echo(f"  Skipped {result.skipped_rows} non-transaction rows")
    if result.rejected_rows:
        click.echo(f"  Ignored {len(result.rejected_rows)} rows without a reference or amount")

    for category in ResultCategory:
        entries = result.bucket(category)
        if not entries:
            continue
        click.echo(f"\n{category.value.capitalize()}:")
        for entry in entries:
            txn = entry.transaction
            line = f"  {txn.date} {txn.reference:15s} {txn.amount:>10}"
            if entry.invoice_reference:
                line += f" -> {entry.invoice_reference} ({entry.match_strategy})"
                if entry.after is not None:
                    line += f" outstanding {entry.after.outstanding_balance}"
            if entry.needs_review:
                line += " [review]"
            if entry.reason:
                line += f" {entry.reason}"
            click.echo(line)


def register_commands(cli):
    """Register reconcile command with main CLI."""
    cli.add_command(reconcile_statement)
