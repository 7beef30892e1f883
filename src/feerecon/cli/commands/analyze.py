"""Statement analysis command."""

import json
from pathlib import Path

import click

from feerecon.cli.error_handling import handle_domain_error
from feerecon.domain.entities import SourceKind
from feerecon.domain.errors import DomainError
from feerecon.domain.source_reader import infer_kind
from feerecon.domain.statement_import import StatementImportService


def resolve_kind(ctx, statement_file: str, kind: str | None) -> SourceKind:
    """Use --kind, else guess from the file extension."""
    if kind:
        return SourceKind(kind)
    guessed = infer_kind(statement_file)
    if guessed is None:
        click.echo(
            f"Error: Cannot tell the statement kind of '{Path(statement_file).name}'; use --kind",
            err=True,
        )
        ctx.exit(1)
    return guessed


@click.command("analyze")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--kind", type=click.Choice([k.value for k in SourceKind]), help="Statement kind")
@click.option("--samples", default=5, show_default=True, help="Number of sample rows to show")
@click.option("--json", "as_json", is_flag=True, help="Print the analysis as JSON")
@click.pass_context
def analyze_statement(ctx, statement_file: str, kind: str | None, samples: int, as_json: bool):
    """Detect the columns of a bank statement without processing it.

    Examples:
        feerecon analyze statement.csv
        feerecon analyze statement.pdf --json
    """
    db = ctx.obj["db"]
    service = StatementImportService(db)
    source_kind = resolve_kind(ctx, statement_file, kind)

    try:
        result = service.analyze(Path(statement_file).read_bytes(), source_kind, sample_size=samples)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.echo(f"\nHeaders ({result.kind.value}): {', '.join(result.headers)}")
    click.echo(f"Rows: {result.total_rows}")
    click.echo("\nDetected mapping:")
    for role, column in result.detection.roles.items():
        click.echo(f"  {role:12s} -> {column}")
    click.echo(f"Confidence: {result.confidence}%")
    if result.needs_manual_mapping:
        click.echo("Manual mapping needed: pass --map ROLE=COLUMN to 'reconcile'.")
    if result.saved_profile is not None:
        click.echo(f"Saved profile for these headers: {result.saved_profile.name}")

    if result.sample_rows:
        click.echo("\nSample rows:")
        for row in result.sample_rows:
            click.echo("  " + " | ".join(f"{k}={v}" for k, v in row.items()))


def register_commands(cli):
    """Register analyze command with main CLI."""
    cli.add_command(analyze_statement)
