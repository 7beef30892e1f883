"""CLI error handling helpers."""

import click

from feerecon.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def parse_mapping_options(ctx: click.Context, pairs: tuple[str, ...]) -> dict[str, str]:
    """Turn repeated ROLE=COLUMN options into a role -> column dict."""
    roles: dict[str, str] = {}
    for pair in pairs:
        role, sep, column = pair.partition("=")
        if not sep or not role.strip() or not column.strip():
            click.echo(f"Error: Invalid mapping '{pair}'. Use ROLE=COLUMN", err=True)
            ctx.exit(1)
        roles[role.strip().lower()] = column.strip()
    return roles
