"""Mapping profile management commands."""

import click

from feerecon.cli.error_handling import handle_domain_error
from feerecon.domain.errors import DomainError
from feerecon.domain.mapping_profile import MappingProfileService


@click.group()
def profile_group():
    """Manage saved column mapping profiles."""
    pass


@profile_group.command("list")
@click.option("--user", "user_id", type=int, help="Only profiles created by this user")
@click.pass_context
def list_profiles(ctx, user_id: int | None):
    """List profiles, most used first."""
    db = ctx.obj["db"]
    service = MappingProfileService(db)

    profiles = service.list_profiles(created_by=user_id)
    if not profiles:
        click.echo("No mapping profiles found.")
        return

    click.echo("\nMapping profiles:")
    click.echo("-" * 70)
    for p in profiles:
        last_used = p.last_used_at.strftime("%Y-%m-%d %H:%M") if p.last_used_at else "never"
        marker = " (default)" if p.is_default else ""
        click.echo(
            f"{p.name:25s} | Bank: {p.bank_name or '-':12s} | Uses: {p.use_count:4d} | Last used: {last_used}{marker}"
        )


@profile_group.command("show")
@click.argument("name")
@click.pass_context
def show_profile(ctx, name: str):
    """Show the column assignments of a profile."""
    db = ctx.obj["db"]
    service = MappingProfileService(db)

    try:
        profile = service.get_profile(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nProfile: {profile.name}")
    if profile.bank_name:
        click.echo(f"Bank: {profile.bank_name}")
    if profile.is_default:
        click.echo("Default: yes")
    mode = "debit/credit columns" if profile.mapping.is_debit_credit else "single amount column"
    click.echo(f"Mode: {mode}")
    for role, column in profile.mapping.roles().items():
        if column:
            click.echo(f"  {role:12s} -> {column}")


@profile_group.command("delete")
@click.argument("name")
@click.option("--owner", "owner_id", type=int, required=True, help="ID of the user deleting the profile")
@click.pass_context
def delete_profile(ctx, name: str, owner_id: int):
    """Delete a profile. Only its creator may delete it."""
    db = ctx.obj["db"]
    service = MappingProfileService(db)

    try:
        service.delete_profile(name, owner_id)
        click.echo(f"Deleted mapping profile '{name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register profile commands with main CLI."""
    cli.add_command(profile_group, name="profile")
