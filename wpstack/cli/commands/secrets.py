"""Secrets management CLI commands."""

from typing import Annotated

import typer
from rich.table import Table

from wpstack.cli.context import get_cli_context
from wpstack.cli.shared.console import console, with_error_handling
from wpstack.infra.secrets import (
    SecretFileError,
    generate_password,
    read_secret,
    secret_paths,
    validate_user_name,
    write_secret,
)

secrets_app = typer.Typer(
    name="secrets",
    help="🔐 Database credential files.",
    no_args_is_help=True,
)


@secrets_app.command()
@with_error_handling
def generate(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Regenerate ALL secrets (overwrites existing values)",
        ),
    ] = False,
    user: Annotated[
        str | None,
        typer.Option("--user", help="Application database user name (default: the login)"),
    ] = None,
) -> None:
    """🔐 Generate the database credential files.

    Creates, under infra/secrets/:
    - mariadb_root_password
    - mariadb_user
    - mariadb_password

    Files that already exist are kept unless --force is given, so
    rerunning the command never changes the credentials of a provisioned
    database by accident.

    Examples:
        wpstack secrets generate
        wpstack secrets generate --force
    """
    ctx = get_cli_context()
    user_name = user or ctx.config.login
    try:
        validate_user_name(user_name)
    except ValueError as e:
        console.error(str(e))
        raise typer.Exit(1) from None

    paths = secret_paths(ctx.paths.secrets_dir, ctx.config.database)
    values = {
        "root_password": generate_password,
        "user": lambda: user_name,
        "password": generate_password,
    }

    written = 0
    for role, path in paths.items():
        if path.exists() and not force:
            console.print(f"[dim]  • {path.name} exists, keeping it[/dim]")
            continue
        write_secret(path, values[role]())
        console.print(f"  • [green]{path.name}[/green] written")
        written += 1

    if written:
        console.ok(f"{written} secret file(s) written to {ctx.paths.secrets_dir}")
    else:
        console.info("All secret files already exist (use --force to regenerate)")


@secrets_app.command("list")
@with_error_handling
def list_secrets(
    show_values: Annotated[
        bool,
        typer.Option("--show-values", help="Print the user name (passwords stay masked)"),
    ] = False,
) -> None:
    """List the credential files and whether they are usable."""
    ctx = get_cli_context()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Secret", style="cyan")
    table.add_column("File")
    table.add_column("Status")

    missing = 0
    for role, path in secret_paths(ctx.paths.secrets_dir, ctx.config.database).items():
        try:
            value = read_secret(path)
        except SecretFileError as e:
            missing += 1
            table.add_row(role, str(path), f"[red]{e}[/red]")
            continue
        shown = value if show_values and role == "user" else "********"
        table.add_row(role, str(path), f"[green]ok[/green] {shown}")

    console.print(table)
    if missing:
        console.warn("Run `wpstack secrets generate` to create the missing files")
        raise typer.Exit(1)
