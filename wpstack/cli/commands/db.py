"""Database commands run inside the MariaDB container.

``bootstrap`` is the container entrypoint: it provisions a fresh data
volume, then replaces itself with the foreground engine. ``verify``
checks a provisioned server and is what ``wpstack stack test`` calls
through ``docker compose exec``.
"""

from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.table import Table

from wpstack.cli.shared.console import console
from wpstack.config import get_config
from wpstack.infra.checks import all_passed
from wpstack.infra.mariadb import (
    BootstrapError,
    DbSettings,
    MariaDBBootstrapper,
    MariaDBConnection,
    ProvisioningVerifier,
)
from wpstack.infra.secrets import Credentials, SecretFileError, read_credentials
from wpstack.utils.logging import configure_container_logging

db_app = typer.Typer(
    name="db",
    help="🗄️  MariaDB bootstrap and verification (in-container).",
    no_args_is_help=True,
)

SecretsDirOption = Annotated[
    Path | None,
    typer.Option("--secrets-dir", help="Directory holding the credential files"),
]


def _credentials(secrets_dir: Path | None) -> Credentials:
    db = get_config().database
    return read_credentials(secrets_dir or Path(db.secrets_dir), db)


@db_app.command()
def bootstrap(
    secrets_dir: SecretsDirOption = None,
    no_exec: Annotated[
        bool,
        typer.Option("--no-exec", help="Provision only; don't hand off to the server"),
    ] = False,
) -> None:
    """Provision the data directory on first boot, then run the server.

    Safe on every container start: an initialized data directory is left
    untouched and the server is started straight away.
    """
    configure_container_logging()

    try:
        config = get_config()
        credentials = _credentials(secrets_dir)
        bootstrapper = MariaDBBootstrapper(DbSettings.load(config.database), credentials)
        outcome = bootstrapper.run()
    except (BootstrapError, SecretFileError, ValueError) as e:
        logger.error(f"MariaDB bootstrap failed: {e}")
        raise typer.Exit(1) from None

    logger.info(f"Bootstrap {outcome}")
    if no_exec:
        return
    bootstrapper.handoff()


@db_app.command()
def verify(
    secrets_dir: SecretsDirOption = None,
    host: Annotated[
        str,
        typer.Option("--host", help="Address for the application user's TCP login"),
    ] = "127.0.0.1",
    port: Annotated[int | None, typer.Option("--port", help="MariaDB TCP port")] = None,
    socket: Annotated[
        Path | None,
        typer.Option("--socket", help="Unix socket for the root login"),
    ] = None,
) -> None:
    """Check that the database, the application user and its grants exist.

    Root logs in over the unix socket, the application user over TCP, so
    the check also proves the user is reachable from other hosts.
    """
    try:
        db = get_config().database
        credentials = _credentials(secrets_dir)
    except (SecretFileError, ValueError) as e:
        console.error(str(e))
        raise typer.Exit(1) from None

    root_socket = socket or Path(db.socket)
    tcp_port = port or db.port

    def connect(user: str, password: str, database: str | None) -> MariaDBConnection:
        if user == "root":
            return MariaDBConnection(
                user=user, password=password, unix_socket=root_socket, database=database
            )
        return MariaDBConnection(
            user=user, password=password, host=host, port=tcp_port, database=database
        )

    results = ProvisioningVerifier(db.name, credentials, connect).verify()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Check", style="cyan")
    table.add_column("Result", width=8)
    table.add_column("Details", style="dim")
    for r in results:
        table.add_row(r.name, "[green]PASS[/green]" if r.ok else "[red]FAIL[/red]", r.detail)
    console.print(table)

    if not all_passed(results):
        console.print("database verification failed")
        raise typer.Exit(1)
    console.print("database verification passed")
