"""Container entrypoints for the edge and application services.

Each command renders its service configuration, then replaces itself
with the server process so the server runs as PID 1 and receives the
container's stop signal directly.
"""

import os
import subprocess
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from loguru import logger

from wpstack.config import get_config
from wpstack.infra.secrets import SecretFileError, read_credentials
from wpstack.infra.smoke import probe_tcp
from wpstack.infra.templates import (
    install_wordpress_core,
    write_nginx_config,
    write_wp_config,
)
from wpstack.utils.logging import configure_container_logging

entrypoint_app = typer.Typer(
    name="entrypoint",
    help="🐳 In-container entrypoints.",
    no_args_is_help=True,
)


def _exec(argv: list[str]) -> NoReturn:
    logger.info(f"Handing off to {' '.join(argv)}")
    try:
        os.execvp(argv[0], argv)
    except OSError as e:
        logger.error(f"Unable to start {argv[0]}: {e}")
        raise typer.Exit(1) from None


@entrypoint_app.command()
def nginx() -> None:
    """Render the NGINX site configuration and run nginx in the foreground."""
    configure_container_logging()
    config = get_config()

    ssl_dir = Path(config.edge.ssl_dir)
    for name in (config.certificate.cert_name, config.certificate.key_name):
        if not (ssl_dir / name).is_file():
            logger.error(f"{ssl_dir / name} is missing; run `wpstack stack setup` on the host")
            raise typer.Exit(1)

    write_nginx_config(config)
    _exec(["nginx", "-g", "daemon off;"])


@entrypoint_app.command()
def wordpress() -> None:
    """Install WordPress into the volume if needed, then run PHP-FPM."""
    configure_container_logging()
    config = get_config()
    app = config.app

    try:
        credentials = read_credentials(Path(config.database.secrets_dir), config.database)
    except SecretFileError as e:
        logger.error(str(e))
        raise typer.Exit(1) from None

    web_root = Path(app.web_root)
    try:
        install_wordpress_core(Path(app.core_source), web_root)
    except FileNotFoundError as e:
        logger.error(str(e))
        raise typer.Exit(1) from None

    write_wp_config(config, credentials)

    try:
        subprocess.run(
            ["chown", "-R", f"{app.os_user}:{app.os_user}", str(web_root)],
            check=True,
            capture_output=True,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        logger.warning(f"Unable to change ownership of {web_root}: {e}")

    _exec([app.fpm_binary, "-F"])


@entrypoint_app.command()
def probe(
    host: Annotated[str, typer.Argument(help="Host name or address")],
    port: Annotated[int, typer.Argument(help="TCP port")],
    timeout: Annotated[float, typer.Option("--timeout", help="Seconds")] = 3.0,
) -> None:
    """Exit 0 if a TCP connection to HOST:PORT opens, 1 otherwise."""
    ok, message = probe_tcp(host, port, timeout=timeout)
    typer.echo(message)
    if not ok:
        raise typer.Exit(1)
