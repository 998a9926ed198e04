"""Main CLI application module.

This module provides the main entry point for the wpstack CLI. The same
executable serves the operator on the host and the entrypoints inside
the three containers.

Command Groups:
- stack: Build, start, stop, clean and test the Compose stack
- certs: Self-signed edge certificate
- secrets: Database credential files
- db: MariaDB bootstrap and verification (in-container)
- entrypoint: NGINX and WordPress entrypoints (in-container)
"""

import typer

from .commands import (
    certs_app,
    db_app,
    entrypoint_app,
    secrets_app,
    stack_app,
)

# Create the main CLI application
app = typer.Typer(
    help="🛠️  wpstack - WordPress on NGINX and MariaDB with Docker Compose",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Host-side command groups
app.add_typer(stack_app, name="stack")
app.add_typer(certs_app, name="certs")
app.add_typer(secrets_app, name="secrets")

# In-container command groups
app.add_typer(db_app, name="db")
app.add_typer(entrypoint_app, name="entrypoint")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
