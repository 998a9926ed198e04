"""TLS certificate commands."""

from typing import Annotated

import typer
from rich.table import Table

from wpstack.cli.context import get_cli_context
from wpstack.cli.shared.console import console, with_error_handling
from wpstack.infra.certs import CertificateManager

certs_app = typer.Typer(
    name="certs",
    help="🔏 Self-signed certificate for the edge service.",
    no_args_is_help=True,
)


def _manager() -> CertificateManager:
    ctx = get_cli_context()
    return CertificateManager(ctx.commands.openssl, ctx.config.certificate)


@certs_app.command()
@with_error_handling
def generate(
    domain: Annotated[
        str | None,
        typer.Option("--domain", "-d", help="Common name (defaults to the configured domain)"),
    ] = None,
) -> None:
    """Generate a new key pair and self-signed certificate.

    Existing files in the ssl data directory are overwritten.

    Examples:
        wpstack certs generate
        wpstack certs generate --domain example.42.fr
    """
    ctx = get_cli_context()
    common_name = domain or ctx.config.domain_name

    with console.status(f"[cyan]Generating certificate for {common_name}..."):
        _manager().generate(common_name, ctx.paths.cert_path, ctx.paths.key_path)

    console.ok(f"Certificate written to {ctx.paths.cert_path}")
    console.info(f"Private key written to {ctx.paths.key_path}")


@certs_app.command()
@with_error_handling
def show() -> None:
    """Show subject, key size and validity of the current certificate."""
    ctx = get_cli_context()
    cert = _manager().inspect(ctx.paths.cert_path)

    table = Table(title="Edge certificate", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Path", str(ctx.paths.cert_path))
    table.add_row("Common name", cert.common_name)
    table.add_row("Key", f"RSA {cert.key_bits} bit")
    table.add_row("Not before", cert.not_before.isoformat())
    table.add_row("Not after", cert.not_after.isoformat())
    table.add_row("Validity", f"{cert.validity_days} days")
    console.print(table)

    if cert.common_name != ctx.config.domain_name:
        console.warn(
            f"Certificate is for {cert.common_name}, configured domain is "
            f"{ctx.config.domain_name}. Run `wpstack certs generate`."
        )
