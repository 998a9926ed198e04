"""Stack lifecycle commands.

This module provides the task-runner commands for the Docker Compose
stack: building images, starting and stopping services, host setup,
cleanup, smoke tests and status.
"""

from typing import TYPE_CHECKING, Annotated

import typer

from wpstack.cli.context import get_cli_context
from wpstack.cli.shared.console import console, with_error_handling

if TYPE_CHECKING:
    from wpstack.deployment.stack_deployer import StackDeployer


# ---------------------------------------------------------------------------
# Deployer Factory
# ---------------------------------------------------------------------------


def _get_deployer() -> "StackDeployer":
    """Get the stack deployer instance.

    Returns:
        StackDeployer configured for the current project
    """
    from wpstack.deployment.stack_deployer import StackDeployer

    ctx = get_cli_context()
    return StackDeployer(
        ctx.console.console,
        ctx.project_root,
        ctx.config,
        commands=ctx.commands,
    )


# ---------------------------------------------------------------------------
# Typer App
# ---------------------------------------------------------------------------

stack_app = typer.Typer(
    name="stack",
    help="Docker Compose stack commands.",
    no_args_is_help=True,
)

NoCacheOption = Annotated[
    bool, typer.Option("--no-cache", help="Build images without the layer cache")
]
NoWaitOption = Annotated[
    bool, typer.Option("--no-wait", help="Don't wait for containers to come up")
]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@stack_app.command()
@with_error_handling
def build(no_cache: NoCacheOption = False) -> None:
    """Build the three service images.

    Examples:
        wpstack stack build
        wpstack stack build --no-cache
    """
    console.print_header("Building Images")
    _get_deployer().build(no_cache=no_cache)


@stack_app.command()
@with_error_handling
def up(no_wait: NoWaitOption = False) -> None:
    """Start the services in the background.

    Requires the secret files, the data directories and the certificate
    (see `wpstack secrets generate` and `wpstack stack setup`).

    Examples:
        wpstack stack up
        wpstack stack up --no-wait
    """
    console.print_header("Starting Stack")
    _get_deployer().up(no_wait=no_wait)


@stack_app.command()
@with_error_handling
def run(no_cache: NoCacheOption = False, no_wait: NoWaitOption = False) -> None:
    """Build the images, start the services and print the site URL.

    Examples:
        wpstack stack run
    """
    console.print_header("Deploying Stack")
    _get_deployer().deploy(no_cache=no_cache, no_wait=no_wait)


@stack_app.command()
@with_error_handling
def down() -> None:
    """Stop the services and remove their containers and volumes.

    Host data directories are left untouched.

    Examples:
        wpstack stack down
    """
    console.print_header("Stopping Stack")
    _get_deployer().teardown()


@stack_app.command()
@with_error_handling
def restart(no_wait: NoWaitOption = False) -> None:
    """Tear the services down and start them again."""
    console.print_header("Restarting Stack")
    _get_deployer().restart(no_wait=no_wait)


@stack_app.command()
@with_error_handling
def clean() -> None:
    """Remove ALL Docker containers, images, volumes and networks on this host.

    Every step is best-effort; running it on a clean host is not an error.

    Examples:
        wpstack stack clean
    """
    console.print_header("Cleaning Docker Resources", style="red")
    _get_deployer().clean()


@stack_app.command()
@with_error_handling
def fclean(
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt")
    ] = False,
) -> None:
    """Run clean, then delete the contents of the host data directories.

    Examples:
        wpstack stack fclean
        wpstack stack fclean -y
    """
    console.print_header("Full Clean", style="red")

    ctx = get_cli_context()
    data_dirs = "\n".join(f"  • {d}" for d in ctx.paths.volume_dirs)
    if not console.confirm_action(
        "Remove every Docker resource and all stack data",
        f"This also deletes everything under:\n{data_dirs}",
        extra_warning="The database and the WordPress files are lost.",
        force=yes,
    ):
        console.print("[dim]Operation cancelled[/dim]")
        raise typer.Exit(0)

    _get_deployer().fclean()


@stack_app.command()
@with_error_handling
def setup() -> None:
    """Prepare the host: data directories, their owner and the TLS certificate.

    Examples:
        wpstack stack setup
    """
    console.print_header("Setting Up Host")
    _get_deployer().setup()


@stack_app.command()
@with_error_handling
def test(
    target: Annotated[
        str | None,
        typer.Option(
            "--target",
            "-t",
            help="Host or IP to send HTTP requests to (the domain stays in the Host header)",
        ),
    ] = None,
) -> None:
    """Smoke-test a running stack.

    Checks the containers, the links between them, HTTPS on the domain,
    the HTTP to HTTPS redirect and the database provisioning.

    Examples:
        wpstack stack test
        wpstack stack test --target 127.0.0.1
    """
    console.print_header("Testing Stack")
    if not _get_deployer().run_tests(target=target):
        console.error("Some checks failed")
        raise typer.Exit(1)
    console.ok("All checks passed")


@stack_app.command()
@with_error_handling
def info() -> None:
    """Show the site URL and container status."""
    console.print_header("Stack Status")
    _get_deployer().show_status()


@stack_app.command()
@with_error_handling
def logs(
    service: Annotated[
        str | None,
        typer.Argument(help="Service name (mariadb, wordpress, nginx)"),
    ] = None,
    follow: Annotated[
        bool, typer.Option("--follow", "-f", help="Follow log output")
    ] = False,
    tail: Annotated[
        int,
        typer.Option("--tail", "-n", help="Number of lines to show from the end of the logs"),
    ] = 100,
) -> None:
    """View logs from the stack services.

    Examples:
        wpstack stack logs
        wpstack stack logs mariadb -f
    """
    _get_deployer().logs(service, follow=follow, tail=tail)
