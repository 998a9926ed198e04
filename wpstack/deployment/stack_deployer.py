"""Deployer for the three-container WordPress stack."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from wpstack.cli.shared.compose import ComposeRunner
from wpstack.config import StackConfig
from wpstack.infra.certs import CertificateManager
from wpstack.infra.checks import CheckResult, all_passed
from wpstack.infra.constants import DEFAULT_CONSTANTS, StackPaths
from wpstack.infra.secrets import secret_paths
from wpstack.infra.smoke import ConnectivityChecker

from .base import BaseDeployer
from .errors import DeploymentError
from .health_checks import HealthChecker
from .shell_commands import ShellCommands


class StackDeployer(BaseDeployer):
    """Builds, starts, inspects and tears down the stack with Docker Compose."""

    def __init__(
        self,
        console: Console,
        project_root: Path,
        config: StackConfig,
        *,
        commands: ShellCommands | None = None,
        compose: ComposeRunner | None = None,
    ) -> None:
        """Initialize the stack deployer.

        Args:
            console: Rich console for output
            project_root: Path to the project root directory
            config: Loaded stack configuration
            commands: Shell command executor (built from project_root if omitted)
            compose: Compose runner (built from config if omitted)
        """
        super().__init__(console, project_root)
        self.config = config
        self.paths = StackPaths(project_root, config)
        self.commands = commands or ShellCommands(project_root)
        self.compose = compose or ComposeRunner(
            project_root,
            compose_file=self.paths.compose_file,
            project_name=config.project_name,
            env=self.compose_env(),
        )
        self.health_checker = HealthChecker(self.commands.docker)
        self.certificates = CertificateManager(
            self.commands.openssl, config.certificate
        )

    def compose_env(self) -> dict[str, str]:
        """Variables the Compose file interpolates."""
        return {
            "DOMAIN_NAME": self.config.domain_name,
            "DATA_PATH": str(self.paths.data_root),
            "SECRETS_PATH": str(self.paths.secrets_dir),
        }

    @property
    def services(self) -> list[str]:
        """Service names in start order."""
        c = self.config
        return [c.database.service, c.app.service, c.edge.service]

    # =========================================================================
    # build / up / run / down / restart
    # =========================================================================

    def build(self, *, no_cache: bool = False) -> None:
        with self.create_progress() as progress:
            task = progress.add_task("Building images...", total=1)
            self._compose(lambda: self.compose.build(no_cache=no_cache), "Image build failed")
            progress.update(task, completed=1)
        self.success("Images built")

    def up(self, *, no_wait: bool = False) -> None:
        self._preflight()
        self._compose(self.compose.up, "Failed to start services")
        self.success("Services started")
        if not no_wait:
            self._monitor_health()

    def deploy(self, **kwargs: Any) -> None:
        """Build images, start services and print the access URL.

        Args:
            **kwargs: Deployment options (no_cache, no_wait)
        """
        self.check_env_file()
        self.build(no_cache=kwargs.get("no_cache", False))
        self.up(no_wait=kwargs.get("no_wait", False))
        self.console.print(
            "\n[bold green]🎉 All containers started successfully.[/bold green]"
        )
        self.console.print(f"🌐 Open [bold cyan]{self.config.https_url}[/bold cyan]")

    def teardown(self, **kwargs: Any) -> None:
        """Stop and remove the services and their volumes (``compose down -v``)."""
        self._compose(
            lambda: self.compose.down(volumes=kwargs.get("volumes", True)),
            "Failed to stop services",
        )
        self.success("Services stopped and removed")

    def restart(self, *, no_wait: bool = False) -> None:
        self.teardown()
        self.up(no_wait=no_wait)

    def _compose(self, action: Any, failure: str) -> None:
        try:
            action()
        except subprocess.CalledProcessError as e:
            raise DeploymentError(
                failure, f"`{' '.join(map(str, e.cmd))}` exited with status {e.returncode}"
            ) from e
        except FileNotFoundError as e:
            raise DeploymentError(
                "docker not found", "Install Docker with the compose plugin."
            ) from e

    def _preflight(self) -> None:
        """Fail early when the host-side inputs of the Compose file are missing."""
        required = [
            *secret_paths(self.paths.secrets_dir, self.config.database).values(),
            self.paths.cert_path,
            self.paths.key_path,
            *self.paths.data_dirs,
        ]
        missing = self.missing_paths(required)
        if missing:
            raise DeploymentError(
                "Stack is not set up",
                "Missing:\n"
                + "\n".join(f"  • {p}" for p in missing)
                + "\n\nRun `wpstack secrets generate` and `wpstack stack setup` first.",
            )

    def _monitor_health(self) -> None:
        self.console.print("\n[bold cyan]🔍 Waiting for services...[/bold cyan]")

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Service", style="cyan", width=12)
        table.add_column("Status", width=18)
        table.add_column("Details", style="dim")

        all_healthy = True
        for service in self.services:

            def check(name: str = service) -> bool:
                return self.health_checker.check_container_health(name)[0]

            healthy = self.health_checker.wait_for_condition(
                check,
                timeout=DEFAULT_CONSTANTS.HEALTH_TIMEOUT,
                interval=DEFAULT_CONSTANTS.HEALTH_INTERVAL,
            )
            _, status = self.health_checker.check_container_health(service)
            if healthy:
                table.add_row(service, "[bold green]✓ Up[/bold green]", status or "")
            else:
                all_healthy = False
                table.add_row(
                    service, "[bold red]✗ Not ready[/bold red]", status or "missing"
                )

        self.console.print(Panel(table, title="Service Status", border_style="green"))
        if not all_healthy:
            self.warning(
                "Some services are not up yet. Check logs with: wpstack stack logs <service>"
            )

    # =========================================================================
    # clean / fclean
    # =========================================================================

    def clean(self) -> None:
        """Remove every container, image, volume and network on the host.

        Mirrors a host-wide reset: each step is best-effort and its failure
        is reported, never raised, so the command is safe to repeat on a host
        that is already (partially) clean.
        """
        docker = self.commands.docker

        with self.console.status("[bold red]Removing Docker resources..."):
            containers = docker.list_container_ids()
            steps = [
                ("stop containers", lambda: docker.stop_containers(containers)),
                ("remove containers", lambda: docker.remove_containers(containers)),
                ("remove images", lambda: docker.remove_images(docker.list_image_ids())),
                ("remove volumes", lambda: docker.remove_volumes(docker.list_volume_names())),
                ("remove networks", lambda: docker.remove_networks(docker.list_network_names())),
                ("system prune", docker.system_prune),
            ]
            for label, step in steps:
                result = step()
                if not result.success:
                    self.note(f"{label}: {(result.stderr or 'failed').strip()}")

        self.success("Docker resources cleaned")

    def fclean(self) -> None:
        """clean, then delete the contents of the host data directories.

        The ssl directory is kept; the certificate does not depend on any
        container state.
        """
        self.clean()
        for directory in self.paths.volume_dirs:
            result = self.commands.host.clear_directory(directory)
            if not result.success:
                raise DeploymentError(
                    f"Could not clear {directory}", result.stderr.strip() or None
                )
        self.success("Everything is clean")

    # =========================================================================
    # setup
    # =========================================================================

    def setup(self) -> None:
        """Prepare the host: data directories, ownership, TLS certificate."""
        dirs = self.paths.data_dirs
        self.info("Creating volume directories...")
        result = self.commands.host.make_dirs(dirs)
        if not result.success:
            raise DeploymentError("Could not create data directories", result.stderr or None)

        login = self.config.login
        result = self.commands.host.chown_recursive(self.paths.data_root, login)
        if not result.success:
            raise DeploymentError(
                f"Could not change ownership of {self.paths.data_root} to {login}",
                result.stderr.strip() or None,
            )

        self.info(f"Generating SSL certificate for {self.config.domain_name}...")
        self.certificates.generate(
            self.config.domain_name, self.paths.cert_path, self.paths.key_path
        )
        self.success(f"Directories created under {self.paths.data_root}")

    # =========================================================================
    # test / info / logs
    # =========================================================================

    def run_tests(self, *, target: str | None = None) -> bool:
        """Run connectivity smoke tests, then the database verification.

        Returns:
            True if every check passed
        """
        self.console.print("[bold]🧪 Connectivity[/bold]")
        connectivity = ConnectivityChecker(
            self.config, self.commands.docker, target=target
        ).run()
        self.print_results(connectivity)

        self.console.print("\n[bold]🧪 Database[/bold]")
        database = self._verify_database()
        self.print_results(database)

        return all_passed(connectivity) and all_passed(database)

    def _verify_database(self) -> list[CheckResult]:
        service = self.config.database.service
        try:
            proc = self.compose.exec(service, ["wpstack", "db", "verify"])
        except FileNotFoundError as e:
            return [CheckResult("database verification", False, str(e))]
        output = (proc.stdout or "") + (proc.stderr or "")
        return [
            CheckResult(
                "database verification",
                proc.returncode == 0,
                output.strip().splitlines()[-1] if output.strip() else "no output",
            )
        ]

    def print_results(self, results: list[CheckResult]) -> None:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Check", style="cyan")
        table.add_column("Result", width=8)
        table.add_column("Details", style="dim")
        for r in results:
            status = "[green]PASS[/green]" if r.ok else "[red]FAIL[/red]"
            table.add_row(r.name, status, r.detail)
        self.console.print(table)

    def show_status(self) -> None:
        self.console.print("[bold]🌐 Available services:[/bold]")
        self.console.print(f"  WordPress: [cyan]{self.config.https_url}[/cyan]\n")
        self.console.print("[bold]📊 Container status:[/bold]")
        self._compose(self.compose.ps, "Failed to list services")

    def logs(
        self, service: str | None = None, *, follow: bool = False, tail: int | None = None
    ) -> None:
        self._compose(
            lambda: self.compose.logs(service=service, follow=follow, tail=tail),
            "Failed to get logs",
        )
