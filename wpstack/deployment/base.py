"""Base deployer class with shared functionality."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn


class BaseDeployer(ABC):
    """Abstract base class for deployers."""

    def __init__(self, console: Console, project_root: Path):
        """Initialize the deployer.

        Args:
            console: Rich console for output
            project_root: Path to the project root directory
        """
        self.console = console
        self.project_root = project_root
        # Load .env so compose substitutions (DOMAIN_NAME, DATA_PATH) are available
        load_dotenv(self.project_root / ".env", override=False)

    @abstractmethod
    def deploy(self, **kwargs: Any) -> None:
        """Build and start the environment."""

    @abstractmethod
    def teardown(self, **kwargs: Any) -> None:
        """Stop and remove the environment."""

    @abstractmethod
    def show_status(self) -> None:
        """Display the current status of the deployment."""

    def check_env_file(self) -> bool:
        """Check if .env file exists and provide guidance if not.

        A missing .env is not fatal: config.yaml carries defaults for every
        variable. Returns True if the file exists.
        """
        env_file = self.project_root / ".env"
        env_example = self.project_root / ".env.example"

        if env_file.exists():
            return True

        self.warning(".env file not found; using defaults from config.yaml")
        if env_example.exists():
            self.console.print(
                "  [dim]To customise the domain or data path:[/dim] "
                "[cyan]cp .env.example .env[/cyan]"
            )
        return False

    def create_progress(self, transient: bool = True) -> Progress:
        """Create a progress indicator.

        Args:
            transient: Whether the progress indicator should disappear after completion

        Returns:
            Progress instance
        """
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.console,
            transient=transient,
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✅ {message}[/green]")

    def error(self, message: str) -> None:
        self.console.print(f"[red]❌ {message}[/red]")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠️  {message}[/yellow]")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]ℹ {message}[/blue]")

    def note(self, message: str) -> None:
        self.console.print(f"[dim]{message}[/dim]")

    @staticmethod
    def missing_paths(paths: Iterable[Path]) -> list[Path]:
        return [p for p in paths if not p.exists()]
