"""Shell command abstractions for stack operations.

This package provides a small, well-documented interface for the shell
commands used by the task runner. It is organized into specialized modules
for each tool:

- docker: host-wide container/image/volume/network operations
- openssl: self-signed certificate generation and inspection
- host: directory creation, ownership and removal with sudo fallback

Usage:
    from wpstack.deployment.shell_commands import ShellCommands

    commands = ShellCommands(project_root=Path("."))
    ids = commands.docker.list_container_ids()
"""

from pathlib import Path

from .docker import DockerCommands
from .host import HostCommands
from .openssl import OpenSSLCommands
from .runner import CommandRunner
from .types import CommandResult, ContainerState


class ShellCommands:
    """Unified interface for all shell command operations.

    Attributes:
        docker: Docker-related commands
        openssl: OpenSSL commands
        host: Host filesystem commands
    """

    def __init__(self, project_root: Path) -> None:
        """Initialize the shell commands executor.

        Args:
            project_root: Path to the project root directory.
                         Commands will be executed from this directory by default.
        """
        self._project_root = Path(project_root)
        self._runner = CommandRunner(self._project_root)

        self.docker = DockerCommands(self._runner)
        self.openssl = OpenSSLCommands(self._runner)
        self.host = HostCommands(self._runner)

    @property
    def project_root(self) -> Path:
        """Get the project root path."""
        return self._project_root

    @property
    def runner(self) -> CommandRunner:
        return self._runner


__all__ = [
    "ShellCommands",
    "CommandResult",
    "ContainerState",
    "CommandRunner",
    "DockerCommands",
    "HostCommands",
    "OpenSSLCommands",
]
