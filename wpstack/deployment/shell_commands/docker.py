"""Docker command abstractions.

This module provides the host-wide Docker operations the stack needs:
listing and removing containers, images, volumes and networks, and
inspecting container state for health monitoring and smoke tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .types import CommandResult, ContainerState

if TYPE_CHECKING:
    from .runner import CommandRunner

# Networks created by the Docker daemon itself; they cannot be removed
BUILTIN_NETWORKS = frozenset({"bridge", "host", "none"})


class DockerCommands:
    """Docker-related shell commands.

    Provides operations for:
    - Resource listing (containers, images, volumes, networks)
    - Best-effort removal used by the full system reset
    - Container inspection and in-container probes
    """

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize Docker commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    # =========================================================================
    # Listing
    # =========================================================================

    def list_container_ids(self) -> list[str]:
        """IDs of all containers, running or not (``docker ps -qa``)."""
        return self._runner.run_ignoring_errors(["docker", "ps", "-qa"]).lines

    def list_image_ids(self) -> list[str]:
        """IDs of all local images (``docker images -qa``)."""
        return self._runner.run_ignoring_errors(["docker", "images", "-qa"]).lines

    def list_volume_names(self) -> list[str]:
        return self._runner.run_ignoring_errors(["docker", "volume", "ls", "-q"]).lines

    def list_network_names(self) -> list[str]:
        """User-defined network names; daemon built-ins are filtered out."""
        result = self._runner.run_ignoring_errors(
            ["docker", "network", "ls", "--format", "{{.Name}}"]
        )
        return [name for name in result.lines if name not in BUILTIN_NETWORKS]

    # =========================================================================
    # Best-effort removal
    # =========================================================================

    def stop_containers(self, ids: list[str]) -> CommandResult:
        return self._bulk(["docker", "stop"], ids)

    def remove_containers(self, ids: list[str]) -> CommandResult:
        return self._bulk(["docker", "rm"], ids)

    def remove_images(self, ids: list[str]) -> CommandResult:
        return self._bulk(["docker", "rmi", "-f"], ids)

    def remove_volumes(self, names: list[str]) -> CommandResult:
        return self._bulk(["docker", "volume", "rm"], names)

    def remove_networks(self, names: list[str]) -> CommandResult:
        return self._bulk(["docker", "network", "rm"], names)

    def system_prune(self) -> CommandResult:
        """Prune dangling data, including volumes, without prompting."""
        return self._runner.run_ignoring_errors(
            ["docker", "system", "prune", "-f", "--volumes"]
        )

    def _bulk(self, base: list[str], targets: list[str]) -> CommandResult:
        # Nothing to act on counts as success: an empty host is already clean
        if not targets:
            return CommandResult(success=True)
        return self._runner.run_ignoring_errors([*base, *targets])

    # =========================================================================
    # Inspection
    # =========================================================================

    def inspect_state(self, container: str) -> ContainerState | None:
        """Return the running/health state of a container, or None if absent.

        Example:
            >>> docker.inspect_state("nginx")
            ContainerState(name='nginx', running=True, health='no-healthcheck')
        """
        fmt = (
            "{{.State.Running}}|"
            "{{if .State.Health}}{{.State.Health.Status}}{{else}}no-healthcheck{{end}}"
        )
        result = self._runner.run_ignoring_errors(
            ["docker", "inspect", "-f", fmt, container]
        )
        if not result.success or "|" not in result.stdout:
            return None
        running, health = result.stdout.strip().split("|", 1)
        return ContainerState(
            name=container, running=running.lower() == "true", health=health
        )

    def exec(self, container: str, argv: list[str]) -> CommandResult:
        """Run a command inside a running container."""
        return self._runner.run_ignoring_errors(["docker", "exec", container, *argv])
