"""Container health monitoring."""

from __future__ import annotations

import time
from collections.abc import Callable

from wpstack.utils.retry import wait_for_condition

from .shell_commands import DockerCommands


class HealthChecker:
    """Polls container state until services report healthy or running."""

    def __init__(
        self,
        docker: DockerCommands,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._docker = docker
        self._sleep = sleep

    def check_container_health(self, container: str) -> tuple[bool, str | None]:
        """Check whether a container is up.

        Containers with a health check must report "healthy"; containers
        without one only have to be running.

        Returns:
            Tuple of (is_healthy, status) where status is the health status,
            "no-healthcheck", "exited", or None if the container is missing
        """
        state = self._docker.inspect_state(container)
        if state is None:
            return False, None
        if not state.running:
            return False, "exited"
        if state.health == "no-healthcheck":
            return True, state.health
        return state.health == "healthy", state.health

    def wait_for_condition(
        self,
        check: Callable[[], bool],
        *,
        timeout: float = 90,
        interval: float = 3,
    ) -> bool:
        """Poll ``check`` every ``interval`` seconds for up to ``timeout``."""
        return wait_for_condition(
            check,
            timeout=timeout,
            initial_delay=interval,
            max_delay=interval,
            backoff=1.0,
            sleep=self._sleep,
        )
