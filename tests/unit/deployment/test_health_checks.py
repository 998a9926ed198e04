"""Tests for container health monitoring."""

from unittest.mock import Mock

import pytest

from wpstack.deployment.health_checks import HealthChecker
from wpstack.deployment.shell_commands import ContainerState, DockerCommands


@pytest.fixture
def docker():
    return Mock(spec=DockerCommands)


@pytest.mark.parametrize(
    "state, expected",
    [
        (None, (False, None)),
        (ContainerState("nginx", running=False, health="no-healthcheck"), (False, "exited")),
        (ContainerState("nginx", running=True, health="no-healthcheck"), (True, "no-healthcheck")),
        (ContainerState("nginx", running=True, health="starting"), (False, "starting")),
        (ContainerState("nginx", running=True, health="healthy"), (True, "healthy")),
    ],
)
def test_check_container_health(docker, state, expected):
    docker.inspect_state.return_value = state

    assert HealthChecker(docker).check_container_health("nginx") == expected


def test_wait_for_condition_uses_fixed_interval(docker):
    sleeps = []
    checker = HealthChecker(docker, sleep=sleeps.append)
    answers = iter([False, False, True])

    assert checker.wait_for_condition(lambda: next(answers), timeout=60, interval=3)
    assert sleeps == [3, 3]
