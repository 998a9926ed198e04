"""Tests for the Docker command wrappers."""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from wpstack.deployment.shell_commands import (
    CommandResult,
    CommandRunner,
    DockerCommands,
)


@pytest.fixture
def runner():
    return Mock(spec=CommandRunner)


@pytest.fixture
def docker(runner):
    return DockerCommands(runner)


def test_listing_parses_lines(docker, runner):
    runner.run_ignoring_errors.return_value = CommandResult(
        success=True, stdout="abc\n\ndef\n"
    )

    assert docker.list_container_ids() == ["abc", "def"]
    runner.run_ignoring_errors.assert_called_once_with(["docker", "ps", "-qa"])


def test_builtin_networks_are_skipped(docker, runner):
    runner.run_ignoring_errors.return_value = CommandResult(
        success=True, stdout="bridge\nhost\nnone\ninception\n"
    )

    assert docker.list_network_names() == ["inception"]


def test_bulk_removal_with_nothing_to_remove(docker, runner):
    result = docker.remove_images([])

    assert result.success
    runner.run_ignoring_errors.assert_not_called()


def test_images_are_force_removed(docker, runner):
    docker.remove_images(["i1", "i2"])

    runner.run_ignoring_errors.assert_called_once_with(["docker", "rmi", "-f", "i1", "i2"])


def test_system_prune(docker, runner):
    docker.system_prune()

    runner.run_ignoring_errors.assert_called_once_with(
        ["docker", "system", "prune", "-f", "--volumes"]
    )


def test_inspect_state(docker, runner):
    runner.run_ignoring_errors.return_value = CommandResult(
        success=True, stdout="true|healthy\n"
    )

    state = docker.inspect_state("mariadb")

    assert state is not None
    assert state.running is True
    assert state.health == "healthy"


def test_inspect_state_missing_container(docker, runner):
    runner.run_ignoring_errors.return_value = CommandResult(
        success=False, stderr="No such object: mariadb", returncode=1
    )

    assert docker.inspect_state("mariadb") is None


@patch("subprocess.run", side_effect=FileNotFoundError("docker"))
def test_run_ignoring_errors_without_docker(mock_run):
    result = CommandRunner(Path("/tmp")).run_ignoring_errors(["docker", "ps", "-qa"])

    assert not result.success
    assert result.returncode == 127
    assert result.lines == []


@patch("subprocess.run")
def test_run_ignoring_errors_reports_failure(mock_run):
    mock_run.return_value = subprocess.CompletedProcess(
        args=[], returncode=1, stdout="", stderr="Error: No such container"
    )

    result = CommandRunner(Path("/tmp")).run_ignoring_errors(["docker", "stop", "x"])

    assert not result.success
    assert "No such container" in result.stderr
