"""CLI context and dependency container."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import click
import typer

from wpstack.cli.shared.console import CLIConsole, console
from wpstack.config import StackConfig, get_config
from wpstack.deployment.shell_commands import ShellCommands
from wpstack.infra.constants import StackPaths
from wpstack.utils.paths import get_project_root


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    project_root: Path
    commands: ShellCommands
    config: StackConfig
    paths: StackPaths


def build_cli_context() -> CLIContext:
    """Build a fresh CLIContext."""
    project_root = get_project_root()
    config = get_config()

    return CLIContext(
        console=console,
        project_root=project_root,
        commands=ShellCommands(project_root),
        config=config,
        paths=StackPaths(project_root, config),
    )


def get_cli_context(ctx: typer.Context | None = None) -> CLIContext:
    """Return the CLIContext from Typer, falling back to a new instance."""
    context = ctx or click.get_current_context(silent=True)
    if context and isinstance(context.obj, CLIContext):
        return context.obj
    return build_cli_context()
