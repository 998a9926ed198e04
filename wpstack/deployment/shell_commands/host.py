"""Host filesystem commands that may need elevated privileges.

Bind-mounted data directories end up owned by container users (mysql,
www-data), so plain Python file operations can fail with EPERM. These
helpers try without privileges first and fall back to ``sudo``.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class HostCommands:
    """Directory creation, ownership and removal on the Docker host."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def make_dirs(self, paths: list[Path]) -> CommandResult:
        """Create directories (and parents), escalating with sudo on EPERM."""
        denied: list[Path] = []
        for path in paths:
            try:
                path.mkdir(parents=True, exist_ok=True)
            except PermissionError:
                denied.append(path)
        if not denied:
            return CommandResult(success=True)
        return self._runner.run(["sudo", "mkdir", "-p", *[str(p) for p in denied]])

    def chown_recursive(self, path: Path, owner: str) -> CommandResult:
        """``chown -R owner:owner path``, via sudo."""
        return self._runner.run(["sudo", "chown", "-R", f"{owner}:{owner}", str(path)])

    def clear_directory(self, path: Path) -> CommandResult:
        """Delete the contents of ``path`` but keep the directory itself."""
        if not path.exists():
            return CommandResult(success=True)

        denied: list[Path] = []
        for child in path.iterdir():
            try:
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink()
            except PermissionError:
                denied.append(child)

        if not denied:
            return CommandResult(success=True)
        return self._runner.run(["sudo", "rm", "-rf", *[str(p) for p in denied]])
