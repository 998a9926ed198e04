"""MariaDB engine process control.

Wraps the server binaries used during bootstrap: data directory
initialization, a temporary background engine for provisioning, and the
argv of the long-lived foreground engine.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import time
from collections.abc import Callable
from typing import NoReturn

from loguru import logger

from wpstack.utils.retry import wait_for_condition

from .connection import DbSettings
from .errors import BootstrapError, EngineNotReadyError

INSTALL_DB_BINARIES = ("mariadb-install-db", "mysql_install_db")
SERVER_BINARIES = ("mariadbd", "mysqld")


def _find_binary(candidates: tuple[str, ...]) -> str:
    """Return the first candidate on PATH, or the last one as a fallback."""
    for name in candidates:
        if shutil.which(name):
            return name
    return candidates[-1]


class MariaDBServer:
    """Controls the MariaDB server binaries for one data directory."""

    def __init__(
        self,
        settings: DbSettings,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings
        self._sleep = sleep
        self._clock = clock

    def server_argv(self) -> list[str]:
        s = self._settings
        return [
            _find_binary(SERVER_BINARIES),
            f"--user={s.os_user}",
            f"--datadir={s.data_dir}",
            f"--bind-address={s.bind_address}",
        ]

    def install_db(self) -> None:
        """Initialize the system tables in an empty data directory.

        Raises:
            BootstrapError: If the initializer is missing or exits non-zero
        """
        s = self._settings
        cmd = [
            _find_binary(INSTALL_DB_BINARIES),
            f"--user={s.os_user}",
            f"--datadir={s.data_dir}",
            "--skip-test-db",
        ]
        logger.info(f"Initializing data directory {s.data_dir}")
        try:
            subprocess.run(cmd, check=True, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise BootstrapError(f"Data directory initializer not found: {cmd[0]}") from e
        except subprocess.CalledProcessError as e:
            raise BootstrapError(
                f"{cmd[0]} exited with status {e.returncode}: {(e.stderr or '').strip()}"
            ) from e

    def start_background(self) -> subprocess.Popen[bytes]:
        """Start a temporary engine used only for provisioning.

        Raises:
            BootstrapError: If the server binary cannot be executed
        """
        argv = self.server_argv()
        logger.info("Starting temporary MariaDB engine")
        try:
            return subprocess.Popen(argv)
        except OSError as e:
            raise BootstrapError(f"Unable to start {argv[0]}: {e}") from e

    def wait_until_ready(
        self, process: subprocess.Popen[bytes], probe: Callable[[], bool]
    ) -> None:
        """Poll ``probe`` with bounded backoff until the engine answers.

        Raises:
            EngineNotReadyError: If the engine exits or the deadline passes
        """
        s = self._settings
        ready = wait_for_condition(
            probe,
            timeout=s.ready_timeout,
            initial_delay=s.ready_initial_delay,
            max_delay=s.ready_max_delay,
            abort=lambda: process.poll() is not None,
            sleep=self._sleep,
            clock=self._clock,
        )
        if ready:
            logger.info("Temporary MariaDB engine is accepting connections")
            return

        if process.poll() is not None:
            raise EngineNotReadyError(
                f"MariaDB exited with status {process.returncode} before accepting connections"
            )
        raise EngineNotReadyError(
            f"MariaDB did not accept connections within {s.ready_timeout:g}s"
        )

    def stop(self, process: subprocess.Popen[bytes]) -> None:
        """Terminate the temporary engine and wait for it to exit.

        A clean shutdown gets ``stop_timeout`` seconds; after that the
        process is killed.

        Raises:
            BootstrapError: If the engine had to be killed
        """
        if process.poll() is not None:
            return

        process.terminate()
        try:
            process.wait(timeout=self._settings.stop_timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
            raise BootstrapError(
                "Temporary MariaDB engine did not shut down cleanly and was killed"
            ) from None
        logger.info("Temporary MariaDB engine stopped")

    def exec_foreground(self) -> NoReturn:
        """Replace the current process with the long-lived engine."""
        argv = self.server_argv()
        logger.info("Handing off to MariaDB")
        os.execvp(argv[0], argv)
