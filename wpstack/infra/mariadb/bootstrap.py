"""First-boot provisioning of the MariaDB data volume.

The procedure runs once per data directory:

1. Initialize the system tables (skipping the test database).
2. Start a temporary engine and poll until it accepts local connections.
3. In one administrative session: set the root password, create the
   application database and user, grant the user full privileges on the
   database, reload the grant tables.
4. Stop the temporary engine and wait for it to exit.

Whether a data directory is already initialized is decided by the
``mysql`` subdirectory the initializer creates. The check runs once at
start-up without locking; Compose runs a single database container per
volume.

After provisioning (or straight away when it is skipped) the caller hands
off to the foreground engine with ``MariaDBBootstrapper.handoff``.
"""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable
from enum import StrEnum
from pathlib import Path
from typing import NoReturn

import pymysql
from loguru import logger

from wpstack.infra.constants import DEFAULT_CONSTANTS
from wpstack.infra.secrets import Credentials

from .connection import (
    DbSettings,
    MariaDBConnection,
    Statement,
    quote_identifier,
)
from .errors import BootstrapError
from .server import MariaDBServer


class BootstrapOutcome(StrEnum):
    PROVISIONED = "provisioned"
    SKIPPED = "skipped"


def is_initialized(data_dir: Path) -> bool:
    """True when the engine has already initialized ``data_dir``."""
    return (data_dir / DEFAULT_CONSTANTS.MARKER_DIR).is_dir()


def provisioning_statements(database: str, credentials: Credentials) -> list[Statement]:
    """Build the administrative statements for a fresh data directory.

    Every statement is idempotent, so replaying them against a provisioned
    server changes nothing but the passwords. Only the database name is
    spliced in as an identifier; the user name and passwords are parameters.
    """
    db = quote_identifier(database)
    user = credentials.user
    return [
        (
            "ALTER USER 'root'@'localhost' IDENTIFIED BY %s",
            (credentials.root_password.get_secret_value(),),
        ),
        (f"CREATE DATABASE IF NOT EXISTS {db}", None),
        (
            "CREATE USER IF NOT EXISTS %s@'%%' IDENTIFIED BY %s",
            (user, credentials.password.get_secret_value()),
        ),
        (f"GRANT ALL PRIVILEGES ON {db}.* TO %s@'%%'", (user,)),
        ("FLUSH PRIVILEGES", None),
    ]


class MariaDBBootstrapper:
    """Brings a data directory from empty to provisioned, exactly once."""

    def __init__(
        self,
        settings: DbSettings,
        credentials: Credentials,
        *,
        server: MariaDBServer | None = None,
        connect: Callable[[], MariaDBConnection] | None = None,
    ) -> None:
        """Initialize the bootstrapper.

        Args:
            settings: Paths, OS user and readiness parameters
            credentials: Root password and application user credentials
            server: Engine process controller (built from settings if omitted)
            connect: Factory for the administrative session. Defaults to root
                     over the unix socket with no password, which is how a
                     freshly initialized server accepts the container's root.
        """
        self._settings = settings
        self._credentials = credentials
        self._server = server or MariaDBServer(settings)
        self._connect = connect or self._socket_connection

    def _socket_connection(self) -> MariaDBConnection:
        return MariaDBConnection(user="root", unix_socket=self._settings.socket)

    def prepare_directories(self) -> None:
        """Create and hand the data, run and log directories to the engine user.

        Runs before every start; repeating it is harmless.

        Raises:
            BootstrapError: If ownership cannot be changed
        """
        s = self._settings
        dirs = [s.data_dir, s.run_dir, s.log_dir]
        for path in dirs:
            path.mkdir(parents=True, exist_ok=True)
        try:
            subprocess.run(
                ["chown", "-R", f"{s.os_user}:{s.os_user}", *[str(d) for d in dirs]],
                check=True,
                capture_output=True,
                text=True,
            )
        except (OSError, subprocess.CalledProcessError) as e:
            raise BootstrapError(f"Unable to set ownership of MariaDB directories: {e}") from e

    def run(self) -> BootstrapOutcome:
        """Provision the data directory if it has not been initialized yet.

        Returns:
            PROVISIONED after a first-boot run, SKIPPED otherwise

        Raises:
            BootstrapError: If any provisioning step fails. The temporary
                engine is stopped and whatever the initializer wrote is
                removed, so the next container start retries from scratch.
            ValueError: If the configured database name is not a plain
                identifier. Raised before anything is written.
        """
        self.prepare_directories()

        data_dir = self._settings.data_dir
        if is_initialized(data_dir):
            logger.info(f"Data directory {data_dir} already initialized; skipping provisioning")
            return BootstrapOutcome.SKIPPED

        statements = provisioning_statements(self._settings.database, self._credentials)
        preexisting = {p.name for p in data_dir.iterdir()}
        try:
            self._provision(statements)
        except BaseException:
            self._rollback(preexisting)
            raise

        logger.success("Database and application user provisioned")
        return BootstrapOutcome.PROVISIONED

    def _provision(self, statements: list[Statement]) -> None:
        self._server.install_db()

        process = self._server.start_background()
        try:
            self._server.wait_until_ready(process, self._probe)
            self._apply_statements(statements)
        except BaseException:
            try:
                self._server.stop(process)
            except BootstrapError as stop_error:
                logger.warning(str(stop_error))
            raise
        self._server.stop(process)

    def _probe(self) -> bool:
        ok, message = self._connect().ping()
        if not ok:
            logger.debug(message)
        return ok

    def _apply_statements(self, statements: list[Statement]) -> None:
        logger.info(
            f"Creating database {self._settings.database} and user {self._credentials.user}"
        )
        try:
            with self._connect() as conn:
                conn.execute_script(statements)
        except pymysql.err.MySQLError as e:
            raise BootstrapError(f"Provisioning statement rejected: {e}") from e
        except OSError as e:
            raise BootstrapError(f"Lost connection to MariaDB during provisioning: {e}") from e

    def _rollback(self, preexisting: set[str]) -> None:
        """Remove what a failed run added to the data directory."""
        data_dir = self._settings.data_dir
        for entry in data_dir.iterdir():
            if entry.name in preexisting:
                continue
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry, ignore_errors=True)
            else:
                entry.unlink(missing_ok=True)
        logger.warning(f"Rolled back partial initialization of {data_dir}")

    def handoff(self) -> NoReturn:
        """Replace this process with the foreground engine."""
        self._server.exec_foreground()
