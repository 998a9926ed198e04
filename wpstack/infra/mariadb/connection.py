"""MariaDB connection management.

Provides centralized database settings and connection utilities.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pymysql
import pymysql.cursors
from pydantic import BaseModel

from wpstack.config import DatabaseConfig

_IDENTIFIER = re.compile(r"^[A-Za-z0-9_]{1,64}$")

Statement = tuple[str, tuple[Any, ...] | None]


def validate_identifier(name: str) -> str:
    """Return ``name`` unchanged if it is a plain identifier.

    Only [A-Za-z0-9_] is accepted; anything else is rejected rather than
    escaped.

    Raises:
        ValueError: If the name is empty, too long or has other characters
    """
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid identifier: {name!r}")
    return name


def quote_identifier(name: str) -> str:
    """Backtick-quote a database identifier."""
    return f"`{validate_identifier(name)}`"


class DbSettings(BaseModel):
    """Database settings for bootstrap and verification.

    Built from the DatabaseConfig section; paths are resolved to Path.
    """

    data_dir: Path
    run_dir: Path
    log_dir: Path
    socket: Path
    os_user: str
    bind_address: str
    host: str
    port: int
    database: str
    ready_timeout: float
    ready_initial_delay: float
    ready_max_delay: float
    stop_timeout: float

    @classmethod
    def load(cls, db_config: DatabaseConfig) -> DbSettings:
        """Load settings from the stack configuration."""
        return cls(
            data_dir=Path(db_config.data_dir),
            run_dir=Path(db_config.run_dir),
            log_dir=Path(db_config.log_dir),
            socket=Path(db_config.socket),
            os_user=db_config.os_user,
            bind_address=db_config.bind_address,
            host=db_config.host,
            port=db_config.port,
            database=db_config.name,
            ready_timeout=db_config.ready_timeout,
            ready_initial_delay=db_config.ready_initial_delay,
            ready_max_delay=db_config.ready_max_delay,
            stop_timeout=db_config.stop_timeout,
        )


class MariaDBConnection:
    """MariaDB connection manager.

    Uses PyMySQL for database operations. Connects over the unix socket when
    one is given (bootstrap, verification inside the container), over TCP
    otherwise.
    """

    def __init__(
        self,
        *,
        user: str,
        password: str | None = None,
        host: str = "localhost",
        port: int = 3306,
        unix_socket: Path | None = None,
        database: str | None = None,
        connect_timeout: int = 5,
    ) -> None:
        self._user = user
        self._password = password
        self._host = host
        self._port = port
        self._unix_socket = unix_socket
        self._database = database
        self._connect_timeout = connect_timeout
        self._conn: pymysql.connections.Connection | None = None

    def get_params(self) -> dict[str, Any]:
        """Get connection parameters for pymysql.connect()."""
        params: dict[str, Any] = {
            "user": self._user,
            "password": self._password or "",
            "connect_timeout": self._connect_timeout,
            "cursorclass": pymysql.cursors.DictCursor,
            "autocommit": True,
        }
        if self._unix_socket is not None:
            params["unix_socket"] = str(self._unix_socket)
        else:
            params["host"] = self._host
            params["port"] = self._port
        if self._database:
            params["database"] = self._database
        return params

    def ensure_connected(self) -> pymysql.connections.Connection:
        """Ensure a connection exists, creating one if needed."""
        if self._conn is None or not self._conn.open:
            self._conn = pymysql.connect(**self.get_params())
        return self._conn

    def close(self) -> None:
        """Close the current connection if open."""
        if self._conn is not None and self._conn.open:
            self._conn.close()
        self._conn = None

    def ping(self) -> tuple[bool, str]:
        """Test connectivity with a throwaway connection.

        Returns:
            Tuple of (success, message)
        """
        try:
            conn = pymysql.connect(**self.get_params())
        except pymysql.err.MySQLError as e:
            return False, f"Connection failed: {e}"
        except OSError as e:
            return False, f"Connection failed: {e}"
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT VERSION() AS version")
                row = cur.fetchone()
            return True, f"Connected: {row['version']}" if row else "Connected"
        finally:
            conn.close()

    def execute(
        self, sql: str, params: tuple[Any, ...] | None = None
    ) -> list[dict[str, Any]]:
        """Execute SQL and return results as a list of dicts."""
        conn = self.ensure_connected()
        with conn.cursor() as cur:
            cur.execute(sql, params)
            if cur.description:
                return [dict(row) for row in cur.fetchall()]
            return []

    def execute_script(self, statements: Sequence[Statement]) -> None:
        """Execute statements in order on one session, stopping at the first error."""
        conn = self.ensure_connected()
        with conn.cursor() as cur:
            for sql, params in statements:
                cur.execute(sql, params)

    def scalar(self, sql: str, params: tuple[Any, ...] | None = None) -> Any:
        """Execute SQL and return the first column of the first row."""
        result = self.execute(sql, params)
        if result and result[0]:
            return list(result[0].values())[0]
        return None

    def __enter__(self) -> MariaDBConnection:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
