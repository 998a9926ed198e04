"""Provisioning verification.

Checks that a provisioned server is in the state the bootstrap promises:
exactly one application database, the application user at host ``%``
with all privileges on it, and a root account guarded by the supplied
password.
"""

from __future__ import annotations

from collections.abc import Callable

import pymysql

from wpstack.infra.checks import CheckResult
from wpstack.infra.constants import DEFAULT_CONSTANTS
from wpstack.infra.secrets import Credentials

from .connection import MariaDBConnection, quote_identifier

# (user, password, database) -> connection
ConnectionFactory = Callable[[str, str, str | None], MariaDBConnection]


class ProvisioningVerifier:
    """Runs the database checks of ``wpstack stack test``."""

    def __init__(
        self,
        database: str,
        credentials: Credentials,
        connect: ConnectionFactory,
    ) -> None:
        self._database = database
        self._credentials = credentials
        self._connect = connect

    def verify(self) -> list[CheckResult]:
        root_password = self._credentials.root_password.get_secret_value()
        results = [self._check_login("root login", "root", root_password, None)]
        if not results[0].ok:
            return results

        try:
            with self._connect("root", root_password, None) as conn:
                results.append(self._check_databases(conn))
                results.append(self._check_user(conn))
                results.append(self._check_grants(conn))
        except pymysql.err.MySQLError as e:
            results.append(CheckResult("catalog queries", False, str(e)))
            return results

        results.append(
            self._check_login(
                "application login",
                self._credentials.user,
                self._credentials.password.get_secret_value(),
                self._database,
            )
        )
        return results

    def _check_login(
        self, name: str, user: str, password: str, database: str | None
    ) -> CheckResult:
        ok, message = self._connect(user, password, database).ping()
        return CheckResult(name, ok, message)

    def _check_databases(self, conn: MariaDBConnection) -> CheckResult:
        rows = conn.execute("SELECT SCHEMA_NAME AS name FROM information_schema.SCHEMATA")
        user_dbs = sorted(
            row["name"] for row in rows if row["name"] not in DEFAULT_CONSTANTS.SYSTEM_SCHEMAS
        )
        ok = user_dbs == [self._database]
        return CheckResult("application database", ok, ", ".join(user_dbs) or "none")

    def _check_user(self, conn: MariaDBConnection) -> CheckResult:
        count = conn.scalar(
            "SELECT COUNT(*) FROM mysql.user WHERE User = %s AND Host = '%%'",
            (self._credentials.user,),
        )
        ok = bool(count) and int(count) == 1
        return CheckResult(
            "application user", ok, f"{self._credentials.user}@% x{int(count or 0)}"
        )

    def _check_grants(self, conn: MariaDBConnection) -> CheckResult:
        rows = conn.execute("SHOW GRANTS FOR %s@'%%'", (self._credentials.user,))
        grants = [str(value) for row in rows for value in row.values()]
        target = f"ON {quote_identifier(self._database)}.*"
        ok = any("ALL PRIVILEGES" in g and target in g for g in grants)
        detail = "ALL PRIVILEGES " + target if ok else "; ".join(grants) or "no grants"
        return CheckResult("application privileges", ok, detail)
