"""Connectivity smoke tests for a running stack.

Checks, in order:

- every service container is running
- nginx can open a TCP connection to the PHP-FPM port of wordpress
- wordpress can open a TCP connection to the MariaDB port
- HTTPS on the domain answers with the application (2xx/3xx)
- plain HTTP on the domain answers with a permanent redirect to HTTPS
"""

from __future__ import annotations

import socket

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from wpstack.config import StackConfig
from wpstack.deployment.shell_commands import DockerCommands
from wpstack.infra.checks import CheckResult

REQUEST_TIMEOUT = 10


def probe_tcp(host: str, port: int, timeout: float = 3.0) -> tuple[bool, str]:
    """Try to open a TCP connection.

    Runs inside the containers (``wpstack entrypoint probe``), where it
    stands in for ``nc -z``.
    """
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True, f"{host}:{port} reachable"
    except OSError as e:
        return False, f"{host}:{port} unreachable: {e}"


class ConnectivityChecker:
    """Runs the smoke tests of ``wpstack stack test``."""

    def __init__(
        self,
        config: StackConfig,
        docker: DockerCommands,
        *,
        session: requests.Session | None = None,
        target: str | None = None,
    ) -> None:
        """Initialize the checker.

        Args:
            config: Stack configuration
            docker: Docker commands used for container state and probes
            session: HTTP session (a fresh one if omitted)
            target: Host or IP to connect to instead of the domain. The
                    request still carries the domain in its Host header,
                    for hosts where the domain does not resolve yet.
        """
        self._config = config
        self._docker = docker
        self._session = session or requests.Session()
        self._target = target

    def run(self) -> list[CheckResult]:
        results = [self._check_container(name) for name in self._services()]
        results.append(
            self._check_link(
                self._config.edge.service,
                self._config.edge.upstream_host,
                self._config.edge.upstream_port,
            )
        )
        results.append(
            self._check_link(
                self._config.app.service,
                self._config.database.host,
                self._config.database.port,
            )
        )
        urllib3.disable_warnings(InsecureRequestWarning)
        results.append(self._check_https())
        results.append(self._check_redirect())
        return results

    def _services(self) -> list[str]:
        c = self._config
        return [c.database.service, c.app.service, c.edge.service]

    def _check_container(self, name: str) -> CheckResult:
        state = self._docker.inspect_state(name)
        if state is None:
            return CheckResult(f"{name} container", False, "not found")
        if not state.running:
            return CheckResult(f"{name} container", False, "not running")
        return CheckResult(f"{name} container", True, state.health)

    def _check_link(self, container: str, host: str, port: int) -> CheckResult:
        result = self._docker.exec(
            container, ["wpstack", "entrypoint", "probe", host, str(port)]
        )
        detail = (result.stdout or result.stderr).strip()
        return CheckResult(f"{container} → {host}:{port}", result.success, detail)

    def _url(self, scheme: str) -> str:
        return f"{scheme}://{self._target or self._config.domain_name}/"

    def _get(self, url: str) -> requests.Response:
        return self._session.get(
            url,
            headers={"Host": self._config.domain_name},
            timeout=REQUEST_TIMEOUT,
            allow_redirects=False,
            # The edge certificate is self-signed
            verify=False,
        )

    def _check_https(self) -> CheckResult:
        url = self._url("https")
        try:
            response = self._get(url)
        except requests.RequestException as e:
            return CheckResult("HTTPS landing page", False, str(e))
        ok = 200 <= response.status_code < 400
        return CheckResult("HTTPS landing page", ok, f"{url} → {response.status_code}")

    def _check_redirect(self) -> CheckResult:
        url = self._url("http")
        try:
            response = self._get(url)
        except requests.RequestException as e:
            return CheckResult("HTTP → HTTPS redirect", False, str(e))
        location = response.headers.get("Location", "")
        expected = f"https://{self._config.domain_name}"
        ok = response.status_code == 301 and location.startswith(expected)
        return CheckResult(
            "HTTP → HTTPS redirect",
            ok,
            f"{response.status_code} Location: {location or '-'}",
        )
