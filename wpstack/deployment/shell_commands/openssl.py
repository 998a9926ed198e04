"""OpenSSL command abstractions.

This module wraps the two ``openssl`` invocations the stack needs:
creating a self-signed certificate for the edge service and reading a
certificate back for inspection.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class OpenSSLCommands:
    """OpenSSL-related shell commands."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def req_self_signed(
        self,
        *,
        key_path: Path,
        cert_path: Path,
        subject: str,
        days: int = 365,
        key_bits: int = 2048,
    ) -> CommandResult:
        """Generate an unencrypted RSA key and a self-signed X.509 certificate.

        Args:
            key_path: Where to write the private key (PEM)
            cert_path: Where to write the certificate (PEM)
            subject: Distinguished name, e.g. "/C=ES/O=42/CN=example.test"
            days: Validity period in days
            key_bits: RSA key size

        Returns:
            CommandResult with generation status
        """
        return self._runner.run(
            [
                "openssl",
                "req",
                "-x509",
                "-nodes",
                "-days",
                str(days),
                "-newkey",
                f"rsa:{key_bits}",
                "-keyout",
                str(key_path),
                "-out",
                str(cert_path),
                "-subj",
                subject,
            ]
        )

    def x509_text(self, cert_path: Path) -> CommandResult:
        """Dump a certificate in human-readable form (subject, dates, key size)."""
        return self._runner.run(
            [
                "openssl",
                "x509",
                "-in",
                str(cert_path),
                "-noout",
                "-subject",
                "-startdate",
                "-enddate",
                "-text",
                "-nameopt",
                "RFC2253",
            ]
        )
