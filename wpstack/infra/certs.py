"""Self-signed TLS certificate for the edge service.

Certificates are produced by the system ``openssl`` binary and written to
the host ``ssl`` data directory, which Compose mounts read-only into the
nginx container.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from loguru import logger

from wpstack.config import CertificateConfig
from wpstack.deployment.errors import DeploymentError
from wpstack.deployment.shell_commands import OpenSSLCommands

_OPENSSL_DATE = "%b %d %H:%M:%S %Y %Z"
_CN = re.compile(r"CN\s*=\s*([^,/\n]+)")
_NOT_BEFORE = re.compile(r"^notBefore=(.+)$", re.MULTILINE)
_NOT_AFTER = re.compile(r"^notAfter=(.+)$", re.MULTILINE)
_KEY_BITS = re.compile(r"Public-Key:\s*\((\d+) bit\)")


@dataclass(frozen=True)
class CertificateInfo:
    """What ``openssl x509`` reports about a certificate."""

    common_name: str
    key_bits: int
    not_before: datetime
    not_after: datetime

    @property
    def validity_days(self) -> int:
        return (self.not_after - self.not_before).days


def _parse_openssl_date(value: str) -> datetime:
    return datetime.strptime(value.strip(), _OPENSSL_DATE).replace(tzinfo=UTC)


def parse_certificate_text(text: str) -> CertificateInfo:
    """Parse the output of ``openssl x509 -noout -subject -startdate -enddate -text``.

    Raises:
        ValueError: If any of the expected fields is missing
    """
    subject_line = next(
        (line for line in text.splitlines() if line.startswith("subject=")), ""
    )
    cn = _CN.search(subject_line)
    not_before = _NOT_BEFORE.search(text)
    not_after = _NOT_AFTER.search(text)
    bits = _KEY_BITS.search(text)
    if not (cn and not_before and not_after and bits):
        raise ValueError("Unrecognized openssl x509 output")

    return CertificateInfo(
        common_name=cn.group(1).strip(),
        key_bits=int(bits.group(1)),
        not_before=_parse_openssl_date(not_before.group(1)),
        not_after=_parse_openssl_date(not_after.group(1)),
    )


class CertificateManager:
    """Generates and inspects the edge certificate."""

    def __init__(self, openssl: OpenSSLCommands, settings: CertificateConfig) -> None:
        self._openssl = openssl
        self._settings = settings

    def generate(self, domain: str, cert_path: Path, key_path: Path) -> None:
        """Create a new key pair and self-signed certificate for ``domain``.

        Existing files are overwritten.

        Raises:
            DeploymentError: If openssl is missing or fails
        """
        if not domain or any(c in domain for c in "/,= "):
            raise DeploymentError(f"Invalid domain name for certificate: {domain!r}")

        cert_path.parent.mkdir(parents=True, exist_ok=True)
        key_path.parent.mkdir(parents=True, exist_ok=True)

        s = self._settings
        try:
            result = self._openssl.req_self_signed(
                key_path=key_path,
                cert_path=cert_path,
                subject=s.subject(domain),
                days=s.days,
                key_bits=s.key_bits,
            )
        except FileNotFoundError as e:
            raise DeploymentError(
                "openssl not found", "Install OpenSSL on the host to generate certificates."
            ) from e

        if not result.success:
            raise DeploymentError(
                f"Certificate generation failed for {domain}", result.stderr.strip() or None
            )

        key_path.chmod(0o600)
        logger.debug(f"Wrote certificate {cert_path} and key {key_path}")

    def inspect(self, cert_path: Path) -> CertificateInfo:
        """Read back subject, key size and validity of a certificate.

        Raises:
            DeploymentError: If the file is missing or cannot be parsed
        """
        if not cert_path.exists():
            raise DeploymentError(f"Certificate not found: {cert_path}")

        result = self._openssl.x509_text(cert_path)
        if not result.success:
            raise DeploymentError(
                f"Unable to read certificate {cert_path}", result.stderr.strip() or None
            )
        try:
            return parse_certificate_text(result.stdout)
        except ValueError as e:
            raise DeploymentError(f"Unable to parse certificate {cert_path}", str(e)) from e
