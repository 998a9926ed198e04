"""Tests for edge certificate generation and inspection."""

import stat
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import Mock

import pytest

from wpstack.config import CertificateConfig
from wpstack.deployment.errors import DeploymentError
from wpstack.deployment.shell_commands import CommandResult, CommandRunner, OpenSSLCommands
from wpstack.infra.certs import CertificateManager, parse_certificate_text

X509_TEXT = """\
subject=CN=test.42.fr,OU=student,O=42,L=Madrid,ST=Madrid,C=ES
notBefore=Oct 18 09:30:00 2026 GMT
notAfter=Oct 18 09:30:00 2027 GMT
Certificate:
    Data:
        Version: 3 (0x2)
        Subject Public Key Info:
            Public Key Algorithm: rsaEncryption
                Public-Key: (2048 bit)
"""


def _write_key_and_cert(**kwargs) -> CommandResult:
    kwargs["key_path"].write_text("KEY")
    kwargs["cert_path"].write_text("CERT")
    return CommandResult(success=True)


@pytest.fixture
def openssl():
    openssl = Mock(spec=OpenSSLCommands)
    openssl.req_self_signed.side_effect = _write_key_and_cert
    return openssl


@pytest.fixture
def manager(openssl):
    return CertificateManager(openssl, CertificateConfig())


def test_req_self_signed_argv(tmp_path: Path):
    runner = Mock(spec=CommandRunner)

    OpenSSLCommands(runner).req_self_signed(
        key_path=tmp_path / "k",
        cert_path=tmp_path / "c",
        subject="/CN=test.42.fr",
        days=365,
        key_bits=2048,
    )

    argv = runner.run.call_args.args[0]
    assert argv[:4] == ["openssl", "req", "-x509", "-nodes"]
    assert argv[argv.index("-days") + 1] == "365"
    assert argv[argv.index("-newkey") + 1] == "rsa:2048"
    assert argv[argv.index("-subj") + 1] == "/CN=test.42.fr"


def test_generate_uses_domain_as_common_name(manager, openssl, tmp_path: Path):
    cert, key = tmp_path / "ssl" / "nginx.crt", tmp_path / "ssl" / "nginx.key"

    manager.generate("test.42.fr", cert, key)

    kwargs = openssl.req_self_signed.call_args.kwargs
    assert kwargs["subject"] == "/C=ES/ST=Madrid/L=Madrid/O=42/OU=student/CN=test.42.fr"
    assert kwargs["days"] == 365
    assert kwargs["key_bits"] == 2048
    assert stat.S_IMODE(key.stat().st_mode) == 0o600


@pytest.mark.parametrize("domain", ["", "a/b", "a,b", "x y", "CN=x"])
def test_generate_rejects_bad_domain(manager, openssl, tmp_path: Path, domain):
    with pytest.raises(DeploymentError):
        manager.generate(domain, tmp_path / "c", tmp_path / "k")

    openssl.req_self_signed.assert_not_called()


def test_generate_failure(manager, openssl, tmp_path: Path):
    openssl.req_self_signed.side_effect = None
    openssl.req_self_signed.return_value = CommandResult(
        success=False, stderr="bad subject", returncode=1
    )

    with pytest.raises(DeploymentError) as excinfo:
        manager.generate("test.42.fr", tmp_path / "c", tmp_path / "k")

    assert excinfo.value.details == "bad subject"


def test_generate_without_openssl(manager, openssl, tmp_path: Path):
    openssl.req_self_signed.side_effect = FileNotFoundError("openssl")

    with pytest.raises(DeploymentError, match="openssl not found"):
        manager.generate("test.42.fr", tmp_path / "c", tmp_path / "k")


def test_parse_certificate_text():
    info = parse_certificate_text(X509_TEXT)

    assert info.common_name == "test.42.fr"
    assert info.key_bits == 2048
    assert info.not_before == datetime(2026, 10, 18, 9, 30, tzinfo=UTC)
    assert info.validity_days == 365


def test_parse_certificate_text_oneline_subject():
    text = X509_TEXT.replace(
        "subject=CN=test.42.fr,OU=student,O=42,L=Madrid,ST=Madrid,C=ES",
        "subject=C = ES, ST = Madrid, L = Madrid, O = 42, OU = student, CN = test.42.fr",
    )

    assert parse_certificate_text(text).common_name == "test.42.fr"


def test_parse_certificate_text_garbage():
    with pytest.raises(ValueError):
        parse_certificate_text("not a certificate")


def test_inspect(manager, openssl, tmp_path: Path):
    cert = tmp_path / "nginx.crt"
    cert.write_text("CERT")
    openssl.x509_text.return_value = CommandResult(success=True, stdout=X509_TEXT)

    info = manager.inspect(cert)

    assert info.common_name == "test.42.fr"
    openssl.x509_text.assert_called_once_with(cert)


def test_inspect_missing_file(manager, tmp_path: Path):
    with pytest.raises(DeploymentError, match="not found"):
        manager.inspect(tmp_path / "absent.crt")
