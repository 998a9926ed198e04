"""Secret file handling.

Credentials live in flat files, one value per file. On the host they sit
under ``infra/secrets``; Compose mounts them read-only at ``/run/secrets``.
They are read on demand and never copied into the process environment.
"""

from __future__ import annotations

import os
import secrets
import string
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, SecretStr, field_validator

from wpstack.config import DatabaseConfig

# Anything larger is not a password
MAX_SECRET_SIZE = 4096

# Longest user name the engine accepts
MAX_USER_NAME_LENGTH = 80

_PASSWORD_ALPHABET = string.ascii_letters + string.digits


class SecretFileError(Exception):
    """Raised when a secret file is missing, unreadable or empty."""


class Credentials(BaseModel):
    """The three database credentials the stack needs.

    Passwords are SecretStr so they never show up in reprs or logs.
    """

    root_password: SecretStr
    user: str
    password: SecretStr

    @field_validator("user")
    @classmethod
    def _check_user(cls, value: str) -> str:
        return validate_user_name(value)


def validate_user_name(name: str) -> str:
    """Reject user names the engine would refuse.

    Any other character is fine: the name is always bound as a query
    parameter, never spliced into SQL.

    Raises:
        ValueError: If the name is empty or longer than the engine allows
    """
    if not name:
        raise ValueError("Database user name is empty")
    if len(name) > MAX_USER_NAME_LENGTH:
        raise ValueError(
            f"Database user name is longer than {MAX_USER_NAME_LENGTH} characters"
        )
    return name


def read_secret(path: Path) -> str:
    """Read one secret value, dropping trailing line breaks.

    Raises:
        SecretFileError: If the file is missing, too large, unreadable or empty
    """
    try:
        size = path.stat().st_size
    except FileNotFoundError as exc:
        raise SecretFileError(f"Secret file not found: {path}") from exc
    except OSError as exc:
        raise SecretFileError(f"Unable to stat secret file {path}: {exc}") from exc

    if size > MAX_SECRET_SIZE:
        raise SecretFileError(
            f"Secret file {path.name} is too large ({size} bytes, max {MAX_SECRET_SIZE})"
        )

    try:
        value = path.read_text(encoding="utf-8").rstrip("\r\n")
    except OSError as exc:
        raise SecretFileError(f"Unable to read secret file {path}: {exc}") from exc

    if not value:
        raise SecretFileError(f"Secret file {path.name} is empty")

    logger.debug(f"Read secret {path.name} ({len(value)} bytes)")
    return value


def secret_paths(secrets_dir: Path, db: DatabaseConfig) -> dict[str, Path]:
    """Map each credential role to its file under ``secrets_dir``."""
    return {
        "root_password": secrets_dir / db.root_password_secret,
        "user": secrets_dir / db.user_secret,
        "password": secrets_dir / db.password_secret,
    }


def read_credentials(secrets_dir: Path, db: DatabaseConfig) -> Credentials:
    """Read the root password, app user and app password files."""
    paths = secret_paths(secrets_dir, db)
    user = read_secret(paths["user"])
    try:
        validate_user_name(user)
    except ValueError as exc:
        raise SecretFileError(f"{paths['user'].name}: {exc}") from exc
    return Credentials(
        root_password=SecretStr(read_secret(paths["root_password"])),
        user=user,
        password=SecretStr(read_secret(paths["password"])),
    )


def generate_password(length: int = 24) -> str:
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


def write_secret(path: Path, value: str) -> None:
    """Write a secret file readable by its owner only."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(value + "\n")
