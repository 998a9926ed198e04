import os
from pathlib import Path

import pytest

# Set env vars BEFORE any imports that might load config, so config.yaml
# resolves to predictable values in every test
os.environ.setdefault("DOMAIN_NAME", "test.42.fr")
os.environ.setdefault("STACK_LOGIN", "tester")
os.environ.setdefault("WPSTACK_LOG_LEVEL", "DEBUG")

from wpstack.config import StackConfig, get_config  # noqa: E402
from wpstack.infra.secrets import Credentials  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_config_cache():
    """get_config() is process-wide; drop it between tests."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def stack_config(tmp_path: Path) -> StackConfig:
    """A StackConfig whose host paths live under tmp_path."""
    return StackConfig(
        domain_name="test.42.fr",
        login="tester",
        data_root=str(tmp_path / "data"),
        secrets_dir=str(tmp_path / "secrets"),
    )


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(root_password="r00t-pass", user="wpuser", password="app-pass")


@pytest.fixture
def secrets_dir(tmp_path: Path) -> Path:
    """Directory holding the three credential files."""
    directory = tmp_path / "run-secrets"
    directory.mkdir()
    (directory / "mariadb_root_password").write_text("r00t-pass\n")
    (directory / "mariadb_user").write_text("wpuser\n")
    (directory / "mariadb_password").write_text("app-pass\n")
    return directory
