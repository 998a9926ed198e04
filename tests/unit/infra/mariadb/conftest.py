from pathlib import Path

import pytest

from wpstack.config import DatabaseConfig
from wpstack.infra.mariadb import DbSettings


@pytest.fixture
def db_settings(tmp_path: Path) -> DbSettings:
    """DbSettings whose engine directories live under tmp_path."""
    return DbSettings.load(
        DatabaseConfig(
            data_dir=str(tmp_path / "lib" / "mysql"),
            run_dir=str(tmp_path / "run" / "mysqld"),
            log_dir=str(tmp_path / "log" / "mysql"),
            socket=str(tmp_path / "run" / "mysqld" / "mysqld.sock"),
            ready_timeout=5,
            stop_timeout=2,
        )
    )
