"""Tests for first-boot provisioning of the MariaDB data directory."""

import os
import subprocess
from unittest.mock import MagicMock, Mock, patch

import pymysql
import pytest
from pymysql.converters import escape_item

from wpstack.infra.mariadb import (
    BootstrapError,
    BootstrapOutcome,
    EngineNotReadyError,
    MariaDBBootstrapper,
    is_initialized,
    provisioning_statements,
)
from wpstack.infra.secrets import Credentials


@pytest.fixture(autouse=True)
def mock_chown():
    with patch("wpstack.infra.mariadb.bootstrap.subprocess.run") as mock_run:
        mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0)
        yield mock_run


@pytest.fixture
def connection():
    conn = MagicMock()
    conn.__enter__.return_value = conn
    return conn


@pytest.fixture
def server(db_settings):
    """Engine controller whose initializer creates the marker directory."""
    server = Mock()
    server.install_db.side_effect = lambda: (db_settings.data_dir / "mysql").mkdir()
    return server


def _bootstrapper(db_settings, credentials, server, connection) -> MariaDBBootstrapper:
    return MariaDBBootstrapper(
        db_settings, credentials, server=server, connect=Mock(return_value=connection)
    )


class TestProvisioningStatements:
    def test_statement_order_and_parameters(self, credentials):
        statements = provisioning_statements("wordpress", credentials)

        assert [sql for sql, _ in statements] == [
            "ALTER USER 'root'@'localhost' IDENTIFIED BY %s",
            "CREATE DATABASE IF NOT EXISTS `wordpress`",
            "CREATE USER IF NOT EXISTS %s@'%%' IDENTIFIED BY %s",
            "GRANT ALL PRIVILEGES ON `wordpress`.* TO %s@'%%'",
            "FLUSH PRIVILEGES",
        ]
        assert statements[0][1] == ("r00t-pass",)
        assert statements[2][1] == ("wpuser", "app-pass")
        assert statements[3][1] == ("wpuser",)

    @pytest.mark.parametrize(
        "user, literal",
        [("wp-user", "'wp-user'"), ("john.doe", "'john.doe'"), ("o'brien", "'o\\'brien'")],
    )
    def test_user_name_is_bound_as_parameter(self, user, literal):
        creds = Credentials(root_password="x", user=user, password="y")

        statements = provisioning_statements("wordpress", creds)

        sql, params = statements[2]
        assert params == (user, "y")
        rendered = sql % tuple(escape_item(p, "utf8") for p in params)
        assert rendered == f"CREATE USER IF NOT EXISTS {literal}@'%' IDENTIFIED BY 'y'"
        assert statements[3][1] == (user,)

    def test_rejects_overlong_user_name(self):
        with pytest.raises(ValueError):
            Credentials(root_password="x", user="u" * 81, password="y")

    def test_rejects_unsafe_database_name(self, credentials):
        with pytest.raises(ValueError):
            provisioning_statements("word`press", credentials)


class TestBootstrapRun:
    def test_fresh_directory_is_provisioned(
        self, db_settings, credentials, server, connection
    ):
        bootstrapper = _bootstrapper(db_settings, credentials, server, connection)

        outcome = bootstrapper.run()

        assert outcome is BootstrapOutcome.PROVISIONED
        assert is_initialized(db_settings.data_dir)
        server.install_db.assert_called_once_with()
        server.wait_until_ready.assert_called_once()
        connection.execute_script.assert_called_once_with(
            provisioning_statements("wordpress", credentials)
        )
        server.stop.assert_called_once_with(server.start_background.return_value)

    def test_initialized_directory_is_skipped(
        self, db_settings, credentials, server, connection
    ):
        (db_settings.data_dir / "mysql").mkdir(parents=True)
        connect = Mock(return_value=connection)
        bootstrapper = MariaDBBootstrapper(
            db_settings, credentials, server=server, connect=connect
        )

        outcome = bootstrapper.run()

        assert outcome is BootstrapOutcome.SKIPPED
        server.install_db.assert_not_called()
        server.start_background.assert_not_called()
        connect.assert_not_called()

    def test_second_run_has_no_side_effects(
        self, db_settings, credentials, server, connection
    ):
        bootstrapper = _bootstrapper(db_settings, credentials, server, connection)

        assert bootstrapper.run() is BootstrapOutcome.PROVISIONED
        assert bootstrapper.run() is BootstrapOutcome.SKIPPED

        assert server.install_db.call_count == 1
        assert connection.execute_script.call_count == 1

    def test_directories_prepared_on_every_start(
        self, db_settings, credentials, server, connection, mock_chown
    ):
        (db_settings.data_dir / "mysql").mkdir(parents=True)

        _bootstrapper(db_settings, credentials, server, connection).run()

        assert db_settings.run_dir.is_dir()
        assert db_settings.log_dir.is_dir()
        argv = mock_chown.call_args.args[0]
        assert argv[:3] == ["chown", "-R", "mysql:mysql"]
        assert str(db_settings.data_dir) in argv

    def test_chown_failure_is_fatal(
        self, db_settings, credentials, server, connection, mock_chown
    ):
        mock_chown.side_effect = subprocess.CalledProcessError(1, ["chown"])

        with pytest.raises(BootstrapError, match="ownership"):
            _bootstrapper(db_settings, credentials, server, connection).run()

        server.install_db.assert_not_called()

    def test_invalid_database_name_fails_before_initializing(
        self, db_settings, credentials, server, connection
    ):
        settings = db_settings.model_copy(update={"database": "word-press"})
        bootstrapper = _bootstrapper(settings, credentials, server, connection)

        with pytest.raises(ValueError):
            bootstrapper.run()

        server.install_db.assert_not_called()
        server.start_background.assert_not_called()

    def test_rejected_statement_rolls_back(
        self, db_settings, credentials, server, connection
    ):
        db_settings.data_dir.mkdir(parents=True)
        (db_settings.data_dir / "lost+found").mkdir()
        connection.execute_script.side_effect = pymysql.err.OperationalError(
            1045, "Access denied"
        )
        bootstrapper = _bootstrapper(db_settings, credentials, server, connection)

        with pytest.raises(BootstrapError, match="rejected"):
            bootstrapper.run()

        assert not is_initialized(db_settings.data_dir)
        assert (db_settings.data_dir / "lost+found").is_dir()
        server.stop.assert_called_once()

    def test_engine_not_ready_rolls_back(
        self, db_settings, credentials, server, connection
    ):
        server.wait_until_ready.side_effect = EngineNotReadyError("timeout")
        bootstrapper = _bootstrapper(db_settings, credentials, server, connection)

        with pytest.raises(EngineNotReadyError):
            bootstrapper.run()

        connection.execute_script.assert_not_called()
        server.stop.assert_called_once()
        assert not is_initialized(db_settings.data_dir)

    def test_stop_failure_after_error_keeps_original_error(
        self, db_settings, credentials, server, connection
    ):
        server.wait_until_ready.side_effect = EngineNotReadyError("timeout")
        server.stop.side_effect = BootstrapError("killed")

        with pytest.raises(EngineNotReadyError):
            _bootstrapper(db_settings, credentials, server, connection).run()

    def test_credentials_never_reach_environment(
        self, db_settings, credentials, server, connection
    ):
        before = dict(os.environ)

        _bootstrapper(db_settings, credentials, server, connection).run()

        assert dict(os.environ) == before
        assert "r00t-pass" not in os.environ.values()
        _, kwargs = server.start_background.call_args
        assert "env" not in kwargs


def test_handoff_execs_foreground_engine(db_settings, credentials, server, connection):
    _bootstrapper(db_settings, credentials, server, connection).handoff()

    server.exec_foreground.assert_called_once_with()


def test_default_connection_uses_socket_as_root(db_settings, credentials):
    bootstrapper = MariaDBBootstrapper(db_settings, credentials, server=Mock())

    params = bootstrapper._socket_connection().get_params()

    assert params["user"] == "root"
    assert params["password"] == ""
    assert params["unix_socket"] == str(db_settings.socket)
    assert "host" not in params
