"""Tests for MariaDB engine process control."""

import subprocess
from unittest.mock import Mock, patch

import pytest

from wpstack.infra.mariadb import BootstrapError, EngineNotReadyError, MariaDBServer


def _which(name: str) -> str | None:
    return f"/usr/bin/{name}" if name.startswith("mariadb") else None


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def mock_which():
    with patch("wpstack.infra.mariadb.server.shutil.which", side_effect=_which):
        yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def server(db_settings, clock):
    return MariaDBServer(db_settings, sleep=clock.sleep, clock=clock)


def test_server_argv(server, db_settings):
    assert server.server_argv() == [
        "mariadbd",
        "--user=mysql",
        f"--datadir={db_settings.data_dir}",
        "--bind-address=0.0.0.0",
    ]


def test_falls_back_to_mysql_binary_names(db_settings):
    with patch("wpstack.infra.mariadb.server.shutil.which", return_value=None):
        assert MariaDBServer(db_settings).server_argv()[0] == "mysqld"


@patch("wpstack.infra.mariadb.server.subprocess.run")
def test_install_db_skips_test_database(mock_run, server, db_settings):
    server.install_db()

    argv = mock_run.call_args.args[0]
    assert argv[0] == "mariadb-install-db"
    assert "--skip-test-db" in argv
    assert f"--datadir={db_settings.data_dir}" in argv
    assert mock_run.call_args.kwargs["check"] is True


@patch("wpstack.infra.mariadb.server.subprocess.run")
def test_install_db_failure(mock_run, server):
    mock_run.side_effect = subprocess.CalledProcessError(
        2, ["mariadb-install-db"], stderr="disk full"
    )

    with pytest.raises(BootstrapError, match="disk full"):
        server.install_db()


@patch("wpstack.infra.mariadb.server.subprocess.run", side_effect=FileNotFoundError)
def test_install_db_missing_binary(mock_run, server):
    with pytest.raises(BootstrapError, match="not found"):
        server.install_db()


@patch("wpstack.infra.mariadb.server.subprocess.Popen", side_effect=OSError("nope"))
def test_start_background_failure(mock_popen, server):
    with pytest.raises(BootstrapError, match="Unable to start"):
        server.start_background()


class TestWaitUntilReady:
    def test_polls_until_probe_succeeds(self, server, clock):
        process = Mock()
        process.poll.return_value = None
        probe = Mock(side_effect=[False, False, True])

        server.wait_until_ready(process, probe)

        assert probe.call_count == 3
        # 0.2 then 0.4 with the default backoff
        assert clock.now == pytest.approx(0.6)

    def test_engine_exit_is_detected_early(self, server, clock):
        process = Mock()
        process.poll.return_value = 1
        process.returncode = 1

        with pytest.raises(EngineNotReadyError, match="exited with status 1"):
            server.wait_until_ready(process, Mock(return_value=False))

        assert clock.now == 0

    def test_deadline(self, server, clock, db_settings):
        process = Mock()
        process.poll.return_value = None

        with pytest.raises(EngineNotReadyError, match="within 5s"):
            server.wait_until_ready(process, Mock(return_value=False))

        assert clock.now == pytest.approx(db_settings.ready_timeout)


class TestStop:
    def test_already_exited(self, server):
        process = Mock()
        process.poll.return_value = 0

        server.stop(process)

        process.terminate.assert_not_called()

    def test_clean_shutdown(self, server):
        process = Mock()
        process.poll.return_value = None

        server.stop(process)

        process.terminate.assert_called_once_with()
        process.wait.assert_called_once_with(timeout=2)
        process.kill.assert_not_called()

    def test_kill_after_timeout(self, server):
        process = Mock()
        process.poll.return_value = None
        process.wait.side_effect = [subprocess.TimeoutExpired("mariadbd", 2), 0]

        with pytest.raises(BootstrapError, match="killed"):
            server.stop(process)

        process.kill.assert_called_once_with()


@patch("wpstack.infra.mariadb.server.os.execvp")
def test_exec_foreground(mock_execvp, server):
    server.exec_foreground()

    argv = server.server_argv()
    mock_execvp.assert_called_once_with("mariadbd", argv)
