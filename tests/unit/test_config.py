"""
Unit tests for server configuration and the command line.
"""

import socket
from pathlib import Path

import pytest

from minihttp.__main__ import config_from_args, main
from minihttp.config import ServerConfig


class TestServerConfig:
    """Tests for ServerConfig defaults and validation."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.protocol == "tcp"
        assert config.host == "0.0.0.0"
        assert config.port == 4221
        assert config.buffer_size == 8192
        assert config.directory == ""
        assert config.confine_files is False
        assert not config.files_enabled
        config.validate()

    @pytest.mark.parametrize("protocol,host,family", [
        ("tcp", "0.0.0.0", socket.AF_INET),
        ("tcp", "::1", socket.AF_INET6),
        ("tcp4", "127.0.0.1", socket.AF_INET),
        ("tcp6", "::", socket.AF_INET6),
    ])
    def test_address_family(self, protocol, host, family):
        assert ServerConfig(protocol=protocol, host=host).address_family == family

    @pytest.mark.parametrize("overrides", [
        {"protocol": "udp"},
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"buffer_size": 8},
        {"timeout": 0},
        {"shutdown_grace": -1},
        {"log_level": "LOUD"},
        {"log_format": "xml"},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()

    def test_missing_directory_rejected(self, tmp_path: Path):
        config = ServerConfig(directory=str(tmp_path / "does-not-exist"))

        with pytest.raises(ValueError) as exc_info:
            config.validate()

        assert "does-not-exist" in str(exc_info.value)

    def test_existing_directory_accepted(self, files_dir: Path):
        config = ServerConfig(directory=str(files_dir))

        config.validate()
        assert config.files_enabled

    def test_lowercase_log_level_accepted(self):
        ServerConfig(log_level="debug").validate()


class TestFromEnv:
    """Tests for ServerConfig.from_env."""

    def test_env_values(self, monkeypatch, files_dir: Path):
        monkeypatch.setenv("MINIHTTP_HOST", "127.0.0.1")
        monkeypatch.setenv("MINIHTTP_PORT", "8080")
        monkeypatch.setenv("MINIHTTP_DIRECTORY", str(files_dir))
        monkeypatch.setenv("MINIHTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("MINIHTTP_CONFINE_FILES", "yes")
        monkeypatch.setenv("MINIHTTP_LOG_FORMAT", "json")

        config = ServerConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.directory == str(files_dir)
        assert config.timeout == 2.5
        assert config.confine_files is True
        assert config.log_format == "json"

    def test_env_defaults(self, monkeypatch):
        for name in ("MINIHTTP_HOST", "MINIHTTP_PORT", "MINIHTTP_DIRECTORY",
                     "MINIHTTP_TIMEOUT", "MINIHTTP_CONFINE_FILES"):
            monkeypatch.delenv(name, raising=False)

        config = ServerConfig.from_env()

        assert config.port == 4221
        assert config.timeout is None
        assert config.confine_files is False


class TestCommandLine:
    """Tests for config_from_args."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ("MINIHTTP_PORT", "MINIHTTP_DIRECTORY", "MINIHTTP_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

    def test_no_arguments(self):
        config = config_from_args([])

        assert config.port == 4221
        assert config.directory == ""
        assert config.access_log is True

    def test_directory_flag(self, files_dir: Path):
        config = config_from_args(["--directory", str(files_dir)])

        assert config.directory == str(files_dir)
        assert config.files_enabled

    def test_flags(self):
        config = config_from_args([
            "-H", "127.0.0.1", "-p", "9000", "--protocol", "tcp4",
            "--log-level", "debug", "--no-access-log", "--confine-files",
        ])

        assert config.host == "127.0.0.1"
        assert config.port == 9000
        assert config.protocol == "tcp4"
        assert config.log_level == "DEBUG"
        assert config.access_log is False
        assert config.confine_files is True

    def test_cli_overrides_env(self, monkeypatch):
        monkeypatch.setenv("MINIHTTP_PORT", "7000")

        assert config_from_args([]).port == 7000
        assert config_from_args(["--port", "7001"]).port == 7001

    def test_invalid_choice_exits(self):
        with pytest.raises(SystemExit):
            config_from_args(["--protocol", "udp"])

    @pytest.mark.parametrize("name,value", [
        ("MINIHTTP_PORT", "not-a-port"),
        ("MINIHTTP_BUFFER_SIZE", "big"),
        ("MINIHTTP_TIMEOUT", "soon"),
    ])
    def test_bad_env_value_exits_cleanly(self, monkeypatch, capsys, name, value):
        """Test that an unparsable env value is an error message, not a traceback."""
        monkeypatch.setenv(name, value)

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1
        assert capsys.readouterr().err.startswith("Error: ")

    def test_missing_directory_exits_cleanly(self, tmp_path: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--directory", str(tmp_path / "absent")])

        assert exc_info.value.code == 1
        assert "Directory does not exist" in capsys.readouterr().err
