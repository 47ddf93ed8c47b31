"""Unit tests for the tool configuration."""

from unittest.mock import patch

import pytest
import yaml

from qftest_runner.config import (
    ToolConfig,
    load_config,
    save_config,
    unset_config,
    validate_config_value,
)
from qftest_runner.errors import BINARY_NOT_FOUND, BinaryNotFoundError


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    """Point the tool config at a temp file and clear env overrides."""
    for var in ("QFTEST_PATH", "QFTEST_PATH_UNIX", "QFTEST_RUNNER_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    path = tmp_path / ".qftest-runner" / "config.yaml"
    with patch("qftest_runner.config.get_config_path", return_value=path):
        yield path


class TestLoadConfig:
    def test_defaults(self, config_file):
        config = load_config()

        assert config.qf_path == ""
        assert config.qf_path_unix == ""
        assert config.log_level == "warning"
        assert config.get_source("qf_path") == "default"

    def test_from_file(self, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("qf_path_unix: /opt/qftest\nlog_level: info\n")

        config = load_config()

        assert config.qf_path_unix == "/opt/qftest"
        assert config.log_level == "info"
        assert config.get_source("qf_path_unix") == "config file"
        assert config.get_source("qf_path") == "default"

    def test_environment_wins(self, config_file, monkeypatch):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("qf_path_unix: /opt/qftest\n")
        monkeypatch.setenv("QFTEST_PATH_UNIX", "/usr/local/qftest")

        config = load_config()

        assert config.qf_path_unix == "/usr/local/qftest"
        assert config.get_source("qf_path_unix") == "environment"

    def test_unreadable_file_is_ignored(self, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("- just\n- a list\n")

        config = load_config()

        assert config.qf_path_unix == ""
        assert config.get_source("qf_path_unix") == "default"


class TestSaveConfig:
    def test_save_and_unset(self, config_file):
        save_config("qf_path", "C:\\QFS\\QF-Test")
        save_config("log_level", "debug")

        assert yaml.safe_load(config_file.read_text()) == {
            "qf_path": "C:\\QFS\\QF-Test",
            "log_level": "debug",
        }

        assert unset_config("qf_path") is True
        assert yaml.safe_load(config_file.read_text()) == {"log_level": "debug"}

    def test_unset_missing(self, config_file):
        assert unset_config("qf_path") is False
        save_config("log_level", "info")
        assert unset_config("qf_path") is False


class TestValidateConfigValue:
    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown config key 'server'"):
            validate_config_value("server", "x")

    def test_log_level_normalized(self):
        assert validate_config_value("log_level", "DEBUG") == "debug"

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="log_level must be one of"):
            validate_config_value("log_level", "loud")

    def test_path_passes_through(self):
        assert validate_config_value("qf_path_unix", "/opt/qftest") == "/opt/qftest"


class TestResolveBinary:
    def test_unix_binary_in_bin(self, qftest_install):
        config = ToolConfig(qf_path_unix=str(qftest_install))

        binary = config.resolve_binary(windows=False)

        assert binary == str(qftest_install / "bin" / "qftest")

    def test_windows_binary_in_bin(self, qftest_install):
        config = ToolConfig(qf_path=str(qftest_install))

        binary = config.resolve_binary(windows=True)

        assert binary == str(qftest_install / "bin" / "qftestc.exe")

    def test_binary_directly_in_directory(self, qftest_install):
        config = ToolConfig()

        binary = config.resolve_binary(custom_path=str(qftest_install / "bin"), windows=False)

        assert binary == str(qftest_install / "bin" / "qftest")

    def test_custom_path_wins(self, qftest_install, tmp_path):
        config = ToolConfig(qf_path_unix=str(tmp_path / "elsewhere"))

        binary = config.resolve_binary(custom_path=str(qftest_install), windows=False)

        assert binary == str(qftest_install / "bin" / "qftest")

    def test_missing_binary(self, tmp_path):
        config = ToolConfig(qf_path_unix=str(tmp_path))

        with pytest.raises(BinaryNotFoundError) as exc_info:
            config.resolve_binary(windows=False)

        assert exc_info.value.code == BINARY_NOT_FOUND
        assert f"Couldn't find qftest in {tmp_path}" in str(exc_info.value)

    def test_unconfigured_uses_path_lookup(self):
        with patch("qftest_runner.config.shutil.which", return_value="/usr/bin/qftest"):
            assert ToolConfig().resolve_binary(windows=False) == "/usr/bin/qftest"

    def test_unconfigured_bare_name(self):
        with patch("qftest_runner.config.shutil.which", return_value=None):
            assert ToolConfig().resolve_binary(windows=True) == "qftestc.exe"

    def test_installation_dir_by_platform(self):
        config = ToolConfig(qf_path="C:\\QFS", qf_path_unix="/opt/qftest")

        assert config.installation_dir(windows=True) == "C:\\QFS"
        assert config.installation_dir(windows=False) == "/opt/qftest"
