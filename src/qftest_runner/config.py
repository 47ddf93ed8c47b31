"""Tool configuration management.

Handles the persistent tool configuration stored in
~/.qftest-runner/config.yaml: where QF-Test is installed on Windows and
Unix agents, and the default log level. Supports environment variable
overrides.
"""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import BinaryNotFoundError
from .shared.logging import get_logger
from .shared.paths import get_config_file

logger = get_logger(__name__)

# Default values
DEFAULT_LOG_LEVEL = "warning"

# Environment variable mappings
ENV_VARS = {
    "qf_path": "QFTEST_PATH",
    "qf_path_unix": "QFTEST_PATH_UNIX",
    "log_level": "QFTEST_RUNNER_LOG_LEVEL",
}

CONFIG_KEYS = tuple(ENV_VARS)

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


@dataclass
class ToolConfig:
    """Where QF-Test lives, independent of any job."""

    qf_path: str = ""
    qf_path_unix: str = ""
    log_level: str = DEFAULT_LOG_LEVEL

    # Track where each value came from
    _sources: dict[str, str] = field(default_factory=dict)

    def get_source(self, key: str) -> str:
        """Get the source of a config value."""
        return self._sources.get(key, "default")

    def to_dict(self) -> dict[str, str]:
        return {key: getattr(self, key) for key in CONFIG_KEYS}

    def installation_dir(self, custom_path: str | None = None, windows: bool = False) -> str:
        """Installation directory to use; a job's custom path wins."""
        if custom_path:
            return custom_path
        return self.qf_path if windows else self.qf_path_unix

    def resolve_binary(self, custom_path: str | None = None, windows: bool | None = None) -> str:
        """Locate the QF-Test executable.

        Args:
            custom_path: Job specific installation directory
            windows: Resolve for a Windows agent (default: current platform)

        Returns:
            Path (or bare name found on PATH) of the executable

        Raises:
            BinaryNotFoundError: Installation directory has no executable
        """
        if windows is None:
            windows = os.name == "nt"
        name = "qftestc.exe" if windows else "qftest"

        directory = self.installation_dir(custom_path, windows)
        if not directory:
            return shutil.which(name) or name

        base = Path(directory)
        for candidate in (base / name, base / "bin" / name):
            if candidate.is_file():
                return str(candidate)

        raise BinaryNotFoundError(
            message=f"Couldn't find {name} in {directory}",
            data={"directory": directory, "executable": name},
        )


def get_config_path() -> Path:
    """Get the tool config file path.

    Returns:
        Path to ~/.qftest-runner/config.yaml
    """
    return get_config_file()


def _read_config_file(config_path: Path) -> dict[str, Any]:
    with open(config_path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping")
    return data


def load_config() -> ToolConfig:
    """Load the tool configuration.

    Precedence (highest to lowest):
    1. Environment variables
    2. Config file (~/.qftest-runner/config.yaml)
    3. Defaults

    Returns:
        ToolConfig with values and sources
    """
    config = ToolConfig()
    sources: dict[str, str] = {key: "default" for key in CONFIG_KEYS}

    config_path = get_config_path()
    if config_path.exists():
        try:
            file_config = _read_config_file(config_path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning("ignoring unreadable config file", path=str(config_path), error=str(e))
            file_config = {}

        for key in CONFIG_KEYS:
            if key in file_config and file_config[key] is not None:
                setattr(config, key, str(file_config[key]))
                sources[key] = "config file"

    for key, env_var in ENV_VARS.items():
        if os.environ.get(env_var):
            setattr(config, key, os.environ[env_var])
            sources[key] = "environment"

    config._sources = sources
    return config


def validate_config_value(key: str, value: str) -> str:
    """Check a value before it is saved.

    Returns:
        Normalized value

    Raises:
        ValueError: Unknown key or invalid value
    """
    if key not in CONFIG_KEYS:
        raise ValueError(f"Unknown config key '{key}'. Valid keys: {', '.join(CONFIG_KEYS)}")
    if key == "log_level":
        value = value.lower()
        if value not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")
    return value


def save_config(key: str, value: Any) -> None:
    """Save a config value to the config file.

    Args:
        key: Config key (qf_path, qf_path_unix, log_level)
        value: Value to save
    """
    config_path = get_config_path()

    existing: dict[str, Any] = {}
    if config_path.exists():
        existing = _read_config_file(config_path)

    existing[key] = value

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(existing, f, default_flow_style=False)


def unset_config(key: str) -> bool:
    """Remove a config value from the config file.

    Args:
        key: Config key to remove

    Returns:
        True if key was removed, False if not found
    """
    config_path = get_config_path()
    if not config_path.exists():
        return False

    existing = _read_config_file(config_path)
    if key not in existing:
        return False

    del existing[key]

    with open(config_path, "w") as f:
        yaml.dump(existing, f, default_flow_style=False)

    return True
