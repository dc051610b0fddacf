"""Configuration loading and validation.

Usage:
    config = load("sonar-notify.yaml")       # raises ConfigError on bad config
    config = load()                          # defaults + environment only
    generate_template("sonar-notify.yaml")   # writes example file to disk

Precedence: command-line flags > environment variables > file > defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from sonar_notify.dingtalk import DEFAULT_ROBOT_URL
from sonar_notify.render import FAILURE_IMAGE, SUCCESS_IMAGE

DEFAULT_CONFIG_PATH = "sonar-notify.yaml"

_TRUE = ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    host: str = "0.0.0.0"
    port: int = 9010
    # SonarQube Developer Edition or the community branch plugin
    multi_branch: bool = False
    robot_url: str = DEFAULT_ROBOT_URL
    timeout: float = 10
    success_image: str = SUCCESS_IMAGE
    failure_image: str = FAILURE_IMAGE


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE


def _read_file(config_path: str | None) -> dict:
    if config_path is None:
        path = Path(DEFAULT_CONFIG_PATH)
        if not path.exists():
            return {}
    else:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(
                f"Config file not found: '{config_path}'\n"
                "Run `sonar-notify init` to generate a template."
            )

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{path}': {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{path}' must be a YAML mapping at the top level.")
    return raw


def load(config_path: str | None = None) -> Config:
    """Load and validate configuration.

    When *config_path* is None, ``sonar-notify.yaml`` in the working
    directory is read if it exists. Environment variables NOTIFY_HOST,
    NOTIFY_PORT, NOTIFY_MULTI_BRANCH, NOTIFY_TIMEOUT and DINGTALK_ROBOT_URL
    override file values.

    Raises:
        ConfigError: if the file is missing, malformed, or a value is invalid.
    """
    raw = _read_file(config_path)
    server = raw.get("server") or {}
    sonar = raw.get("sonar") or {}
    dingtalk = raw.get("dingtalk") or {}
    defaults = Config()

    host = os.environ.get("NOTIFY_HOST") or server.get("host", defaults.host)
    port = os.environ.get("NOTIFY_PORT") or server.get("port", defaults.port)
    multi_branch = (os.environ.get("NOTIFY_MULTI_BRANCH")
                    or sonar.get("multi_branch", defaults.multi_branch))
    timeout = os.environ.get("NOTIFY_TIMEOUT") or raw.get("timeout", defaults.timeout)
    robot_url = os.environ.get("DINGTALK_ROBOT_URL") or dingtalk.get("robot_url", defaults.robot_url)

    try:
        port = int(port)
        timeout = float(timeout)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid numeric value in configuration: {exc}") from exc

    config = Config(
        host=str(host).strip(),
        port=port,
        multi_branch=_as_bool(multi_branch),
        robot_url=str(robot_url).strip(),
        timeout=timeout,
        success_image=str(dingtalk.get("success_image") or defaults.success_image),
        failure_image=str(dingtalk.get("failure_image") or defaults.failure_image),
    )
    validate(config)
    return config


def validate(config: Config) -> None:
    """Raise ConfigError if any field is out of range."""
    errors: list[str] = []

    if not config.host:
        errors.append("  - 'server.host' is empty (or set NOTIFY_HOST)")
    if not 0 < config.port < 65536:
        errors.append(f"  - 'server.port' must be between 1 and 65535, got {config.port}")
    if config.timeout <= 0:
        errors.append(f"  - 'timeout' must be positive, got {config.timeout}")
    if not config.robot_url.startswith(("http://", "https://")):
        errors.append(
            "  - 'dingtalk.robot_url' must be an http(s) URL (or set DINGTALK_ROBOT_URL)"
        )

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = f"""\
server:
  host: "0.0.0.0"
  port: 9010

sonar:
  # Enable when SonarQube reports branch/PR URLs (Developer Edition or
  # the community branch plugin); links then point at the branch result.
  multi_branch: false

dingtalk:
  robot_url: "{DEFAULT_ROBOT_URL}"
  success_image: "{SUCCESS_IMAGE}"
  failure_image: "{FAILURE_IMAGE}"

# Seconds to wait for SonarQube and DingTalk
timeout: 10
"""


def generate_template(output_path: str = DEFAULT_CONFIG_PATH) -> None:
    """Write a template sonar-notify.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists.
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
