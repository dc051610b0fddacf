"""Tests for sonar_notify/config.py"""

import textwrap
from pathlib import Path

import pytest

from sonar_notify.config import (
    Config,
    ConfigError,
    generate_template,
    load,
    validate,
)
from sonar_notify.dingtalk import DEFAULT_ROBOT_URL


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def write_config(tmp_path: Path, content: str) -> Path:
    p = tmp_path / "sonar-notify.yaml"
    p.write_text(textwrap.dedent(content), encoding="utf-8")
    return p


VALID_YAML = """\
    server:
      host: "127.0.0.1"
      port: 9999
    sonar:
      multi_branch: true
    dingtalk:
      robot_url: "http://bot.internal/robot/send"
      success_image: "https://img/ok.png"
    timeout: 3
    """


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ("NOTIFY_HOST", "NOTIFY_PORT", "NOTIFY_MULTI_BRANCH",
                 "NOTIFY_TIMEOUT", "DINGTALK_ROBOT_URL"):
        monkeypatch.delenv(name, raising=False)
    # keep a stray sonar-notify.yaml in the cwd out of the defaults test
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# load() — happy path
# ---------------------------------------------------------------------------

def test_load_valid_config(tmp_path):
    p = write_config(tmp_path, VALID_YAML)
    config = load(str(p))
    assert config.host == "127.0.0.1"
    assert config.port == 9999
    assert config.multi_branch is True
    assert config.robot_url == "http://bot.internal/robot/send"
    assert config.success_image == "https://img/ok.png"
    assert config.timeout == 3.0


def test_load_without_file_uses_defaults():
    config = load()
    assert config == Config()
    assert config.host == "0.0.0.0"
    assert config.port == 9010
    assert config.multi_branch is False
    assert config.robot_url == DEFAULT_ROBOT_URL


def test_load_default_file_when_present(tmp_path):
    write_config(tmp_path, VALID_YAML)
    assert load().port == 9999


def test_load_empty_file_uses_defaults(tmp_path):
    p = write_config(tmp_path, "")
    assert load(str(p)) == Config()


# ---------------------------------------------------------------------------
# load() — errors
# ---------------------------------------------------------------------------

def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load(str(tmp_path / "no-such-file.yaml"))


def test_load_malformed_yaml(tmp_path):
    p = write_config(tmp_path, "server: [unclosed\n")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load(str(p))


def test_load_non_mapping(tmp_path):
    p = write_config(tmp_path, "- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        load(str(p))


def test_load_bad_port(tmp_path):
    p = write_config(tmp_path, """\
        server:
          port: "abc"
        """)
    with pytest.raises(ConfigError, match="numeric"):
        load(str(p))


def test_load_port_out_of_range(tmp_path):
    p = write_config(tmp_path, """\
        server:
          port: 70000
        """)
    with pytest.raises(ConfigError, match="server.port"):
        load(str(p))


def test_load_bad_robot_url(tmp_path):
    p = write_config(tmp_path, """\
        dingtalk:
          robot_url: "oapi.dingtalk.com"
        """)
    with pytest.raises(ConfigError, match="robot_url"):
        load(str(p))


def test_validate_reports_all_errors():
    with pytest.raises(ConfigError) as excinfo:
        validate(Config(host="", port=0, timeout=0))
    message = str(excinfo.value)
    assert "server.host" in message
    assert "server.port" in message
    assert "timeout" in message


# ---------------------------------------------------------------------------
# load() — environment variable overrides
# ---------------------------------------------------------------------------

def test_env_overrides_config(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("NOTIFY_HOST", "10.0.0.1")
    monkeypatch.setenv("NOTIFY_PORT", "8080")
    monkeypatch.setenv("NOTIFY_MULTI_BRANCH", "false")
    monkeypatch.setenv("DINGTALK_ROBOT_URL", "https://override.example.com/robot/send")
    config = load(str(p))
    assert config.host == "10.0.0.1"
    assert config.port == 8080
    assert config.multi_branch is False
    assert config.robot_url == "https://override.example.com/robot/send"


@pytest.mark.parametrize("value", ["1", "true", "YES", "on"])
def test_env_multi_branch_truthy(monkeypatch, value):
    monkeypatch.setenv("NOTIFY_MULTI_BRANCH", value)
    assert load().multi_branch is True


# ---------------------------------------------------------------------------
# generate_template()
# ---------------------------------------------------------------------------

def test_generate_template_creates_loadable_file(tmp_path):
    out = tmp_path / "generated.yaml"
    generate_template(str(out))
    content = out.read_text(encoding="utf-8")
    assert "server:" in content
    assert "dingtalk:" in content
    assert load(str(out)) == Config()


def test_generate_template_refuses_to_overwrite(tmp_path):
    out = tmp_path / "sonar-notify.yaml"
    out.write_text("existing content")
    with pytest.raises(ConfigError, match="already exists"):
        generate_template(str(out))


def test_null_images_fall_back_to_defaults(tmp_path):
    p = write_config(tmp_path, """\
        dingtalk:
          success_image:
          failure_image: null
        """)
    config = load(str(p))
    assert config.success_image == Config().success_image
    assert config.failure_image == Config().failure_image
