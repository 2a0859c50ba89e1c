"""Settings.from_env tests."""

import pytest

from limesurvey_core.config import DEFAULT_API_URL, Settings
from limesurvey_core.errors import ConfigurationError


def test_defaults():
    settings = Settings.from_env({})

    assert settings.api_url == DEFAULT_API_URL
    assert settings.username is None
    assert settings.password is None
    assert settings.timeout == 30.0
    assert settings.readonly_mode is False
    assert settings.transport == "stdio"
    assert settings.port == 3000
    assert settings.log_level == "INFO"
    assert settings.log_dir is None


def test_values_from_environment():
    settings = Settings.from_env(
        {
            "LIMESURVEY_API_URL": "https://survey.example.org/index.php/admin/remotecontrol",
            "LIMESURVEY_USERNAME": "admin",
            "LIMESURVEY_PASSWORD": "secret",
            "LIMESURVEY_TIMEOUT": "12.5",
            "READONLY_MODE": "TRUE",
            "MCP_TRANSPORT": "sse",
            "HOST": "127.0.0.1",
            "PORT": "8080",
            "LOG_LEVEL": "debug",
            "LOG_DIR": "logs",
        }
    )

    assert settings.api_url.startswith("https://survey.example.org")
    assert (settings.username, settings.password) == ("admin", "secret")
    assert settings.timeout == 12.5
    assert settings.readonly_mode is True
    assert settings.transport == "sse"
    assert (settings.host, settings.port) == ("127.0.0.1", 8080)
    assert settings.log_level == "DEBUG"
    assert settings.log_dir == "logs"


@pytest.mark.parametrize("value", ["false", "1", "yes", ""])
def test_readonly_mode_only_for_true(value):
    assert Settings.from_env({"READONLY_MODE": value}).readonly_mode is False


def test_empty_credentials_are_unset():
    settings = Settings.from_env({"LIMESURVEY_USERNAME": "", "LIMESURVEY_PASSWORD": ""})

    assert settings.username is None
    assert settings.password is None


@pytest.mark.parametrize("name", ["PORT", "LIMESURVEY_TIMEOUT"])
def test_invalid_number(name):
    with pytest.raises(ConfigurationError, match=name):
        Settings.from_env({name: "soon"})


def test_unknown_transport():
    with pytest.raises(ConfigurationError, match="MCP_TRANSPORT"):
        Settings.from_env({"MCP_TRANSPORT": "websocket"})


def test_settings_are_frozen():
    settings = Settings.from_env({})

    with pytest.raises(AttributeError):
        settings.username = "someone"
