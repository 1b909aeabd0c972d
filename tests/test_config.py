"""
Tests for configuration loading and the startup gate.
"""

import logging

import pytest

import main
from bitbucket_api.config import DEFAULT_TIMEOUT_SECONDS, load_config
from bitbucket_api.errors import ConfigError


def test_load_config_reads_required_values():
    config = load_config({"BB_BASE_URL": "https://bb.example.com/", "BB_TOKEN": "secret"})

    assert config.base_url == "https://bb.example.com"
    assert config.token == "secret"
    assert config.timeout_seconds == DEFAULT_TIMEOUT_SECONDS


def test_load_config_custom_timeout():
    config = load_config({"BB_BASE_URL": "https://bb", "BB_TOKEN": "t", "BB_TIMEOUT": "2.5"})
    assert config.timeout_seconds == 2.5


@pytest.mark.parametrize("environ, missing", [
    ({"BB_TOKEN": "t"}, "BB_BASE_URL"),
    ({"BB_BASE_URL": "https://bb"}, "BB_TOKEN"),
    ({"BB_BASE_URL": "https://bb", "BB_TOKEN": "   "}, "BB_TOKEN"),
])
def test_load_config_missing_values(environ, missing):
    with pytest.raises(ConfigError, match=missing):
        load_config(environ)


@pytest.mark.parametrize("timeout", ["soon", "0", "-1"])
def test_load_config_rejects_bad_timeout(timeout):
    with pytest.raises(ConfigError, match="BB_TIMEOUT"):
        load_config({"BB_BASE_URL": "https://bb", "BB_TOKEN": "t", "BB_TIMEOUT": timeout})


def test_repr_hides_token():
    config = load_config({"BB_BASE_URL": "https://bb", "BB_TOKEN": "super-secret"})
    assert "super-secret" not in repr(config)


def test_main_exits_before_building_server_without_token(monkeypatch):
    monkeypatch.setenv("BB_BASE_URL", "https://bb.example.com")
    monkeypatch.delenv("BB_TOKEN", raising=False)

    built = []
    monkeypatch.setattr(main, "create_server", lambda config: built.append(config))

    with pytest.raises(SystemExit) as exc_info:
        main.main()

    assert exc_info.value.code == 1
    assert built == []


@pytest.mark.parametrize("name, expected", [
    ("DEBUG", logging.DEBUG),
    (" warning ", logging.WARNING),
    ("error", logging.ERROR),
])
def test_resolve_log_level_accepts_names(name, expected):
    assert main.resolve_log_level(name) == expected


@pytest.mark.parametrize("name", ["LOUD", "", "10"])
def test_resolve_log_level_unknown_is_none(name):
    assert main.resolve_log_level(name) is None


def test_setup_logging_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "LOUD")
    calls = []
    monkeypatch.setattr(main.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    main.setup_logging()

    assert calls[0]["level"] == logging.INFO
