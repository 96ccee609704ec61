"""Tests for settings loading."""

import pytest

from teamboard.config import Settings, load_settings
from teamboard.exceptions import ConfigurationError


def test_defaults_without_overrides() -> None:
    settings = load_settings(environ={})

    assert settings == Settings()
    assert settings.poll_interval == 10.0
    assert settings.relays[0] == "https://corsproxy.io/?"


def test_yaml_file_overrides(tmp_path) -> None:
    path = tmp_path / "board.yaml"
    path.write_text("poll_interval: 15\nrelays:\n  - https://relay.test/?\n", encoding="utf-8")

    settings = load_settings(path, environ={})

    assert settings.poll_interval == 15.0
    assert settings.relays == ("https://relay.test/?",)


def test_config_path_from_environment(tmp_path) -> None:
    path = tmp_path / "board.yaml"
    path.write_text("results_limit: 50\n", encoding="utf-8")

    settings = load_settings(environ={"TEAMBOARD_CONFIG": str(path)})

    assert settings.results_limit == 50


def test_environment_beats_file(tmp_path) -> None:
    path = tmp_path / "board.yaml"
    path.write_text("request_timeout: 3\n", encoding="utf-8")

    settings = load_settings(
        path, environ={"TEAMBOARD_REQUEST_TIMEOUT": "7.5", "TEAMBOARD_RELAYS": "a, b,"}
    )

    assert settings.request_timeout == 7.5
    assert settings.relays == ("a", "b")


def test_empty_relays_disable_relay_fallback() -> None:
    assert load_settings(environ={"TEAMBOARD_RELAYS": ""}).relays == ()


def test_unknown_key_is_rejected(tmp_path) -> None:
    path = tmp_path / "board.yaml"
    path.write_text("poll_intervall: 5\n", encoding="utf-8")

    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(path, environ={})

    assert exc_info.value.parameter == "poll_intervall"


def test_bad_value_is_rejected() -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(environ={"TEAMBOARD_POLL_INTERVAL": "often"})

    assert exc_info.value.expected_format == "float"


def test_missing_file_is_rejected(tmp_path) -> None:
    with pytest.raises(ConfigurationError):
        load_settings(tmp_path / "missing.yaml", environ={})


def test_non_mapping_file_is_rejected(tmp_path) -> None:
    path = tmp_path / "board.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_settings(path, environ={})
