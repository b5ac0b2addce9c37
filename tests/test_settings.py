"""Tests for core.settings, core.logging_config and orchestrator wiring from settings."""

import logging
from pathlib import Path

import pytest
import yaml

from core.logging_config import setup_logging
from core.settings import get_default_settings, get_setting, load_settings, reload_settings
from wizard.catalog import DataSourceId
from wizard.credentials import HttpCredentialVerifier, SimulatedCredentialVerifier
from wizard.orchestrator import create_orchestrator


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    reload_settings()
    yield
    reload_settings()


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    settings = load_settings(tmp_path)
    assert get_setting(settings, "wizard.default_data_source") == "machina-core"
    assert get_setting(settings, "data_sources.sportradar.verifier") == "simulated"


def test_file_values_are_deep_merged(tmp_path: Path) -> None:
    (tmp_path / "settings.yaml").write_text(
        yaml.safe_dump({"wizard": {"sync_latency": 0.5}, "logging": {"level": "DEBUG"}})
    )
    settings = load_settings(tmp_path)
    assert get_setting(settings, "wizard.sync_latency") == 0.5
    assert get_setting(settings, "wizard.credential_latency") == 1.5
    assert get_setting(settings, "logging.level") == "DEBUG"


def test_invalid_yaml_falls_back_to_defaults(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    (tmp_path / "settings.yaml").write_text("wizard: [unclosed")
    with caplog.at_level(logging.WARNING, logger="core.settings"):
        assert load_settings(tmp_path) == get_default_settings()
    assert "Ignoring unreadable settings file" in caplog.text


def test_settings_are_cached_until_reload(tmp_path: Path) -> None:
    first = load_settings(tmp_path)
    (tmp_path / "settings.yaml").write_text(yaml.safe_dump({"wizard": {"min_name_length": 3}}))
    assert load_settings(tmp_path) is first
    reload_settings()
    assert get_setting(load_settings(tmp_path), "wizard.min_name_length") == 3


def test_get_setting_missing_path_returns_default() -> None:
    assert get_setting({"a": {"b": 1}}, "a.c", "x") == "x"
    assert get_setting({"a": 1}, "a.b") is None


def test_default_settings_are_a_copy() -> None:
    d = get_default_settings()
    d["wizard"]["sync_latency"] = 99
    assert get_default_settings()["wizard"]["sync_latency"] == 3.0


def test_create_orchestrator_uses_simulated_verifier_by_default() -> None:
    orch = create_orchestrator(get_default_settings())
    assert isinstance(orch._verifiers[DataSourceId.SPORTRADAR], SimulatedCredentialVerifier)
    assert orch.config.data_sources == [DataSourceId.MACHINA_CORE]


def test_create_orchestrator_http_verifier_and_name_rule() -> None:
    settings = get_default_settings()
    settings["data_sources"]["sportradar"]["verifier"] = "http"
    settings["wizard"]["min_name_length"] = 3
    orch = create_orchestrator(settings)
    assert isinstance(orch._verifiers[DataSourceId.SPORTRADAR], HttpCredentialVerifier)
    assert "project_name" in orch.set_name("ab").errors


def test_setup_logging_writes_rotating_file(tmp_path: Path) -> None:
    settings = get_default_settings()
    settings["logging"]["level"] = "DEBUG"
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        setup_logging(tmp_path, settings)
        logging.getLogger("wizard.test").debug("hello from test")
        for h in root.handlers:
            h.flush()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert "hello from test" in (tmp_path / "logs" / "wizard.log").read_text()
    finally:
        for h in root.handlers[:]:
            root.removeHandler(h)
            h.close()
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])
