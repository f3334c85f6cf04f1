"""Tests for the ambient settings stores."""

import json

import pytest

from compliance_router.models import ComplianceConfig, DataClassification, TargetEnvironment
from compliance_router.onprem import OnPremConfig
from compliance_router.settings import (
    COMPLIANCE_CONFIG_KEY,
    OLLAMA_URL_ENV,
    VLLM_URL_ENV,
    ComplianceConfigStore,
    JsonFileSettingsStore,
    MemorySettingsStore,
    OnPremConfigStore,
)


def test_missing_value_returns_default():
    assert ComplianceConfigStore(MemorySettingsStore()).get() == ComplianceConfig()


def test_partial_value_merges_onto_default():
    store = MemorySettingsStore({COMPLIANCE_CONFIG_KEY: {"strict_mode": True}})
    config = ComplianceConfigStore(store).get()
    assert config.strict_mode
    assert config.data_classification is DataClassification.INTERNAL


@pytest.mark.parametrize(
    "stored",
    [
        {"strict_mode": "yes"},
        {"data_classification": "top-secret"},
        ["not", "an", "object"],
        "garbage",
    ],
)
def test_invalid_value_returns_default(stored):
    store = MemorySettingsStore({COMPLIANCE_CONFIG_KEY: stored})
    assert ComplianceConfigStore(store).get() == ComplianceConfig()


def test_set_replaces_whole_object():
    settings = MemorySettingsStore()
    store = ComplianceConfigStore(settings)
    first = store.get()
    updated = store.set(target_environment="production")
    assert updated.target_environment is TargetEnvironment.PRODUCTION
    assert first.target_environment is TargetEnvironment.DEVELOPMENT
    assert settings.get_raw(COMPLIANCE_CONFIG_KEY)["target_environment"] == "production"


def test_invalid_set_stores_nothing():
    settings = MemorySettingsStore()
    with pytest.raises(ValueError):
        ComplianceConfigStore(settings).set(data_classification="top-secret")
    assert settings.get_raw(COMPLIANCE_CONFIG_KEY) is None


def test_json_file_persists_across_instances(tmp_path):
    path = tmp_path / "settings.json"
    ComplianceConfigStore(JsonFileSettingsStore(path)).set(strict_mode=True, audit_enabled=False)

    config = ComplianceConfigStore(JsonFileSettingsStore(path)).get()
    assert config.strict_mode
    assert not config.audit_enabled
    assert json.loads(path.read_text())[COMPLIANCE_CONFIG_KEY]["strict_mode"] is True


def test_corrupt_file_returns_default(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    assert ComplianceConfigStore(JsonFileSettingsStore(path)).get() == ComplianceConfig()


def test_corrupt_file_is_replaced_on_write(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2")
    ComplianceConfigStore(JsonFileSettingsStore(path)).set(strict_mode=True)
    assert ComplianceConfigStore(JsonFileSettingsStore(path)).get().strict_mode


def test_json_file_keeps_other_keys(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    settings = JsonFileSettingsStore(path)
    OnPremConfigStore(settings, environ={}).set(OnPremConfig(enabled=True))
    ComplianceConfigStore(settings).set(strict_mode=True)
    assert OnPremConfigStore(settings, environ={}).get().enabled


def test_onprem_default_is_disabled():
    assert not OnPremConfigStore(MemorySettingsStore(), environ={}).get().enabled


def test_onprem_enabled_from_environment():
    environ = {VLLM_URL_ENV: "http://gpu-box:8000"}
    config = OnPremConfigStore(MemorySettingsStore(), environ=environ).get()
    assert config.enabled
    assert config.vllm_url == "http://gpu-box:8000"
    assert config.ollama_url == "http://localhost:11434"


def test_stored_onprem_config_beats_environment():
    store = OnPremConfigStore(MemorySettingsStore(), environ={OLLAMA_URL_ENV: "http://x:11434"})
    store.set(OnPremConfig(enabled=False))
    assert not store.get().enabled


def test_unreadable_settings_path_returns_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.mkdir()
    settings = JsonFileSettingsStore(path)
    assert ComplianceConfigStore(settings).get() == ComplianceConfig()
    assert not OnPremConfigStore(settings, environ={}).get().enabled


def test_unreadable_onprem_settings_fall_back_to_environment(tmp_path):
    path = tmp_path / "settings.json"
    path.mkdir()
    store = OnPremConfigStore(JsonFileSettingsStore(path), environ={OLLAMA_URL_ENV: "http://gpu-box:11434"})
    config = store.get()
    assert config.enabled
    assert config.ollama_url == "http://gpu-box:11434"
