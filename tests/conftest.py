"""Shared fixtures for compliance_router tests."""

from datetime import datetime, timezone

import pytest

from compliance_router import (
    ComplianceConfig,
    ComplianceConfigStore,
    ComplianceRouter,
    InMemoryAuditLog,
    MemorySettingsStore,
    OnPremConfig,
    OnPremConfigStore,
    OnPremModel,
    StaticOnPremAvailability,
)

FIXED_NOW = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def llama_model():
    return OnPremModel(
        id="ollama:llama3.2",
        display_name="Llama 3.2 8B",
        endpoint="http://localhost:11434",
        model_id="llama3.2",
    )


@pytest.fixture
def coder_model():
    return OnPremModel(
        id="ollama:qwen2.5-coder:32b",
        display_name="Qwen 2.5 Coder 32B",
        endpoint="http://localhost:11434",
        model_id="qwen2.5-coder:32b",
        capabilities=frozenset({"code"}),
    )


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def audit_log():
    return InMemoryAuditLog()


@pytest.fixture
def make_router(audit_log):
    """Build a router over in-memory stores.

    Returns (router, config_store, availability).
    """

    def _make(
        config: ComplianceConfig | None = None,
        models=(),
        on_prem_enabled: bool = True,
        sink=audit_log,
    ):
        settings = MemorySettingsStore()
        config_store = ComplianceConfigStore(settings)
        if config is not None:
            config_store.set(**config.to_dict())
        on_prem_store = OnPremConfigStore(settings, environ={})
        on_prem_store.set(OnPremConfig(enabled=on_prem_enabled))
        availability = StaticOnPremAvailability(models)
        router = ComplianceRouter(
            config_store,
            availability,
            sink,
            on_prem_config_store=on_prem_store,
            clock=lambda: FIXED_NOW,
        )
        return router, config_store, availability

    return _make
