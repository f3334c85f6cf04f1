"""Tests for the cloud catalog and on-prem presets."""

import pytest

from compliance_router.catalog import CLOUD_MODELS, CloudCatalog, EmptyCatalogError, match_preset
from compliance_router.models import CloudModel


def test_builtin_catalog_not_empty():
    catalog = CloudCatalog()
    assert len(catalog) == len(CLOUD_MODELS) > 0
    assert catalog.default() is CLOUD_MODELS[0]


def test_empty_catalog_is_fatal():
    with pytest.raises(EmptyCatalogError):
        CloudCatalog([])


def test_resolve_exact_and_normalized():
    catalog = CloudCatalog()
    assert catalog.resolve("gpt-4o").id == "gpt-4o"
    assert catalog.resolve("Claude 4.5 Opus").id == "claude-4.5-opus"
    assert catalog.resolve("GEMINI_2.5_FLASH").id == "gemini-2.5-flash"
    assert catalog.resolve("llama-99") is None
    assert catalog.resolve(None) is None


def test_suggest_close_ids():
    assert "gpt-4o" in CloudCatalog().suggest("gpt4")


def test_first_by_provider_falls_back_to_first_entry():
    catalog = CloudCatalog()
    assert catalog.first("Google").id == "gemini-2.5-pro"
    assert catalog.first("Mistral") is CLOUD_MODELS[0]


def test_recommended_falls_back_to_first_entry():
    models = [
        CloudModel("gpt-4o", "GPT-4o", "OpenAI", "Fast multimodal"),
        CloudModel("gemini-2.5-pro", "Gemini 2.5 Pro", "Google", "Advanced reasoning"),
    ]
    assert CloudCatalog(models).recommended().id == "gpt-4o"
    assert CloudCatalog().recommended().id == "claude-4.5-sonnet"


@pytest.mark.parametrize(
    "name, display",
    [
        ("qwen2.5-coder:32b", "Qwen 2.5 Coder 32B"),
        ("qwen2.5-coder:7b", "Qwen 2.5 Coder 32B"),
        ("mistral-nemo:latest", "Mistral Nemo 12B"),
        ("llama3.2:3b", "Llama 3.2 3B"),
        ("phi4", "Phi-4 14B"),
    ],
)
def test_match_preset(name, display):
    assert match_preset(name).display_name == display


def test_match_preset_unknown():
    assert match_preset("starcoder2") is None


def test_code_presets_are_tagged():
    assert "code" in match_preset("codestral").capabilities
    assert "code" not in match_preset("llama3.2").capabilities
