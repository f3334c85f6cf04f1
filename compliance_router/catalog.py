"""Model catalog: the static cloud model table and known on-prem presets.

The cloud catalog is the single source of truth for cloud model ids. It is
never empty; an empty catalog means the package was built wrong and is
reported as EmptyCatalogError rather than papered over.
"""

from __future__ import annotations

import difflib
from collections.abc import Iterable
from dataclasses import dataclass

from compliance_router.models import CloudModel

# Keep in display order; the first entry is the ultimate fallback.
CLOUD_MODELS: tuple[CloudModel, ...] = (
    CloudModel("claude-4.5-sonnet", "Claude 4.5 Sonnet", "Anthropic",
               "Best for coding - fast & capable", recommended=True),
    CloudModel("claude-4.5-opus", "Claude 4.5 Opus", "Anthropic", "Most capable model"),
    CloudModel("gpt-5", "GPT-5", "OpenAI", "Latest OpenAI flagship"),
    CloudModel("gpt-4o", "GPT-4o", "OpenAI", "Fast multimodal"),
    CloudModel("gemini-2.5-pro", "Gemini 2.5 Pro", "Google", "Advanced reasoning"),
    CloudModel("gemini-2.5-flash", "Gemini 2.5 Flash", "Google", "Fastest responses"),
)


class EmptyCatalogError(RuntimeError):
    """The cloud catalog has no entries. Packaging error, not recoverable."""


def _normalize(s: str) -> str:
    """Strip hyphens, underscores, spaces, dots and lowercase."""
    return s.lower().replace("-", "").replace("_", "").replace(" ", "").replace(".", "")


class CloudCatalog:
    """Read-only lookup over an ordered list of cloud models."""

    def __init__(self, models: Iterable[CloudModel] = CLOUD_MODELS) -> None:
        self._models = tuple(models)
        if not self._models:
            raise EmptyCatalogError("Cloud model catalog is empty")
        self._by_id = {m.id: m for m in self._models}
        # Normalized id/name → id, built once for fast lookup.
        self._normalized: dict[str, str] = {}
        for m in self._models:
            self._normalized.setdefault(_normalize(m.id), m.id)
            self._normalized.setdefault(_normalize(m.name), m.id)

    def __len__(self) -> int:
        return len(self._models)

    def __iter__(self):
        return iter(self._models)

    @property
    def models(self) -> tuple[CloudModel, ...]:
        return self._models

    def default(self) -> CloudModel:
        return self._models[0]

    def get(self, model_id: str) -> CloudModel | None:
        return self._by_id.get(model_id)

    def resolve(self, raw: str | None) -> CloudModel | None:
        """Resolve a user-supplied id or display name to a catalog model.

        Tries an exact id first, then a normalized match against ids and
        names ("Claude 4.5 Sonnet", "claude_4.5_sonnet"). No fuzzy matching:
        a near miss is reported through suggest() instead.
        """
        if not raw:
            return None
        if raw in self._by_id:
            return self._by_id[raw]
        model_id = self._normalized.get(_normalize(raw))
        return self._by_id[model_id] if model_id else None

    def suggest(self, raw: str, n: int = 2) -> list[str]:
        """Close catalog ids for an unknown ``raw`` value."""
        candidates = difflib.get_close_matches(_normalize(raw), self._normalized.keys(), n=n, cutoff=0.6)
        seen: list[str] = []
        for c in candidates:
            model_id = self._normalized[c]
            if model_id not in seen:
                seen.append(model_id)
        return seen

    def first(self, provider: str | None = None) -> CloudModel:
        """First model from ``provider``, or the first entry if none match."""
        if provider:
            for m in self._models:
                if m.provider == provider:
                    return m
        return self._models[0]

    def recommended(self) -> CloudModel:
        """The flagged recommended model, or the first entry."""
        for m in self._models:
            if m.recommended:
                return m
        return self._models[0]


@dataclass(frozen=True)
class OnPremPreset:
    """Known metadata for a self-hosted model family."""

    model_id: str
    display_name: str
    context_length: int
    description: str
    capabilities: frozenset[str] = frozenset()


_CODE = frozenset({"code"})
_REASONING = frozenset({"reasoning"})

# Preset key → preset. Matched against discovered model names by
# match_preset(); longer model ids are tried first so "mistral-nemo" wins
# over "mistral".
ON_PREM_PRESETS: dict[str, OnPremPreset] = {
    "mistral-7b": OnPremPreset("mistral", "Mistral 7B", 32768, "Fast, efficient general-purpose model"),
    "mistral-nemo": OnPremPreset("mistral-nemo", "Mistral Nemo 12B", 128000, "State-of-the-art 12B with 128K context"),
    "mixtral-8x7b": OnPremPreset("mixtral", "Mixtral 8x7B", 32768, "Powerful MoE model, great for coding"),
    "codestral": OnPremPreset("codestral", "Codestral 22B", 32768, "Mistral code-specialized model", _CODE),
    "llama3.3-70b": OnPremPreset("llama3.3:70b", "Llama 3.3 70B", 128000, "Meta's flagship open model"),
    "llama3.2-8b": OnPremPreset("llama3.2", "Llama 3.2 8B", 128000, "Fast and capable for most tasks"),
    "llama3.2-3b": OnPremPreset("llama3.2:3b", "Llama 3.2 3B", 128000, "Lightweight, runs on any machine"),
    "codellama-34b": OnPremPreset("codellama:34b", "Code Llama 34B", 16384, "Specialized for code generation", _CODE),
    "qwen2.5-72b": OnPremPreset("qwen2.5:72b", "Qwen 2.5 72B", 131072, "Alibaba's top-tier open model"),
    "qwen2.5-coder-32b": OnPremPreset("qwen2.5-coder:32b", "Qwen 2.5 Coder 32B", 131072, "Best open-source coding model", _CODE),
    "deepseek-coder-v2": OnPremPreset("deepseek-coder-v2", "DeepSeek Coder V2", 128000, "Excellent for code tasks", _CODE),
    "deepseek-r1": OnPremPreset("deepseek-r1:70b", "DeepSeek R1", 64000, "Advanced reasoning model", _REASONING),
    "phi-4": OnPremPreset("phi4", "Phi-4 14B", 16384, "Microsoft's compact powerhouse"),
    "command-r-plus": OnPremPreset("command-r-plus", "Command R+", 128000, "Cohere's best for RAG and agents"),
}


def match_preset(model_name: str) -> OnPremPreset | None:
    """Find the preset for a discovered model name like ``qwen2.5-coder:32b``.

    Exact model id wins; otherwise the preset with the longest family name
    (model id up to ':') that prefixes ``model_name``.
    """
    presets = ON_PREM_PRESETS.values()
    for p in presets:
        if p.model_id == model_name:
            return p
    best: OnPremPreset | None = None
    best_len = 0
    for p in presets:
        family = p.model_id.split(":")[0]
        if model_name.startswith(family) and len(family) > best_len:
            best, best_len = p, len(family)
    return best
