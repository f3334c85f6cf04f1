"""Ambient settings: compliance and on-prem configuration stores.

Values live in a small key-value store (a JSON file on disk in production).
Readers always get a complete, valid config object: a missing or corrupt
stored value falls back to the built-in default.
"""

from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from loguru import logger

from compliance_router.models import ComplianceConfig
from compliance_router.onprem import DEFAULT_OLLAMA_URL, OnPremConfig

COMPLIANCE_CONFIG_KEY = "compliance-config"
ONPREM_CONFIG_KEY = "onprem-config"

OLLAMA_URL_ENV = "COMPLIANCE_ROUTER_OLLAMA_URL"
VLLM_URL_ENV = "COMPLIANCE_ROUTER_VLLM_URL"

DEFAULT_SETTINGS_PATH = Path.home() / ".compliance-router" / "settings.json"


class SettingsStore(ABC):
    """Durable key-value storage for JSON-serialisable values."""

    @abstractmethod
    def get_raw(self, key: str) -> Any:
        """Return the stored value or None.

        Raises:
            ValueError: If the backing storage cannot be parsed.
            OSError: If the backing storage cannot be read.
        """
        ...

    @abstractmethod
    def set_raw(self, key: str, value: Any) -> None:
        ...


class MemorySettingsStore(SettingsStore):
    def __init__(self, initial: Mapping[str, Any] | None = None):
        self._data: dict[str, Any] = dict(initial or {})

    def get_raw(self, key: str) -> Any:
        return self._data.get(key)

    def set_raw(self, key: str, value: Any) -> None:
        self._data[key] = value


class JsonFileSettingsStore(SettingsStore):
    """All keys in one JSON object on disk. Writes replace the file atomically."""

    def __init__(self, path: str | Path = DEFAULT_SETTINGS_PATH):
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get_raw(self, key: str) -> Any:
        return self._load().get(key)

    def set_raw(self, key: str, value: Any) -> None:
        try:
            data = self._load()
        except ValueError as e:
            logger.warning(f"Settings: discarding unreadable {self.path}: {e}")
            data = {}
        data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".settings-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise


class ComplianceConfigStore:
    """Reads and writes the ambient ComplianceConfig.

    Not cached: every get() reads the store so a settings change applies to
    the very next routing call.
    """

    def __init__(self, store: SettingsStore, default: ComplianceConfig | None = None):
        self._store = store
        self._default = default or ComplianceConfig()

    def get(self) -> ComplianceConfig:
        try:
            stored = self._store.get_raw(COMPLIANCE_CONFIG_KEY)
            if stored is None:
                return self._default
            if not isinstance(stored, dict):
                raise TypeError(f"expected an object, got {type(stored).__name__}")
            return self._default.merged(**stored)
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Settings: unreadable {COMPLIANCE_CONFIG_KEY}, using defaults: {e}")
            return self._default

    def set(self, **changes: Any) -> ComplianceConfig:
        """Merge ``changes`` into the current config and store the whole object.

        Raises:
            ValueError, TypeError: If a change is invalid; nothing is stored.
        """
        config = self.get().merged(**changes)
        self._store.set_raw(COMPLIANCE_CONFIG_KEY, config.to_dict())
        return config


class OnPremConfigStore:
    """Reads and writes OnPremConfig, with environment defaults when unset."""

    def __init__(self, store: SettingsStore, environ: Mapping[str, str] | None = None):
        self._store = store
        self._environ = os.environ if environ is None else environ

    def _env_default(self) -> OnPremConfig:
        ollama_url = self._environ.get(OLLAMA_URL_ENV)
        vllm_url = self._environ.get(VLLM_URL_ENV)
        if ollama_url or vllm_url:
            return OnPremConfig(
                enabled=True,
                ollama_url=ollama_url or DEFAULT_OLLAMA_URL,
                vllm_url=vllm_url,
            )
        return OnPremConfig()

    def get(self) -> OnPremConfig:
        try:
            stored = self._store.get_raw(ONPREM_CONFIG_KEY)
            if stored is None:
                return self._env_default()
            if not isinstance(stored, dict):
                raise TypeError(f"expected an object, got {type(stored).__name__}")
            return OnPremConfig.from_dict(stored)
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Settings: unreadable {ONPREM_CONFIG_KEY}, using defaults: {e}")
            return self._env_default()

    def set(self, config: OnPremConfig) -> None:
        self._store.set_raw(ONPREM_CONFIG_KEY, config.to_dict())
