"""On-prem model availability: discovery of self-hosted models.

Supports Ollama (``/api/tags``) and OpenAI-compatible servers such as vLLM
(``/v1/models``). Discovery never raises: unreachable endpoints simply
contribute no models and the router degrades to cloud.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx
from loguru import logger

from compliance_router.catalog import match_preset
from compliance_router.health import EndpointHealth
from compliance_router.models import OnPremModel

DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_VLLM_URL = "http://localhost:8000"
DEFAULT_LLAMACPP_URL = "http://localhost:8080"
# Discovery must not stall a routing call; an endpoint slower than this is
# treated as unreachable.
DEFAULT_DISCOVERY_TIMEOUT_S = 2.0


@dataclass(frozen=True)
class OnPremConfig:
    """Where on-prem models live and whether they may be used at all."""
    enabled: bool = False
    ollama_url: str | None = DEFAULT_OLLAMA_URL
    vllm_url: str | None = None
    llamacpp_url: str | None = None
    custom_url: str | None = None  # any OpenAI-compatible endpoint
    timeout_s: float = DEFAULT_DISCOVERY_TIMEOUT_S

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "ollama_url": self.ollama_url,
            "vllm_url": self.vllm_url,
            "llamacpp_url": self.llamacpp_url,
            "custom_url": self.custom_url,
            "timeout_s": self.timeout_s,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OnPremConfig":
        """Build from a mapping, filling gaps from the defaults.

        Raises:
            TypeError: If a value has the wrong type.
        """
        values = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if "enabled" in values and not isinstance(values["enabled"], bool):
            raise TypeError(f"enabled must be a boolean, got {values['enabled']!r}")
        for key in ("ollama_url", "vllm_url", "llamacpp_url", "custom_url"):
            if values.get(key) is not None and not isinstance(values[key], str):
                raise TypeError(f"{key} must be a string, got {values[key]!r}")
        if "timeout_s" in values:
            values["timeout_s"] = float(values["timeout_s"])
        return cls(**values)


class OnPremConfigSource(Protocol):
    def get(self) -> OnPremConfig: ...


@dataclass
class ConnectionStatus:
    """Result of probing one discovery endpoint."""
    connected: bool
    models: list[str] = field(default_factory=list)
    error: str | None = None


class OnPremAvailability(ABC):
    """Source of currently reachable on-prem models."""

    @abstractmethod
    async def get_available_models(self) -> list[OnPremModel]:
        """Return reachable models, most recently activated first.

        Must return an empty list, never raise, when nothing is reachable.
        """
        ...

    @property
    def name(self) -> str:
        return self.__class__.__name__


class StaticOnPremAvailability(OnPremAvailability):
    """A fixed, in-memory list of models."""

    def __init__(self, models: Iterable[OnPremModel] = ()):
        self._models = list(models)

    async def get_available_models(self) -> list[OnPremModel]:
        return list(self._models)

    def set_models(self, models: Iterable[OnPremModel]) -> None:
        self._models = list(models)

    def clear(self) -> None:
        self._models = []


def _names(entries: Any, key: str) -> list[str]:
    """Pull ``key`` from each entry of a model listing.

    Raises:
        TypeError: If the listing or a name has the wrong shape.
    """
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise TypeError(f"model listing must be a list, got {type(entries).__name__}")
    names = []
    for entry in entries:
        name = entry[key]
        if not isinstance(name, str) or not name:
            raise TypeError(f"model {key} must be a non-empty string, got {name!r}")
        names.append(name)
    return names


async def check_ollama_connection(
    client: httpx.AsyncClient, base_url: str = DEFAULT_OLLAMA_URL,
) -> ConnectionStatus:
    """List model names served by an Ollama instance."""
    try:
        response = await client.get(f"{base_url.rstrip('/')}/api/tags")
        response.raise_for_status()
        data = response.json()
        models = _names(data.get("models"), "name")
        return ConnectionStatus(True, models)
    except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
        return ConnectionStatus(False, [], str(e) or e.__class__.__name__)


async def check_openai_compatible_connection(
    client: httpx.AsyncClient, base_url: str,
) -> ConnectionStatus:
    """List model ids served by an OpenAI-compatible endpoint (vLLM, llama.cpp, ...)."""
    try:
        response = await client.get(f"{base_url.rstrip('/')}/v1/models")
        response.raise_for_status()
        data = response.json()
        models = _names(data.get("data"), "id")
        return ConnectionStatus(True, models)
    except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
        return ConnectionStatus(False, [], str(e) or e.__class__.__name__)


def _from_discovery(provider: str, endpoint: str, model_name: str) -> OnPremModel:
    preset = match_preset(model_name) if provider == "ollama" else None
    return OnPremModel(
        id=f"{provider}:{model_name}",
        display_name=preset.display_name if preset else model_name,
        endpoint=endpoint,
        model_id=model_name,
        provider=provider,
        context_length=preset.context_length if preset else None,
        description=preset.description if preset else None,
        capabilities=preset.capabilities if preset else frozenset(),
    )


class HttpOnPremAvailability(OnPremAvailability):
    """Discovers on-prem models by querying the configured endpoints.

    Endpoints are queried in a fixed order (Ollama, vLLM, llama.cpp, custom).
    Endpoints whose health circuit is open are skipped until their cooldown
    elapses.
    """

    def __init__(
        self,
        config_source: OnPremConfigSource,
        health: EndpointHealth | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config_source = config_source
        self.health = health or EndpointHealth()
        self._transport = transport

    def _endpoints(self, config: OnPremConfig) -> list[tuple[str, str]]:
        endpoints = []
        if config.ollama_url:
            endpoints.append(("ollama", config.ollama_url))
        if config.vllm_url:
            endpoints.append(("vllm", config.vllm_url))
        if config.llamacpp_url:
            endpoints.append(("llamacpp", config.llamacpp_url))
        if config.custom_url:
            endpoints.append(("openai-compatible", config.custom_url))
        return endpoints

    async def get_available_models(self) -> list[OnPremModel]:
        config = self._config_source.get()
        if not config.enabled:
            return []

        available: list[OnPremModel] = []
        async with httpx.AsyncClient(timeout=config.timeout_s, transport=self._transport) as client:
            for provider, endpoint in self._endpoints(config):
                if self.health.is_open(endpoint):
                    logger.debug(f"Discovery: skipping {provider} at {endpoint} (circuit open)")
                    continue

                try:
                    models = await self._discover(client, provider, endpoint)
                except Exception as e:
                    # malformed URL, unexpected payload
                    models = None
                    logger.warning(f"Discovery: {provider} at {endpoint} failed: {e!r}")

                if models is None:
                    self.health.record_failure(endpoint)
                    continue

                self.health.record_success(endpoint)
                logger.debug(f"Discovery: {provider} at {endpoint} serves {len(models)} model(s)")
                available.extend(models)

        return available

    async def _discover(
        self, client: httpx.AsyncClient, provider: str, endpoint: str,
    ) -> list[OnPremModel] | None:
        """Models served by one endpoint, or None if it is unreachable."""
        if provider == "ollama":
            status = await check_ollama_connection(client, endpoint)
        else:
            status = await check_openai_compatible_connection(client, endpoint)

        if not status.connected:
            logger.warning(f"Discovery: {provider} at {endpoint} unreachable: {status.error}")
            return None
        return [_from_discovery(provider, endpoint, name) for name in status.models]


def base_url_for(model: OnPremModel) -> str:
    """OpenAI-compatible base URL the caller should use to invoke ``model``."""
    endpoint = model.endpoint.rstrip("/")
    if model.provider in ("ollama", "vllm"):
        return f"{endpoint}/v1"
    return endpoint
