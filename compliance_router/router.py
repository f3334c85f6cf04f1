"""ComplianceRouter — compliance-aware on-prem/cloud model routing."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

from loguru import logger

from compliance_router.audit import AuditSink, JsonlAuditSink, emit
from compliance_router.catalog import CloudCatalog
from compliance_router.models import (
    AuditEntry,
    CloudModel,
    ComplianceConfig,
    ModelDescriptor,
    OnPremModel,
    RoutingContext,
    RoutingResult,
)
from compliance_router.onprem import HttpOnPremAvailability, OnPremAvailability
from compliance_router.policy import PolicyDecision, requires_on_prem
from compliance_router.selector import ModelSelector
from compliance_router.settings import (
    DEFAULT_SETTINGS_PATH,
    ComplianceConfigStore,
    JsonFileSettingsStore,
    OnPremConfigStore,
)

NOTE_FORCED_ON_PREM = "forced on-prem by caller"
NOTE_FORCED_CLOUD = "forced cloud by caller"
NOTE_CLOUD_OVERRIDDEN = "Warning: Cloud requested but on-prem required by compliance - using on-prem"
NOTE_ON_PREM_DISABLED = "Warning: On-prem required but not enabled - falling back to cloud"
NOTE_NO_ON_PREM_MODELS = "Warning: No on-prem models available - falling back to cloud"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ComplianceRouter:
    """Decides, per request, whether a task goes to an on-prem or a cloud model.

    Routing is determined by:
      1. Compliance policy (strict mode, task category, environment, data)
      2. Caller overrides: force_on_prem always wins; force_cloud only
         when policy allows it
      3. Availability: an on-prem decision with nothing reachable, or with
         on-prem disabled, degrades to cloud with a warning note

    Each call reads the ambient config fresh and keeps no state between
    calls, so concurrent route() calls are independent. The router only
    selects a model; invoking it is the caller's job.
    """

    def __init__(
        self,
        config_store: ComplianceConfigStore,
        availability: OnPremAvailability,
        audit_sink: AuditSink | None = None,
        *,
        catalog: CloudCatalog | None = None,
        on_prem_config_store: OnPremConfigStore | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._config_store = config_store
        self._selector = ModelSelector(availability, catalog)
        self._audit_sink = audit_sink
        self._on_prem_config_store = on_prem_config_store
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings_path: str | Path = DEFAULT_SETTINGS_PATH,
        audit_path: str | Path | None = None,
    ) -> "ComplianceRouter":
        """Router wired to a JSON settings file, HTTP discovery and a JSONL audit file."""
        store = JsonFileSettingsStore(settings_path)
        on_prem_store = OnPremConfigStore(store)
        audit_path = audit_path or Path(settings_path).with_name("routing_audit.jsonl")
        return cls(
            ComplianceConfigStore(store),
            HttpOnPremAvailability(on_prem_store),
            JsonlAuditSink(audit_path),
            on_prem_config_store=on_prem_store,
        )

    @property
    def selector(self) -> ModelSelector:
        return self._selector

    def _on_prem_enabled(self) -> bool:
        if self._on_prem_config_store is None:
            return True  # availability provider alone decides
        return self._on_prem_config_store.get().enabled

    async def route(self, context: RoutingContext) -> RoutingResult:
        """Route one request.

        Never raises for unavailability or audit failures; those are recorded
        in compliance_notes and the log. An empty cloud catalog is rejected
        earlier, when the router is built (EmptyCatalogError).
        """
        config = self._config_store.get()
        if context.data_classification is not None:
            config = replace(config, data_classification=context.data_classification)
        if context.target_environment is not None:
            config = replace(config, target_environment=context.target_environment)

        policy = requires_on_prem(context.task, config)
        notes: list[str] = [policy.reason]
        use_on_prem = self._resolve_overrides(context, policy, notes)

        model: ModelDescriptor
        if use_on_prem:
            model, reason = await self._select_on_prem(context, notes)
        else:
            model = self._selector.select_cloud_model(context.task, context.user_preferred_model)
            reason = f"Selected {model.name} for cloud processing"

        result = RoutingResult(
            model_type=model.model_type,
            model_id=model.id,
            model_config=model,
            reason=reason,
            compliance_notes=tuple(notes),
        )
        logger.info(f"Route: {result.model_type.value} ({policy.category.value}) → {describe(model)}")

        if config.audit_enabled:
            entry = self._audit_entry(result, policy, config)
            result = result.with_audit(entry)
            await emit(self._audit_sink, entry)

        return result

    @staticmethod
    def _resolve_overrides(context: RoutingContext, policy: PolicyDecision, notes: list[str]) -> bool:
        if context.force_on_prem:
            notes.append(NOTE_FORCED_ON_PREM)
            return True
        if context.force_cloud and not policy.required:
            notes.append(NOTE_FORCED_CLOUD)
            return False
        if context.force_cloud and policy.required:
            notes.append(NOTE_CLOUD_OVERRIDDEN)
            logger.warning(f"Route: cloud request overridden by compliance ({policy.reason})")
            return True
        return policy.required

    async def _select_on_prem(
        self, context: RoutingContext, notes: list[str],
    ) -> tuple[ModelDescriptor, str]:
        if not self._on_prem_enabled():
            notes.append(NOTE_ON_PREM_DISABLED)
            logger.warning("Route: on-prem required but disabled — falling back to cloud")
            cloud = self._selector.select_cloud_model(context.task, context.user_preferred_model)
            return cloud, "On-prem fallback to cloud"

        on_prem = await self._selector.select_on_prem_model(context.task)
        if on_prem is None:
            notes.append(NOTE_NO_ON_PREM_MODELS)
            logger.warning("Route: no on-prem models available — falling back to cloud")
            cloud = self._selector.select_cloud_model(context.task, context.user_preferred_model)
            return cloud, "No on-prem models available"

        return on_prem, f"Selected {on_prem.display_name} for on-prem processing"

    def _audit_entry(
        self, result: RoutingResult, policy: PolicyDecision, config: ComplianceConfig,
    ) -> AuditEntry:
        return AuditEntry(
            timestamp=self._clock(),
            task_category=policy.category,
            model_type=result.model_type,
            model_id=result.model_id,
            data_classification=config.data_classification,
            target_environment=config.target_environment,
            reason=result.reason,
            approved=True,  # no human approval gate; every decision is auto-approved
        )


def describe(model: ModelDescriptor) -> str:
    """Human-readable label for either model variant."""
    if isinstance(model, OnPremModel):
        return f"{model.display_name} (on-prem, {model.provider})"
    if isinstance(model, CloudModel):
        return f"{model.name} ({model.provider})"
    raise TypeError(f"Unknown model descriptor: {model!r}")
