"""compliance-router: compliance-aware routing between on-prem and cloud AI models."""

from compliance_router.models import (
    AuditEntry,
    CloudModel,
    ComplianceConfig,
    DataClassification,
    ModelDescriptor,
    ModelType,
    OnPremModel,
    RoutingContext,
    RoutingResult,
    TargetEnvironment,
    TaskCategory,
)
from compliance_router.heuristics import classify
from compliance_router.policy import PolicyDecision, requires_on_prem
from compliance_router.catalog import CLOUD_MODELS, CloudCatalog, EmptyCatalogError
from compliance_router.onprem import (
    HttpOnPremAvailability,
    OnPremAvailability,
    OnPremConfig,
    StaticOnPremAvailability,
)
from compliance_router.health import EndpointHealth
from compliance_router.selector import ModelSelector
from compliance_router.settings import (
    ComplianceConfigStore,
    JsonFileSettingsStore,
    MemorySettingsStore,
    OnPremConfigStore,
)
from compliance_router.audit import AuditSink, InMemoryAuditLog, JsonlAuditSink
from compliance_router.router import ComplianceRouter

__all__ = [
    "AuditEntry",
    "CloudModel",
    "ComplianceConfig",
    "DataClassification",
    "ModelDescriptor",
    "ModelType",
    "OnPremModel",
    "RoutingContext",
    "RoutingResult",
    "TargetEnvironment",
    "TaskCategory",
    "classify",
    "PolicyDecision",
    "requires_on_prem",
    "CLOUD_MODELS",
    "CloudCatalog",
    "EmptyCatalogError",
    "HttpOnPremAvailability",
    "OnPremAvailability",
    "OnPremConfig",
    "StaticOnPremAvailability",
    "EndpointHealth",
    "ModelSelector",
    "ComplianceConfigStore",
    "JsonFileSettingsStore",
    "MemorySettingsStore",
    "OnPremConfigStore",
    "AuditSink",
    "InMemoryAuditLog",
    "JsonlAuditSink",
    "ComplianceRouter",
]
