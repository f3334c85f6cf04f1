"""Core data models for compliance-router."""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Union


class TaskCategory(str, Enum):
    """Closed set of task categories produced by the classifier."""
    CODE = "code"
    DATA = "data"
    TEST = "test"
    DEPLOY = "deploy"
    DESIGN = "design"
    DOCUMENT = "document"
    RESEARCH = "research"
    GENERAL = "general"


class DataClassification(str, Enum):
    """Sensitivity label of the data a task touches, ordered low to high."""
    PUBLIC = "public"
    INTERNAL = "internal"
    CONFIDENTIAL = "confidential"
    RESTRICTED = "restricted"

    @property
    def rank(self) -> int:
        return _CLASSIFICATION_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, DataClassification):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, DataClassification):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, DataClassification):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, DataClassification):
            return NotImplemented
        return self.rank >= other.rank


_CLASSIFICATION_RANK = {
    DataClassification.PUBLIC: 0,
    DataClassification.INTERNAL: 1,
    DataClassification.CONFIDENTIAL: 2,
    DataClassification.RESTRICTED: 3,
}


class TargetEnvironment(str, Enum):
    PRODUCTION = "production"
    STAGING = "staging"
    DEVELOPMENT = "development"
    LOCAL = "local"


class ModelType(str, Enum):
    ONPREM = "onprem"
    CLOUD = "cloud"


@dataclass(frozen=True)
class ComplianceConfig:
    """Ambient compliance settings. Never mutated; updates build a new object."""
    enabled: bool = True
    data_classification: DataClassification = DataClassification.INTERNAL
    target_environment: TargetEnvironment = TargetEnvironment.DEVELOPMENT
    audit_enabled: bool = True
    strict_mode: bool = False  # on-prem for every non-public classification

    def merged(self, **changes: Any) -> "ComplianceConfig":
        """Return a copy with ``changes`` applied (values may be raw strings)."""
        return ComplianceConfig.from_dict({**self.to_dict(), **changes})

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "data_classification": self.data_classification.value,
            "target_environment": self.target_environment.value,
            "audit_enabled": self.audit_enabled,
            "strict_mode": self.strict_mode,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ComplianceConfig":
        """Build a config from a mapping, filling gaps from the defaults.

        Raises:
            ValueError: If an enum value is unknown.
            TypeError: If a flag is not a boolean.
        """
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        for flag in ("enabled", "audit_enabled", "strict_mode"):
            if flag in values and not isinstance(values[flag], bool):
                raise TypeError(f"{flag} must be a boolean, got {values[flag]!r}")
        if "data_classification" in values:
            values["data_classification"] = DataClassification(values["data_classification"])
        if "target_environment" in values:
            values["target_environment"] = TargetEnvironment(values["target_environment"])
        return cls(**values)


@dataclass(frozen=True)
class RoutingContext:
    """Per-request routing input. Optional fields override the ambient config."""
    task: str
    data_classification: DataClassification | None = None
    target_environment: TargetEnvironment | None = None
    user_preferred_model: str | None = None
    force_on_prem: bool = False
    force_cloud: bool = False

    def __post_init__(self):
        # Accept raw strings ("confidential"); unknown values raise ValueError.
        if self.data_classification is not None:
            object.__setattr__(self, "data_classification", DataClassification(self.data_classification))
        if self.target_environment is not None:
            object.__setattr__(self, "target_environment", TargetEnvironment(self.target_environment))


@dataclass(frozen=True)
class OnPremModel:
    """A model served from the organization's own infrastructure."""
    id: str
    display_name: str
    endpoint: str
    model_id: str
    provider: str = "ollama"  # "ollama", "vllm", "llamacpp", "openai-compatible"
    context_length: int | None = None
    description: str | None = None
    capabilities: frozenset[str] = frozenset()

    model_type = ModelType.ONPREM


@dataclass(frozen=True)
class CloudModel:
    """A third-party hosted model from the static catalog."""
    id: str
    name: str
    provider: str
    description: str
    recommended: bool = False

    model_type = ModelType.CLOUD


ModelDescriptor = Union[OnPremModel, CloudModel]


@dataclass(frozen=True)
class AuditEntry:
    """One routing decision, as recorded for compliance review."""
    timestamp: datetime
    task_category: TaskCategory
    model_type: ModelType
    model_id: str
    data_classification: DataClassification
    target_environment: TargetEnvironment
    reason: str
    approved: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "task_category": self.task_category.value,
            "model_type": self.model_type.value,
            "model_id": self.model_id,
            "data_classification": self.data_classification.value,
            "target_environment": self.target_environment.value,
            "reason": self.reason,
            "approved": self.approved,
        }


@dataclass(frozen=True)
class RoutingResult:
    """Result of routing: which model to call and why."""
    model_type: ModelType
    model_id: str
    model_config: ModelDescriptor
    reason: str
    compliance_notes: tuple[str, ...] = field(default_factory=tuple)
    audit_log: AuditEntry | None = None

    @property
    def is_on_prem(self) -> bool:
        return self.model_type is ModelType.ONPREM

    def with_audit(self, entry: AuditEntry) -> "RoutingResult":
        return replace(self, audit_log=entry)
