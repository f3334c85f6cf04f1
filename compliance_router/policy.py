"""Compliance policy: decide whether a task must be processed on-prem."""

from dataclasses import dataclass

from compliance_router.heuristics import classify, is_sensitive
from compliance_router.models import (
    ComplianceConfig,
    DataClassification,
    TargetEnvironment,
    TaskCategory,
)

# Strict mode keeps everything but public data on-prem.
STRICT_CLASSIFICATIONS = frozenset({
    DataClassification.INTERNAL,
    DataClassification.CONFIDENTIAL,
    DataClassification.RESTRICTED,
})
SENSITIVE_ENVIRONMENTS = frozenset({TargetEnvironment.PRODUCTION, TargetEnvironment.STAGING})
SENSITIVE_CLASSIFICATIONS = frozenset({
    DataClassification.CONFIDENTIAL,
    DataClassification.RESTRICTED,
})


@dataclass(frozen=True)
class PolicyDecision:
    """Outcome of policy evaluation."""
    required: bool
    reason: str  # shown to the user as a compliance note
    category: TaskCategory


def requires_on_prem(task: str, config: ComplianceConfig) -> PolicyDecision:
    """Evaluate the on-prem requirement for ``task`` under ``config``.

    Precedence:
      1. Strict mode with non-public data → on-prem
      2. Sensitive category targeting production/staging → on-prem
      3. Sensitive category with confidential/restricted data → on-prem
      4. Otherwise cloud is allowed
    """
    category = classify(task)
    classification = config.data_classification
    environment = config.target_environment

    if config.strict_mode and classification in STRICT_CLASSIFICATIONS:
        return PolicyDecision(
            True,
            f"Strict mode enabled for {classification.value} data classification",
            category,
        )

    if is_sensitive(category):
        if environment in SENSITIVE_ENVIRONMENTS:
            return PolicyDecision(
                True,
                f"{category.value} tasks require on-prem in {environment.value} environment",
                category,
            )
        if classification in SENSITIVE_CLASSIFICATIONS:
            return PolicyDecision(
                True,
                f"{classification.value} data requires on-prem processing",
                category,
            )

    if category is TaskCategory.GENERAL:
        return PolicyDecision(False, "General task - cloud allowed", category)
    return PolicyDecision(False, f"{category.value} tasks allowed on cloud", category)
