"""Keyword heuristics that map a task description to a TaskCategory.

Rules are evaluated top to bottom and the first match wins, so a task that
mentions both "refactor" and "research" is a code task. Keep the table
ordered by precedence, not alphabetically.
"""

import re
from dataclasses import dataclass

from compliance_router.models import TaskCategory


@dataclass(frozen=True)
class TaskRule:
    """One row of the classification table."""

    pattern: re.Pattern
    category: TaskCategory
    sensitive: bool  # code/data may leave the building if routed to cloud


def _rule(regex: str, category: TaskCategory, sensitive: bool) -> TaskRule:
    return TaskRule(re.compile(regex, re.IGNORECASE), category, sensitive)


TASK_RULES: tuple[TaskRule, ...] = (
    _rule(
        r"\b(code|function|implement|refactor|debug|fix|write.*class|method|variable)\b",
        TaskCategory.CODE, True,
    ),
    _rule(
        r"\b(data|database|query|sql|api|fetch|user.*data|customer|patient|financial)\b",
        TaskCategory.DATA, True,
    ),
    _rule(
        r"\b(test|spec|unit|integration|e2e|cypress|jest|vitest|prod.*test|staging)\b",
        TaskCategory.TEST, True,
    ),
    _rule(
        r"\b(deploy|release|production|staging|ci/cd|pipeline|kubernetes|docker)\b",
        TaskCategory.DEPLOY, True,
    ),
    _rule(
        r"\b(design|mockup|ui|ux|layout|wireframe|figma|prototype|visual)\b",
        TaskCategory.DESIGN, False,
    ),
    _rule(
        r"\b(document|readme|wiki|guide|tutorial|explain|describe)\b",
        TaskCategory.DOCUMENT, False,
    ),
    _rule(
        r"\b(research|search|find|look.*up|best.*practice|how.*to|what.*is)\b",
        TaskCategory.RESEARCH, False,
    ),
)

SENSITIVE_CATEGORIES: frozenset[TaskCategory] = frozenset(
    rule.category for rule in TASK_RULES if rule.sensitive
)


def classify(task: str, rules: tuple[TaskRule, ...] = TASK_RULES) -> TaskCategory:
    """Return the category of the first rule matching ``task``, else GENERAL."""
    for rule in rules:
        if rule.pattern.search(task):
            return rule.category
    return TaskCategory.GENERAL


def is_sensitive(category: TaskCategory) -> bool:
    """True for categories whose work product must stay on-prem under policy."""
    return category in SENSITIVE_CATEGORIES
