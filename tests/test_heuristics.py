"""Tests for the keyword task classifier."""

import pytest

from compliance_router.heuristics import SENSITIVE_CATEGORIES, TASK_RULES, classify, is_sensitive
from compliance_router.models import TaskCategory


@pytest.mark.parametrize(
    "task, expected",
    [
        ("fix the login bug", TaskCategory.CODE),
        ("Refactor the payment module", TaskCategory.CODE),
        ("query the customer database", TaskCategory.DATA),
        ("write unit tests for the parser", TaskCategory.TEST),
        ("deploy to production", TaskCategory.DEPLOY),
        ("design a landing page layout", TaskCategory.DESIGN),
        ("explain this", TaskCategory.DOCUMENT),
        ("research best practices for caching", TaskCategory.RESEARCH),
        ("hello there", TaskCategory.GENERAL),
        ("", TaskCategory.GENERAL),
    ],
)
def test_classify(task, expected):
    assert classify(task) is expected


def test_classify_is_case_insensitive():
    assert classify("DEBUG THE CRASH") is TaskCategory.CODE


def test_classify_matches_whole_words_only():
    # "documentation" is not the keyword "document"
    assert classify("write documentation") is TaskCategory.GENERAL


def test_earlier_rule_wins():
    task = "refactor the research notes"
    assert TASK_RULES[0].pattern.search(task)
    assert TASK_RULES[-1].pattern.search(task)
    assert classify(task) is TaskCategory.CODE


def test_classify_is_deterministic():
    task = "look up how to configure docker"
    assert len({classify(task) for _ in range(20)}) == 1


def test_rule_order():
    assert [r.category for r in TASK_RULES] == [
        TaskCategory.CODE,
        TaskCategory.DATA,
        TaskCategory.TEST,
        TaskCategory.DEPLOY,
        TaskCategory.DESIGN,
        TaskCategory.DOCUMENT,
        TaskCategory.RESEARCH,
    ]


def test_sensitive_table():
    assert SENSITIVE_CATEGORIES == {
        TaskCategory.CODE, TaskCategory.DATA, TaskCategory.TEST, TaskCategory.DEPLOY,
    }
    for category in (TaskCategory.DESIGN, TaskCategory.DOCUMENT, TaskCategory.RESEARCH, TaskCategory.GENERAL):
        assert not is_sensitive(category)
