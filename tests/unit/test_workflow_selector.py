"""
Unit tests for workflow rule selection.
"""

import pytest

from app.models.workflow import BranchPatternPair, WorkflowConfig, WorkflowRule
from app.services.workflow_selector import WorkflowSelector, normalize_branch


def make_rule(comment, *pairs, tasks=()):
    return WorkflowRule(
        merge=[BranchPatternPair(from_pattern=f, to_pattern=t) for f, t in pairs],
        comment=comment,
        tasks=list(tasks),
    )


@pytest.fixture
def selector():
    return WorkflowSelector()


def test_normalize_branch_strips_heads_prefix():
    assert normalize_branch("refs/heads/feature/x") == "feature/x"
    assert normalize_branch("feature/x") == "feature/x"
    assert normalize_branch("refs/tags/v1") == "refs/tags/v1"


def test_first_matching_rule_wins(selector):
    """Test that rule A is returned when both A and B match."""
    rule_a = make_rule("A", ("*", "main"))
    rule_b = make_rule("B", ("feature/*", "main"))
    config = WorkflowConfig(workflow=[rule_a, rule_b])

    assert selector.select(config, "feature/x", "main") is rule_a


def test_later_rule_selected_when_earlier_does_not_match(selector):
    rule_a = make_rule("A", ("hotfix/*", "main"))
    rule_b = make_rule("B", ("feature/*", "main"))
    config = WorkflowConfig(workflow=[rule_a, rule_b])

    assert selector.select(config, "feature/x", "main") is rule_b


def test_pairs_are_ored_and_sides_are_anded(selector):
    """Test AND across a pair's sides and OR across a rule's pairs."""
    rule = make_rule("release", ("main", "release"), ("develop", "release"))
    config = WorkflowConfig(workflow=[rule])

    assert selector.select(config, "main", "release") is rule
    assert selector.select(config, "develop", "release") is rule
    assert selector.select(config, "main", "hotfix") is None
    assert selector.select(config, "develop", "main") is None


def test_full_refs_are_normalized(selector):
    rule = make_rule("A", ("feature/*", "develop"))
    config = WorkflowConfig(workflow=[rule])

    assert selector.select(config, "refs/heads/feature/x", "refs/heads/develop") is rule


def test_no_match_returns_none(selector):
    config = WorkflowConfig(workflow=[make_rule("A", ("release/*", "main"))])

    assert selector.select(config, "feature/x", "main") is None


def test_empty_config_returns_none(selector):
    assert selector.select(WorkflowConfig(workflow=[]), "a", "b") is None


def test_invalid_pattern_does_not_match(selector):
    rule_a = make_rule("A", ("[broken", "main"))
    rule_b = make_rule("B", ("*", "main"))
    config = WorkflowConfig(workflow=[rule_a, rule_b])

    assert selector.select(config, "[broken", "main") is rule_b
