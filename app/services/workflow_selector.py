"""
Workflow rule selection.

Rules are tried in declared order and the first rule with at least one
matching (from, to) pattern pair wins.
"""

from typing import Optional

from app.models.workflow import BranchPatternPair, WorkflowConfig, WorkflowRule
from app.services.pattern_matcher import PatternMatcher


BRANCH_REF_PREFIX = "refs/heads/"


def normalize_branch(ref_id: str) -> str:
    """Strip the ``refs/heads/`` namespace so patterns target short branch names."""
    if ref_id.startswith(BRANCH_REF_PREFIX):
        return ref_id[len(BRANCH_REF_PREFIX):]
    return ref_id


class WorkflowSelector:
    """Selects the workflow rule applying to a source/target branch pair."""

    def __init__(self, matcher: Optional[PatternMatcher] = None):
        self.matcher = matcher or PatternMatcher()

    def pair_matches(self, pair: BranchPatternPair, from_branch: str, to_branch: str) -> bool:
        return (
            self.matcher.matches(pair.from_pattern, from_branch)
            and self.matcher.matches(pair.to_pattern, to_branch)
        )

    def select(self, config: WorkflowConfig, from_branch: str, to_branch: str) -> Optional[WorkflowRule]:
        """
        Find the first rule matching the branch pair.

        Args:
            config: Parsed workflow configuration
            from_branch: Source branch, short name or full ref
            to_branch: Target branch, short name or full ref

        Returns:
            The first matching rule, or None when no rule applies
        """
        from_branch = normalize_branch(from_branch)
        to_branch = normalize_branch(to_branch)

        for rule in config.workflow:
            if any(self.pair_matches(pair, from_branch, to_branch) for pair in rule.merge):
                return rule
        return None
