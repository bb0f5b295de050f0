"""Workflow configuration data models."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class BranchPatternPair(BaseModel):
    """Source and target branch wildcard patterns; both sides must match."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_pattern: str = Field(alias="from")
    to_pattern: str = Field(alias="to")


class WorkflowRule(BaseModel):
    """A rule pairing branch conditions with a comment and its follow-up tasks."""

    model_config = ConfigDict(frozen=True)

    merge: List[BranchPatternPair] = Field(min_length=1)
    comment: str
    tasks: List[str] = []


class WorkflowConfig(BaseModel):
    """Parsed workflow configuration; rules are tried in file order."""

    model_config = ConfigDict(frozen=True)

    workflow: List[WorkflowRule]
