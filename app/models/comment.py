"""Comment and task request/response models for the Bitbucket REST API."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CommentSeverity(str, Enum):
    """Severity of a pull request comment; BLOCKER comments are tasks."""

    NORMAL = "NORMAL"
    BLOCKER = "BLOCKER"


class CommentParent(BaseModel):
    id: int


class CommentCreate(BaseModel):
    """Body for creating a pull request comment, or a reply task when parented."""

    text: str
    parent: Optional[CommentParent] = None
    severity: Optional[CommentSeverity] = None


class CommentResponse(BaseModel):
    """Created comment; only the server-assigned id is used."""

    id: int


class TaskAnchor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    anchor_type: str = Field(default="COMMENT", alias="type")


class TaskCreate(BaseModel):
    """Body for the legacy ``/rest/api/1.0/tasks`` endpoint."""

    anchor: TaskAnchor
    text: str
