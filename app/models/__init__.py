"""Data models for the Bitbucket Task Bot."""

from .api_response import WebhookResponse
from .comment import (
    CommentCreate,
    CommentParent,
    CommentResponse,
    CommentSeverity,
    TaskAnchor,
    TaskCreate,
)
from .pr_event import (
    PR_OPENED_EVENT_KEY,
    Link,
    Links,
    Project,
    PullRequest,
    PullRequestOpenedEvent,
    Ref,
    Repository,
)
from .workflow import BranchPatternPair, WorkflowConfig, WorkflowRule

__all__ = [
    # PR event models
    "PR_OPENED_EVENT_KEY",
    "PullRequestOpenedEvent",
    "PullRequest",
    "Ref",
    "Repository",
    "Project",
    "Links",
    "Link",
    # Workflow configuration models
    "WorkflowConfig",
    "WorkflowRule",
    "BranchPatternPair",
    # Comment and task models
    "CommentSeverity",
    "CommentParent",
    "CommentCreate",
    "CommentResponse",
    "TaskAnchor",
    "TaskCreate",
    # API response models
    "WebhookResponse",
]
