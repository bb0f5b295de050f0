"""Pull request event data models.

Only the subset of the Bitbucket Server webhook payload the bot needs is
modelled; unknown fields are ignored.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


PR_OPENED_EVENT_KEY = "pr:opened"


class Project(BaseModel):
    """Bitbucket project owning a repository."""

    key: str


class Repository(BaseModel):
    """Repository addressed by project key and slug."""

    model_config = ConfigDict(frozen=True)

    slug: str
    project: Project

    @property
    def full_name(self) -> str:
        return f"{self.project.key}/{self.slug}"


class Ref(BaseModel):
    """Branch reference, e.g. ``refs/heads/main``."""

    id: str
    repository: Repository


class Link(BaseModel):
    href: str


class Links(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    self_link: List[Link] = Field(alias="self")


class PullRequest(BaseModel):
    """Pull request as carried by the webhook payload."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    from_ref: Ref = Field(alias="fromRef")
    to_ref: Ref = Field(alias="toRef")
    links: Links


class PullRequestOpenedEvent(BaseModel):
    """``pr:opened`` webhook event."""

    model_config = ConfigDict(populate_by_name=True)

    event_key: str = Field(alias="eventKey")
    pull_request: PullRequest = Field(alias="pullRequest")
