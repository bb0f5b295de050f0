"""
Error taxonomy for webhook event handling.

Every error is terminal for the event being handled; nothing is retried.
``status_code`` is the HTTP status the webhook route answers with.
"""

from typing import Optional


class WorkflowBotError(Exception):
    """Base exception for workflow bot errors."""

    status_code: int = 500


class DecodeError(WorkflowBotError):
    """Inbound payload is malformed or misses a required field."""

    status_code = 400


class AddressingError(WorkflowBotError):
    """Hosting base URL or repository identity cannot be derived from the event."""

    status_code = 500


class ConfigError(WorkflowBotError):
    """Workflow configuration could not be fetched or parsed."""

    status_code = 500


class RemoteError(WorkflowBotError):
    """A Bitbucket REST call did not report success."""

    status_code = 502

    def __init__(self, detail: str, remote_status: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        self.remote_status = remote_status


class NotFoundError(RemoteError):
    """The requested remote resource does not exist."""
