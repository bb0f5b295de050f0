"""API response data models."""

from pydantic import BaseModel


class WebhookResponse(BaseModel):
    """Response from webhook handler."""

    status: str  # 'success' or 'ignored'
    message: str
