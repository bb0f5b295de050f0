"""
Webhook endpoint for Bitbucket Server pull request events.
"""

import logging

from fastapi import APIRouter, HTTPException, Query, Request

from app.models.api_response import WebhookResponse
from app.services.errors import WorkflowBotError
from app.services.workflow_executor import WorkflowExecutor

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])

# Stateless; one instance serves all events
workflow_executor = WorkflowExecutor()


@router.post("/hook", response_model=WebhookResponse)
async def handle_bitbucket_webhook(
    request: Request,
    bearer: str = Query(..., description="Bearer token used for Bitbucket REST calls")
) -> WebhookResponse:
    """
    Receive a Bitbucket webhook and run the matching workflow.

    Connection tests and events other than ``pr:opened`` are acknowledged
    without further processing.

    Args:
        request: FastAPI request object
        bearer: Bearer token for calls back to Bitbucket

    Returns:
        WebhookResponse with status 'success' or 'ignored'

    Raises:
        HTTPException: With the underlying cause in ``detail`` when handling fails
    """
    payload = await request.body()
    logger.info(f"Received event: {payload.decode('utf-8', errors='replace')}")

    try:
        return await workflow_executor.handle_payload(payload, bearer)
    except WorkflowBotError as e:
        logger.error(f"Error handling webhook: {e}", exc_info=True)
        raise HTTPException(status_code=e.status_code, detail=str(e))
