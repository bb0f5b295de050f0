"""
Workflow Executor component.

Turns an inbound Bitbucket webhook payload into the configured pull request
actions. Handling goes through these states, in order, without retries:

1. decode_event      - parse the payload, short-circuit tests and other events
2. derive_addressing - Bitbucket base URL and target repository
3. load_config       - fetch and parse the workflow file; failures are
                       reported as a pull request comment, then re-raised
4. select_rule       - first matching rule, or ignore the event
5. execute_rule      - one comment, then its tasks strictly one at a time
"""

import json
from typing import Any, AsyncContextManager, Callable, Optional, Union
from urllib.parse import urlparse

from pydantic import ValidationError

from app.config import settings
from app.models.api_response import WebhookResponse
from app.models.pr_event import PR_OPENED_EVENT_KEY, PullRequestOpenedEvent, Repository
from app.models.workflow import WorkflowRule
from app.services.bitbucket_client import BitbucketClient, HostingGateway
from app.services.errors import AddressingError, ConfigError, DecodeError, RemoteError
from app.services.workflow_config_loader import WorkflowConfigLoader
from app.services.workflow_selector import WorkflowSelector, normalize_branch
from app.utils.logging import (
    get_logger,
    log_error_with_context,
    log_pr_event,
    log_state_transition,
)


logger = get_logger(__name__)

GatewayFactory = Callable[[str, str], AsyncContextManager[HostingGateway]]


def derive_base_url(href: str) -> str:
    """
    Reduce a pull request self link to the Bitbucket instance root.

    Args:
        href: Self link, e.g. https://git.example.com:7990/projects/P/repos/r/pull-requests/1

    Returns:
        Scheme, host and optional port with a trailing slash

    Raises:
        AddressingError: If the link is not an absolute http(s) URL
    """
    try:
        parsed = urlparse(href)
        # Accessing the port validates it
        parsed.port
    except ValueError as e:
        raise AddressingError(f"Error reading URL: {href}") from e

    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise AddressingError(f"Error reading URL: {href}")

    return f"{parsed.scheme}://{parsed.netloc}/"


def default_gateway_factory(base_url: str, bearer: str) -> BitbucketClient:
    return BitbucketClient(
        base_url,
        bearer,
        timeout=settings.http_timeout_seconds,
        verify_ssl=settings.verify_ssl,
        task_api=settings.task_api,
    )


class WorkflowExecutor:
    """Handles Bitbucket webhook events for the configured branch workflows."""

    def __init__(
        self,
        gateway_factory: Optional[GatewayFactory] = None,
        config_path: Optional[str] = None,
        selector: Optional[WorkflowSelector] = None,
    ):
        """
        Initialize the executor.

        Args:
            gateway_factory: Builds a gateway for (base_url, bearer); the
                result is used as an async context manager for one event
            config_path: Repository path of the workflow file
            selector: Rule selector, shared across events
        """
        self.gateway_factory = gateway_factory or default_gateway_factory
        self.config_path = config_path or settings.workflow_config_path
        self.selector = selector or WorkflowSelector()

    def decode_event(self, payload: Union[bytes, str]) -> Union[PullRequestOpenedEvent, WebhookResponse]:
        """
        Decode a raw webhook payload.

        Returns:
            The decoded event, or a terminal WebhookResponse for connectivity
            tests and events the bot does not handle

        Raises:
            DecodeError: If the payload is not JSON or misses required fields
        """
        try:
            data: Any = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(f"Invalid JSON payload: {e}") from e

        if not isinstance(data, dict):
            raise DecodeError("Invalid payload: expected a JSON object")

        if data.get("test") is True:
            logger.info("Received Bitbucket connection test")
            return WebhookResponse(status="success", message="Success")

        event_key = data.get("eventKey")
        if event_key != PR_OPENED_EVENT_KEY:
            logger.info(f"Ignoring event: {event_key}")
            return WebhookResponse(status="ignored", message="Ignoring unexpected payload")

        try:
            return PullRequestOpenedEvent.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"Invalid PR event payload: {e}") from e

    async def handle_payload(self, payload: Union[bytes, str], bearer: str) -> WebhookResponse:
        """
        Handle one webhook call end to end.

        Args:
            payload: Raw request body
            bearer: Bearer token for all Bitbucket calls made for this event

        Returns:
            WebhookResponse with status 'success' or 'ignored'

        Raises:
            DecodeError, AddressingError, ConfigError, RemoteError
        """
        decoded = self.decode_event(payload)
        if isinstance(decoded, WebhookResponse):
            return decoded
        return await self.handle_pr_opened(decoded, bearer)

    async def handle_pr_opened(self, event: PullRequestOpenedEvent, bearer: str) -> WebhookResponse:
        pr = event.pull_request
        repository = pr.to_ref.repository

        log_pr_event(logger, pr_id=pr.id, repository=repository.full_name, event_key=event.event_key)

        if not pr.links.self_link:
            raise AddressingError(f"Pull request {pr.id} carries no self link")
        base_url = derive_base_url(pr.links.self_link[0].href)

        event_logger = logger.with_context(pr_id=pr.id, repository=repository.full_name)
        from_branch = normalize_branch(pr.from_ref.id)
        to_branch = normalize_branch(pr.to_ref.id)

        async with self.gateway_factory(base_url, bearer) as gateway:
            log_state_transition(event_logger, pr.id, "load_config", "started")
            try:
                config = await WorkflowConfigLoader(gateway, self.config_path).load(repository)
            except ConfigError as e:
                log_state_transition(event_logger, pr.id, "load_config", "failed")
                await self._report_config_error(gateway, repository, pr.id, e)
                raise

            rule = self.selector.select(config, from_branch, to_branch)
            if rule is None:
                event_logger.info(f"No workflow for merge {from_branch} -> {to_branch}")
                return WebhookResponse(status="ignored", message="No workflow")

            event_logger.info(f"Triggering workflow for merge {from_branch} -> {to_branch}")
            log_state_transition(event_logger, pr.id, "execute_rule", "started")
            await self.execute_rule(gateway, repository, pr.id, rule)
            log_state_transition(event_logger, pr.id, "execute_rule", "completed")

        return WebhookResponse(status="success", message="Success")

    async def execute_rule(
        self,
        gateway: HostingGateway,
        repository: Repository,
        pull_request_id: int,
        rule: WorkflowRule,
    ) -> None:
        """
        Post the rule's comment, then create its tasks in order.

        The first failure stops the sequence; tasks already created are kept.

        Raises:
            RemoteError: If the comment or any task cannot be created
        """
        comment_id = await gateway.post_comment(repository, pull_request_id, rule.comment)
        logger.info(f"Commented with id: {comment_id}", extra={"pr_id": pull_request_id})

        for position, task in enumerate(rule.tasks, start=1):
            try:
                await gateway.create_task(repository, pull_request_id, comment_id, task)
            except RemoteError:
                logger.error(
                    f"Task {position}/{len(rule.tasks)} failed, skipping remaining tasks",
                    extra={"pr_id": pull_request_id},
                )
                raise

    async def _report_config_error(
        self,
        gateway: HostingGateway,
        repository: Repository,
        pull_request_id: int,
        error: ConfigError,
    ) -> None:
        """Post a single comment explaining a config failure on the pull request."""
        log_error_with_context(
            logger,
            f"Error loading config file: {error}",
            error,
            pr_id=pull_request_id,
            repository=repository.full_name,
        )
        message = (
            f"Error reading {self.config_path} configuration file "
            f"from default branch: {error}"
        )
        try:
            await gateway.post_comment(repository, pull_request_id, message)
        except RemoteError as comment_error:
            logger.error(
                f"Could not report config error on PR {pull_request_id}: {comment_error} "
                f"(original error: {error})"
            )
            raise comment_error from error
