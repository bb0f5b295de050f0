"""
Bitbucket Server REST client.

Implements the three calls the workflow executor depends on: posting a pull
request comment, reading a raw file from a repository's default branch and
creating a task anchored to a comment. Every call is a single attempt; a
non-success status raises RemoteError.
"""

import time
from typing import Optional, Protocol

import httpx
from pydantic import ValidationError

from app.models.comment import (
    CommentCreate,
    CommentParent,
    CommentResponse,
    CommentSeverity,
    TaskAnchor,
    TaskCreate,
)
from app.models.pr_event import Repository
from app.services.errors import NotFoundError, RemoteError
from app.utils.logging import get_logger, log_api_call


logger = get_logger(__name__)


class HostingGateway(Protocol):
    """Remote operations the workflow executor needs from the hosting service."""

    async def post_comment(self, repository: Repository, pull_request_id: int, text: str) -> int:
        ...

    async def fetch_raw_file(self, repository: Repository, path: str) -> bytes:
        ...

    async def create_task(
        self,
        repository: Repository,
        pull_request_id: int,
        comment_id: int,
        text: str,
    ) -> None:
        ...


class BitbucketClient:
    """
    HostingGateway implementation for Bitbucket Server REST API 1.0.

    One client is created per webhook event with the bearer token supplied
    by that event's caller. Use it as an async context manager so the
    underlying connection pool is closed when the event is done.
    """

    def __init__(
        self,
        base_url: str,
        bearer: str,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        task_api: str = "comment",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Bitbucket instance root, with trailing slash
            bearer: Bearer token used for every request
            timeout: Per-request timeout in seconds
            verify_ssl: Whether to verify TLS certificates
            task_api: 'comment' to create tasks as BLOCKER reply comments,
                'legacy' to use the /tasks endpoint
            transport: Optional httpx transport (used by tests)
        """
        if task_api not in ("comment", "legacy"):
            raise ValueError(f"Unsupported task API: {task_api}")

        self.base_url = base_url
        self.rest_api_base_url = f"{base_url}rest/api/1.0/"
        self.task_api = task_api
        self._http = httpx.AsyncClient(
            headers={"Authorization": f"Bearer {bearer}"},
            timeout=timeout,
            verify=verify_ssl,
            transport=transport,
        )

    async def __aenter__(self) -> "BitbucketClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    def repo_base_url(self, repository: Repository) -> str:
        return (
            f"{self.rest_api_base_url}projects/{repository.project.key}"
            f"/repos/{repository.slug}/"
        )

    async def _request(
        self,
        method: str,
        url: str,
        expected_status: int,
        action: str,
        json: Optional[dict] = None,
    ) -> httpx.Response:
        """
        Send a single request and check the status code.

        Raises:
            NotFoundError: If the remote answers 404
            RemoteError: On transport failure or any other unexpected status
        """
        start_time = time.monotonic()
        try:
            response = await self._http.request(method, url, json=json)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            duration_ms = (time.monotonic() - start_time) * 1000
            log_api_call(
                logger,
                service="bitbucket",
                endpoint=url,
                method=method,
                duration_ms=duration_ms,
                error=str(e),
            )
            raise RemoteError(f"Error sending request for {action}: {e}") from e

        duration_ms = (time.monotonic() - start_time) * 1000

        if response.status_code != expected_status:
            detail = f"Unexpected status code for {action}: {response.status_code}"
            log_api_call(
                logger,
                service="bitbucket",
                endpoint=url,
                method=method,
                status_code=response.status_code,
                duration_ms=duration_ms,
                error=detail,
            )
            logger.debug(f"Response body for {action}: {response.text}")
            if response.status_code == 404:
                raise NotFoundError(detail, remote_status=response.status_code)
            raise RemoteError(detail, remote_status=response.status_code)

        log_api_call(
            logger,
            service="bitbucket",
            endpoint=url,
            method=method,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        return response

    async def post_comment(self, repository: Repository, pull_request_id: int, text: str) -> int:
        """
        Post a top-level comment on a pull request.

        Returns:
            The server-assigned comment id
        """
        url = f"{self.repo_base_url(repository)}pull-requests/{pull_request_id}/comments"
        body = CommentCreate(text=text)

        response = await self._request(
            "POST",
            url,
            expected_status=201,
            action="comment creation",
            json=body.model_dump(exclude_none=True),
        )

        try:
            comment = CommentResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise RemoteError(f"Error converting response to JSON: {e}") from e
        return comment.id

    async def fetch_raw_file(self, repository: Repository, path: str) -> bytes:
        """Read a file from the repository's default branch."""
        url = f"{self.repo_base_url(repository)}raw/{path.lstrip('/')}"
        response = await self._request("GET", url, expected_status=200, action="reading file")
        return response.content

    async def create_task(
        self,
        repository: Repository,
        pull_request_id: int,
        comment_id: int,
        text: str,
    ) -> None:
        """Create a task anchored to an existing pull request comment."""
        if self.task_api == "legacy":
            url = f"{self.rest_api_base_url}tasks"
            body = TaskCreate(anchor=TaskAnchor(id=comment_id), text=text)
            payload = body.model_dump(by_alias=True)
        else:
            url = f"{self.repo_base_url(repository)}pull-requests/{pull_request_id}/comments"
            body = CommentCreate(
                text=text,
                parent=CommentParent(id=comment_id),
                severity=CommentSeverity.BLOCKER,
            )
            payload = body.model_dump(mode="json", exclude_none=True)

        await self._request("POST", url, expected_status=201, action="task creation", json=payload)
