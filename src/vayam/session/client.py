"""HTTP client the voting session uses to talk to the Vayam API.

Error responses are translated back into the service-layer exceptions so
the session engine handles local and remote failures the same way.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from vayam.core.settings import settings
from vayam.services.errors import (
    AuthorizationError,
    DuplicateVoteError,
    MismatchError,
    NotFoundError,
    TransientNetworkError,
    ValidationError,
    VayamError,
)
from vayam.session.state import ConversationSnapshot, SessionComment, SkippedSnapshot

logger = logging.getLogger(__name__)

# HTTP status codes
HTTP_BAD_REQUEST = 400
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_UNPROCESSABLE = 422
HTTP_INTERNAL_SERVER_ERROR = 500

DUPLICATE_VOTE_DETAIL = "Already voted this way"
MISMATCH_DETAIL = "Comment does not belong to this conversation"


def _detail(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    return detail if isinstance(detail, str) else str(detail)


def error_from_response(response: httpx.Response) -> VayamError:
    """Map an error response onto the matching domain exception."""
    code = response.status_code
    detail = _detail(response)
    if code == HTTP_NOT_FOUND:
        entity = "comment" if "comment" in detail.lower() else "conversation"
        return NotFoundError(entity, detail)
    if code == HTTP_FORBIDDEN:
        return AuthorizationError(detail)
    if code == HTTP_BAD_REQUEST:
        if detail == DUPLICATE_VOTE_DETAIL:
            return DuplicateVoteError(detail)
        if detail == MISMATCH_DETAIL:
            return MismatchError(detail)
        return ValidationError(detail)
    if code == HTTP_UNPROCESSABLE:
        return ValidationError(detail)
    return TransientNetworkError(f"Server responded with {code}: {detail}")


class ApiClient:
    """Async wrapper around the v1 endpoints a voting session needs."""

    def __init__(
        self,
        token: str,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.api_base_url
        self.timeout = timeout if timeout is not None else settings.api_timeout_seconds
        self._token = token
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    timeout=httpx.Timeout(self.timeout),
                    headers={"Authorization": f"Bearer {self._token}"},
                    transport=self._transport,
                )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_data: Any | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        client = await self._ensure_client()
        try:
            response = await client.request(method, path, json=json_data, params=params)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransientNetworkError(f"Request failed: {exc}") from exc

        if response.status_code >= HTTP_BAD_REQUEST:
            raise error_from_response(response)
        return response.json()

    async def get_conversation(self, zid: int) -> ConversationSnapshot:
        """Fetch a conversation with all comments and their votes."""
        payload = await self._request("GET", f"/api/v1/conversations/{zid}")
        return ConversationSnapshot(
            zid=payload["zid"],
            topic=payload["topic"],
            comments=[SessionComment.from_payload(c) for c in payload.get("comments", [])],
        )

    async def get_skipped(self, zid: int) -> SkippedSnapshot:
        """Fetch the caller's skipped comments and participation stats."""
        payload = await self._request(
            "GET",
            "/api/v1/user/conversations/skipped-comments",
            params={"zid": zid},
        )
        stats = payload["stats"]
        return SkippedSnapshot(
            skipped=[SessionComment.from_payload(c) for c in payload["skipped_comments"]],
            skipped_count=stats["skipped_comments_count"],
            total_count=stats["total_comments_count"],
            participation_percentage=float(stats["participation_percentage"]),
        )

    async def cast_vote(self, zid: int, tid: int, vote: int) -> dict[str, Any]:
        """Write a vote; raises DuplicateVoteError when nothing changed."""
        return await self._request(
            "POST",
            "/api/v1/votes",
            json_data={"zid": zid, "tid": tid, "vote": vote},
        )

    async def create_comment(self, zid: int, txt: str) -> dict[str, Any]:
        """Submit a comment into the conversation."""
        return await self._request(
            "POST",
            "/api/v1/comments",
            json_data={"zid": zid, "txt": txt},
        )

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
