"""LMS REST gateway client.

Talks to the LMS backend's knowledge and discussion endpoints:

    POST  /knowledge/{id}/like
    POST  /knowledge/{id}/dislike
    PATCH /discussions/{id}/vote   {"type": "upvote" | "downvote", "idUser": ...}
    POST  /discussions             {"idTopic", "idUser", "comment", "idParent"?, "idRoot"?}

Responses arrive wrapped in ``{"status", "success", "message", "data"}``.
"""

import asyncio
from collections import deque
from typing import Any, Optional

import httpx
import logfire

from engage.domain.error import (
    GatewayError,
    NetworkError,
    RejectedError,
    UnknownGatewayError,
)
from engage.domain.model.reply import Reply
from engage.domain.service.gateway import EngagementGateway
from engage.domain.value import (
    CounterAck,
    EntityId,
    ReplyId,
    SubjectId,
    TopicId,
    VoteAck,
    VoteDirection,
)

# Upstream statuses worth retrying
_TRANSIENT_STATUSES = {502, 503, 504}


def _author_label(subject: str) -> str:
    """Fallback display name when the server sends no author."""
    return f"User {subject[-6:]}"


class HttpEngagementGateway(EngagementGateway):
    """Engagement gateway backed by the LMS REST API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        user_agent: str = "engage/1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize LMS gateway.

        Args:
            base_url: API root, e.g. https://lms.example.com/api
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header value
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport

    async def submit_like(self, entity_id: EntityId) -> CounterAck:
        """Record a like on a knowledge article."""
        data = await self._request("POST", f"/knowledge/{entity_id}/like")
        return CounterAck(
            count=self._extract_count(data, "likeCount", "like_count", "totalLikes")
        )

    async def submit_dislike(self, entity_id: EntityId) -> CounterAck:
        """Record a dislike on a knowledge article."""
        data = await self._request("POST", f"/knowledge/{entity_id}/dislike")
        return CounterAck(
            count=self._extract_count(
                data, "dislikeCount", "dislike_count", "totalDislikes"
            )
        )

    async def submit_vote(
        self, entity_id: EntityId, subject: SubjectId, direction: VoteDirection
    ) -> VoteAck:
        """Toggle a vote on a discussion reply."""
        data = await self._request(
            "PATCH",
            f"/discussions/{entity_id}/vote",
            json={"type": direction.value, "idUser": subject},
        )
        return VoteAck(
            upvote_count=self._extract_count(data, "upvoteCount"),
            downvote_count=self._extract_count(data, "downvoteCount"),
        )

    async def submit_reply(
        self,
        topic_id: TopicId,
        subject: SubjectId,
        text: str,
        replying_to_id: Optional[ReplyId] = None,
        root_reply_id: Optional[ReplyId] = None,
    ) -> Reply:
        """Create a reply in a discussion topic."""
        payload: dict[str, Any] = {
            "idTopic": topic_id,
            "idUser": subject,
            "comment": text,
        }
        if replying_to_id:
            payload["idParent"] = replying_to_id
            payload["idRoot"] = root_reply_id or replying_to_id

        data = await self._request("POST", "/discussions", json=payload)
        if not isinstance(data, dict) or "id" not in data:
            raise UnknownGatewayError("Reply response is missing an id")

        try:
            return Reply(
                id=EntityId(str(data["id"])),
                topic_id=TopicId(str(data.get("idTopic") or topic_id)),
                text=data.get("comment") or text,
                author_label=data.get("author") or _author_label(subject),
                created_at_label=data.get("time") or data.get("createdAt") or "",
                parent_reply_id=data.get("idParent") or replying_to_id,
                root_reply_id=data.get("idRoot") or payload.get("idRoot"),
                upvoters=frozenset(data.get("upvotedBy") or ()),
                downvoters=frozenset(data.get("downvotedBy") or ()),
            )
        except ValueError as e:
            logfire.error("Malformed reply from LMS", error=str(e))
            raise UnknownGatewayError(f"Malformed reply: {e}")

    async def _request(
        self, method: str, path: str, json: Optional[dict[str, Any]] = None
    ) -> Any:
        """Send a request and unwrap the response envelope.

        Raises:
            NetworkError: On timeouts, transport failures and 502/503/504
            RejectedError: On 4xx responses or ``success: false`` envelopes
            UnknownGatewayError: On anything else
        """
        url = f"{self.base_url}{path}"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            ) as client:
                response = await client.request(method, url, json=json)
        except httpx.TransportError as e:
            # Includes timeouts
            logfire.warn("LMS request failed", method=method, url=url, error=str(e))
            raise NetworkError(f"{method} {path} failed: {e}")
        except httpx.HTTPError as e:
            logfire.error("LMS HTTP error", method=method, url=url, error=str(e))
            raise UnknownGatewayError(f"{method} {path} failed: {e}")

        if response.status_code >= 400:
            self._raise_for_status(method, path, response)

        try:
            body = response.json()
        except ValueError:
            logfire.error("LMS returned invalid JSON", method=method, url=url)
            raise UnknownGatewayError(f"{method} {path} returned invalid JSON")

        if isinstance(body, dict):
            if body.get("success") is False:
                message = body.get("message") or "Request declined"
                raise RejectedError(message, status_code=body.get("status"))
            return body.get("data", body)
        return body

    @staticmethod
    def _raise_for_status(method: str, path: str, response: httpx.Response) -> None:
        status = response.status_code
        logfire.warn(
            "LMS request rejected",
            method=method,
            path=path,
            status_code=status,
            error=response.text,
        )

        error: GatewayError
        if status in _TRANSIENT_STATUSES:
            error = NetworkError(f"{method} {path} unavailable: {status}")
        elif 400 <= status < 500:
            message = f"{method} {path} rejected: {status}"
            try:
                body = response.json()
                if isinstance(body, dict) and body.get("message"):
                    message = body["message"]
            except ValueError:
                pass
            error = RejectedError(message, status_code=status)
        else:
            error = UnknownGatewayError(f"{method} {path} failed: {status}")
        raise error

    @staticmethod
    def _extract_count(data: Any, *keys: str) -> Optional[int]:
        if not isinstance(data, dict):
            return None
        for key in keys:
            value = data.get(key)
            if isinstance(value, int) and value >= 0:
                return value
        return None


class MockEngagementGateway(EngagementGateway):
    """Mock gateway for testing.

    Records every call and succeeds by default. Tests can queue failures
    with ``fail_next`` and hold calls in flight with ``hold``/``release``.
    """

    def __init__(self) -> None:
        """Initialize mock gateway without any server state."""
        self.calls: list[tuple[Any, ...]] = []
        self.like_counts: dict[EntityId, int] = {}
        self.dislike_counts: dict[EntityId, int] = {}
        self._failures: deque[Exception] = deque()
        self._gate: Optional[asyncio.Event] = None
        self._reply_seq = 0

    def fail_next(self, *errors: Exception) -> None:
        """Make the next calls raise the given errors, in order."""
        self._failures.extend(errors)

    def hold(self) -> None:
        """Keep subsequent calls in flight until ``release`` is called."""
        self._gate = asyncio.Event()

    def release(self) -> None:
        """Let held calls complete."""
        if self._gate is not None:
            self._gate.set()
            self._gate = None

    async def submit_like(self, entity_id: EntityId) -> CounterAck:
        await self._call("submit_like", entity_id)
        return CounterAck(count=self._bump(self.like_counts, entity_id))

    async def submit_dislike(self, entity_id: EntityId) -> CounterAck:
        await self._call("submit_dislike", entity_id)
        return CounterAck(count=self._bump(self.dislike_counts, entity_id))

    async def submit_vote(
        self, entity_id: EntityId, subject: SubjectId, direction: VoteDirection
    ) -> VoteAck:
        await self._call("submit_vote", entity_id, subject, direction)
        return VoteAck()

    async def submit_reply(
        self,
        topic_id: TopicId,
        subject: SubjectId,
        text: str,
        replying_to_id: Optional[ReplyId] = None,
        root_reply_id: Optional[ReplyId] = None,
    ) -> Reply:
        await self._call(
            "submit_reply", topic_id, subject, text, replying_to_id, root_reply_id
        )
        self._reply_seq += 1
        return Reply(
            id=EntityId(f"reply-{self._reply_seq}"),
            topic_id=topic_id,
            text=text,
            author_label=_author_label(subject),
            created_at_label="just now",
            parent_reply_id=replying_to_id,
            root_reply_id=root_reply_id,
        )

    async def _call(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        if self._gate is not None:
            await self._gate.wait()
        if self._failures:
            raise self._failures.popleft()

    @staticmethod
    def _bump(counts: dict[EntityId, int], entity_id: EntityId) -> Optional[int]:
        # Only report authoritative counts for articles the test seeded
        if entity_id not in counts:
            return None
        counts[entity_id] += 1
        return counts[entity_id]
