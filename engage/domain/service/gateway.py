"""Engagement gateway interface."""

from abc import ABC, abstractmethod
from typing import Optional

from engage.domain.model.reply import Reply
from engage.domain.value import (
    CounterAck,
    EntityId,
    ReplyId,
    SubjectId,
    TopicId,
    VoteAck,
    VoteDirection,
)


class EngagementGateway(ABC):
    """Remote collaborator that makes engagement mutations authoritative.

    Implementations own transport, endpoints and timeouts. Every failure
    must be raised as a ``GatewayError`` subclass; timeouts are
    ``NetworkError``s.
    """

    @abstractmethod
    async def submit_like(self, entity_id: EntityId) -> CounterAck:
        """Record a like on a knowledge article.

        Args:
            entity_id: Article ID

        Returns:
            Acknowledgement, optionally with the new like count
        """
        pass

    @abstractmethod
    async def submit_dislike(self, entity_id: EntityId) -> CounterAck:
        """Record a dislike on a knowledge article.

        Args:
            entity_id: Article ID

        Returns:
            Acknowledgement, optionally with the new dislike count
        """
        pass

    @abstractmethod
    async def submit_vote(
        self, entity_id: EntityId, subject: SubjectId, direction: VoteDirection
    ) -> VoteAck:
        """Toggle a subject's vote on a reply.

        Args:
            entity_id: Reply ID
            subject: Voting subject
            direction: Vote direction

        Returns:
            Acknowledgement
        """
        pass

    @abstractmethod
    async def submit_reply(
        self,
        topic_id: TopicId,
        subject: SubjectId,
        text: str,
        replying_to_id: Optional[ReplyId] = None,
        root_reply_id: Optional[ReplyId] = None,
    ) -> Reply:
        """Create a reply in a discussion topic.

        Args:
            topic_id: Topic being replied to
            subject: Author
            text: Trimmed, non-empty reply text
            replying_to_id: Quoted parent reply, if any
            root_reply_id: First reply of the parent's thread, if any

        Returns:
            The reply as stored by the server
        """
        pass
