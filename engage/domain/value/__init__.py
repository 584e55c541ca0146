"""Domain value objects for the engagement engine."""

from engage.domain.value.identifiers import (
    EntityId,
    KnowledgeId,
    NoticeId,
    ReplyId,
    SubjectId,
    TopicId,
)
from engage.domain.value.types import (
    CounterAck,
    MutationKind,
    MutationState,
    ReplyVoteState,
    VoteAck,
    VoteDirection,
)

__all__ = [
    # Identifiers
    "SubjectId",
    "EntityId",
    "ReplyId",
    "TopicId",
    "KnowledgeId",
    "NoticeId",
    # Types
    "VoteDirection",
    "MutationKind",
    "MutationState",
    "CounterAck",
    "VoteAck",
    "ReplyVoteState",
]
