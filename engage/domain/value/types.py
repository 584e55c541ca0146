"""Engagement value objects.

Value objects are immutable and defined by their values, not identity.
"""

from enum import Enum

from pydantic import Field

from engage.domain.value.common import ValueObject


class VoteDirection(str, Enum):
    """Direction of a reply vote.

    Values match the LMS API's vote ``type`` field.
    """

    UP = "upvote"
    DOWN = "downvote"


class MutationKind(str, Enum):
    """User-triggered action the coordinator can apply optimistically."""

    LIKE = "like"
    DISLIKE = "dislike"
    UPVOTE = "upvote"
    DOWNVOTE = "downvote"
    REPLY = "reply"

    @property
    def is_vote(self) -> bool:
        """Whether the action toggles per-subject vote membership."""
        return self in (MutationKind.UPVOTE, MutationKind.DOWNVOTE)

    @property
    def is_counter(self) -> bool:
        """Whether the action increments a scalar counter."""
        return self in (MutationKind.LIKE, MutationKind.DISLIKE)

    @property
    def direction(self) -> VoteDirection:
        """Vote direction for vote kinds."""
        if self is MutationKind.UPVOTE:
            return VoteDirection.UP
        if self is MutationKind.DOWNVOTE:
            return VoteDirection.DOWN
        raise ValueError(f"{self.value} is not a vote kind")

    @classmethod
    def for_direction(cls, direction: VoteDirection) -> "MutationKind":
        """Vote kind for a direction."""
        return cls.UPVOTE if direction is VoteDirection.UP else cls.DOWNVOTE


class MutationState(str, Enum):
    """Lifecycle of one (entity, kind) mutation.

    IDLE -> PENDING -> {COMMITTED, ROLLED_BACK}; both terminal states
    return to IDLE once the outcome has been delivered.
    """

    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class CounterAck(ValueObject):
    """Gateway acknowledgement for a like or dislike.

    ``count`` is the authoritative counter value when the server reports it.
    """

    count: int | None = Field(default=None, ge=0)


class VoteAck(ValueObject):
    """Gateway acknowledgement for a reply vote.

    The LMS API may echo aggregate counts; membership stays client-side.
    """

    upvote_count: int | None = Field(default=None, ge=0)
    downvote_count: int | None = Field(default=None, ge=0)


class ReplyVoteState(ValueObject):
    """Vote summary for rendering one reply's vote buttons."""

    upvotes: int
    downvotes: int
    user_vote: VoteDirection | None = None
