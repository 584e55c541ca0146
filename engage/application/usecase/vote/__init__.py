"""Vote use cases."""

from .vote_reply import VoteReplyRequest, VoteReplyResponse, VoteReplyUseCase

__all__ = [
    "VoteReplyRequest",
    "VoteReplyResponse",
    "VoteReplyUseCase",
]
