"""Reply use cases."""

from .submit_reply import SubmitReplyRequest, SubmitReplyResponse, SubmitReplyUseCase

__all__ = [
    "SubmitReplyRequest",
    "SubmitReplyResponse",
    "SubmitReplyUseCase",
]
