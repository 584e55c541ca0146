"""Presentation state for discussion components."""

from .composer import ReplyComposer
from .discussion import DiscussionView

__all__ = [
    "DiscussionView",
    "ReplyComposer",
]
