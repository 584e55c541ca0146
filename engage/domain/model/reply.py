"""Reply entity.

Replies are the votable posts inside a forum discussion topic.
"""

from typing import Optional

from pydantic import Field, field_validator

from engage.domain.model.votable import VotableItem
from engage.domain.value import ReplyId, TopicId


class Reply(VotableItem):
    """Reply to a discussion topic.

    ``parent_reply_id`` is a weak reference used only to locate and
    highlight the quoted reply. It never affects ordering or ownership.
    ``root_reply_id`` is the first reply of the thread the reply belongs to;
    the server groups nested replies by it.

    ``author_label`` and ``created_at_label`` are display strings and are
    not interpreted by the engine.
    """

    topic_id: TopicId
    text: str = Field(min_length=1, max_length=10000)
    author_label: str = ""
    created_at_label: str = ""
    parent_reply_id: Optional[ReplyId] = None
    root_reply_id: Optional[ReplyId] = None
    is_provisional: bool = False

    @field_validator("text", mode="before")
    @classmethod
    def strip_text(cls, v: str) -> str:
        """Trim surrounding whitespace before length validation."""
        return v.strip() if isinstance(v, str) else v
