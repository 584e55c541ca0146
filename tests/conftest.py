"""Test configuration and helpers."""

from typing import Iterable

from engage.domain.model.knowledge import KnowledgeArticle
from engage.domain.model.reply import Reply
from engage.domain.value import EntityId, SubjectId, TopicId


def make_reply(
    reply_id: str,
    topic_id: str = "topic-1",
    upvoters: Iterable[str] = (),
    downvoters: Iterable[str] = (),
    text: str | None = None,
    parent_reply_id: str | None = None,
    root_reply_id: str | None = None,
) -> Reply:
    """Helper to build a reply with the given voters.

    Args:
        reply_id: Reply ID
        topic_id: Owning topic ID
        upvoters: Subject IDs that upvoted
        downvoters: Subject IDs that downvoted
        text: Reply text (defaults to a text derived from the ID)
        parent_reply_id: Quoted reply ID
        root_reply_id: First reply of the thread

    Returns:
        Reply entity
    """
    return Reply(
        id=EntityId(reply_id),
        topic_id=TopicId(topic_id),
        text=text or f"Reply {reply_id}",
        author_label=f"Author of {reply_id}",
        created_at_label="2 hours ago",
        upvoters=frozenset(SubjectId(s) for s in upvoters),
        downvoters=frozenset(SubjectId(s) for s in downvoters),
        parent_reply_id=parent_reply_id,
        root_reply_id=root_reply_id,
    )


def make_scored_reply(reply_id: str, score: int, topic_id: str = "topic-1") -> Reply:
    """Helper to build a reply with a given net score from distinct voters."""
    if score >= 0:
        return make_reply(
            reply_id, topic_id, upvoters=[f"{reply_id}-u{i}" for i in range(score)]
        )
    return make_reply(
        reply_id, topic_id, downvoters=[f"{reply_id}-d{i}" for i in range(-score)]
    )


def make_article(
    article_id: str = "kc-1", like_count: int = 0, dislike_count: int = 0
) -> KnowledgeArticle:
    """Helper to build a knowledge article with given counters."""
    return KnowledgeArticle(
        id=EntityId(article_id),
        title=f"Article {article_id}",
        like_count=like_count,
        dislike_count=dislike_count,
    )
