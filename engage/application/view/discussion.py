"""Discussion reply list view state."""

from typing import Callable, Optional

import logfire

from engage.domain.error import NotFoundError
from engage.domain.model.reply import Reply
from engage.domain.repository import CacheChange, EntityCache
from engage.domain.service import PreviewWindow, ReplyOrderer, VoteLedger
from engage.domain.value import (
    EntityId,
    ReplyId,
    ReplyVoteState,
    SubjectId,
    TopicId,
)


class DiscussionView:
    """Rendered reply list of one discussion topic.

    Replies are re-sorted by net score from scratch whenever any reply of
    the topic is added, removed or re-voted in the cache. Only the first
    ``preview_limit`` replies are visible until the view is expanded.

    The view reads from the cache and never writes to it. Call ``close``
    when the discussion is unmounted.
    """

    def __init__(
        self,
        topic_id: TopicId,
        entity_cache: EntityCache,
        reply_orderer: ReplyOrderer,
        vote_ledger: VoteLedger,
        preview_limit: int = 2,
        default_show_all: bool = False,
    ) -> None:
        """Initialize discussion view and subscribe to cache changes.

        Args:
            topic_id: Topic whose replies are shown
            entity_cache: Session entity cache
            reply_orderer: Reply ordering service
            vote_ledger: Vote ledger for per-subject vote state
            preview_limit: Replies shown while collapsed
            default_show_all: Start expanded
        """
        self.topic_id = topic_id
        self.entity_cache = entity_cache
        self.reply_orderer = reply_orderer
        self.vote_ledger = vote_ledger
        self.preview_limit = preview_limit
        self.is_expanded = default_show_all
        self.recompute_count = 0
        self._ordered: list[Reply] = []
        self._window: PreviewWindow = reply_orderer.preview_window([], preview_limit)
        self._unsubscribe: Optional[Callable[[], None]] = entity_cache.subscribe(
            self._on_change
        )
        self._recompute()

    @property
    def is_open(self) -> bool:
        return self._unsubscribe is not None

    @property
    def ordered_replies(self) -> list[Reply]:
        """All replies, highest net score first."""
        return list(self._ordered)

    @property
    def visible_replies(self) -> list[Reply]:
        """Replies to render given the expanded flag."""
        if self.is_expanded:
            return self.reply_orderer.expand(self._ordered)
        return list(self._window.visible)

    @property
    def has_more(self) -> bool:
        """Whether the list is longer than the preview (show the toggle)."""
        return self._window.has_more

    @property
    def hidden_count(self) -> int:
        """Replies currently hidden behind the toggle."""
        return 0 if self.is_expanded else self._window.hidden_count

    def expand(self) -> None:
        self.is_expanded = True

    def collapse(self) -> None:
        self.is_expanded = False

    def toggle_expanded(self) -> bool:
        """Flip between preview and full list.

        Returns:
            The new expanded flag
        """
        self.is_expanded = not self.is_expanded
        return self.is_expanded

    def locate_parent(self, reply_id: ReplyId) -> Optional[Reply]:
        """Find the reply a reply is quoting, for jump-and-highlight.

        Returns:
            The parent reply, or None if there is none or it is gone

        Raises:
            NotFoundError: If the reply itself is not in this discussion
        """
        reply = self._find(reply_id)
        if reply.parent_reply_id is None:
            return None
        parent = self.entity_cache.get(EntityId(reply.parent_reply_id))
        if isinstance(parent, Reply) and parent.topic_id == self.topic_id:
            return parent
        return None

    def vote_state(self, reply_id: ReplyId, subject: SubjectId) -> ReplyVoteState:
        """Vote counts and the subject's own vote for one reply."""
        reply = self._find(reply_id)
        return ReplyVoteState(
            upvotes=len(reply.upvoters),
            downvotes=len(reply.downvoters),
            user_vote=self.vote_ledger.vote_of(reply, subject),
        )

    def close(self) -> None:
        """Stop following cache changes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _find(self, reply_id: ReplyId) -> Reply:
        for reply in self._ordered:
            if reply.id == reply_id:
                return reply
        raise NotFoundError("Reply", reply_id)

    def _on_change(self, change: CacheChange) -> None:
        if change.touches_topic(self.topic_id):
            self._recompute()

    def _recompute(self) -> None:
        replies = self.entity_cache.find_replies(self.topic_id)
        self._ordered = self.reply_orderer.sort_by_net_score_desc(replies)
        self._window = self.reply_orderer.preview_window(
            self._ordered, self.preview_limit
        )
        self.recompute_count += 1
        logfire.debug(
            "Discussion replies re-sorted",
            topic_id=self.topic_id,
            count=len(self._ordered),
        )
