"""Engagement session lifecycle."""

from typing import Iterable

import logfire

from engage.application.notice import NoticeBoard
from engage.application.usecase.reply import SubmitReplyUseCase
from engage.application.view import DiscussionView, ReplyComposer
from engage.config import ReplySettings
from engage.domain.model.knowledge import KnowledgeArticle
from engage.domain.model.reply import Reply
from engage.domain.repository import EntityCache
from engage.domain.service import (
    OptimisticMutationCoordinator,
    ReplyOrderer,
    VoteLedger,
)
from engage.domain.value import SubjectId, TopicId


class EngagementSession:
    """State of one logged-in session.

    Seeds the entity cache from server payloads, hands out discussion views
    and compose boxes, and tears everything down on logout or reload.
    After seeding, only the mutation coordinator writes to the cache.
    """

    def __init__(
        self,
        entity_cache: EntityCache,
        coordinator: OptimisticMutationCoordinator,
        reply_orderer: ReplyOrderer,
        vote_ledger: VoteLedger,
        notice_board: NoticeBoard,
        submit_reply: SubmitReplyUseCase,
        reply_settings: ReplySettings,
    ) -> None:
        self.entity_cache = entity_cache
        self.coordinator = coordinator
        self.reply_orderer = reply_orderer
        self.vote_ledger = vote_ledger
        self.notice_board = notice_board
        self.submit_reply = submit_reply
        self.reply_settings = reply_settings
        self._views: list[DiscussionView] = []

    def load_articles(self, articles: Iterable[KnowledgeArticle]) -> int:
        """Cache knowledge articles fetched from the server.

        Returns:
            Number of articles cached
        """
        count = 0
        for article in articles:
            self.entity_cache.put(article)
            count += 1
        logfire.info("Knowledge articles loaded", count=count)
        return count

    def load_replies(self, replies: Iterable[Reply]) -> int:
        """Cache discussion replies in recency order.

        Returns:
            Number of replies cached
        """
        count = 0
        for reply in replies:
            self.entity_cache.put(reply)
            count += 1
        logfire.info("Discussion replies loaded", count=count)
        return count

    def open_discussion(
        self, topic_id: TopicId, default_show_all: bool = False
    ) -> DiscussionView:
        """Mount a discussion view that follows the cache."""
        view = DiscussionView(
            topic_id=topic_id,
            entity_cache=self.entity_cache,
            reply_orderer=self.reply_orderer,
            vote_ledger=self.vote_ledger,
            preview_limit=self.reply_settings.preview_limit,
            default_show_all=default_show_all,
        )
        self._views.append(view)
        return view

    def compose_reply(self, topic_id: TopicId, subject_id: SubjectId) -> ReplyComposer:
        return ReplyComposer(
            discussion_id=topic_id,
            subject_id=subject_id,
            submit_reply=self.submit_reply,
        )

    def reset(self) -> None:
        """Tear the session down.

        Unmounts views, forgets pending mutations, empties the cache and
        drops notices. Round trips still in flight finish as no-ops.
        """
        for view in self._views:
            view.close()
        self._views.clear()
        self.coordinator.reset()
        self.entity_cache.clear()
        self.notice_board.clear()
        logfire.info("Engagement session reset")
