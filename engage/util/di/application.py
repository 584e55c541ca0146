"""Application layer DI providers."""

from collections.abc import Iterator

from dishka import Scope, provide

from engage.application.notice import NoticeBoard
from engage.application.session import EngagementSession
from engage.application.usecase.knowledge import (
    DislikeKnowledgeUseCase,
    LikeKnowledgeUseCase,
)
from engage.application.usecase.reply import SubmitReplyUseCase
from engage.application.usecase.vote import VoteReplyUseCase
from engage.config import ReplySettings
from engage.domain.repository import EntityCache
from engage.domain.service import (
    OptimisticMutationCoordinator,
    ReplyOrderer,
    VoteLedger,
)
from engage.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    @provide(scope=Scope.REQUEST)
    def get_notice_board(self) -> NoticeBoard:
        """Provide session notice board."""
        return NoticeBoard()

    @provide(scope=Scope.REQUEST)
    def get_session(
        self,
        entity_cache: EntityCache,
        coordinator: OptimisticMutationCoordinator,
        reply_orderer: ReplyOrderer,
        vote_ledger: VoteLedger,
        notice_board: NoticeBoard,
        submit_reply: SubmitReplyUseCase,
        reply_settings: ReplySettings,
    ) -> Iterator[EngagementSession]:
        """Provide the engagement session, reset when the scope closes."""
        session = EngagementSession(
            entity_cache=entity_cache,
            coordinator=coordinator,
            reply_orderer=reply_orderer,
            vote_ledger=vote_ledger,
            notice_board=notice_board,
            submit_reply=submit_reply,
            reply_settings=reply_settings,
        )
        yield session
        session.reset()

    # Knowledge use cases
    @provide(scope=Scope.REQUEST)
    def get_like_knowledge_use_case(
        self, coordinator: OptimisticMutationCoordinator, notice_board: NoticeBoard
    ) -> LikeKnowledgeUseCase:
        """Provide like knowledge use case."""
        return LikeKnowledgeUseCase(coordinator=coordinator, notice_board=notice_board)

    @provide(scope=Scope.REQUEST)
    def get_dislike_knowledge_use_case(
        self, coordinator: OptimisticMutationCoordinator, notice_board: NoticeBoard
    ) -> DislikeKnowledgeUseCase:
        """Provide dislike knowledge use case."""
        return DislikeKnowledgeUseCase(
            coordinator=coordinator, notice_board=notice_board
        )

    # Discussion use cases
    @provide(scope=Scope.REQUEST)
    def get_vote_reply_use_case(
        self,
        coordinator: OptimisticMutationCoordinator,
        vote_ledger: VoteLedger,
        notice_board: NoticeBoard,
    ) -> VoteReplyUseCase:
        """Provide vote reply use case."""
        return VoteReplyUseCase(
            coordinator=coordinator,
            vote_ledger=vote_ledger,
            notice_board=notice_board,
        )

    @provide(scope=Scope.REQUEST)
    def get_submit_reply_use_case(
        self,
        coordinator: OptimisticMutationCoordinator,
        notice_board: NoticeBoard,
        reply_settings: ReplySettings,
    ) -> SubmitReplyUseCase:
        """Provide submit reply use case."""
        return SubmitReplyUseCase(
            coordinator=coordinator,
            notice_board=notice_board,
            reply_settings=reply_settings,
        )
