"""Like/dislike knowledge article use cases."""

from typing import cast

from pydantic import BaseModel, ConfigDict

from engage.application.notice import NoticeBoard
from engage.application.usecase.base import BaseUseCase
from engage.domain.model.knowledge import KnowledgeArticle
from engage.domain.service import MutationTicket, OptimisticMutationCoordinator
from engage.domain.value import EntityId, MutationKind


class KnowledgeReactionRequest(BaseModel):
    """Like or dislike request."""

    knowledge_id: str


class KnowledgeReactionResponse(BaseModel):
    """Optimistic counters right after the click."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    knowledge_id: str
    like_count: int
    dislike_count: int
    ticket: MutationTicket

    @property
    def is_pending(self) -> bool:
        """Whether the server has not answered yet (spinner state)."""
        return self.ticket.is_pending


class _ReactToKnowledgeUseCase(
    BaseUseCase[KnowledgeReactionRequest, KnowledgeReactionResponse]
):
    """Shared flow for the two counter reactions."""

    kind: MutationKind

    def __init__(
        self,
        coordinator: OptimisticMutationCoordinator,
        notice_board: NoticeBoard,
    ) -> None:
        """Initialize reaction use case.

        Args:
            coordinator: Optimistic mutation coordinator
            notice_board: Notice board for failed reactions
        """
        self.coordinator = coordinator
        self.notice_board = notice_board

    async def execute(
        self, request: KnowledgeReactionRequest
    ) -> KnowledgeReactionResponse:
        """Apply the reaction locally and dispatch it.

        Returns without waiting for the server.

        Args:
            request: Reaction request

        Returns:
            Optimistic counters and the in-flight ticket

        Raises:
            MutationInFlightError: If the same reaction is still pending
            NotFoundError: If the article is not loaded
            ValidationError: If the ID is not a knowledge article
        """
        knowledge_id = EntityId(request.knowledge_id)

        ticket = self.coordinator.submit(knowledge_id, self.kind)
        ticket.add_done_callback(self.notice_board.record)

        # The coordinator only patches counters on knowledge articles
        article = cast(KnowledgeArticle, ticket.optimistic)

        return KnowledgeReactionResponse(
            knowledge_id=article.id,
            like_count=article.like_count,
            dislike_count=article.dislike_count,
            ticket=ticket,
        )


class LikeKnowledgeUseCase(_ReactToKnowledgeUseCase):
    """Use case for liking a knowledge article."""

    kind = MutationKind.LIKE


class DislikeKnowledgeUseCase(_ReactToKnowledgeUseCase):
    """Use case for disliking a knowledge article."""

    kind = MutationKind.DISLIKE
