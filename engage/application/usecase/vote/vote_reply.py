"""Vote reply use case."""

from typing import Optional, cast

from pydantic import BaseModel, ConfigDict

from engage.application.notice import NoticeBoard
from engage.application.usecase.base import BaseUseCase
from engage.domain.model.votable import VotableItem
from engage.domain.service import (
    MutationTicket,
    OptimisticMutationCoordinator,
    VoteLedger,
)
from engage.domain.value import EntityId, MutationKind, SubjectId, VoteDirection


class VoteReplyRequest(BaseModel):
    """Vote reply request."""

    reply_id: str
    direction: VoteDirection
    subject_id: str  # Logged-in subject


class VoteReplyResponse(BaseModel):
    """Optimistic vote state right after the click."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    reply_id: str
    upvotes: int
    downvotes: int
    net_score: int
    user_vote: Optional[VoteDirection]
    ticket: MutationTicket

    @property
    def is_pending(self) -> bool:
        return self.ticket.is_pending


class VoteReplyUseCase(BaseUseCase[VoteReplyRequest, VoteReplyResponse]):
    """Use case for toggling an upvote or downvote on a discussion reply.

    Open discussion views re-sort as soon as the cache is patched.
    """

    def __init__(
        self,
        coordinator: OptimisticMutationCoordinator,
        vote_ledger: VoteLedger,
        notice_board: NoticeBoard,
    ) -> None:
        """Initialize vote reply use case.

        Args:
            coordinator: Optimistic mutation coordinator
            vote_ledger: Vote ledger domain service
            notice_board: Notice board for failed votes
        """
        self.coordinator = coordinator
        self.vote_ledger = vote_ledger
        self.notice_board = notice_board

    async def execute(self, request: VoteReplyRequest) -> VoteReplyResponse:
        """Execute vote flow.

        Args:
            request: Vote reply request

        Returns:
            Optimistic vote state and the in-flight ticket

        Raises:
            MutationInFlightError: If the same vote is still pending
            NotFoundError: If the reply is not loaded
        """
        reply_id = EntityId(request.reply_id)
        subject = SubjectId(request.subject_id)

        ticket = self.coordinator.submit(
            reply_id, MutationKind.for_direction(request.direction), subject
        )
        ticket.add_done_callback(self.notice_board.record)

        # The coordinator only toggles votes on votable items
        reply = cast(VotableItem, ticket.optimistic)

        return VoteReplyResponse(
            reply_id=reply.id,
            upvotes=len(reply.upvoters),
            downvotes=len(reply.downvoters),
            net_score=self.vote_ledger.net_score(reply),
            user_vote=self.vote_ledger.vote_of(reply, subject),
            ticket=ticket,
        )
