"""Submit reply use case."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from engage.application.notice import NoticeBoard
from engage.application.usecase.base import BaseUseCase
from engage.config import ReplySettings
from engage.domain.error import ValidationError
from engage.domain.service import MutationTicket, OptimisticMutationCoordinator
from engage.domain.value import ReplyId, SubjectId, TopicId


class SubmitReplyRequest(BaseModel):
    """Submit reply request."""

    discussion_id: str
    text: str
    subject_id: str  # Logged-in subject
    replying_to_id: Optional[str] = None


class SubmitReplyResponse(BaseModel):
    """Provisional reply appended to the discussion."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    provisional_id: str
    text: str
    ticket: MutationTicket

    @property
    def is_pending(self) -> bool:
        return self.ticket.is_pending


class SubmitReplyUseCase(BaseUseCase[SubmitReplyRequest, SubmitReplyResponse]):
    """Use case for posting a reply to a discussion topic."""

    def __init__(
        self,
        coordinator: OptimisticMutationCoordinator,
        notice_board: NoticeBoard,
        reply_settings: ReplySettings,
    ) -> None:
        """Initialize submit reply use case.

        Args:
            coordinator: Optimistic mutation coordinator
            notice_board: Notice board for failed replies
            reply_settings: Reply configuration
        """
        self.coordinator = coordinator
        self.notice_board = notice_board
        self.reply_settings = reply_settings

    async def execute(self, request: SubmitReplyRequest) -> SubmitReplyResponse:
        """Execute submit reply flow.

        Steps:
        1. Trim and validate the text locally
        2. Append a provisional reply to the discussion
        3. Dispatch to the gateway in the background

        Args:
            request: Submit reply request

        Returns:
            Provisional reply details and the in-flight ticket

        Raises:
            ValidationError: If the text is empty or too long
        """
        text = request.text.strip()
        if not text:
            raise ValidationError("Reply text cannot be empty")
        if len(text) > self.reply_settings.max_length:
            raise ValidationError(
                f"Reply text exceeds {self.reply_settings.max_length} characters"
            )

        ticket = self.coordinator.submit_reply(
            topic_id=TopicId(request.discussion_id),
            subject=SubjectId(request.subject_id),
            text=text,
            author_label=self.reply_settings.provisional_author_label,
            created_at_label=self.reply_settings.provisional_created_at_label,
            replying_to_id=(
                ReplyId(request.replying_to_id) if request.replying_to_id else None
            ),
        )
        ticket.add_done_callback(self.notice_board.record)

        return SubmitReplyResponse(
            provisional_id=ticket.entity_id,
            text=text,
            ticket=ticket,
        )
