"""Reply compose box state."""

from typing import Optional

from engage.application.usecase.reply import (
    SubmitReplyRequest,
    SubmitReplyResponse,
    SubmitReplyUseCase,
)
from engage.domain.model.reply import Reply
from engage.domain.value import SubjectId, TopicId


class ReplyComposer:
    """Compose box of one discussion.

    The draft is cleared only after the provisional reply has been
    appended; a rejected draft stays in the box for editing.
    """

    def __init__(
        self,
        discussion_id: TopicId,
        subject_id: SubjectId,
        submit_reply: SubmitReplyUseCase,
    ) -> None:
        self.discussion_id = discussion_id
        self.subject_id = subject_id
        self.submit_reply = submit_reply
        self.draft = ""
        self.replying_to: Optional[Reply] = None
        self.is_open = False

    def start_reply(self, reply: Optional[Reply] = None) -> None:
        """Open the box, optionally quoting a reply."""
        self.replying_to = reply
        self.is_open = True

    def cancel(self) -> None:
        """Close the box and forget the quoted reply. The draft is kept."""
        self.replying_to = None
        self.is_open = False

    async def submit(self) -> SubmitReplyResponse:
        """Post the draft.

        Returns:
            Submit reply response with the in-flight ticket

        Raises:
            ValidationError: If the draft is empty or too long
        """
        response = await self.submit_reply.execute(
            SubmitReplyRequest(
                discussion_id=self.discussion_id,
                text=self.draft,
                subject_id=self.subject_id,
                replying_to_id=self.replying_to.id if self.replying_to else None,
            )
        )

        self.draft = ""
        self.cancel()
        return response
