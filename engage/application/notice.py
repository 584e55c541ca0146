"""Dismissible notices for failed mutations."""

from typing import Optional
from uuid import uuid4

import logfire

from engage.domain.service import MutationOutcome
from engage.domain.value import EntityId, MutationKind, NoticeId
from engage.domain.value.common import ValueObject

_MESSAGES = {
    MutationKind.LIKE: "Your like could not be saved.",
    MutationKind.DISLIKE: "Your dislike could not be saved.",
    MutationKind.UPVOTE: "Your upvote could not be saved.",
    MutationKind.DOWNVOTE: "Your downvote could not be saved.",
    MutationKind.REPLY: "Your reply could not be posted.",
}


class Notice(ValueObject):
    """A transient message shown after an optimistic mutation was reverted."""

    id: NoticeId
    entity_id: EntityId
    kind: MutationKind
    message: str
    retryable: bool = False


class NoticeBoard:
    """Session-scoped list of notices the UI has not dismissed yet."""

    def __init__(self) -> None:
        self._notices: dict[NoticeId, Notice] = {}

    @property
    def active(self) -> list[Notice]:
        return list(self._notices.values())

    def record(self, outcome: MutationOutcome) -> Optional[Notice]:
        """Post a notice for a rolled-back outcome.

        Args:
            outcome: Outcome delivered by a mutation ticket

        Returns:
            The posted notice, or None for successful outcomes
        """
        if outcome.error is None:
            return None

        notice = Notice(
            id=NoticeId(str(uuid4())),
            entity_id=outcome.entity_id,
            kind=outcome.kind,
            message=_MESSAGES[outcome.kind],
            retryable=outcome.error.retryable,
        )
        self._notices[notice.id] = notice
        logfire.info(
            "Notice posted",
            notice_id=notice.id,
            entity_id=notice.entity_id,
            kind=notice.kind.value,
        )
        return notice

    def dismiss(self, notice_id: NoticeId) -> bool:
        """Dismiss a notice.

        Returns:
            True if the notice was active
        """
        return self._notices.pop(notice_id, None) is not None

    def clear(self) -> None:
        self._notices.clear()
