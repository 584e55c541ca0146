"""Vote ledger domain service."""

from typing import Optional, TypeVar

from engage.domain.model.votable import VotableItem
from engage.domain.value import SubjectId, VoteDirection

from .base import Service

Item = TypeVar("Item", bound=VotableItem)


class VoteLedger(Service):
    """Upvote/downvote membership rules for votable items.

    Every operation is pure: toggles return a new item and leave the one
    passed in untouched. Callers write the result back to their store.
    """

    def toggle_upvote(self, item: Item, subject: SubjectId) -> Item:
        """Toggle a subject's upvote.

        An existing upvote is withdrawn. Otherwise the subject is added to
        the upvoters and removed from the downvoters.

        Args:
            item: Item being voted on
            subject: Acting subject

        Returns:
            Updated copy of the item
        """
        if subject in item.upvoters:
            return item.model_copy(update={"upvoters": item.upvoters - {subject}})

        return item.model_copy(
            update={
                "upvoters": item.upvoters | {subject},
                "downvoters": item.downvoters - {subject},
            }
        )

    def toggle_downvote(self, item: Item, subject: SubjectId) -> Item:
        """Toggle a subject's downvote.

        Mirror image of ``toggle_upvote``.

        Args:
            item: Item being voted on
            subject: Acting subject

        Returns:
            Updated copy of the item
        """
        if subject in item.downvoters:
            return item.model_copy(
                update={"downvoters": item.downvoters - {subject}}
            )

        return item.model_copy(
            update={
                "downvoters": item.downvoters | {subject},
                "upvoters": item.upvoters - {subject},
            }
        )

    def set_vote(
        self, item: Item, subject: SubjectId, vote: Optional[VoteDirection]
    ) -> Item:
        """Put a subject's vote into a given state, leaving other subjects alone.

        Args:
            item: Item being voted on
            subject: Subject whose vote is set
            vote: Direction to record, or None to clear the vote

        Returns:
            Updated copy of the item
        """
        upvoters = item.upvoters - {subject}
        downvoters = item.downvoters - {subject}
        if vote is VoteDirection.UP:
            upvoters = upvoters | {subject}
        elif vote is VoteDirection.DOWN:
            downvoters = downvoters | {subject}
        return item.model_copy(update={"upvoters": upvoters, "downvoters": downvoters})

    def toggle(self, item: Item, subject: SubjectId, direction: VoteDirection) -> Item:
        """Toggle a vote in the given direction."""
        if direction is VoteDirection.UP:
            return self.toggle_upvote(item, subject)
        return self.toggle_downvote(item, subject)

    def net_score(self, item: VotableItem) -> int:
        """Upvote count minus downvote count."""
        return len(item.upvoters) - len(item.downvoters)

    def has_upvoted(self, item: VotableItem, subject: SubjectId) -> bool:
        return subject in item.upvoters

    def has_downvoted(self, item: VotableItem, subject: SubjectId) -> bool:
        return subject in item.downvoters

    def vote_of(
        self, item: VotableItem, subject: SubjectId
    ) -> Optional[VoteDirection]:
        """Current vote of a subject, or None if they have not voted."""
        if self.has_upvoted(item, subject):
            return VoteDirection.UP
        if self.has_downvoted(item, subject):
            return VoteDirection.DOWN
        return None
