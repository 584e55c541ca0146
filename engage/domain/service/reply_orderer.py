"""Reply ordering domain service."""

from typing import Sequence

from engage.domain.error import ValidationError
from engage.domain.model.reply import Reply
from engage.domain.value.common import ValueObject

from .base import Service
from .vote_ledger import VoteLedger


class PreviewWindow(ValueObject):
    """Truncated view of an ordered reply list."""

    visible: tuple[Reply, ...]
    has_more: bool
    hidden_count: int


class ReplyOrderer(Service):
    """Domain service that orders discussion replies for display.

    Orders are always recomputed from scratch; list sizes are in the tens.
    """

    def __init__(self, vote_ledger: VoteLedger) -> None:
        """Initialize reply orderer.

        Args:
            vote_ledger: Vote ledger used to score replies
        """
        self.vote_ledger = vote_ledger

    def sort_by_net_score_desc(self, replies: Sequence[Reply]) -> list[Reply]:
        """Sort replies by net score, highest first.

        The sort is stable: replies with equal scores keep their input order,
        so equal-score replies never swap places between recomputes.

        Args:
            replies: Replies in recency order

        Returns:
            New list ordered by descending net score
        """
        return sorted(replies, key=self.vote_ledger.net_score, reverse=True)

    def preview_window(self, ordered: Sequence[Reply], limit: int) -> PreviewWindow:
        """Cut an ordered list down to its first ``limit`` replies.

        Args:
            ordered: Replies already in display order
            limit: Number of replies to show

        Returns:
            Visible replies plus how many are hidden

        Raises:
            ValidationError: If limit is negative
        """
        if limit < 0:
            raise ValidationError(f"Preview limit must be non-negative, got {limit}")

        return PreviewWindow(
            visible=tuple(ordered[:limit]),
            has_more=len(ordered) > limit,
            hidden_count=max(0, len(ordered) - limit),
        )

    def expand(self, ordered: Sequence[Reply]) -> list[Reply]:
        """Full list for the expanded view. Expansion changes no data."""
        return list(ordered)
