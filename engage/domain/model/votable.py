"""Votable item entity.

Anything that carries per-subject upvote/downvote membership.
"""

from pydantic import Field, model_validator

from engage.domain.model.common import DomainModel
from engage.domain.value import EntityId, SubjectId


class VotableItem(DomainModel):
    """Votable item.

    Business rules:
    - A subject is in at most one of ``upvoters``/``downvoters``
    - Net score is derived, never stored, and may be negative
    """

    id: EntityId
    upvoters: frozenset[SubjectId] = Field(default_factory=frozenset)
    downvoters: frozenset[SubjectId] = Field(default_factory=frozenset)

    @model_validator(mode="after")
    def validate_exclusive_votes(self) -> "VotableItem":
        """Reject subjects that both upvoted and downvoted."""
        both = self.upvoters & self.downvoters
        if both:
            raise ValueError(
                f"Subjects cannot both upvote and downvote: {sorted(both)}"
            )
        return self

    @property
    def net_score(self) -> int:
        """Upvote count minus downvote count."""
        return len(self.upvoters) - len(self.downvoters)
