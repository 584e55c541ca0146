"""Pending mutation record."""

from typing import Any, Optional

from pydantic import Field

from engage.domain.model.common import DomainModel
from engage.domain.value import EntityId, MutationKind, SubjectId


class PendingMutation(DomainModel):
    """An optimistic mutation awaiting its gateway round trip.

    ``previous_snapshot`` holds the pre-mutation value of exactly the fields
    the mutation changed. An empty snapshot means the entity did not exist
    before the mutation (a provisional reply), so rollback removes it.
    """

    entity_id: EntityId
    kind: MutationKind
    previous_snapshot: dict[str, Any] = Field(default_factory=dict)

    # Acting subject of a vote; rollback only touches their membership
    subject: Optional[SubjectId] = None

    @property
    def key(self) -> tuple[EntityId, MutationKind]:
        """In-flight key; at most one pending mutation per key."""
        return (self.entity_id, self.kind)
