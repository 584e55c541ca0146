"""Entity cache interface."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Union

from engage.domain.model.common import DomainModel
from engage.domain.model.knowledge import KnowledgeArticle
from engage.domain.model.reply import Reply
from engage.domain.model.votable import VotableItem
from engage.domain.value import EntityId, TopicId

Entity = Union[Reply, VotableItem, KnowledgeArticle]


class CacheChange(DomainModel):
    """A single write to the cache.

    ``previous`` is None for an insert, ``current`` is None for a removal.
    """

    entity_id: EntityId
    previous: Optional[Entity] = None
    current: Optional[Entity] = None

    def touches_topic(self, topic_id: TopicId) -> bool:
        """Whether either side of the change is a reply in the given topic."""
        return any(
            isinstance(entity, Reply) and entity.topic_id == topic_id
            for entity in (self.previous, self.current)
        )


CacheListener = Callable[[CacheChange], None]


class EntityCache(ABC):
    """Session-scoped cache of engagement entities keyed by entity id.

    All writes are synchronous and each one is announced to subscribers
    after it has been applied. Iteration order is insertion order, which
    for replies is recency order within a topic.
    """

    @abstractmethod
    def get(self, entity_id: EntityId) -> Optional[Entity]:
        """Find an entity by ID.

        Args:
            entity_id: The entity's identifier

        Returns:
            The entity if cached, None otherwise
        """
        pass

    @abstractmethod
    def contains(self, entity_id: EntityId) -> bool:
        """Whether an entity is cached."""
        pass

    @abstractmethod
    def put(self, entity: Entity) -> Entity:
        """Insert or replace an entity.

        A replaced entity keeps its position; a new one is appended.

        Args:
            entity: The entity to store

        Returns:
            The stored entity
        """
        pass

    @abstractmethod
    def replace(self, entity_id: EntityId, entity: Entity) -> bool:
        """Swap the entry at ``entity_id`` for an entity with another ID.

        The new entity takes the old entry's position. Used when a
        provisional reply is confirmed under its server-issued ID.

        Args:
            entity_id: ID of the entry to swap out
            entity: Replacement entity

        Returns:
            True if the entry existed and was replaced, False otherwise
        """
        pass

    @abstractmethod
    def remove(self, entity_id: EntityId) -> bool:
        """Remove an entity.

        Returns:
            True if an entity was removed, False if none was cached
        """
        pass

    @abstractmethod
    def find_replies(self, topic_id: TopicId) -> List[Reply]:
        """Replies of a topic in insertion order."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Drop every entity, announcing each removal. Subscribers are kept."""
        pass

    @abstractmethod
    def subscribe(self, listener: CacheListener) -> Callable[[], None]:
        """Register a change listener.

        Args:
            listener: Called with a CacheChange after every write

        Returns:
            Function that removes the listener
        """
        pass
