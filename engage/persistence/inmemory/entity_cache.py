"""In-memory entity cache."""

from typing import Callable, Optional

import logfire

from engage.domain.model.reply import Reply
from engage.domain.repository.entity_cache import (
    CacheChange,
    CacheListener,
    Entity,
    EntityCache,
)
from engage.domain.value import EntityId, TopicId


class InMemoryEntityCache(EntityCache):
    """Dict-backed implementation of EntityCache for one user session."""

    def __init__(self) -> None:
        self._entities: dict[EntityId, Entity] = {}
        self._listeners: list[CacheListener] = []

    def get(self, entity_id: EntityId) -> Optional[Entity]:
        """Find an entity by ID."""
        return self._entities.get(entity_id)

    def contains(self, entity_id: EntityId) -> bool:
        """Whether an entity is cached."""
        return entity_id in self._entities

    def put(self, entity: Entity) -> Entity:
        """Insert or replace an entity in place."""
        previous = self._entities.get(entity.id)
        self._entities[entity.id] = entity
        self._notify(CacheChange(entity_id=entity.id, previous=previous, current=entity))
        return entity

    def replace(self, entity_id: EntityId, entity: Entity) -> bool:
        """Swap an entry for an entity with another ID, keeping its position."""
        previous = self._entities.get(entity_id)
        if previous is None:
            return False

        entities: dict[EntityId, Entity] = {}
        for key, value in self._entities.items():
            if key == entity_id:
                entities[entity.id] = entity
            elif key != entity.id:
                entities[key] = value
        self._entities = entities

        self._notify(CacheChange(entity_id=entity_id, previous=previous, current=None))
        self._notify(CacheChange(entity_id=entity.id, previous=None, current=entity))
        return True

    def remove(self, entity_id: EntityId) -> bool:
        """Remove an entity by ID."""
        previous = self._entities.pop(entity_id, None)
        if previous is None:
            return False
        self._notify(CacheChange(entity_id=entity_id, previous=previous, current=None))
        return True

    def find_replies(self, topic_id: TopicId) -> list[Reply]:
        """Replies of a topic in insertion order."""
        return [
            e
            for e in self._entities.values()
            if isinstance(e, Reply) and e.topic_id == topic_id
        ]

    def clear(self) -> None:
        """Drop every entity, announcing each removal."""
        entities, self._entities = self._entities, {}
        for entity_id, previous in entities.items():
            self._notify(CacheChange(entity_id=entity_id, previous=previous))
        logfire.debug("Entity cache cleared", count=len(entities))

    def subscribe(self, listener: CacheListener) -> Callable[[], None]:
        """Register a change listener."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, change: CacheChange) -> None:
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            listener(change)
