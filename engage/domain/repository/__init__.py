"""Repository interfaces for the engagement domain.

Interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from engage.domain.repository.entity_cache import (
    CacheChange,
    CacheListener,
    Entity,
    EntityCache,
)

__all__ = [
    "CacheChange",
    "CacheListener",
    "Entity",
    "EntityCache",
]
