"""In-memory cache implementations."""

from .entity_cache import InMemoryEntityCache

__all__ = [
    "InMemoryEntityCache",
]
