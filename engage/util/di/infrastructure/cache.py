"""Entity cache providers."""

from collections.abc import Iterator

from dishka import Scope, provide

from engage.domain.repository import EntityCache
from engage.persistence.inmemory import InMemoryEntityCache
from engage.util.di.base import ProviderBase


class CacheProvider(ProviderBase):
    """Session entity cache provider - concrete, no mocks needed."""

    @provide(scope=Scope.REQUEST)
    def get_entity_cache(self) -> Iterator[EntityCache]:
        """Provide an empty cache per session, cleared when the session ends."""
        cache = InMemoryEntityCache()
        yield cache
        cache.clear()
