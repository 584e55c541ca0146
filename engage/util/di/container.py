"""Dependency injection container."""

from dishka import AsyncContainer, make_async_container

from engage.config import Settings
from engage.util.di import PROVIDERS, get_provider
from engage.util.logging import setup_logging
from engage.util.observability import configure_logfire


def create_container(settings: Settings | None = None) -> AsyncContainer:
    """Build production container (all prod implementations).

    Configures logging and Logfire from the settings before wiring. Open
    one request scope per user session:

        container = create_container()
        async with container() as session_container:
            session = await session_container.get(EngagementSession)

    Args:
        settings: Settings to log with; loaded from the environment if omitted

    Returns:
        Configured DI container with production providers
    """
    settings = settings or Settings()
    setup_logging(settings)
    configure_logfire(settings)

    provider_instances = [get_provider(base, use_mock=False)() for base in PROVIDERS]
    return make_async_container(*provider_instances)
