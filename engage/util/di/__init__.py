"""Dependency injection module."""

from typing import Type

from engage.util.di.application import ProdApplicationProvider
from engage.util.di.base import Component, ProviderBase
from engage.util.di.core import ProdConfigProvider
from engage.util.di.domain import ProdDomainProvider
from engage.util.di.infrastructure import (
    CacheProvider,
    GatewayProvider,
    ProdGatewayProvider,
)

# Wiring order does not matter to dishka; mockable components go last
PROVIDERS: list[Type[ProviderBase]] = [
    # Core providers (not mockable)
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    CacheProvider,
    # Infrastructure components (mockable)
    GatewayProvider,
]


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Resolve a provider base to the class to instantiate.

    Concrete providers have no subclasses and are returned as-is. A mockable
    component base returns whichever subclass has a matching ``__is_mock__``.

    Raises:
        ValueError: If the component has no implementation of that kind
    """
    variants = base.__subclasses__()
    if not variants:
        return base

    for variant in variants:
        if variant.__is_mock__ == use_mock:
            return variant

    kind = "mock" if use_mock else "production"
    raise ValueError(f"No {kind} implementation for {base.__mock_component__}")


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    # Core providers
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "CacheProvider",
    # Infrastructure
    "GatewayProvider",
    "ProdGatewayProvider",
]
