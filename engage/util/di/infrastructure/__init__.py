"""Infrastructure providers."""

# Import bases
from .cache import CacheProvider
from .gateway import GatewayProvider

# Import implementations (needed for __subclasses__())
from .gateway import ProdGatewayProvider  # noqa: F401

__all__ = [
    "CacheProvider",
    "GatewayProvider",
    "ProdGatewayProvider",
]
