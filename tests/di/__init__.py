"""Test wiring: mock providers and the test container builder."""

from .gateway import MockGatewayProvider
from .container import build_test_container

__all__ = [
    "MockGatewayProvider",
    "build_test_container",
]
