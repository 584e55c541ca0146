"""Configuration providers."""

from dishka import Scope, provide

from engage.config import GatewaySettings, ReplySettings, Settings
from engage.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Settings and their sections, loaded once per container.

    Sections are provided separately so the gateway and reply code depend
    only on the part of the configuration they read.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Load settings from the environment and .env."""
        return Settings()

    @provide(scope=Scope.APP)
    def provide_gateway_settings(self, settings: Settings) -> GatewaySettings:
        """Provide gateway settings."""
        return settings.gateway

    @provide(scope=Scope.APP)
    def provide_reply_settings(self, settings: Settings) -> ReplySettings:
        """Provide reply settings."""
        return settings.replies
