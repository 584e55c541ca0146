"""LMS gateway infrastructure providers."""

from dishka import Scope, provide

from engage.adapter.lms import HttpEngagementGateway
from engage.config import GatewaySettings
from engage.domain.service import EngagementGateway
from engage.util.di.base import ProviderBase
from engage.util.observability import instrument_httpx


class GatewayProvider(ProviderBase):
    """Gateway component base."""

    __mock_component__ = "gateway"


class ProdGatewayProvider(GatewayProvider):
    """Production gateway provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_gateway(self, gateway_settings: GatewaySettings) -> EngagementGateway:
        """Provide LMS REST gateway.

        Raises:
            ValueError: If the gateway base URL is not configured
        """
        if not gateway_settings.base_url:
            raise ValueError("Gateway base URL must be configured")

        # Instrument httpx for observability
        instrument_httpx()
        return HttpEngagementGateway(
            base_url=gateway_settings.base_url,
            timeout=gateway_settings.timeout,
            user_agent=gateway_settings.user_agent,
        )
