"""LMS REST gateway adapter."""

from engage.adapter.lms.client import HttpEngagementGateway, MockEngagementGateway

__all__ = ["HttpEngagementGateway", "MockEngagementGateway"]
