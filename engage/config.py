"""Application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewaySettings(BaseModel):
    """LMS REST gateway configuration."""

    base_url: str = "http://localhost:4000/api"

    # Seconds before an in-flight request is treated as a network failure
    timeout: float = 10.0

    user_agent: str = "engage/1.0"


class ReplySettings(BaseModel):
    """Discussion reply configuration."""

    # Replies shown before the "show all" toggle
    preview_limit: int = Field(default=2, ge=0)

    max_length: int = Field(default=10000, ge=1)

    # Display labels for a reply that has not been confirmed by the server yet
    provisional_author_label: str = "You"
    provisional_created_at_label: str = "just now"


class ObservabilitySettings(BaseModel):
    """Logfire configuration."""

    # OBSERVABILITY__LOGFIRE_TOKEN; console only when unset
    logfire_token: str | None = None

    # None means "send when a token is present"
    send_to_logfire: bool | None = None


class Settings(BaseSettings):
    """Application settings.

    Set environment variables to override, using ``__`` for nesting:

        ENVIRONMENT=production
        GATEWAY__BASE_URL=https://lms.example.com/api
        REPLIES__PREVIEW_LIMIT=3
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    environment: Literal["test", "development", "staging", "production"] = "development"
    debug: bool = False

    # Nested settings
    gateway: GatewaySettings = GatewaySettings()
    replies: ReplySettings = ReplySettings()
    observability: ObservabilitySettings = ObservabilitySettings()
