"""Logfire setup.

Services log through the logfire module directly:

    logfire.info("Mutation committed", entity_id=entity_id, kind=kind.value)

Console output is always on. Events reach Logfire only when a token is
configured, unless OBSERVABILITY__SEND_TO_LOGFIRE overrides it.
"""

import logfire

from engage.config import Settings


def _should_send(settings: Settings) -> bool:
    explicit = settings.observability.send_to_logfire
    if explicit is not None:
        return explicit
    return bool(settings.observability.logfire_token)


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for the engagement engine.

    Args:
        settings: Application settings
    """
    send_to_logfire = _should_send(settings)

    logfire.configure(
        service_name="engage",
        environment=settings.environment,
        token=settings.observability.logfire_token,
        send_to_logfire=send_to_logfire,
        console=logfire.ConsoleOptions(
            span_style="show-parents",
            verbose=settings.debug,
        ),
    )
    logfire.info(
        "Logfire configured",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
    )


def instrument_httpx() -> None:
    """Trace every LMS gateway request made with httpx."""
    logfire.instrument_httpx()
