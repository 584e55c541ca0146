"""Base class for domain services."""


class Service:
    """Marker base for domain services.

    Services hold the engagement rules that span entities (vote membership,
    ordering, optimistic writes). They are created per session by the DI
    container.
    """
