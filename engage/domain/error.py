"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Input rejected locally, before any cache mutation or network call."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested entity is not in the cache."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class MutationInFlightError(DomainError):
    """Raised when the same action is repeated while the first is still pending."""

    def __init__(self, entity_id: str, kind: str):
        self.entity_id = entity_id
        self.kind = kind
        super().__init__(f"A {kind} mutation is already in flight for {entity_id}")


class GatewayError(DomainError):
    """Base error for a failed gateway round trip.

    Every gateway failure rolls the optimistic patch back before it is surfaced.
    """

    retryable: bool = False


class NetworkError(GatewayError):
    """Transport failure or timeout. The caller may retry."""

    retryable = True


class RejectedError(GatewayError):
    """The server explicitly declined the mutation."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class UnknownGatewayError(GatewayError):
    """Any other gateway failure."""

    pass
