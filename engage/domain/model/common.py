"""Base model for domain entities."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Base class for cached entities.

    Entities are frozen. Every change is a ``model_copy(update=...)`` that
    the caller writes back to the entity cache, which is what lets the
    mutation coordinator keep the previous value as its snapshot.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
