"""Base class for value objects."""

from pydantic import BaseModel, ConfigDict


class ValueObject(BaseModel):
    """Immutable value compared by its fields.

    Acks, outcomes and notices are value objects. Some carry live objects
    such as exceptions, hence ``arbitrary_types_allowed``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
