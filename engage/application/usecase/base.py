"""Base use case."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel

RequestT = TypeVar("RequestT", bound=BaseModel)
ResponseT = TypeVar("ResponseT", bound=BaseModel)


class BaseUseCase(ABC, Generic[RequestT, ResponseT]):
    """A UI-facing action.

    ``execute`` applies the action locally and returns as soon as the
    optimistic state is in the cache; the response carries the ticket for
    the gateway round trip.
    """

    @abstractmethod
    async def execute(self, request: RequestT) -> ResponseT: ...
