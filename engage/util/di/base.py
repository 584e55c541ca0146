"""Provider base class shared by every dishka provider in engage."""

from typing import ClassVar, Literal

from dishka import Provider

# Components that have both a production and a mock provider
Component = Literal["gateway"]


class ProviderBase(Provider):
    """Provider with mock/prod metadata.

    A mockable component declares ``__mock_component__`` on its base and
    ships one subclass per variant, told apart by ``__is_mock__``.
    Concrete providers leave both at their defaults.
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
