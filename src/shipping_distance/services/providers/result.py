"""Outcome of one distance calculation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ...errors import ProviderError
from ...models.distance import Distance
from ..http.dispatcher import Dispatcher


@dataclass(frozen=True, slots=True)
class Success:
    distance: Distance
    dispatcher: Optional[Dispatcher] = None

    def is_error(self) -> bool:
        return False

    def raise_for_error(self) -> Distance:
        return self.distance


@dataclass(frozen=True, slots=True)
class Failure:
    error: str
    dispatcher: Optional[Dispatcher] = None

    def is_error(self) -> bool:
        return True

    def raise_for_error(self) -> Distance:
        raise ProviderError(self.error, self.dispatcher)


class CalcResult:
    """Factories for the two result variants.

    A :class:`Success` has no ``error`` attribute and a :class:`Failure` has no
    ``distance`` attribute, so reading the wrong one fails loudly.
    """

    @staticmethod
    def success(distance: Distance, dispatcher: Optional[Dispatcher] = None) -> Success:
        return Success(distance=distance, dispatcher=dispatcher)

    @staticmethod
    def failure(error: str, dispatcher: Optional[Dispatcher] = None) -> Failure:
        return Failure(error=error or "API request failed.", dispatcher=dispatcher)


CalcOutcome = Union[Success, Failure]
