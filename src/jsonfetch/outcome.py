"""Result types returned by the resolver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

from .exceptions import HttpError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A successful request. ``value`` is None for empty or non-JSON bodies."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """A response that carried a failure status code.

    Attributes:
        message: Human-readable error text, never empty.
        status_code: The HTTP status that triggered the failure.
    """

    message: str
    status_code: int

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        """Raise the failure as an :class:`HttpError`."""
        raise HttpError(self.message, self.status_code)


Outcome = Union[Ok[T], Err]
