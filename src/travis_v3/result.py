"""Result type for explicit error handling.

Every endpoint call resolves to either a :class:`Success` carrying the decoded
value or a :class:`Failure` carrying a :class:`~travis_v3.errors.TravisError`.
Failures are part of the data flow, not exceptions to catch.
"""

from __future__ import annotations

import dataclasses
import typing

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success(typing.Generic[TSuccess]):
    """A successful result."""

    value: TSuccess

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> TSuccess:
        """Return the wrapped value."""
        return self.value


@dataclasses.dataclass(frozen=True, slots=True)
class Failure(typing.Generic[TFailure]):
    """A failed result, containing the error."""

    error: TFailure

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> typing.NoReturn:
        """Raise the wrapped error."""
        raise typing.cast("Exception", self.error)


Result = Success[TSuccess] | Failure[TFailure]
