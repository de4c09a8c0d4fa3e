"""Exception hierarchy for travis_v3.

Endpoint calls do not raise these; they return them inside
:class:`travis_v3.result.Failure`. Only construction-time misuse raises.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class TravisError(Exception):
    """Base exception for all travis_v3 errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(TravisError):
    """Configuration validation or resolution failed."""


class TransportError(TravisError):
    """No usable response bytes were received.

    ``status_code`` is set when the failure carried an HTTP status.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code = status_code


class DecodeError(TravisError):
    """A response document could not be turned into the expected value."""


class MalformedDocumentError(DecodeError):
    """The response body is not valid JSON."""


class MissingFieldError(DecodeError):
    """A mandatory metadata key is absent from the document."""

    def __init__(self, name: str, *, hint: str | None = None) -> None:
        super().__init__(f"Missing required field {name!r}", hint=hint)
        self.name = name


class MissingDiscriminatorError(MissingFieldError):
    """The ``@type`` discriminator is absent from the document."""

    def __init__(self, name: str = "@type", *, hint: str | None = None) -> None:
        super().__init__(name, hint=hint)


class SchemaMismatchError(DecodeError):
    """The payload does not match the expected shape."""


class UnparseableLinkError(DecodeError):
    """An embedded or pagination href is not a valid URL."""

    def __init__(self, href: str, *, hint: str | None = None) -> None:
        super().__init__(f"Unparseable link: {href!r}", hint=hint)
        self.href = href


class RemoteError(TravisError):
    """The service answered with a structured error document."""

    def __init__(
        self,
        message: str,
        *,
        error_type: str,
        hint: str | None = None,
        resource_type: str | None = None,
        permission: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.error_type = error_type
        self.resource_type = resource_type
        self.permission = permission
        self.status_code = status_code


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
