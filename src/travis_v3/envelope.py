"""Envelope decoding for ``@type``-tagged response documents.

Every v3 response is a JSON object carrying ``@type``, ``@href`` and an
optional ``@pagination`` block. Collections nest their payload under the key
named by ``@type`` (``{"@type": "repositories", "repositories": [...]}``);
single resources inline their fields next to the metadata keys
(``{"@type": "repository", "id": 1, ...}``).

Decoding resolves one of two branches up front and then runs only that
branch:

- ``"nested"``: the document holds a non-null value under the ``@type`` key;
  that value is the payload.
- ``"inline"``: no such value; the whole document is the payload.

A nested value that fails validation is a schema mismatch. It never falls
back to the inline branch.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from functools import lru_cache
import json
import logging
from typing import Any, Generic, Literal, TypeVar

from pydantic import AliasChoices, Field, TypeAdapter, ValidationError

from travis_v3.errors import (
    DecodeError,
    MalformedDocumentError,
    MissingDiscriminatorError,
    MissingFieldError,
    RemoteError,
    SchemaMismatchError,
)
from travis_v3.models import ErrorMessage, TravisModel
from travis_v3.result import Failure, Result, Success

logger = logging.getLogger(__name__)

ObjectT = TypeVar("ObjectT")

TYPE_KEY = "@type"
HREF_KEY = "@href"
PAGINATION_KEY = "@pagination"

PayloadBranch = Literal["nested", "inline"]


class Page(TravisModel):
    """A link to one window of a paginated collection."""

    path: str = Field(alias="@href")
    offset: int | None = None
    limit: int | None = None


class Pagination(TravisModel):
    """Windowing metadata for a collection response."""

    limit: int
    offset: int
    count: int
    is_first: bool | None = None
    is_last: bool | None = None
    current: Page | None = Field(default=None, alias="self")
    next: Page | None = None
    previous: Page | None = Field(
        default=None, validation_alias=AliasChoices("prev", "previous")
    )
    first: Page | None = None
    last: Page | None = None


@dataclass(frozen=True)
class Envelope(Generic[ObjectT]):
    """A decoded response: metadata plus the typed payload.

    Declared fields of the payload model are readable directly on the
    envelope (``envelope.slug`` is ``envelope.object.slug``). Sequence
    payloads make the envelope iterable, sized and indexable.
    """

    type: str
    path: str
    pagination: Pagination | None
    object: ObjectT
    #: The shape the payload was decoded as; used to decode further pages.
    shape: Any = field(default=None, compare=False, repr=False)

    def __getattr__(self, name: str) -> Any:
        # Only reached for names the envelope itself does not define.
        if name.startswith("_"):
            raise AttributeError(name)
        obj = self.__dict__.get("object")
        declared = getattr(type(obj), "model_fields", None)
        if declared is not None and name in declared:
            return getattr(obj, name)
        raise AttributeError(
            f"{type(self).__name__!r} object has no attribute {name!r}"
        )

    def _sequence(self) -> Sequence[Any]:
        if isinstance(self.object, Sequence) and not isinstance(
            self.object, (str, bytes)
        ):
            return self.object
        raise TypeError(
            f"Envelope of {type(self.object).__name__} is not a collection"
        )

    def __iter__(self) -> Any:
        return iter(self._sequence())

    def __len__(self) -> int:
        return len(self._sequence())

    def __getitem__(self, index: int) -> Any:
        return self._sequence()[index]

    def __bool__(self) -> bool:
        try:
            return bool(self._sequence())
        except TypeError:
            return True

    @property
    def has_next_page(self) -> bool:
        return self.pagination is not None and self.pagination.next is not None


@lru_cache(maxsize=128)
def _adapter(shape: Any) -> TypeAdapter[Any]:
    return TypeAdapter(shape)


def _shape_name(shape: Any) -> str:
    return getattr(shape, "__name__", None) or str(shape)


def _mismatch(where: str, shape: Any, exc: ValidationError) -> SchemaMismatchError:
    first = exc.errors()[0] if exc.error_count() else {}
    loc = ".".join(str(p) for p in first.get("loc", ())) or "<root>"
    err = SchemaMismatchError(
        f"{where} does not match {_shape_name(shape)} "
        f"({exc.error_count()} validation error(s))",
        hint=f"First error at {loc}: {first.get('msg', 'invalid value')}",
    )
    err.__cause__ = exc
    return err


def parse_document(raw: bytes | str | Mapping[str, Any]) -> Result[dict[str, Any], DecodeError]:
    """Parse raw bytes or text into a top-level JSON object."""
    if isinstance(raw, Mapping):
        return Success(dict(raw))
    try:
        document = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        err = MalformedDocumentError(f"Response is not valid JSON: {exc}")
        err.__cause__ = exc
        return Failure(err)
    if not isinstance(document, dict):
        return Failure(
            SchemaMismatchError(
                f"Expected a JSON object at the top level, got {type(document).__name__}"
            )
        )
    return Success(document)


def resolve_branch(document: Mapping[str, Any], type_key: str) -> PayloadBranch:
    """Pick the payload branch. Nested presence always wins."""
    return "nested" if document.get(type_key) is not None else "inline"


def decode_nested(
    document: Mapping[str, Any], type_key: str, shape: Any
) -> Result[Any, SchemaMismatchError]:
    """Decode the value stored under *type_key* as *shape*."""
    try:
        return Success(_adapter(shape).validate_python(document[type_key]))
    except ValidationError as exc:
        return Failure(_mismatch(f"Nested payload {type_key!r}", shape, exc))


def decode_inline(
    document: Mapping[str, Any], shape: Any
) -> Result[Any, SchemaMismatchError]:
    """Decode the whole document as *shape*."""
    try:
        return Success(_adapter(shape).validate_python(dict(document)))
    except ValidationError as exc:
        return Failure(_mismatch("Document", shape, exc))


def _metadata(
    document: Mapping[str, Any], discriminator_key: str
) -> Result[tuple[str, str, Pagination | None], DecodeError]:
    kind = document.get(discriminator_key)
    if kind is None:
        return Failure(MissingDiscriminatorError(discriminator_key))
    if not isinstance(kind, str):
        return Failure(
            SchemaMismatchError(
                f"{discriminator_key} must be a string, got {type(kind).__name__}"
            )
        )

    path = document.get(HREF_KEY)
    if path is None:
        return Failure(MissingFieldError(HREF_KEY))
    if not isinstance(path, str):
        return Failure(
            SchemaMismatchError(f"{HREF_KEY} must be a string, got {type(path).__name__}")
        )

    raw_pagination = document.get(PAGINATION_KEY)
    if raw_pagination is None:
        return Success((kind, path, None))
    try:
        pagination = Pagination.model_validate(raw_pagination)
    except ValidationError as exc:
        return Failure(_mismatch(PAGINATION_KEY, Pagination, exc))
    return Success((kind, path, pagination))


def decode(
    raw: bytes | str | Mapping[str, Any],
    shape: type[ObjectT] | Any,
    *,
    discriminator_key: str = TYPE_KEY,
) -> Result[Envelope[ObjectT], DecodeError]:
    """Decode a response document into an :class:`Envelope`.

    Args:
        raw: Response body, or an already-parsed JSON object.
        shape: Payload type, e.g. ``Repository`` or ``tuple[Repository, ...]``.
        discriminator_key: Key holding the type tag.

    Returns:
        ``Success(Envelope)`` or ``Failure`` with a DecodeError subclass.
    """
    parsed = parse_document(raw)
    if isinstance(parsed, Failure):
        return parsed
    document = parsed.value

    meta = _metadata(document, discriminator_key)
    if isinstance(meta, Failure):
        return meta
    kind, path, pagination = meta.value

    branch = resolve_branch(document, kind)
    logger.debug("Decoding %r as %s via %s branch", kind, _shape_name(shape), branch)
    if branch == "nested":
        payload = decode_nested(document, kind, shape)
    else:
        payload = decode_inline(document, shape)
    if isinstance(payload, Failure):
        return payload

    return Success(
        Envelope(
            type=kind,
            path=path,
            pagination=pagination,
            object=payload.value,
            shape=shape,
        )
    )


def decode_plain(
    raw: bytes | str | Mapping[str, Any], shape: type[ObjectT] | Any
) -> Result[ObjectT, DecodeError]:
    """Decode a document that carries no envelope metadata (e.g. actions)."""
    parsed = parse_document(raw)
    if isinstance(parsed, Failure):
        return parsed
    return decode_inline(parsed.value, shape)


def decode_remote_error(
    raw: bytes | str | Mapping[str, Any], *, status_code: int | None = None
) -> RemoteError | None:
    """Return a RemoteError if *raw* is the service's error document."""
    parsed = parse_document(raw)
    if isinstance(parsed, Failure):
        return None
    try:
        message = ErrorMessage.model_validate(parsed.value)
    except ValidationError:
        return None
    return RemoteError(
        message.error_message,
        error_type=message.error_type,
        resource_type=message.resource_type,
        permission=message.permission,
        status_code=status_code,
    )
