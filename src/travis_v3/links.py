"""Link following: turn embedded stubs and pagination links into requests.

Both builders are pure. They produce a :class:`~travis_v3.request.TravisRequest`
with the same host and headers as any endpoint request and leave sending it
to the caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl, urlsplit

from travis_v3._http import DEFAULT_HTTPS_PORT, SCHEME
from travis_v3.errors import UnparseableLinkError
from travis_v3.result import Failure, Result, Success

if TYPE_CHECKING:
    from travis_v3.envelope import Page
    from travis_v3.models import MinimalResource
    from travis_v3.request import RequestBuilder, TravisRequest

logger = logging.getLogger(__name__)


def follow_minimal(
    ref: MinimalResource, builder: RequestBuilder
) -> Result[TravisRequest, UnparseableLinkError] | None:
    """Build a request for the full representation of *ref*.

    Returns None when the stub has no ``@href``; not every embedded stub is
    resolvable. An href that is present but unusable is a Failure.
    """
    if not ref.path:
        logger.debug("Skipping %s stub without @href", type(ref).__name__)
        return None
    try:
        path, query = split_href(ref.path, host=builder.host)
    except UnparseableLinkError as exc:
        return Failure(exc)
    return Success(builder.build(path, query=query))


def split_href(href: str, *, host: str) -> tuple[str, tuple[tuple[str, str], ...]]:
    """Split *href* into an escaped path and ordered query items.

    Absolute hrefs must point at *host* over https.

    Raises:
        UnparseableLinkError: If *href* is not a structurally valid URL.
    """
    if not isinstance(href, str) or not href.strip():
        raise UnparseableLinkError(str(href))
    if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in href):
        raise UnparseableLinkError(href, hint="Links may not contain whitespace.")

    try:
        parts = urlsplit(href)
        port = parts.port
        configured = urlsplit(f"{SCHEME}://{host}")
        configured_port = configured.port or DEFAULT_HTTPS_PORT
    except ValueError as exc:
        raise UnparseableLinkError(href) from exc

    if parts.scheme or parts.netloc:
        if parts.scheme != SCHEME or parts.hostname is None:
            raise UnparseableLinkError(href, hint="Only https links are followed.")
        if (
            parts.username is not None
            or parts.hostname != configured.hostname
            or (port or DEFAULT_HTTPS_PORT) != configured_port
        ):
            raise UnparseableLinkError(
                href, hint=f"Link points outside the configured host {host!r}."
            )

    path = parts.path or "/"
    if not path.startswith("/"):
        raise UnparseableLinkError(href, hint="Relative links must start with '/'.")

    query = tuple(parse_qsl(parts.query, keep_blank_values=True))
    return path, query


def follow_page(
    page: Page, builder: RequestBuilder
) -> Result[TravisRequest, UnparseableLinkError]:
    """Build a request for the collection window *page* points at."""
    try:
        path, query = split_href(page.path, host=builder.host)
    except UnparseableLinkError as exc:
        return Failure(exc)
    return Success(builder.build(path, query=query))
