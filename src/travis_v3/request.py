"""Request construction: authenticated, host-bound TravisRequest values."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urlencode

from travis_v3._http import (
    API_VERSION,
    API_VERSION_HEADER,
    AUTHORIZATION_HEADER,
    AUTHORIZATION_SCHEME,
    JSON_CONTENT_TYPE,
    SCHEME,
    HTTPMethod,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from travis_v3.config import Config
    from travis_v3.queries import QueryItems


@dataclass(frozen=True)
class TravisRequest:
    """A fully formed request, ready for a transport."""

    method: HTTPMethod
    host: str
    path: str
    query: tuple[tuple[str, str], ...] = ()
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None

    @property
    def url(self) -> str:
        """Absolute URL including the encoded query string."""
        url = f"{SCHEME}://{self.host}{self.path}"
        if self.query:
            url = f"{url}?{urlencode(self.query)}"
        return url

    def query_dict(self) -> dict[str, str]:
        """Query items as a dict; later duplicates win."""
        return dict(self.query)

    def __repr__(self) -> str:
        return f"TravisRequest({self.method} {self.url})"


def escape_segment(value: str | int) -> str:
    """Percent-escape one path segment (``owner/name`` → ``owner%2Fname``)."""
    return quote(str(value), safe="")


class RequestBuilder:
    """Builds requests against one configured endpoint.

    Every request carries the API version, authorization and user-agent
    headers. Write operations additionally carry a JSON body.
    """

    def __init__(self, config: Config) -> None:
        """Bind the builder to a host and token."""
        self.host = config.endpoint.host
        self._headers: dict[str, str] = {
            API_VERSION_HEADER: API_VERSION,
            AUTHORIZATION_HEADER: f"{AUTHORIZATION_SCHEME} {config.token}",
            "User-Agent": config.user_agent,
            "Accept": JSON_CONTENT_TYPE,
        }

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    def build(
        self,
        path: str,
        *,
        method: HTTPMethod = "GET",
        query: QueryItems | Iterable[tuple[str, str]] | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> TravisRequest:
        """Build a request for an already-escaped *path*.

        Args:
            path: Percent-encoded absolute path, e.g. ``/repo/1/builds``.
            method: HTTP method.
            query: Ordered query items.
            body: JSON-serializable mapping for write operations.
        """
        if not path.startswith("/"):
            path = f"/{path}"

        headers = dict(self._headers)
        payload: bytes | None = None
        if body is not None:
            headers["Content-Type"] = JSON_CONTENT_TYPE
            payload = json.dumps(body, separators=(",", ":")).encode("utf-8")

        return TravisRequest(
            method=method,
            host=self.host,
            path=path,
            query=tuple((str(k), str(v)) for k, v in (query or ())),
            headers=headers,
            body=payload,
        )
