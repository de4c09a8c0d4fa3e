"""Transport protocol and the default httpx-backed implementation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx

from travis_v3.errors import TransportError, _walk_exception_chain

if TYPE_CHECKING:
    from collections.abc import Mapping

    from travis_v3.request import TravisRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Raw response bytes plus the status the server answered with."""

    status_code: int
    content: bytes
    headers: Mapping[str, str] = field(default_factory=dict)


@runtime_checkable
class Transport(Protocol):
    """Minimal transport protocol: send one request, return raw bytes.

    Implementations own connection pooling, TLS and timeouts, and raise on
    transport-level failure.
    """

    async def send(self, request: TravisRequest) -> TransportResponse:
        """Send *request* and return the raw response."""
        ...


def extract_status_code(exc: BaseException) -> int | None:
    """Walk the exception chain to find an HTTP status code."""
    for e in _walk_exception_chain(exc):
        for attr in ("status_code", "status"):
            value = getattr(e, attr, None)
            if isinstance(value, int) and 100 <= value <= 599:
                return value
        response = getattr(e, "response", None)
        value = getattr(response, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    return None


def wrap_transport_error(exc: BaseException, *, request: TravisRequest) -> TransportError:
    """Map a transport exception into TransportError."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    if isinstance(exc, TransportError):
        return exc

    status_code = extract_status_code(exc)
    hint: str | None = None
    for e in _walk_exception_chain(exc):
        if isinstance(e, httpx.TimeoutException):
            hint = "The request timed out; raise Config.timeout_s or retry later."
            break
        if isinstance(e, httpx.ConnectError):
            hint = f"Could not connect to {request.host}; check the endpoint host."
            break

    status_note = f" (status={status_code})" if isinstance(status_code, int) else ""
    cause = str(exc)
    msg = f"{request.method} {request.path} failed{status_note}"
    err = TransportError(
        f"{msg}: {cause}" if cause else msg,
        hint=hint,
        status_code=status_code,
    )
    err.__cause__ = exc
    return err


class HttpxTransport:
    """Transport backed by ``httpx.AsyncClient``.

    Closes the underlying client only when it created it.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout_s: float = 30.0,
    ) -> None:
        """Use *client* when given, otherwise create one lazily."""
        self._client = client
        self._owns_client = client is None
        self._timeout_s = timeout_s

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout_s)
        return self._client

    async def send(self, request: TravisRequest) -> TransportResponse:
        """Send *request* through httpx."""
        client = self._get_client()
        response = await client.request(
            request.method,
            request.url,
            headers=dict(request.headers),
            content=request.body,
        )
        return TransportResponse(
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
        )

    async def aclose(self) -> None:
        """Close the owned httpx client, if any."""
        if self._owns_client and self._client is not None:
            client, self._client = self._client, None
            await client.aclose()
