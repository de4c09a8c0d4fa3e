"""Test helpers (small, reusable doubles and document builders).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off transports as coverage expands.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any

from travis_v3.request import TravisRequest
from travis_v3.transport import TransportResponse


@dataclass
class ScriptedTransport:
    """Transport double that returns a scripted sequence of responses/exceptions.

    Every sent request is recorded in ``requests`` for assertions.
    """

    script: list[TransportResponse | BaseException] = field(default_factory=list)
    requests: list[TravisRequest] = field(default_factory=list)
    closed: bool = False

    async def send(self, request: TravisRequest) -> TransportResponse:
        self.requests.append(request)
        if not self.script:
            raise AssertionError(f"Unscripted request: {request!r}")
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def aclose(self) -> None:
        self.closed = True

    @property
    def last(self) -> TravisRequest:
        return self.requests[-1]


def respond(document: Any, status_code: int = 200) -> TransportResponse:
    """Build a JSON TransportResponse."""
    return TransportResponse(
        status_code=status_code,
        content=json.dumps(document).encode("utf-8"),
        headers={"content-type": "application/json"},
    )


def repository_doc(repo_id: int = 1, slug: str = "octo/widgets", **extra: Any) -> dict[str, Any]:
    """A standard-representation repository, as embedded in collections."""
    owner, _, name = slug.partition("/")
    doc: dict[str, Any] = {
        "@type": "repository",
        "@href": f"/repo/{repo_id}",
        "@representation": "standard",
        "id": repo_id,
        "name": name,
        "slug": slug,
        "description": None,
        "github_language": "Python",
        "active": True,
        "private": False,
        "owner": {"@type": "user", "id": 7, "login": owner, "@href": "/user/7"},
        "default_branch": {
            "@type": "branch",
            "@href": f"/repo/{repo_id}/branch/main",
            "@representation": "minimal",
            "name": "main",
        },
        "starred": False,
    }
    doc.update(extra)
    return doc


def collection_doc(
    kind: str,
    items: list[dict[str, Any]],
    *,
    href: str = "/repos",
    pagination: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """A collection envelope with the payload nested under *kind*."""
    doc: dict[str, Any] = {"@type": kind, "@href": href, "@representation": "standard"}
    if pagination is not None:
        doc["@pagination"] = pagination
    doc[kind] = items
    return doc


def pagination_doc(
    *, limit: int = 2, offset: int = 0, count: int = 5, path: str = "/repos"
) -> dict[str, Any]:
    """Pagination block in the shape the service emits."""
    is_last = offset + limit >= count
    last_offset = ((count - 1) // limit) * limit if count else 0
    return {
        "limit": limit,
        "offset": offset,
        "count": count,
        "is_first": offset == 0,
        "is_last": is_last,
        "self": {
            "@href": f"{path}?limit={limit}&offset={offset}",
            "offset": offset,
            "limit": limit,
        },
        "next": None
        if is_last
        else {
            "@href": f"{path}?limit={limit}&offset={offset + limit}",
            "offset": offset + limit,
            "limit": limit,
        },
        "prev": None
        if offset == 0
        else {
            "@href": f"{path}?limit={limit}&offset={max(0, offset - limit)}",
            "offset": max(0, offset - limit),
            "limit": limit,
        },
        "first": {"@href": f"{path}?limit={limit}", "offset": 0, "limit": limit},
        "last": {
            "@href": f"{path}?limit={limit}&offset={last_offset}",
            "offset": last_offset,
            "limit": limit,
        },
    }


def error_doc(error_type: str = "not_found", message: str = "repository not found (or insufficient access)") -> dict[str, Any]:
    return {
        "@type": "error",
        "error_type": error_type,
        "error_message": message,
        "resource_type": "repository",
    }
