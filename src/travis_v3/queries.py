"""Query parameters for collection endpoints."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Protocol, runtime_checkable

from travis_v3.errors import ConfigurationError

QueryItems = tuple[tuple[str, str], ...]


@runtime_checkable
class QueryConvertible(Protocol):
    """Anything that can render itself as ordered query items."""

    def query_items(self) -> QueryItems:
        """Return ``(name, value)`` pairs in a stable order."""
        ...


def _render(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


@dataclass(frozen=True)
class GeneralQuery:
    """Paging, sorting and eager-loading options shared by collection endpoints."""

    limit: int | None = None
    offset: int | None = None
    #: e.g. ``("name", "id:desc")``.
    sort_by: tuple[str, ...] | None = None
    #: e.g. ``("build.commit", "repository.current_build")``.
    include: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        """Validate paging values early for clear errors."""
        if self.limit is not None and self.limit < 0:
            raise ConfigurationError(
                f"limit must be >= 0, got {self.limit}",
                hint="limit=0 asks the server for every item.",
            )
        if self.offset is not None and self.offset < 0:
            raise ConfigurationError(f"offset must be >= 0, got {self.offset}")

    def query_items(self) -> QueryItems:
        items: list[tuple[str, str]] = []
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, (list, tuple)) and not value:
                continue
            items.append((f.name, _render(value)))
        return tuple(items)


@dataclass(frozen=True)
class BuildQuery(GeneralQuery):
    """Filters for build collections."""

    #: e.g. ``"passed"``, ``"failed"``, ``"started"``.
    state: str | None = None
    #: e.g. ``"push"``, ``"pull_request"``, ``"cron"``, ``"api"``.
    event_type: str | None = None
    branch_name: str | None = None
    created_by: str | None = None

    def query_items(self) -> QueryItems:
        items = list(super().query_items())
        # The API namespaces build filters by resource.
        renamed = {
            "state": "build.state",
            "event_type": "build.event_type",
            "branch_name": "branch.name",
            "created_by": "build.created_by",
        }
        return tuple((renamed.get(name, name), value) for name, value in items)
