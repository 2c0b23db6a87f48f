"""
Typed option bags for client operations.

Each type renders, via ``to_dict()``, the camelCase JSON document the
native library reads. Unset fields are omitted so the native defaults
apply. Plain mappings are accepted anywhere these types are.

Example:
    >>> from eventdbx_native.types import AggregateSort, ListAggregatesOptions
    >>> opts = ListAggregatesOptions(
    ...     take=50,
    ...     include_archived=True,
    ...     sort=[AggregateSort("created_at", descending=True)],
    ... )
    >>> opts.to_dict()
    {'take': 50, 'includeArchived': True, 'sort': 'created_at:desc'}
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

__all__ = [
    "SORT_FIELDS",
    "AggregateSort",
    "ListAggregatesOptions",
    "ListEventsOptions",
    "PublishTarget",
    "PayloadOptions",
    "ArchiveOptions",
]

SORT_FIELDS = frozenset({"aggregate_type", "aggregate_id", "archived", "created_at", "updated_at"})


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    """Drop unset (None) entries."""
    return {key: value for key, value in values.items() if value is not None}


@dataclass(frozen=True)
class AggregateSort:
    """
    One sort key for ``list_aggregates``.

    Attributes
    ----------
        field: One of ``SORT_FIELDS``.
        descending: Sort order.
    """

    field: str
    descending: bool = False

    def __post_init__(self) -> None:
        if self.field not in SORT_FIELDS:
            from .exceptions import ValidationError

            raise ValidationError(
                f"Unknown sort field {self.field!r}; expected one of {sorted(SORT_FIELDS)}",
                details={"field": self.field},
            )

    def __str__(self) -> str:
        return f"{self.field}:{'desc' if self.descending else 'asc'}"


def _render_sort(sort: str | Sequence[AggregateSort] | None) -> str | None:
    if sort is None or isinstance(sort, str):
        return sort
    return ",".join(str(key) for key in sort) or None


@dataclass
class ListAggregatesOptions:
    """Paging, filtering and sorting for ``list_aggregates``."""

    cursor: str | None = None
    take: int | None = None
    filter: str | None = None
    include_archived: bool | None = None
    archived_only: bool | None = None
    token: str | None = None
    sort: str | Sequence[AggregateSort] | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "cursor": self.cursor,
                "take": self.take,
                "filter": self.filter,
                "includeArchived": self.include_archived,
                "archivedOnly": self.archived_only,
                "token": self.token,
                "sort": _render_sort(self.sort),
            }
        )


@dataclass
class ListEventsOptions:
    """Paging and filtering for ``list_events``."""

    cursor: str | None = None
    take: int | None = None
    filter: str | None = None
    token: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "cursor": self.cursor,
                "take": self.take,
                "filter": self.filter,
                "token": self.token,
            }
        )


@dataclass
class PublishTarget:
    """Plugin that should receive an appended event."""

    plugin: str
    mode: str | None = None
    priority: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"plugin": self.plugin, "mode": self.mode, "priority": self.priority})


@dataclass
class PayloadOptions:
    """
    Body of ``append_event``, ``create_aggregate`` and ``patch_event``.

    ``payload`` and ``metadata`` are arbitrary JSON documents.
    """

    payload: Any = None
    metadata: Any = None
    note: str | None = None
    token: str | None = None
    publish_targets: list[PublishTarget] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        values = _compact(
            {
                "payload": self.payload,
                "metadata": self.metadata,
                "note": self.note,
                "token": self.token,
            }
        )
        if self.publish_targets:
            values["publishTargets"] = [target.to_dict() for target in self.publish_targets]
        return values


@dataclass
class ArchiveOptions:
    """Options for ``archive``/``restore``."""

    note: str | None = None
    token: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"note": self.note, "token": self.token})
