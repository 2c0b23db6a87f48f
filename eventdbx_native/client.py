"""
EventDBX client backed by the native control library.

Example:
    >>> from eventdbx_native import Client, ClientConfig
    >>>
    >>> config = ClientConfig(host="127.0.0.1", token="secret", tenant_id="acme")
    >>> with Client(config) as client:
    ...     client.create_aggregate("order", "42", "created", {"payload": {"total": 10}})
    ...     client.append_event("order", "42", "paid", {"payload": {"amount": 10}})
    ...     page = client.list_events("order", "42", {"take": 20})
    ...     root = client.verify_aggregate("order", "42")["merkleRoot"]

Threading:
    A client wraps one native connection handle and does no locking. Use
    one client per thread, or serialize calls through a single owner.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from ._bindings import NativeHandle, get_lib
from ._codec import encode
from ._dispatch import NO_DATA, invoke
from ._logging import scoped_logger
from ._native import OPERATIONS
from .config import ClientConfig
from .exceptions import EncodingError, NoDataError, StateError
from .types import (
    ArchiveOptions,
    ListAggregatesOptions,
    ListEventsOptions,
    PayloadOptions,
)

__all__ = ["Client"]

log = scoped_logger("client")

Options = Mapping[str, Any]


class Client:
    """
    Connection to an EventDBX server through the native library.

    Args:
        config: ``ClientConfig`` or a mapping passed verbatim to the native
            constructor (see ``eventdbx_native.config`` for known keys).
        library_path: Path to the native shared library. Defaults to
            ``EVENTDBX_NATIVE_LIB`` or the bundled/release/debug build.

    Raises
    ------
        LibraryNotFoundError: If the native library cannot be located.
        EncodingError: If the config cannot be encoded as JSON.
        NativeError: If the native library rejects the config or cannot
            connect.

    Every operation returns the decoded JSON document produced by the
    native library. Operations raise ``NativeError`` for native failures
    (message unchanged), ``NoDataError`` when the native side returns
    nothing, ``DecodingError`` for malformed responses, ``EncodingError``
    for arguments that cannot be encoded, and ``StateError`` after
    ``close()``.
    """

    _handle: NativeHandle | None

    def __init__(
        self,
        config: ClientConfig | Mapping[str, Any] | None = None,
        library_path: str | os.PathLike[str] | None = None,
    ) -> None:
        self._handle = None
        self._lib = get_lib(library_path)
        self._handle = NativeHandle.open(self._lib, encode({} if config is None else config))
        log.info("Client connected", extra={"library": str(self._lib.path)})

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def library_path(self) -> Path:
        """Path of the loaded native library."""
        return self._lib.path

    @property
    def closed(self) -> bool:
        handle = getattr(self, "_handle", None)
        return handle is None or handle.closed

    def close(self) -> None:
        """
        Release the native connection handle.

        This method is idempotent - calling it multiple times is safe.
        """
        if self._handle is not None:
            self._handle.close()

    def __del__(self) -> None:
        """Release resources on garbage collection."""
        handle = getattr(self, "_handle", None)
        if handle is not None:
            handle.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def __repr__(self) -> str:
        lib = getattr(self, "_lib", None)
        path = str(lib.path) if lib is not None else None
        state = "closed" if self.closed else "open"
        return f"Client(library={path!r}, {state})"

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def call(self, operation: str, *args: Any) -> Any:
        """
        Invoke a native operation by logical name.

        Args:
            operation: Key of ``eventdbx_native._native.OPERATIONS``
                (e.g. ``"get_aggregate"``).
            *args: Operation arguments in native order, handle excluded.

        Raises
        ------
            KeyError: If the operation is unknown.
            NoDataError: If the operation requires data and got none.
        """
        if self._handle is None or self._handle.closed:
            raise StateError("Client is closed", details={"operation": operation})
        descriptor = OPERATIONS[operation]
        result = invoke(self._lib, self._handle, descriptor, args)
        if result is NO_DATA:
            if descriptor.requires_data:
                raise NoDataError(
                    f"{descriptor.symbol} returned no data",
                    details={"operation": descriptor.name, "symbol": descriptor.symbol},
                )
            return None
        return result

    # -------------------------------------------------------------------------
    # Aggregates
    # -------------------------------------------------------------------------

    def list_aggregates(
        self,
        aggregate_type: str | None = "",
        options: ListAggregatesOptions | Options | None = None,
    ) -> Any:
        """
        List aggregates, optionally restricted to one type.

        Returns ``{"items": [...], "nextCursor": str | None}``.
        """
        return self.call("list_aggregates", aggregate_type, options)

    def get_aggregate(self, aggregate_type: str, aggregate_id: str) -> Any:
        """Fetch one aggregate. Returns ``{"found": bool, "aggregate": ...}``."""
        return self.call("get_aggregate", aggregate_type, aggregate_id)

    def select_aggregate(
        self, aggregate_type: str, aggregate_id: str, fields: Sequence[str] | None
    ) -> Any:
        """
        Fetch selected fields of an aggregate's state.

        Raises
        ------
            EncodingError: If ``fields`` is a single string rather than a
                sequence of field names.
        """
        if isinstance(fields, (str, bytes)):
            raise EncodingError(
                f"fields must be a sequence of field names, got {type(fields).__name__}",
                details={"operation": "select_aggregate", "argument": "fields"},
            )
        return self.call(
            "select_aggregate",
            aggregate_type,
            aggregate_id,
            None if fields is None else list(fields),
        )

    def create_aggregate(
        self,
        aggregate_type: str,
        aggregate_id: str,
        event_type: str,
        options: PayloadOptions | Options | None = None,
    ) -> Any:
        """Create an aggregate with its first event."""
        return self.call("create_aggregate", aggregate_type, aggregate_id, event_type, options)

    def set_archive(
        self,
        aggregate_type: str,
        aggregate_id: str,
        archived: bool,
        options: ArchiveOptions | Options | None = None,
    ) -> Any:
        """Set or clear the archived flag of an aggregate."""
        return self.call("set_archive", aggregate_type, aggregate_id, archived, options)

    def archive(
        self,
        aggregate_type: str,
        aggregate_id: str,
        options: ArchiveOptions | Options | None = None,
    ) -> Any:
        """Archive an aggregate."""
        return self.set_archive(aggregate_type, aggregate_id, True, options)

    def restore(
        self,
        aggregate_type: str,
        aggregate_id: str,
        options: ArchiveOptions | Options | None = None,
    ) -> Any:
        """Restore an archived aggregate."""
        return self.set_archive(aggregate_type, aggregate_id, False, options)

    def verify_aggregate(self, aggregate_type: str, aggregate_id: str) -> Any:
        """Verify an aggregate's event log. Returns ``{"merkleRoot": str}``."""
        return self.call("verify_aggregate", aggregate_type, aggregate_id)

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def list_events(
        self,
        aggregate_type: str,
        aggregate_id: str,
        options: ListEventsOptions | Options | None = None,
    ) -> Any:
        """List an aggregate's events. Returns ``{"items": [...], "nextCursor": ...}``."""
        return self.call("list_events", aggregate_type, aggregate_id, options)

    def append_event(
        self,
        aggregate_type: str,
        aggregate_id: str,
        event_type: str,
        options: PayloadOptions | Options | None = None,
    ) -> Any:
        """Append an event. Returns ``{"event": ...}``."""
        return self.call("append_event", aggregate_type, aggregate_id, event_type, options)

    def patch_event(
        self,
        aggregate_type: str,
        aggregate_id: str,
        event_type: str,
        patch: Sequence[Mapping[str, Any]],
        options: PayloadOptions | Options | None = None,
    ) -> Any:
        """Append an event described by JSON Patch operations."""
        return self.call("patch_event", aggregate_type, aggregate_id, event_type, patch, options)

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def create_snapshot(
        self,
        aggregate_type: str,
        aggregate_id: str,
        options: Options | None = None,
    ) -> Any:
        """Snapshot an aggregate's current state."""
        return self.call("create_snapshot", aggregate_type, aggregate_id, options)

    def list_snapshots(self, options: Options | None = None) -> Any:
        """List snapshots matching the options filter."""
        return self.call("list_snapshots", options)

    def get_snapshot(self, snapshot_id: int, options: Options | None = None) -> Any:
        """Fetch a snapshot by its numeric id."""
        return self.call("get_snapshot", snapshot_id, options)
