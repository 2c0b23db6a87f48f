"""
eventdbx_native - EventDBX client over the native control library.

The native library speaks the EventDBX control protocol (aggregates,
events, archival, Merkle verification, snapshots). This package loads it
with ctypes, owns its connection handle, and exchanges JSON documents
with it.

Quick Start
-----------

    >>> from eventdbx_native import Client
    >>>
    >>> with Client({"host": "127.0.0.1", "token": "secret"}) as client:
    ...     client.create_aggregate("order", "42", "created", {"payload": {"total": 10}})
    ...     client.get_aggregate("order", "42")
    {'found': True, 'aggregate': {...}}

Locating the native library
---------------------------

1. ``Client(..., library_path=...)``
2. ``EVENTDBX_NATIVE_LIB`` environment variable
3. ``libeventdbx_native.{so,dylib}`` / ``eventdbx_native.dll`` next to the
   package, then ``native/target/release``, then ``native/target/debug``

Errors
------

All errors derive from ``EventDbxError``. See ``eventdbx_native.exceptions``.
"""

from eventdbx_native._logging import setup_logging
from eventdbx_native.client import Client
from eventdbx_native.config import ClientConfig
from eventdbx_native.exceptions import (
    DecodingError,
    EncodingError,
    EventDbxError,
    LibraryNotFoundError,
    NativeError,
    NoDataError,
    StateError,
    SymbolNotFoundError,
    ValidationError,
)
from eventdbx_native.types import (
    AggregateSort,
    ArchiveOptions,
    ListAggregatesOptions,
    ListEventsOptions,
    PayloadOptions,
    PublishTarget,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "Client",
    "ClientConfig",
    # Options
    "AggregateSort",
    "ArchiveOptions",
    "ListAggregatesOptions",
    "ListEventsOptions",
    "PayloadOptions",
    "PublishTarget",
    # Errors
    "EventDbxError",
    "LibraryNotFoundError",
    "SymbolNotFoundError",
    "EncodingError",
    "DecodingError",
    "NativeError",
    "NoDataError",
    "StateError",
    "ValidationError",
    # Logging
    "setup_logging",
]
