"""
Native library loading and the cross-boundary ownership protocol.

Ownership rules:

- Every string the native side returns (result payloads and error
  messages alike) is owned by the caller. It is copied into a Python
  ``bytes`` object and handed back to ``dbx_string_free`` exactly once,
  on every exit path. ``native_string`` is the only place that happens.
- The connection handle is owned by one ``NativeHandle``. ``close()``
  calls ``dbx_client_free`` at most once. A failed ``dbx_client_new``
  yields no handle, so there is nothing to free.
- Request strings are Python-owned ``bytes`` passed by reference for the
  duration of the call only.

Loaded libraries are cached per resolved path for the life of the
process. Signatures are configured once, at load time.
"""

from __future__ import annotations

import ctypes
import os
import sys
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from ctypes import byref, c_void_p
from pathlib import Path
from typing import Any

from ._logging import scoped_logger
from ._native import Operation, setup_signatures
from .exceptions import (
    LibraryNotFoundError,
    NativeError,
    NoDataError,
    StateError,
    SymbolNotFoundError,
)

__all__ = [
    "LIBRARY_ENV",
    "NativeLibrary",
    "NativeHandle",
    "library_filename",
    "default_library_candidates",
    "find_library",
    "get_lib",
    "native_string",
    "raise_for_error",
]

log = scoped_logger("ffi")

LIBRARY_ENV = "EVENTDBX_NATIVE_LIB"

_LIB_STEM = "eventdbx_native"
PACKAGE_DIR = Path(__file__).resolve().parent
NATIVE_TARGET = PACKAGE_DIR.parent / "native" / "target"


# =============================================================================
# Locating the library
# =============================================================================


def library_filename(platform: str | None = None) -> str:
    """Return the shared library file name for a platform (default: current)."""
    platform = platform or sys.platform
    if platform == "win32":
        return f"{_LIB_STEM}.dll"
    if platform == "darwin":
        return f"lib{_LIB_STEM}.dylib"
    return f"lib{_LIB_STEM}.so"


def default_library_candidates(platform: str | None = None) -> list[Path]:
    """
    Default search locations, in priority order.

    A library bundled next to the package wins, then the release build,
    then the debug build.
    """
    name = library_filename(platform)
    return [
        PACKAGE_DIR / name,
        NATIVE_TARGET / "release" / name,
        NATIVE_TARGET / "debug" / name,
    ]


def find_library(path: str | os.PathLike[str] | None = None) -> Path:
    """
    Resolve the native library path.

    Order: explicit ``path``, then ``EVENTDBX_NATIVE_LIB``, then
    ``default_library_candidates()``.

    Raises
    ------
        LibraryNotFoundError: If the resolved file does not exist. For the
            default search, the error names the release build path.
    """
    if path is None:
        path = os.environ.get(LIBRARY_ENV) or None

    if path is not None:
        candidate = Path(path)
        if not candidate.is_file():
            raise LibraryNotFoundError(
                f"Native library not found at {candidate}. "
                "Build it with `cargo build --release` inside native/.",
                details={"path": str(candidate)},
            )
        return candidate

    candidates = default_library_candidates()
    for candidate in candidates:
        if candidate.is_file():
            return candidate

    release = candidates[1]
    raise LibraryNotFoundError(
        f"Native library not found at {release}. "
        "Build it with `cargo build --release` inside native/, "
        f"or set {LIBRARY_ENV}.",
        details={"path": str(release), "searched": [str(c) for c in candidates]},
    )


# =============================================================================
# Loaded library
# =============================================================================


class NativeLibrary:
    """
    A loaded native library with signatures configured.

    Read-only after construction; safe to share between clients.
    """

    def __init__(self, lib: Any, path: Path, available: frozenset[str]) -> None:
        self._lib = lib
        self.path = path
        self.available = available

    def function(self, operation: Operation) -> Callable[..., Any]:
        """Return the entry point for an operation."""
        if operation.name not in self.available:
            raise SymbolNotFoundError(
                f"Native library at {self.path} does not export {operation.symbol}",
                details={"operation": operation.name, "symbol": operation.symbol},
            )
        return getattr(self._lib, operation.symbol)

    def string_free(self, address: int) -> None:
        self._lib.dbx_string_free(address)

    def client_new(self, config_json: bytes, error: c_void_p) -> int | None:
        return self._lib.dbx_client_new(config_json, byref(error))

    def client_free(self, address: int) -> None:
        self._lib.dbx_client_free(address)

    def __repr__(self) -> str:
        return f"NativeLibrary({str(self.path)!r})"


_cache: dict[str, NativeLibrary] = {}
_cache_lock = threading.Lock()


def _load(path: Path) -> NativeLibrary:
    try:
        cdll = ctypes.CDLL(str(path))
    except OSError as e:
        raise LibraryNotFoundError(
            f"Cannot load native library at {path}: {e}",
            details={"path": str(path)},
        ) from e
    available = setup_signatures(cdll)
    log.info(
        "Loaded native library",
        extra={"path": str(path), "operations": len(available)},
    )
    return NativeLibrary(cdll, path, available)


def get_lib(path: str | os.PathLike[str] | None = None) -> NativeLibrary:
    """
    Load (once per path) and return the native library.

    Raises
    ------
        LibraryNotFoundError: If the library cannot be located or loaded.
        SymbolNotFoundError: If a lifecycle symbol is missing.
    """
    resolved = find_library(path).resolve()
    key = str(resolved)
    with _cache_lock:
        lib = _cache.get(key)
        if lib is None:
            lib = _load(resolved)
            _cache[key] = lib
    return lib


# =============================================================================
# Ownership protocol
# =============================================================================


@contextmanager
def native_string(lib: NativeLibrary, address: int | None) -> Iterator[bytes | None]:
    """
    Borrow a native-allocated string and release it on exit.

    Yields the copied bytes, or ``None`` for a null pointer. The native
    string is freed exactly once even if the body raises.
    """
    if not address:
        yield None
        return
    try:
        yield ctypes.string_at(address)
    finally:
        lib.string_free(address)


def raise_for_error(
    lib: NativeLibrary, error: c_void_p, details: dict[str, Any] | None = None
) -> None:
    """
    Consume the error slot after a native call.

    A non-null slot is always released. A non-empty message raises
    ``NativeError`` with the text unchanged; an empty one means success.
    """
    address, error.value = error.value, None
    with native_string(lib, address) as raw:
        if raw:
            message = raw.decode("utf-8", errors="replace")
            log.debug("Native error", extra={**(details or {}), "error": message})
            raise NativeError(message, details=details)


class NativeHandle:
    """
    Single-owner wrapper around a native connection handle.

    Created only through ``open()``, which either returns a live handle or
    raises. ``close()`` is idempotent.
    """

    __slots__ = ("_lib", "_address")

    def __init__(self, lib: NativeLibrary, address: int) -> None:
        self._lib = lib
        self._address: int | None = address

    @classmethod
    def open(cls, lib: NativeLibrary, config_json: bytes) -> NativeHandle:
        """
        Call ``dbx_client_new``.

        Raises
        ------
            NativeError: If the native side rejected the configuration.
            NoDataError: If no handle and no error came back.
        """
        error = c_void_p()
        details = {"operation": "client_new", "symbol": "dbx_client_new"}
        address = lib.client_new(config_json, error)
        try:
            raise_for_error(lib, error, details)
        except NativeError:
            if address:
                # Handle alongside an error: still ours to free.
                lib.client_free(address)
            raise
        if not address:
            raise NoDataError("dbx_client_new returned no handle", details=details)
        log.debug("Opened native handle", extra={"symbol": "dbx_client_new"})
        return cls(lib, address)

    @property
    def closed(self) -> bool:
        return self._address is None

    @property
    def value(self) -> int:
        """Raw handle address for passing to native calls."""
        if self._address is None:
            raise StateError("Client is closed")
        return self._address

    def close(self) -> None:
        """Release the handle. Safe to call more than once."""
        address, self._address = self._address, None
        if address is None:
            return
        self._lib.client_free(address)
        log.debug("Released native handle", extra={"symbol": "dbx_client_free"})
