"""
Native ABI definition for the EventDBX control library.

Every operation entry point shares one shape::

    char* dbx_<operation>(void* handle, <arguments>, char** error_out);

so the whole surface is described by a table of ``Operation`` descriptors
and a single generic invoker (see ``_dispatch.py``). Adding an operation
means adding a row to ``OPERATIONS``.

Result and error strings are declared as ``c_void_p`` rather than
``c_char_p``: ctypes converts ``c_char_p`` results to ``bytes`` and drops
the address, which would make it impossible to hand the string back to
``dbx_string_free``.

This module holds no mutable state. The table is built once at import
and shared read-only by every client in the process.
"""

from __future__ import annotations

import ctypes
from collections.abc import Mapping
from ctypes import POINTER, c_bool, c_char_p, c_uint64, c_void_p
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

from .exceptions import SymbolNotFoundError

__all__ = [
    "DbxHandle",
    "ErrorSlot",
    "ArgKind",
    "Param",
    "Operation",
    "OPERATIONS",
    "LIFECYCLE_SIGNATURES",
    "setup_signatures",
]

# Opaque connection handle (DbxHandle*)
DbxHandle = c_void_p

# char** error_out, written by the native side on every call
ErrorSlot = POINTER(c_void_p)


class ArgKind(Enum):
    """How a host argument is marshalled into a native argument."""

    STRING = "string"  # const char*, UTF-8
    JSON = "json"  # const char*, JSON document ("null" when absent)
    BOOL = "bool"  # bool
    U64 = "u64"  # uint64_t


_CTYPES: Mapping[ArgKind, Any] = MappingProxyType(
    {
        ArgKind.STRING: c_char_p,
        ArgKind.JSON: c_char_p,
        ArgKind.BOOL: c_bool,
        ArgKind.U64: c_uint64,
    }
)


@dataclass(frozen=True)
class Param:
    """A positional native argument following the handle."""

    name: str
    kind: ArgKind
    # STRING only: None crosses as "" (e.g. "all types")
    optional: bool = False

    @property
    def ctype(self) -> Any:
        return _CTYPES[self.kind]


@dataclass(frozen=True)
class Operation:
    """
    Static description of one native entry point.

    Attributes
    ----------
        name: Logical operation name used by ``Client.call``.
        symbol: Exported native symbol.
        params: Arguments between the handle and the error slot, in order.
        requires_data: Whether a null result is an error for this operation.
    """

    name: str
    symbol: str
    params: tuple[Param, ...]
    requires_data: bool = True

    @property
    def argtypes(self) -> list[Any]:
        return [DbxHandle, *(p.ctype for p in self.params), ErrorSlot]

    @property
    def arity(self) -> int:
        return len(self.params)


_TYPE = Param("aggregate_type", ArgKind.STRING)
_ID = Param("aggregate_id", ArgKind.STRING)
_EVENT_TYPE = Param("event_type", ArgKind.STRING)
_OPTIONS = Param("options", ArgKind.JSON)


def _operation(name: str, *params: Param) -> Operation:
    return Operation(name=name, symbol=f"dbx_{name}", params=params)


OPERATIONS: Mapping[str, Operation] = MappingProxyType(
    {
        op.name: op
        for op in (
            _operation(
                "list_aggregates", Param("aggregate_type", ArgKind.STRING, optional=True), _OPTIONS
            ),
            _operation("get_aggregate", _TYPE, _ID),
            _operation("select_aggregate", _TYPE, _ID, Param("fields", ArgKind.JSON)),
            _operation("list_events", _TYPE, _ID, _OPTIONS),
            _operation("append_event", _TYPE, _ID, _EVENT_TYPE, _OPTIONS),
            _operation("create_aggregate", _TYPE, _ID, _EVENT_TYPE, _OPTIONS),
            _operation(
                "patch_event", _TYPE, _ID, _EVENT_TYPE, Param("patch", ArgKind.JSON), _OPTIONS
            ),
            _operation("set_archive", _TYPE, _ID, Param("archived", ArgKind.BOOL), _OPTIONS),
            _operation("verify_aggregate", _TYPE, _ID),
            _operation("create_snapshot", _TYPE, _ID, _OPTIONS),
            _operation("list_snapshots", _OPTIONS),
            _operation("get_snapshot", Param("snapshot_id", ArgKind.U64), _OPTIONS),
        )
    }
)

# symbol -> (argtypes, restype)
LIFECYCLE_SIGNATURES: Mapping[str, tuple[list[Any], Any]] = MappingProxyType(
    {
        "dbx_string_free": ([c_void_p], None),
        "dbx_client_new": ([c_char_p, ErrorSlot], DbxHandle),
        "dbx_client_free": ([DbxHandle], None),
    }
)


def setup_signatures(lib: ctypes.CDLL) -> frozenset[str]:
    """
    Configure argtypes/restype on a freshly loaded library.

    Returns
    -------
        Names of the operations whose symbols the library exports.

    Raises
    ------
        SymbolNotFoundError: If a lifecycle symbol is missing.
    """
    for symbol, (argtypes, restype) in LIFECYCLE_SIGNATURES.items():
        try:
            fn = getattr(lib, symbol)
        except AttributeError as e:
            raise SymbolNotFoundError(
                f"Native library does not export {symbol}",
                details={"symbol": symbol},
            ) from e
        fn.argtypes = argtypes
        fn.restype = restype

    available = set()
    for op in OPERATIONS.values():
        fn = getattr(lib, op.symbol, None)
        if fn is None:
            continue
        fn.argtypes = op.argtypes
        fn.restype = c_void_p
        available.add(op.name)
    return frozenset(available)
