"""
Generic invoker for native operation entry points.

Arguments are marshalled according to the operation's descriptor, in host
memory, before the native function is touched. The native result then
goes through the ownership protocol and the JSON codec.
"""

from __future__ import annotations

from collections.abc import Sequence
from ctypes import byref, c_void_p
from typing import Any, Final

from . import _codec
from ._bindings import NativeHandle, NativeLibrary, native_string, raise_for_error
from ._logging import scoped_logger
from ._native import ArgKind, Operation, Param
from .exceptions import DecodingError, EncodingError

__all__ = ["NO_DATA", "encode_arguments", "invoke"]

log = scoped_logger("ffi")

_U64_MAX = 2**64 - 1


class _NoData:
    """Marker for a successful native call that returned a null result."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_DATA"

    def __bool__(self) -> bool:
        return False


NO_DATA: Final = _NoData()


def _encode_string(param: Param, value: Any) -> bytes:
    if value is None and param.optional:
        return b""
    if not isinstance(value, str):
        raise EncodingError(
            f"{param.name} must be a string, got {type(value).__name__}",
            details={"argument": param.name},
        )
    if "\x00" in value:
        raise EncodingError(
            f"{param.name} must not contain NUL characters",
            details={"argument": param.name},
        )
    return value.encode("utf-8")


def _encode_u64(param: Param, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(
            f"{param.name} must be an integer, got {type(value).__name__}",
            details={"argument": param.name},
        )
    if not 0 <= value <= _U64_MAX:
        raise EncodingError(
            f"{param.name} must fit in an unsigned 64-bit integer, got {value}",
            details={"argument": param.name},
        )
    return value


def _encode_bool(param: Param, value: Any) -> bool:
    if not isinstance(value, bool):
        raise EncodingError(
            f"{param.name} must be a bool, got {type(value).__name__}",
            details={"argument": param.name},
        )
    return value


def _encode_argument(param: Param, value: Any) -> Any:
    if param.kind is ArgKind.STRING:
        return _encode_string(param, value)
    if param.kind is ArgKind.JSON:
        # Absent payloads still cross as a well-formed document
        return _codec.NULL if value is None else _codec.encode(value)
    if param.kind is ArgKind.BOOL:
        return _encode_bool(param, value)
    return _encode_u64(param, value)


def encode_arguments(operation: Operation, args: Sequence[Any]) -> list[Any]:
    """
    Marshal host arguments for an operation, in descriptor order.

    Raises
    ------
        TypeError: If the argument count does not match the descriptor.
        EncodingError: If any argument cannot cross the boundary.
    """
    if len(args) != operation.arity:
        names = ", ".join(p.name for p in operation.params)
        raise TypeError(
            f"{operation.name}() takes {operation.arity} arguments ({names}), "
            f"got {len(args)}"
        )
    return [_encode_argument(param, value) for param, value in zip(operation.params, args)]


def invoke(
    lib: NativeLibrary,
    handle: NativeHandle,
    operation: Operation,
    args: Sequence[Any],
) -> Any:
    """
    Call a native operation and decode its result.

    Returns
    -------
        The decoded JSON value, or ``NO_DATA`` when the native side reported
        success with a null or empty result.

    Raises
    ------
        EncodingError: Before the call, if an argument cannot be encoded.
        SymbolNotFoundError: If the library lacks the entry point.
        NativeError: If the native side filled the error slot.
        DecodingError: If the result is not valid JSON.
    """
    encoded = encode_arguments(operation, args)
    fn = lib.function(operation)
    address = handle.value
    details = {"operation": operation.name, "symbol": operation.symbol}

    error = c_void_p()
    log.debug("Native call", extra={"symbol": operation.symbol})
    result = fn(address, *encoded, byref(error))

    # The result is released even when the error slot wins
    with native_string(lib, result) as payload:
        raise_for_error(lib, error, details)
        if not payload:
            return NO_DATA

    try:
        return _codec.decode(payload)
    except DecodingError as e:
        e.details.update(details)
        raise
