"""
eventdbx_native exceptions.

This module defines the exception hierarchy for eventdbx_native:

    EventDbxError (base)
    ├── LibraryNotFoundError - Native library missing or not loadable
    ├── SymbolNotFoundError - Native library lacks an entry point
    ├── EncodingError - Request value not representable as JSON
    ├── DecodingError - Native response is not valid JSON
    ├── NativeError - Failure reported by the native library
    ├── NoDataError - Native call succeeded but returned nothing
    ├── StateError - Invalid object state (closed client)
    └── ValidationError - Invalid parameter value

Usage:
    try:
        client.get_aggregate("order", "42")
    except eventdbx_native.NoDataError:
        print("Nothing came back")
    except eventdbx_native.NativeError as e:
        print(f"Engine rejected the call: {e}")
    except eventdbx_native.EventDbxError as e:
        # Catch any bridge error with structured details
        print(f"Error {e.code}: {e}")
        print(f"Details: {e.details}")

None of these errors are retried by the bridge. Retry policy belongs to
the native library.
"""

from typing import Any

__all__ = [
    # Base
    "EventDbxError",
    # Loading
    "LibraryNotFoundError",
    "SymbolNotFoundError",
    # Codec
    "EncodingError",
    "DecodingError",
    # Native calls
    "NativeError",
    "NoDataError",
    # State
    "StateError",
    # Validation
    "ValidationError",
]


class EventDbxError(Exception):
    """
    Base exception for all eventdbx_native errors.

    Attributes
    ----------
    message : str
        Human-readable error description.
    code : str
        Stable, string-based error code (e.g., "NATIVE_ERROR").
        Use this for programmatic error handling.
    details : dict[str, Any]
        Structured context (e.g., {"operation": "get_aggregate",
        "symbol": "dbx_get_aggregate"}).
    """

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    @property
    def message(self) -> str:
        return self.args[0]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r}, code={self.code!r})"


# =============================================================================
# Loading Errors
# =============================================================================


class LibraryNotFoundError(EventDbxError, FileNotFoundError):
    """
    Native library could not be located or loaded.

    Raised before any native symbol is touched when:
    - The explicit ``library_path`` does not exist
    - No default build artifact (release or debug) exists
    - The file exists but the dynamic loader rejects it

    ``details["path"]`` holds the path that was tried.
    """

    def __init__(
        self,
        message: str,
        code: str = "LIBRARY_NOT_FOUND",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


class SymbolNotFoundError(EventDbxError, AttributeError):
    """
    Native library does not export a required entry point.

    Lifecycle symbols (``dbx_client_new``, ``dbx_client_free``,
    ``dbx_string_free``) are checked when the library is loaded. Operation
    symbols are checked when the operation is first invoked, so an older
    build without snapshot support still serves the other operations.
    """

    def __init__(
        self,
        message: str,
        code: str = "SYMBOL_NOT_FOUND",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# Codec Errors
# =============================================================================


class EncodingError(EventDbxError, ValueError):
    """
    Request value cannot be represented as JSON.

    Raised in host memory before the native call is issued. Common causes:
    - Non-finite floats (``float("nan")``, ``float("inf")``)
    - Objects JSON does not know how to serialize
    - Circular references
    - Integers outside the range of a native scalar argument
    """

    def __init__(
        self,
        message: str,
        code: str = "ENCODING_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


class DecodingError(EventDbxError, ValueError):
    """
    Native response is not valid JSON.

    Only raised after the native call succeeded and returned a non-empty
    payload, so it never hides a native error or a missing result.
    """

    def __init__(
        self,
        message: str,
        code: str = "DECODING_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# Native Call Errors
# =============================================================================


class NativeError(EventDbxError, RuntimeError):
    """
    Failure reported by the native library through its error slot.

    The message is passed through verbatim so it can be correlated with
    native-side logs.

    Example:
        >>> try:
        ...     client.append_event("order", "42", "created", {"payload": {}})
        ... except eventdbx_native.NativeError as e:
        ...     print(e)
        failed to connect: connection refused
    """

    def __init__(
        self,
        message: str,
        code: str = "NATIVE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


class NoDataError(EventDbxError, LookupError):
    """
    Native call reported no error but returned no result.

    The message names the native entry point, e.g.
    ``"dbx_list_events returned no data"``.
    """

    def __init__(
        self,
        message: str,
        code: str = "NO_DATA",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# State Errors
# =============================================================================


class StateError(EventDbxError, RuntimeError):
    """
    Invalid object state error.

    Raised when an operation is attempted on a closed client.
    """

    def __init__(
        self,
        message: str,
        code: str = "STATE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(EventDbxError, ValueError):
    """
    Invalid parameter value.

    Raised when a configuration value is out of range or cannot be parsed,
    for example a port outside 1..65535 or a non-numeric ``EVENTDBX_PORT``.
    """

    def __init__(
        self,
        message: str,
        code: str = "INVALID_ARGUMENT",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)
