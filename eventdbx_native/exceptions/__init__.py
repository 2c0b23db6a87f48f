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
"""

from .exceptions import (
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
