"""
Tests for the ownership protocol.

Uses a pure-Python heap so every release can be counted.
"""

from ctypes import c_void_p

import pytest

from eventdbx_native._bindings import NativeHandle, native_string, raise_for_error
from eventdbx_native.exceptions import NativeError, NoDataError, StateError
from tests.fixtures.fakes import FakeHeap, fake_library


@pytest.fixture
def heap():
    return FakeHeap()


@pytest.fixture
def lib(heap):
    lib, _ = fake_library(heap)
    return lib


class TestNativeString:
    """Tests for native_string()."""

    def test_copies_then_frees(self, heap, lib):
        """The string is copied and released exactly once."""
        address = heap.alloc('{"ok":true}')
        with native_string(lib, address) as data:
            assert data == b'{"ok":true}'
        assert heap.freed == [address]
        assert heap.live == 0

    def test_null_pointer_yields_none(self, heap, lib):
        """A null pointer yields None and frees nothing."""
        with native_string(lib, None) as data:
            assert data is None
        assert heap.freed == []

    def test_freed_when_body_raises(self, heap, lib):
        """The string is released on the exception path too."""
        address = heap.alloc("payload")
        with pytest.raises(RuntimeError):
            with native_string(lib, address):
                raise RuntimeError("boom")
        assert heap.freed == [address]


class TestRaiseForError:
    """Tests for raise_for_error()."""

    def test_no_error(self, heap, lib):
        """A null error slot is success."""
        raise_for_error(lib, c_void_p())
        assert heap.freed == []

    def test_error_message_verbatim(self, heap, lib):
        """A message is raised unchanged and released."""
        error = c_void_p(heap.alloc("failed to connect: connection refused"))
        with pytest.raises(NativeError) as exc_info:
            raise_for_error(lib, error, {"operation": "get_aggregate"})
        assert str(exc_info.value) == "failed to connect: connection refused"
        assert exc_info.value.details == {"operation": "get_aggregate"}
        assert heap.live == 0

    def test_empty_message_is_success_but_released(self, heap, lib):
        """An empty error string means no error, and is still freed."""
        address = heap.alloc("")
        raise_for_error(lib, c_void_p(address))
        assert heap.freed == [address]

    def test_slot_cleared_after_read(self, heap, lib):
        """The slot is nulled so it cannot be released twice."""
        error = c_void_p(heap.alloc("boom"))
        with pytest.raises(NativeError):
            raise_for_error(lib, error)
        assert error.value is None
        raise_for_error(lib, error)
        assert len(heap.freed) == 1


class TestNativeHandle:
    """Tests for NativeHandle."""

    def test_open_returns_live_handle(self):
        """A non-null handle with no error opens successfully."""
        lib, cdll = fake_library()
        handle = NativeHandle.open(lib, b"{}")
        assert not handle.closed
        assert handle.value == cdll.next_handle
        assert cdll.calls == [("dbx_client_new", (b"{}",))]

    def test_open_null_handle_raises(self):
        """No handle and no error is reported as missing data."""
        lib, cdll = fake_library()
        cdll.next_handle = None
        with pytest.raises(NoDataError, match="dbx_client_new"):
            NativeHandle.open(lib, b"{}")
        assert cdll.freed_handles == []

    def test_close_releases_once(self):
        """close() frees the handle exactly once."""
        lib, cdll = fake_library()
        handle = NativeHandle.open(lib, b"{}")
        handle.close()
        handle.close()
        assert cdll.freed_handles == [0x1000]
        assert handle.closed

    def test_value_after_close_raises(self):
        """A closed handle cannot be used."""
        lib, _ = fake_library()
        handle = NativeHandle.open(lib, b"{}")
        handle.close()
        with pytest.raises(StateError):
            _ = handle.value
