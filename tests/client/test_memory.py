"""
Leak and double-free checks across the native boundary.

The stub counts its outstanding string and handle allocations. After any
sequence of calls - successful or failing - the string count must be back
to zero and the handle count back to where it started.
"""

import math

import pytest

from eventdbx_native import Client, EventDbxError

MARKERS = ["ok", "native-error", "no-data", "bad-json", "empty-error", "error-and-data"]


class TestNativeStrings:
    """Every native string is released exactly once."""

    @pytest.mark.parametrize("marker", MARKERS)
    def test_no_outstanding_strings(self, client, stub_counters, marker):
        """Results and errors are released whatever the outcome."""
        try:
            client.get_aggregate("order", marker)
        except EventDbxError:
            pass
        assert stub_counters.strings == 0

    def test_many_calls(self, client, stub_counters):
        """Repeated calls do not accumulate native strings."""
        for i in range(200):
            client.append_event("order", str(i), "created", {"payload": {"n": i}})
            client.list_snapshots({"page": i})
        assert stub_counters.strings == 0

    def test_encoding_failure_allocates_nothing(self, client, stub_counters):
        """Calls that fail encoding never allocate native memory."""
        with pytest.raises(EventDbxError):
            client.list_events("order", "1", {"x": math.nan})
        assert stub_counters.strings == 0


class TestHandles:
    """The connection handle is released exactly once."""

    def test_released_after_failing_operations(self, native_stub_path, stub_counters):
        """Failures between open and close do not leak the handle."""
        before = stub_counters.handles
        with Client({"token": "t"}, native_stub_path) as client:
            for marker in MARKERS:
                try:
                    client.create_snapshot("order", marker)
                except EventDbxError:
                    pass
        assert stub_counters.handles == before

    def test_garbage_collected_client_releases(self, native_stub_path, stub_counters):
        """Dropping the last reference frees the handle."""
        import gc

        before = stub_counters.handles
        client = Client({"token": "t"}, native_stub_path)
        del client
        gc.collect()
        assert stub_counters.handles == before

    def test_independent_clients(self, native_stub_path, stub_counters):
        """Clients sharing one library own separate handles."""
        before = stub_counters.handles
        first = Client({"token": "a"}, native_stub_path)
        second = Client({"token": "b"}, native_stub_path)
        assert stub_counters.handles == before + 2
        first.close()
        assert second.get_aggregate("order", "1")["aggregate_id"] == "1"
        second.close()
        assert stub_counters.handles == before
