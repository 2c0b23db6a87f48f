"""Tests for the typed option bags in eventdbx_native.types."""

import pytest

from eventdbx_native import (
    AggregateSort,
    ArchiveOptions,
    ListAggregatesOptions,
    ListEventsOptions,
    PayloadOptions,
    PublishTarget,
    ValidationError,
)


class TestAggregateSort:
    """Tests for AggregateSort."""

    def test_renders_ascending(self):
        assert str(AggregateSort("aggregate_id")) == "aggregate_id:asc"

    def test_renders_descending(self):
        assert str(AggregateSort("updated_at", descending=True)) == "updated_at:desc"

    def test_unknown_field(self):
        """Only fields the server can sort by are accepted."""
        with pytest.raises(ValidationError, match="Unknown sort field"):
            AggregateSort("payload")


class TestListAggregatesOptions:
    """Tests for ListAggregatesOptions."""

    def test_empty(self):
        assert ListAggregatesOptions().to_dict() == {}

    def test_all_fields(self):
        options = ListAggregatesOptions(
            cursor="c1",
            take=25,
            filter="archived = false",
            include_archived=False,
            archived_only=False,
            token="t",
            sort=[AggregateSort("aggregate_type"), AggregateSort("created_at", True)],
        )
        assert options.to_dict() == {
            "cursor": "c1",
            "take": 25,
            "filter": "archived = false",
            "includeArchived": False,
            "archivedOnly": False,
            "token": "t",
            "sort": "aggregate_type:asc,created_at:desc",
        }

    def test_sort_string_passed_through(self):
        assert ListAggregatesOptions(sort="id:desc").to_dict() == {"sort": "id:desc"}

    def test_empty_sort_sequence_omitted(self):
        assert ListAggregatesOptions(sort=[]).to_dict() == {}


class TestListEventsOptions:
    """Tests for ListEventsOptions."""

    def test_fields(self):
        assert ListEventsOptions(cursor="c", take=5).to_dict() == {"cursor": "c", "take": 5}


class TestPayloadOptions:
    """Tests for PayloadOptions and PublishTarget."""

    def test_empty(self):
        assert PayloadOptions().to_dict() == {}

    def test_payload_and_metadata(self):
        options = PayloadOptions(payload={"total": 1}, metadata={"source": "web"}, note="n")
        assert options.to_dict() == {
            "payload": {"total": 1},
            "metadata": {"source": "web"},
            "note": "n",
        }

    def test_publish_targets(self):
        options = PayloadOptions(
            publish_targets=[PublishTarget("search"), PublishTarget("audit", "sync", "high")]
        )
        assert options.to_dict() == {
            "publishTargets": [
                {"plugin": "search"},
                {"plugin": "audit", "mode": "sync", "priority": "high"},
            ]
        }

    def test_targets_not_shared_between_instances(self):
        first = PayloadOptions()
        first.publish_targets.append(PublishTarget("x"))
        assert PayloadOptions().publish_targets == []


class TestArchiveOptions:
    """Tests for ArchiveOptions."""

    def test_fields(self):
        assert ArchiveOptions(note="cleanup", token="t").to_dict() == {
            "note": "cleanup",
            "token": "t",
        }
