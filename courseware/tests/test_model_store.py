"""Tests for the normalized entity store."""

from unittest.mock import MagicMock

from courseware.enums import ModelType
from courseware.model_store import ModelEvent, ModelStore


class TestMerge:
    """Test create-or-merge writes."""

    def test_creates_missing_record(self):
        store = ModelStore()
        store.merge("courses", "c1", {"title": "Intro"})

        assert store.get("courses", "c1") == {"id": "c1", "title": "Intro"}

    def test_new_values_win_and_old_fields_survive(self):
        store = ModelStore()
        store.merge("units", "u1", {"title": "Old", "graded": False})
        store.merge("units", "u1", {"title": "New", "complete": True})

        assert store.get("units", "u1") == {
            "id": "u1",
            "title": "New",
            "graded": False,
            "complete": True,
        }

    def test_merge_is_idempotent(self):
        payload = {"title": "Intro", "unitIds": ["u1", "u2"]}
        once = ModelStore()
        once.merge("sequences", "s1", payload)
        twice = ModelStore()
        twice.merge("sequences", "s1", payload)
        twice.merge("sequences", "s1", payload)

        assert once.snapshot() == twice.snapshot()

    def test_disjoint_merges_commute(self):
        a = {"title": "Intro"}
        b = {"bookmarked": True}
        forward = ModelStore()
        forward.merge("units", "u1", a)
        forward.merge("units", "u1", b)
        backward = ModelStore()
        backward.merge("units", "u1", b)
        backward.merge("units", "u1", a)

        assert forward.snapshot() == backward.snapshot()

    def test_input_is_copied(self):
        store = ModelStore()
        fields = {"title": "Intro"}
        store.merge("courses", "c1", fields)
        fields["title"] = "Changed"

        assert store.get("courses", "c1")["title"] == "Intro"

    def test_nested_input_values_are_copied(self):
        store = ModelStore()
        unit_ids = ["u1"]
        gated = {"gated": False}
        store.merge("sequences", "s1", {"unitIds": unit_ids, "gatedContent": gated})
        unit_ids.append("u2")
        gated["gated"] = True

        assert store.get("sequences", "s1")["unitIds"] == ["u1"]
        assert store.get("sequences", "s1")["gatedContent"] == {"gated": False}

    def test_id_field_cannot_be_overwritten(self):
        store = ModelStore()
        store.merge("courses", "c1", {"id": "other"})

        assert store.get("courses", "c1")["id"] == "c1"
        assert store.get("courses", "other") is None

    def test_types_are_partitioned(self):
        store = ModelStore()
        store.merge("sequences", "x", {"kind": "sequence"})
        store.merge("units", "x", {"kind": "unit"})

        assert store.get("sequences", "x")["kind"] == "sequence"
        assert store.get("units", "x")["kind"] == "unit"

    def test_enum_and_string_types_are_the_same_partition(self):
        store = ModelStore()
        store.merge(ModelType.units, "u1", {"complete": True})

        assert store.get("units", "u1")["complete"] is True
        assert "units" in store.snapshot()


class TestBulkAndReads:
    """Test bulk merges and read helpers."""

    def test_merge_many_uses_record_ids(self):
        store = ModelStore()
        store.merge_many("units", [{"id": "u1", "title": "A"}, {"id": "u2", "title": "B"}])

        assert list(store.get_type("units")) == ["u1", "u2"]

    def test_merge_map(self):
        store = ModelStore()
        store.merge_map("sections", {"s1": {"title": "Week 1"}})

        assert store.get("sections", "s1") == {"id": "s1", "title": "Week 1"}

    def test_get_absent(self):
        store = ModelStore()

        assert store.get("courses", "missing") is None
        assert store.get_field("courses", "missing", "title", "n/a") == "n/a"
        assert store.has("courses", "missing") is False
        assert dict(store.get_type("courses")) == {}

    def test_snapshot_is_detached(self):
        store = ModelStore()
        store.merge("sequences", "s1", {"unitIds": ["u1"]})
        snapshot = store.snapshot()
        snapshot["sequences"]["s1"]["unitIds"].append("u2")

        assert store.get("sequences", "s1")["unitIds"] == ["u1"]


class TestSubscribe:
    """Test merge listeners."""

    def test_listener_receives_events_until_unsubscribed(self):
        store = ModelStore()
        events = []
        unsubscribe = store.subscribe(events.append)

        store.merge("units", "u1", {"complete": True})
        unsubscribe()
        store.merge("units", "u1", {"complete": False})

        assert events == [ModelEvent("units", "u1", ("complete",))]

    def test_listener_errors_are_reported(self):
        log_error = MagicMock()
        store = ModelStore(log_error=log_error)
        error = RuntimeError("listener broke")
        events = []

        def broken(event):
            raise error

        store.subscribe(broken)
        store.subscribe(events.append)
        record = store.merge("units", "u1", {"complete": True})

        assert record["complete"] is True
        assert len(events) == 1
        log_error.assert_called_once_with(error)
