"""Tests for RangeObservableList single-item and batch operations."""

import pytest

from rangelist.rl_events import ITEMS_PROPERTY, LENGTH_PROPERTY, ChangeAction, ChangeEvent
from rangelist.rl_model import BatchSession, NullInputError, RangeObservableList

BASE = ["a", "b", "c", "d", "e", "f", "g"]


class TestConstruction:
    def test_empty_by_default(self):
        col = RangeObservableList()
        assert col.length == 0
        assert list(col) == []
        assert col.suppressed is False

    def test_prepopulated_emits_nothing(self, record):
        col = RangeObservableList(["a", "b"])
        rec = record(col)
        assert col == ["a", "b"]
        assert rec.events == []
        assert rec.properties == []

    def test_copies_input(self):
        source = [1, 2]
        col = RangeObservableList(source)
        source.append(3)
        assert col.length == 2


class TestSingleItemOperations:
    def test_append_fires_add_event(self, record):
        col = RangeObservableList(["a"])
        rec = record(col)
        col.append("b")
        assert col == ["a", "b"]
        assert rec.events == [ChangeEvent.add(["b"], 1)]

    def test_insert_element_inserted(self, record):
        col = RangeObservableList(["a", "b", "c"])
        rec = record(col)
        col.insert(1, "x")
        assert col == ["a", "x", "b", "c"]
        assert rec.events[0].new_start_index == 1
        assert rec.events[0].new_items == ["x"]

    def test_insert_at_end_allowed(self):
        col = RangeObservableList(["a"])
        col.insert(1, "b")
        assert col == ["a", "b"]

    @pytest.mark.parametrize("index", [-1, 4])
    def test_insert_out_of_range(self, index):
        col = RangeObservableList(["a", "b", "c"])
        with pytest.raises(IndexError):
            col.insert(index, "x")

    def test_remove_by_value(self, record):
        col = RangeObservableList(["b", "c", "d"])
        rec = record(col)
        assert col.remove("c") is True
        assert col == ["b", "d"]
        assert rec.events == [ChangeEvent.remove(["c"], 1)]

    def test_remove_first_occurrence(self):
        col = RangeObservableList(["a", "b", "a"])
        col.remove("a")
        assert col == ["b", "a"]

    def test_remove_missing_is_silent(self, record):
        col = RangeObservableList(["b", "c"])
        rec = record(col)
        assert col.remove("x") is False
        assert col == ["b", "c"]
        assert rec.events == []
        assert rec.properties == []

    def test_remove_at(self, record):
        col = RangeObservableList(["a", "b", "c"])
        rec = record(col)
        col.remove_at(1)
        assert col == ["a", "c"]
        assert rec.events == [ChangeEvent.remove(["b"], 1)]

    @pytest.mark.parametrize("index", [-1, 3])
    def test_remove_at_out_of_range(self, index):
        col = RangeObservableList(["a", "b", "c"])
        with pytest.raises(IndexError):
            col.remove_at(index)

    def test_replace_fires_replace_event(self, record):
        col = RangeObservableList(["a", "b", "c"])
        rec = record(col)
        col.replace_at(2, "z")
        assert col == ["a", "b", "z"]
        event = rec.events[0]
        assert event.action is ChangeAction.REPLACE
        assert event.new_start_index == 2
        assert event.old_start_index == 2
        assert event.new_items == ["z"]
        assert event.old_items == ["c"]
        assert rec.properties == [ITEMS_PROPERTY]

    def test_replace_out_of_range(self):
        col = RangeObservableList(["a"])
        with pytest.raises(IndexError):
            col.replace_at(1, "z")

    def test_clear_fires_reset(self, record):
        col = RangeObservableList(["b", "c"])
        rec = record(col)
        col.clear()
        assert col.length == 0
        assert [e.action for e in rec.events] == [ChangeAction.RESET]

    def test_structural_change_reports_length_then_items(self, record):
        col = RangeObservableList()
        rec = record(col)
        col.append("a")
        assert rec.timeline == [
            ("property", LENGTH_PROPERTY),
            ("property", ITEMS_PROPERTY),
            ("change", ChangeAction.ADD),
        ]


class TestSequenceProtocol:
    def test_negative_index_and_slice(self):
        col = RangeObservableList(["a", "b", "c"])
        assert col[-1] == "c"
        assert col[1:] == ["b", "c"]
        assert "b" in col
        assert col.index("c") == 2
        assert col.count("a") == 1

    def test_setitem_replaces(self, record):
        col = RangeObservableList(["a", "b", "c"])
        rec = record(col)
        col[-1] = "z"
        assert col == ["a", "b", "z"]
        assert rec.events == [ChangeEvent.replace("c", "z", 2)]

    def test_delitem_removes(self, record):
        col = RangeObservableList(["a", "b", "c"])
        rec = record(col)
        del col[0]
        assert col == ["b", "c"]
        assert rec.events == [ChangeEvent.remove(["a"], 0)]

    def test_slice_assignment_rejected(self):
        col = RangeObservableList(["a", "b"])
        with pytest.raises(TypeError):
            col[0:1] = ["x"]
        with pytest.raises(TypeError):
            del col[0:1]

    def test_pop_uses_remove_at(self, record):
        col = RangeObservableList(["a", "b"])
        rec = record(col)
        assert col.pop() == "b"
        assert rec.events == [ChangeEvent.remove(["b"], 1)]

    def test_extend_emits_per_item(self, record):
        col = RangeObservableList()
        rec = record(col)
        col.extend(["a", "b"])
        assert [e.new_start_index for e in rec.events] == [0, 1]

    def test_snapshot_is_a_copy(self):
        col = RangeObservableList(["a"])
        snap = col.snapshot()
        snap.append("b")
        assert col == ["a"]

    def test_equality(self):
        assert RangeObservableList([1, 2]) == RangeObservableList([1, 2])
        assert RangeObservableList([1, 2]) == (1, 2)
        assert RangeObservableList([1, 2]) != [2, 1]


class TestAddRange:
    def test_elements_added(self):
        col = RangeObservableList()
        col.add_range(["a", "b"])
        assert col == ["a", "b"]

    def test_none_values_are_kept(self):
        col = RangeObservableList()
        col.add_range(["a", None])
        assert col == ["a", None]

    def test_single_add_event(self, record):
        col = RangeObservableList(["a"])
        rec = record(col)
        col.add_range(["x", "y", "x"])
        assert rec.events == [ChangeEvent.add(["x", "y", "x"], 1)]
        assert col == ["a", "x", "y", "x"]

    def test_properties_once_before_event(self, record):
        col = RangeObservableList()
        rec = record(col)
        col.add_range(["a", "b", "c"])
        assert rec.timeline == [
            ("property", LENGTH_PROPERTY),
            ("property", ITEMS_PROPERTY),
            ("change", ChangeAction.ADD),
        ]

    @pytest.mark.parametrize("items", [None, [], ()])
    def test_empty_or_none_is_noop(self, record, items):
        col = RangeObservableList(["a"])
        rec = record(col)
        col.add_range(items)
        assert col == ["a"]
        assert rec.timeline == []

    def test_accepts_generator(self, record):
        col = RangeObservableList()
        rec = record(col)
        col.add_range(str(i) for i in range(3))
        assert rec.events[0].new_items == ["0", "1", "2"]

    def test_five_sequential_adds_report_five_events(self, record):
        col = RangeObservableList(["a"])
        rec = record(col)
        for n in range(1, 6):
            col.add_range([f"z{n}", f"f{n}", f"y{n}"])

        assert len(rec.events) == 5
        assert all(e.action is ChangeAction.ADD for e in rec.events)
        for event in rec.events:
            start = event.new_start_index
            assert col[start:start + len(event.new_items)] == event.new_items
        assert col.length == 16
        assert col[-3:] == ["z5", "f5", "y5"]


class TestRemoveRange:
    def test_none_raises(self):
        col = RangeObservableList(["a"])
        with pytest.raises(NullInputError):
            col.remove_range(None)
        assert issubclass(NullInputError, TypeError)

    def test_none_raises_even_when_empty(self):
        with pytest.raises(NullInputError):
            RangeObservableList().remove_range(None)

    def test_empty_container_is_noop(self, record):
        col = RangeObservableList()
        rec = record(col)
        col.remove_range(["a", "b"])
        assert rec.timeline == []

    def test_empty_request_is_noop(self, record):
        col = RangeObservableList(["a"])
        rec = record(col)
        col.remove_range([])
        assert col == ["a"]
        assert rec.timeline == []

    def test_single_item_behaves_like_remove(self, record):
        col = RangeObservableList(BASE)
        rec = record(col)
        col.remove_range(["d"])
        assert rec.events == [ChangeEvent.remove(["d"], 3)]
        assert col == ["a", "b", "c", "e", "f", "g"]

    def test_single_missing_item_is_silent(self, record):
        col = RangeObservableList(BASE)
        rec = record(col)
        col.remove_range(["x"])
        assert rec.timeline == []
        assert col.length == 7

    def test_elements_removed(self):
        col = RangeObservableList(["b", "c", "d"])
        col.remove_range(["b", "c"])
        assert col == ["d"]

    def test_missing_values_skipped(self, record):
        col = RangeObservableList(["b", "c", "d"])
        rec = record(col)
        col.remove_range(["b", "X"])
        assert col == ["c", "d"]
        assert rec.events == [ChangeEvent.remove(["b"], 0)]

    def test_sequential_run_from_start(self, record):
        col = RangeObservableList(BASE)
        rec = record(col)
        col.remove_range(["a", "b", "c", "d", "e"])
        assert rec.events == [ChangeEvent.remove(["a", "b", "c", "d", "e"], 0)]
        assert col == ["f", "g"]

    def test_sequential_run_from_second(self, record):
        col = RangeObservableList(BASE)
        rec = record(col)
        col.remove_range(["b", "c", "d", "e"])
        assert rec.events == [ChangeEvent.remove(["b", "c", "d", "e"], 1)]
        assert col == ["a", "f", "g"]

    def test_unsorted_request_three_clusters(self, record):
        col = RangeObservableList(BASE)
        rec = record(col)
        col.remove_range(["b", "c", "a", "g"])
        assert rec.events == [
            ChangeEvent.remove(["b", "c"], 1),
            ChangeEvent.remove(["a"], 0),
            ChangeEvent.remove(["g"], 3),
        ]
        assert col == ["d", "e", "f"]

    def test_two_separate_runs(self, record):
        col = RangeObservableList(BASE)
        rec = record(col)
        col.remove_range(["b", "c", "f", "g"])
        assert rec.events == [
            ChangeEvent.remove(["b", "c"], 1),
            ChangeEvent.remove(["f", "g"], 3),
        ]
        assert col == ["a", "d", "e"]

    def test_joined_run_after_shift(self, record):
        col = RangeObservableList(BASE)
        rec = record(col)
        col.remove_range(["b", "c", "a", "d"])
        assert rec.events == [
            ChangeEvent.remove(["b", "c"], 1),
            ChangeEvent.remove(["a", "d"], 0),
        ]
        assert col == ["e", "f", "g"]

    def test_repeated_anchor_index_keeps_both_clusters(self, record):
        col = RangeObservableList(BASE)
        rec = record(col)
        col.remove_range(["b", "d", "c"])
        # b@1, then d@2, then c is back at 1: three runs, two share index 1
        assert rec.events == [
            ChangeEvent.remove(["b"], 1),
            ChangeEvent.remove(["d"], 2),
            ChangeEvent.remove(["c"], 1),
        ]
        assert col == ["a", "e", "f", "g"]

    def test_replaying_events_reproduces_result(self, record):
        col = RangeObservableList(BASE)
        rec = record(col)
        col.remove_range(["g", "a", "x", "c", "d", "f"])
        mirror = list(BASE)
        for event in rec.events:
            start = event.old_start_index
            assert mirror[start:start + len(event.old_items)] == event.old_items
            del mirror[start:start + len(event.old_items)]
        assert col == mirror

    def test_absent_values_do_not_change_event_count(self, record):
        with_noise = RangeObservableList(BASE)
        rec_noise = record(with_noise)
        with_noise.remove_range(["x", "b", "y", "c", "z"])

        clean = RangeObservableList(BASE)
        rec_clean = record(clean)
        clean.remove_range(["b", "c"])

        assert rec_noise.events == rec_clean.events
        assert with_noise == clean

    def test_all_removed_fires_single_reset(self, record):
        col = RangeObservableList(["a", "b", "c", "d", "e", "f"])
        rec = record(col)
        col.remove_range(["a", "b", "c", "d", "e", "f"])
        assert [e.action for e in rec.events] == [ChangeAction.RESET]
        assert col.length == 0

    def test_all_removed_out_of_order_fires_single_reset(self, record):
        col = RangeObservableList(BASE)
        rec = record(col)
        col.remove_range(["g", "a", "d", "b", "f", "c", "e", "x"])
        assert [e.action for e in rec.events] == [ChangeAction.RESET]

    def test_properties_once_before_events(self, record):
        col = RangeObservableList(BASE)
        rec = record(col)
        col.remove_range(["b", "f"])
        assert rec.timeline == [
            ("property", LENGTH_PROPERTY),
            ("property", ITEMS_PROPERTY),
            ("change", ChangeAction.REMOVE),
            ("change", ChangeAction.REMOVE),
        ]

    def test_lazy_query_over_self(self):
        col = RangeObservableList(["a", "b", "c"])
        col.remove_range(c for c in col if c in ("b", "c"))
        assert col == ["a"]


class TestBeforePurge:
    def test_called_before_emptying(self, record):
        col = RangeObservableList(["a", "b", "c"])
        rec = record(col)
        seen = []

        def before_purge(items):
            seen.append((list(items), col.snapshot(), len(rec.events)))

        col.remove_range(["c", "a", "b"], before_purge=before_purge)
        assert seen == [(["c", "a", "b"], ["a", "b", "c"], 0)]
        assert [e.action for e in rec.events] == [ChangeAction.RESET]

    def test_not_called_when_items_remain(self):
        col = RangeObservableList(["a", "b", "c"])
        calls = []
        col.remove_range(["a", "b", "x"], before_purge=calls.append)
        assert calls == []
        assert col == ["c"]

    def test_not_called_for_shorter_request(self):
        col = RangeObservableList(["a", "a", "b"])
        calls = []
        col.remove_range(["a", "b"], before_purge=calls.append)
        assert calls == []

    def test_duplicates_in_request(self):
        col = RangeObservableList(["a", "a"])
        calls = []
        col.remove_range(["a", "a", "a"], before_purge=calls.append)
        assert calls == [["a", "a", "a"]]
        assert col.length == 0

    def test_unhashable_values(self):
        col = RangeObservableList([["a"], ["b"]])
        calls = []
        col.remove_range([["b"], ["a"]], before_purge=calls.append)
        assert calls == [[["b"], ["a"]]]
        assert col.length == 0

    def test_unhashable_values_partial(self):
        col = RangeObservableList([["a"], ["a"], ["b"]])
        calls = []
        col.remove_range([["a"], ["b"], ["c"]], before_purge=calls.append)
        assert calls == []
        assert col == [["a"]]

    def test_single_item_request_bypasses_callback(self):
        col = RangeObservableList(["a"])
        calls = []
        col.remove_range(["a"], before_purge=calls.append)
        assert calls == []
        assert col.length == 0


class TestSuppression:
    def test_nested_batch_rejected(self):
        col = RangeObservableList(["a"])
        with BatchSession(col):
            assert col.suppressed
            with pytest.raises(RuntimeError):
                col.add_range(["b"])
            assert col.suppressed
        assert col.suppressed is False
        assert col == ["a"]

    def test_no_intermediate_events_during_batch(self):
        col = RangeObservableList(["a"])
        states = []
        col.notifier.subscribe(lambda sender, event: states.append(sender.suppressed))
        col.add_range(["b", "c"])
        col.remove_range(["a", "c"])
        assert states == [False, False, False]
        assert col.suppressed is False

    def test_released_after_exception(self):
        class Exploding:
            def __eq__(self, other):
                raise RuntimeError("boom")

        col = RangeObservableList(["a", "b"])
        with pytest.raises(RuntimeError, match="boom"):
            col.remove_range([Exploding(), "a"])
        assert col.suppressed is False

        events = []
        col.notifier.subscribe(lambda sender, event: events.append(event))
        col.append("c")
        assert events == [ChangeEvent.add(["c"], 2)]

    def test_released_after_failing_iterable(self):
        def items():
            yield "x"
            raise ValueError("bad input")

        col = RangeObservableList(["a"])
        with pytest.raises(ValueError):
            col.add_range(items())
        assert col.suppressed is False
        assert col == ["a"]


class TestComplexOperation:
    def test_collection_updated_properly(self):
        col = RangeObservableList(["a", "b", "c"])
        col.append("d")
        col.remove("b")
        col.insert(0, "x")
        col.add_range(["z", "f", "y"])
        col.remove_at(4)
        col.remove_range(["y", "c"])
        col.replace_at(2, "p")
        assert sorted(col) == sorted(["x", "a", "p", "f"])
        assert col == ["x", "a", "p", "f"]
