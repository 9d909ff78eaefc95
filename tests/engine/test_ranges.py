"""
Unit tests for RangeSet and draft bound resolution.
"""

import pytest

from pdf_toolkit.core.errors import NotFoundError
from pdf_toolkit.engine.previews import range_key
from pdf_toolkit.engine.ranges import RangeSet, resolve_bound


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("", 10),
        ("   ", 10),
        ("abc", 10),
        (None, 10),
        ("0", 10),
        ("4", 4),
        (" 7 ", 7),
        ("12abc", 12),
        ("-3", 1),
        ("42", 42),
    ],
)
def test_resolve_bound_when_draft_text_then_resolves(raw, expected):
    assert resolve_bound(raw, 10) == expected


class TestInitialize:
    """Tests for construction and initialize()."""

    def test_init_when_created_then_single_full_span_range(self):
        ranges = RangeSet(10)

        assert len(ranges) == 1
        only = ranges.get(ranges.ids[0])
        assert (only.start, only.end, only.name) == (1, 10, "Part 1")

    def test_init_when_zero_pages_then_value_error(self):
        with pytest.raises(ValueError):
            RangeSet(0)

    def test_initialize_when_ranges_exist_then_reset_and_counter_restarts(self, registry):
        ranges = RangeSet(5, registry)
        second = ranges.add()
        registry.acquire(range_key(second.id), b"x")

        first = ranges.initialize()

        assert ranges.ids == [first.id]
        assert first.name == "Part 1"
        assert range_key(second.id) not in registry

    def test_init_when_custom_prefix_then_used_in_names(self):
        ranges = RangeSet(3, name_prefix="Chapter")
        assert ranges.add().name == "Chapter 2"


class TestAddRemove:
    """Tests for add() and remove()."""

    def test_add_when_called_then_appends_full_span_with_next_name(self):
        ranges = RangeSet(8)
        second = ranges.add()

        assert (second.start, second.end, second.name) == (1, 8, "Part 2")
        assert ranges.ids[-1] == second.id

    def test_add_when_after_removal_then_names_not_reused(self):
        """Auto-generated names follow a running counter, not the list length."""
        ranges = RangeSet(8)
        second = ranges.add()
        ranges.remove(second.id)

        assert ranges.add().name == "Part 3"

    def test_remove_when_present_then_preview_released(self, registry):
        ranges = RangeSet(4, registry)
        extra = ranges.add()
        registry.acquire(range_key(extra.id), b"x")

        assert ranges.remove(extra.id) is True
        assert range_key(extra.id) not in registry

    def test_remove_when_absent_then_noop(self):
        ranges = RangeSet(4)
        assert ranges.remove(999) is False
        assert len(ranges) == 1

    def test_remove_when_last_range_then_set_is_empty(self):
        ranges = RangeSet(4)
        ranges.remove(ranges.ids[0])

        assert len(ranges) == 0
        assert ranges.eligible() == []


class TestUpdateCommit:
    """Tests for update(), commit() and input_value()."""

    def test_update_when_name_then_applied_immediately(self):
        ranges = RangeSet(4)
        rid = ranges.ids[0]

        updated = ranges.update(rid, "name", "Intro")

        assert updated.name == "Intro"
        assert ranges.get(rid).name == "Intro"

    def test_update_when_bound_then_only_draft_changes(self):
        ranges = RangeSet(10)
        rid = ranges.ids[0]

        ranges.update(rid, "start", "")

        assert ranges.input_value(rid, "start") == ""
        assert ranges.get(rid).start == 1

    def test_commit_when_empty_drafts_then_defaults_applied(self):
        ranges = RangeSet(10)
        rid = ranges.ids[0]
        ranges.update(rid, "start", "")
        ranges.update(rid, "end", "")

        committed = ranges.commit(rid)

        assert (committed.start, committed.end) == (1, 10)
        assert ranges.input_value(rid, "start") == "1"
        assert ranges.input_value(rid, "end") == "10"

    def test_commit_when_single_field_then_other_draft_untouched(self):
        ranges = RangeSet(10)
        rid = ranges.ids[0]
        ranges.update(rid, "start", "3")
        ranges.update(rid, "end", "5")

        committed = ranges.commit(rid, "start")

        assert (committed.start, committed.end) == (3, 10)
        assert ranges.input_value(rid, "end") == "5"

    def test_commit_when_negative_then_clamped_to_one(self):
        ranges = RangeSet(10)
        rid = ranges.ids[0]
        assert ranges.set_bounds(rid, "-4", "2").start == 1

    def test_commit_when_beyond_page_count_then_kept_but_ineligible(self):
        """Out-of-bounds ranges are stored, and only composition skips them."""
        ranges = RangeSet(10)
        rid = ranges.ids[0]

        committed = ranges.set_bounds(rid, 8, 14)

        assert (committed.start, committed.end) == (8, 14)
        assert ranges.eligible() == []

    def test_commit_when_reversed_then_kept_but_ineligible(self):
        ranges = RangeSet(10)
        rid = ranges.ids[0]

        committed = ranges.set_bounds(rid, 6, 3)

        assert (committed.start, committed.end) == (6, 3)
        assert not committed.is_eligible(10)

    def test_commit_when_bad_field_then_value_error(self):
        ranges = RangeSet(10)
        with pytest.raises(ValueError):
            ranges.commit(ranges.ids[0], "name")

    def test_update_when_unknown_field_then_value_error(self):
        ranges = RangeSet(10)
        with pytest.raises(ValueError):
            ranges.update(ranges.ids[0], "colour", "red")

    @pytest.mark.parametrize("method, args", [
        ("update", ("name", "x")),
        ("commit", ()),
        ("get", ()),
        ("input_value", ("start",)),
    ])
    def test_when_range_absent_then_not_found(self, method, args):
        ranges = RangeSet(10)
        with pytest.raises(NotFoundError):
            getattr(ranges, method)(999, *args)

    def test_eligible_when_mixed_then_only_valid_in_order(self):
        ranges = RangeSet(10)
        first = ranges.ids[0]
        bad = ranges.add()
        good = ranges.add()
        ranges.set_bounds(first, 3, 5)
        ranges.set_bounds(bad.id, 6, 3)
        ranges.set_bounds(good.id, 9, 10)

        assert [r.id for r in ranges.eligible()] == [first, good.id]
