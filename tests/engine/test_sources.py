"""
Unit tests for SourceCollection.
"""

import itertools

import pytest

from pdf_toolkit.core.errors import NotFoundError, UnsupportedFormatError
from pdf_toolkit.engine.previews import source_key
from pdf_toolkit.engine.sources import SourceCollection


@pytest.fixture
def sources(codec, registry):
    return SourceCollection(codec, registry)


@pytest.fixture
def three(sources, make_pdf):
    """Collection holding a.pdf, b.pdf, c.pdf; returns their ids in order."""
    result = sources.add([(name, make_pdf([name])) for name in ("a.pdf", "b.pdf", "c.pdf")])
    return [s.id for s in result.added]


class TestAdd:
    """Tests for add()."""

    def test_add_when_valid_inputs_then_appended_in_order(self, sources, make_pdf):
        sources.add([("a.pdf", make_pdf(["A"]))])
        result = sources.add([("b.pdf", make_pdf(["B"])), ("c.pdf", make_pdf(["C"]))])

        assert [s.name for s in sources] == ["a.pdf", "b.pdf", "c.pdf"]
        assert [s.name for s in result.added] == ["b.pdf", "c.pdf"]
        assert result.rejected == ()

    def test_add_when_ids_generated_then_unique(self, sources, make_pdf):
        sources.add([(f"{i}.pdf", make_pdf(["X"])) for i in range(25)])
        assert len(set(sources.ids)) == 25

    def test_add_when_invalid_input_then_rejected_individually(self, sources, make_pdf):
        """A bad input does not abort unrelated inputs."""
        # Act
        result = sources.add([
            ("a.pdf", make_pdf(["A"])),
            ("photo.png", b"\x89PNG\r\n\x1a\n"),
            ("b.pdf", make_pdf(["B"])),
        ])

        # Assert
        assert [s.name for s in sources] == ["a.pdf", "b.pdf"]
        assert len(result.rejected) == 1
        assert isinstance(result.rejected[0], UnsupportedFormatError)
        assert result.rejected[0].name == "photo.png"

    def test_add_when_added_then_preview_acquired(self, sources, registry, make_pdf):
        data = make_pdf(["A"])
        source = sources.add([("a.pdf", data)]).added[0]

        handle = registry.get(source_key(source.id))
        assert handle is not None
        assert registry.read(handle) == data

    def test_add_when_added_then_page_count_lazy(self, sources, make_pdf):
        source = sources.add([("a.pdf", make_pdf(["A", "B"]))]).added[0]

        assert source.page_count_resolved is False
        assert source.page_count == 2


class TestRemove:
    """Tests for remove() and clear()."""

    def test_remove_when_present_then_order_kept_and_preview_released(self, sources, registry, three):
        a, b, c = three

        assert sources.remove(b) is True
        assert sources.ids == [a, c]
        assert source_key(b) not in registry
        assert source_key(a) in registry

    def test_remove_when_absent_then_noop(self, sources, three):
        assert sources.remove("missing") is False
        assert sources.ids == three

    def test_clear_when_populated_then_empty_and_previews_released(self, sources, registry, three):
        sources.clear()

        assert len(sources) == 0
        assert len(registry) == 0


class TestReorder:
    """Tests for reorder()."""

    def test_reorder_when_moved_to_front_then_sequence_changes(self, sources, three):
        a, b, c = three
        sources.reorder(c, 0)
        assert sources.ids == [c, a, b]

    def test_reorder_when_index_out_of_range_then_clamped(self, sources, three):
        a, b, c = three
        sources.reorder(a, 99)
        assert sources.ids == [b, c, a]
        sources.reorder(c, -5)
        assert sources.ids == [c, b, a]

    def test_reorder_when_id_absent_then_not_found_and_unchanged(self, sources, three):
        with pytest.raises(NotFoundError):
            sources.reorder("missing", 0)
        assert sources.ids == three

    def test_reorder_when_any_permutation_then_membership_unchanged(self, sources, three):
        """Reordering only changes positions, never membership."""
        for target in itertools.permutations(three):
            for index, source_id in enumerate(target):
                sources.reorder(source_id, index)
            assert sources.ids == list(target)
            assert sorted(sources.ids) == sorted(three)


class TestQueries:
    """Tests for lookups."""

    def test_get_when_absent_then_not_found(self, sources):
        with pytest.raises(NotFoundError):
            sources.get("nope")

    def test_index_of_when_present_then_position(self, sources, three):
        assert sources.index_of(three[2]) == 2

    def test_total_size_when_populated_then_sums(self, sources, three):
        assert sources.total_size == sum(s.size for s in sources)
