"""
Tests for AssemblySession wiring and lifecycle.
"""

import asyncio

import pytest

from pdf_toolkit.core.errors import NotFoundError, UnsupportedFormatError
from pdf_toolkit.engine.previews import range_key, source_key
from pdf_toolkit.engine.session import AssemblySession


@pytest.fixture
def session():
    with AssemblySession() as s:
        yield s


class TestSplitSource:
    """Tests for load_split_source() and clear_split()."""

    def test_load_when_valid_then_ranges_seeded_with_full_span(self, session, ten_page_pdf):
        ranges = session.load_split_source("book.pdf", ten_page_pdf)

        assert ranges.total_pages == 10
        assert [(r.start, r.end, r.name) for r in ranges] == [(1, 10, "Part 1")]
        assert source_key(session.split_source.id) in session.previews

    def test_load_when_new_source_then_previous_ranges_reset(self, session, ten_page_pdf, make_pdf):
        session.load_split_source("book.pdf", ten_page_pdf)
        session.ranges.add()
        session.ranges.add()

        ranges = session.load_split_source("short.pdf", make_pdf(["A", "B", "C"]))

        assert len(ranges) == 1
        assert ranges.get(ranges.ids[0]).end == 3
        assert session.split_source.name == "short.pdf"

    def test_load_when_invalid_then_previous_state_untouched(self, session, ten_page_pdf):
        original = session.load_split_source("book.pdf", ten_page_pdf)

        with pytest.raises(UnsupportedFormatError):
            session.load_split_source("notes.txt", b"plain text")

        assert session.ranges is original
        assert session.split_source.name == "book.pdf"

    def test_ranges_when_nothing_loaded_then_not_found(self, session):
        with pytest.raises(NotFoundError):
            session.ranges

    def test_clear_split_when_previews_exist_then_released(self, session, ten_page_pdf):
        session.load_split_source("book.pdf", ten_page_pdf)
        asyncio.run(session.refresh_split_previews())
        assert range_key(1) in session.previews

        session.clear_split()

        assert len(session.previews) == 0
        assert session.split_source is None

    def test_split_when_loaded_then_report_returned(self, session, ten_page_pdf):
        ranges = session.load_split_source("book.pdf", ten_page_pdf)
        ranges.set_bounds(ranges.ids[0], 2, 4)

        report = asyncio.run(session.split())

        assert [r.page_count for r in report] == [3]


class TestThumbnail:
    """Tests for thumbnail()."""

    def test_thumbnail_when_source_preview_then_image(self, session, make_pdf):
        added = session.add_sources([("a.pdf", make_pdf(["A"], sizes=[(144, 72)]))])

        image = session.thumbnail(source_key(added.added[0].id))

        assert image.size == (144, 72)

    def test_thumbnail_when_no_preview_then_not_found(self, session):
        with pytest.raises(NotFoundError):
            session.thumbnail(source_key("missing"))


class TestLifecycle:
    """Tests for close() and the context manager."""

    def test_close_when_previews_live_then_all_released(self, make_pdf, ten_page_pdf):
        session = AssemblySession()
        session.add_sources([("a.pdf", make_pdf(["A"]))])
        session.load_split_source("book.pdf", ten_page_pdf)
        handles = [session.previews.get(key) for key in session.previews.keys()]

        session.close()

        assert session.closed
        assert len(session.previews) == 0
        assert not any(session.previews.is_live(h) for h in handles)

    def test_close_when_called_twice_then_noop(self):
        session = AssemblySession()
        session.close()
        session.close()
        assert session.closed

    def test_add_sources_when_closed_then_runtime_error(self, make_pdf):
        with AssemblySession() as session:
            pass
        with pytest.raises(RuntimeError):
            session.add_sources([("a.pdf", make_pdf(["A"]))])


class TestRefreshInFlight:
    """Tests for edits and teardown while a preview refresh is running."""

    def test_refresh_when_range_removed_meanwhile_then_no_preview_left(self, session, ten_page_pdf):
        # Arrange
        ranges = session.load_split_source("book.pdf", ten_page_pdf)
        extra = ranges.add()

        async def run():
            task = asyncio.ensure_future(session.refresh_split_previews())
            await asyncio.sleep(0)
            ranges.remove(extra.id)
            return await task

        # Act
        handles = asyncio.run(run())

        # Assert
        assert extra.id not in handles
        assert range_key(extra.id) not in session.previews
        assert range_key(ranges.ids[0]) in session.previews

    def test_refresh_when_source_replaced_meanwhile_then_new_source_previewed(
        self, session, make_pdf, labels_of
    ):
        # Arrange
        first = make_pdf([f"A{i}" for i in range(1, 11)])
        second = make_pdf([f"B{i}" for i in range(1, 11)])
        session.load_split_source("a.pdf", first)

        async def run():
            task = asyncio.ensure_future(session.refresh_split_previews())
            await asyncio.sleep(0)
            session.load_split_source("b.pdf", second)
            stale = await task
            return stale, await session.refresh_split_previews()

        # Act
        stale, handles = asyncio.run(run())

        # Assert
        assert stale == {}
        rid = session.ranges.ids[0]
        assert labels_of(session.previews.read(handles[rid]))[0] == "B1"

    def test_refresh_when_session_closed_meanwhile_then_abandoned(self, ten_page_pdf):
        # Arrange
        session = AssemblySession()
        session.load_split_source("book.pdf", ten_page_pdf)

        async def run():
            task = asyncio.ensure_future(session.refresh_split_previews())
            await asyncio.sleep(0)
            session.close()
            return await task

        # Act
        handles = asyncio.run(run())

        # Assert
        assert handles == {}
        assert len(session.previews) == 0

    def test_load_when_called_twice_then_sources_get_distinct_ids(self, session, ten_page_pdf):
        session.load_split_source("a.pdf", ten_page_pdf)
        first_id = session.split_source.id

        session.load_split_source("a.pdf", ten_page_pdf)

        assert session.split_source.id != first_id
