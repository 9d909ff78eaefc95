"""
Unit tests for output-name and file-size helpers.
"""

import pytest

from pdf_toolkit.core.naming import ensure_extension, format_file_size


class TestEnsureExtension:
    """Tests for ensure_extension()."""

    def test_ensure_extension_when_missing_then_appends(self):
        assert ensure_extension("report", ".pdf") == "report.pdf"

    def test_ensure_extension_when_present_then_unchanged(self):
        assert ensure_extension("report.pdf", ".pdf") == "report.pdf"

    def test_ensure_extension_when_blank_then_uses_default(self):
        assert ensure_extension("   ", ".pdf", default="merged") == "merged.pdf"
        assert ensure_extension(None, ".pdf", default="merged") == "merged.pdf"

    def test_ensure_extension_when_padded_then_strips(self):
        assert ensure_extension("  notes ", ".pdf") == "notes.pdf"


class TestFormatFileSize:
    """Tests for format_file_size()."""

    @pytest.mark.parametrize(
        "size, expected",
        [
            (0, "0 Bytes"),
            (512, "512 Bytes"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (1024 * 1024, "1 MB"),
            (5 * 1024 ** 3, "5 GB"),
        ],
    )
    def test_format_file_size_when_sized_then_formats(self, size, expected):
        assert format_file_size(size) == expected
