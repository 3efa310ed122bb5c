"""Tests for file name sanitizing and saving."""

import pytest

from confluence_markdown_converter.utils.export import page_filename
from confluence_markdown_converter.utils.export import sanitize_filename
from confluence_markdown_converter.utils.export import save_file


class TestSanitizeFilename:
    """Page titles become safe, hyphenated file name stems."""

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Release Notes: v2.0", "release-notes-v2.0"),
            ("  What's  new?  ", "what's-new"),
            ("C++ Guide", "c++-guide"),
            ("Q&A (2024)", "q&a-(2024)"),
            ("Report <draft> | v1*", "report-draft-v1"),
            ("A / B \\ C", "a-b-c"),
            ("--Leading and trailing--", "leading-and-trailing"),
            ("multiple   -   separators", "multiple-separators"),
            ("Ünïcode Tïtle", "ünïcode-tïtle"),
        ],
    )
    def test_examples(self, title, expected):
        assert sanitize_filename(title) == expected

    def test_empty_result(self):
        assert sanitize_filename("???") == "untitled"

    def test_length_cap(self):
        name = sanitize_filename("word " * 50)
        assert len(name) <= 100
        assert not name.endswith("-")

    def test_reserved_names(self):
        assert sanitize_filename("CON") == "con_"
        assert sanitize_filename("Aux.Notes") == "aux.notes_"

    def test_page_filename(self):
        assert page_filename("Release Notes") == "release-notes.md"


class TestSaveFile:
    def test_creates_parent_directories(self, tmp_path):
        target = tmp_path / "nested" / "dir" / "page.md"
        save_file(target, "# Title\n")
        assert target.read_text(encoding="utf-8") == "# Title\n"

    def test_bytes(self, tmp_path):
        target = tmp_path / "page.bin"
        save_file(target, b"\x00\x01")
        assert target.read_bytes() == b"\x00\x01"

    def test_rejects_other_types(self, tmp_path):
        with pytest.raises(TypeError):
            save_file(tmp_path / "x", 42)


class TestPageFilenamePunctuation:
    """Only characters filesystems reject are removed."""

    def test_keeps_ordinary_punctuation(self):
        assert page_filename("What's New?") == "what's-new.md"
        assert page_filename("C++ Guide") == "c++-guide.md"
