"""Tests for multi-file (book) scanning."""

import pytest

from litbook.errors import ScanError
from litbook.scanner import Document, ScanState, first_pass_for_all, process_line
from litbook.tangle import tangle_to_string
from litbook.types import Section
from litbook.weave import final_markdown

BOOK = "* [First chapter](first.md)\n             * [Second chapter](second.md)"


def _scan_book(make_reader, data: dict[str, str], root: str, *, book: bool = True, proc=process_line):
    state = ScanState.for_root(root, book=book)
    doc = Document()
    first_pass_for_all(state, doc, make_reader(data), proc)
    return state, doc


class TestFollowingLinks:
    def test_follows_links_from_book(self, make_reader) -> None:
        data = {
            "book.md": BOOK,
            "first.md": "First line 1\nFirst line 2",
            "second.md": "Second line 1\nSecond line 2",
        }
        state, doc = _scan_book(make_reader, data, "book.md")

        assert set(doc.markdown) == {"book.md", "first.md", "second.md"}
        assert len(doc.markdown_text("book.md")) >= 20
        assert doc.markdown_text("first.md") == data["first.md"] + "\n"
        assert doc.markdown_text("second.md") == data["second.md"] + "\n"
        assert state.in_names == ["book.md", "first.md", "second.md"]
        assert doc.in_names == state.in_names

    def test_no_links_followed_when_not_a_book(self, make_reader) -> None:
        data = {"not-a-book.md": BOOK}
        _, doc = _scan_book(make_reader, data, "not-a-book.md", book=False)
        assert list(doc.markdown) == ["not-a-book.md"]

    def test_only_root_links_are_followed(self, make_reader) -> None:
        data = {
            "book.md": "* [First chapter](first.md)",
            "first.md": "[Second link](second.md)",
        }
        _, doc = _scan_book(make_reader, data, "book.md")
        assert set(doc.markdown) == {"book.md", "first.md"}
        assert doc.markdown_text("first.md") == data["first.md"] + "\n"

    def test_book_outside_base_dir(self, make_reader) -> None:
        data = {
            "../aaa/book.md": (
                "* [First chapter](chaps/first.md)\n"
                "             * [Second chapter](chaps/second.md)"
            ),
            "../aaa/chaps/first.md": "First line 1\nFirst line 2",
            "../aaa/chaps/second.md": "Second line 1\nSecond line 2",
        }
        _, doc = _scan_book(make_reader, data, "../aaa/book.md")
        assert set(doc.markdown) == set(data)
        assert doc.markdown_text("../aaa/chaps/first.md") == "First line 1\nFirst line 2\n"

    def test_links_inside_chunks_are_not_followed(self, make_reader) -> None:
        data = {
            "book.md": "``` notes.txt\nsee [x](hidden.md)\n```\n[real](first.md)",
            "first.md": "First",
        }
        state, _ = _scan_book(make_reader, data, "book.md")
        assert state.in_names == ["book.md", "first.md"]

    def test_duplicate_links_scheduled_once(self, make_reader) -> None:
        data = {
            "book.md": "[a](first.md) and [again](./first.md)\n[b](first.md)",
            "first.md": "First",
        }
        state, _ = _scan_book(make_reader, data, "book.md")
        assert state.in_names == ["book.md", "first.md"]

    def test_link_back_to_root_is_ignored(self, make_reader) -> None:
        data = {"book.md": "[self](book.md)"}
        state, _ = _scan_book(make_reader, data, "book.md")
        assert state.in_names == ["book.md"]

    def test_dotted_root_is_not_scanned_twice(self, make_reader) -> None:
        data = {"book.md": "[Home](book.md)\n``` a.txt\nhello\n```"}
        state, doc = _scan_book(make_reader, data, "./book.md")

        assert state.in_names == ["book.md"]
        assert doc.in_names == ["book.md"]
        assert len(doc.chunks["a.txt"].defs) == 1
        assert tangle_to_string(doc.chunks, "a.txt") == "hello\n"
        assert final_markdown("book.md", doc).startswith(
            '<a name="section-0"></a>\n[Home](book.html)\n'
        )


class TestSectionsAcrossChapters:
    def test_section_carries_into_next_chapter(self, make_reader) -> None:
        data = {
            "book.md": BOOK,
            "first.md": "# Section 1\n# Section 2\n## Section 2.1",
            "second.md": "Second line 1",
        }
        seen: list[Section] = []

        def spy(state: ScanState, doc: Document, line: str) -> None:
            if not seen and state.in_name == "second.md":
                seen.append(state.sec)
            process_line(state, doc, line)

        _scan_book(make_reader, data, "book.md", proc=spy)
        assert seen == [Section("second.md", (2, 1), "Section 2.1")]

    def test_each_file_records_its_starting_section(self, make_reader) -> None:
        data = {
            "book.md": BOOK,
            "first.md": "# One\n# Two",
            "second.md": "Body",
        }
        _, doc = _scan_book(make_reader, data, "book.md")
        assert doc.sec_starts["book.md"][1] == Section("book.md")
        assert doc.sec_starts["first.md"][1] == Section("first.md")
        assert doc.sec_starts["second.md"][1] == Section("second.md", (2,), "Two")


class TestBookErrors:
    def test_file_ending_in_chunk_is_fatal(self, make_reader) -> None:
        data = {
            "book.md": "* [First chapter](first.md)",
            "first.md": "First line 1\n``` Chunk one\n\n",
        }
        with pytest.raises(ScanError) as excinfo:
            _scan_book(make_reader, data, "book.md")
        message = str(excinfo.value)
        assert "in chunk" in message
        assert "first.md" in message
        assert excinfo.value.in_name == "first.md"

    def test_missing_chapter_is_a_scan_error(self, make_reader) -> None:
        data = {"book.md": "* [Gone](missing.md)"}
        with pytest.raises(ScanError, match="missing.md"):
            _scan_book(make_reader, data, "book.md")

    def test_in_names_kept_after_failure(self, make_reader) -> None:
        data = {"book.md": "* [Gone](missing.md)"}
        state = ScanState.for_root("book.md", book=True)
        doc = Document()
        with pytest.raises(ScanError):
            first_pass_for_all(state, doc, make_reader(data))
        assert doc.in_names == ["book.md", "missing.md"]
