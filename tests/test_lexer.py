"""Tests for the literate line classifier."""

import pytest

from litbook.lexer import (
    classify_line,
    coding_language,
    initial_whitespace,
    is_filename,
    leading_backticks,
    markdown_links,
    parse_chunk_reference,
)


class TestClassifyLine:
    def test_outside_chunk(self) -> None:
        assert classify_line("Some prose", in_chunk=False).kind == "plain"
        assert classify_line("```", in_chunk=False).kind == "chunk_open"
        heading = classify_line("## Two words", in_chunk=False)
        assert heading.kind == "heading"
        assert heading.level == 2
        assert heading.text == "Two words"

    def test_chunk_open_name_is_trimmed(self) -> None:
        token = classify_line("```   main.go  ", in_chunk=False)
        assert token.kind == "chunk_open"
        assert token.name == "main.go"
        assert classify_line("```Chunk 1a", in_chunk=False).name == "Chunk 1a"

    def test_inside_chunk(self) -> None:
        assert classify_line("```", in_chunk=True).kind == "chunk_close"
        assert classify_line("``` ", in_chunk=True).kind == "plain"
        assert classify_line("```go", in_chunk=True).kind == "plain"
        assert classify_line("# comment", in_chunk=True).kind == "plain"
        ref = classify_line("    @{Body}", in_chunk=True)
        assert ref.kind == "chunk_reference"
        assert ref.name == "Body"
        assert ref.indent == "    "

    def test_references_only_count_inside_chunks(self) -> None:
        assert classify_line("@{Body}", in_chunk=False).kind == "plain"

    def test_hash_without_space_is_not_heading(self) -> None:
        assert classify_line("#Not a heading", in_chunk=False).kind == "plain"


REFERENCE_CASES = [
    ("First line", ""),
    ("Some @{Second line}", ""),
    ("@{Third line} here", ""),
    ("@{Fourth line}", "Fourth line"),
    ("  @{Fifth line}  ", "Fifth line"),
    ("@{  Sixth line  }", "Sixth line"),
    ("@{}", ""),
    ("@chunk three", ""),
]


class TestChunkReferences:
    @pytest.mark.parametrize(("line", "expected"), REFERENCE_CASES)
    def test_reference_line(self, line: str, expected: str) -> None:
        token = classify_line(line, in_chunk=True)
        assert (token.name if token.kind == "chunk_reference" else "") == expected

    def test_reference_indent(self) -> None:
        assert parse_chunk_reference("\t  @{Name}") == ("\t  ", "Name")
        assert parse_chunk_reference("text @{Name}") is None


FILENAME_CASES = [
    ("", False),
    ("aa", False),
    ("aa bb cc", False),
    ("a.", False),
    (".a c", False),
    (".gitignore ", False),
    (".abc", True),
    ("note.txt", True),
    (".txt.bak", True),
]


class TestIsFilename:
    @pytest.mark.parametrize(("name", "expected"), FILENAME_CASES)
    def test_is_filename(self, name: str, expected: bool) -> None:
        assert is_filename(name) is expected


LINK_CASES = [
    ("", ""),
    ("no.md", ""),
    ("...](some/file.md)...", "some/file.md"),
    ("...](some/file.md...", ""),
    ('...](some/file.md "Title")', "some/file.md"),
    ("...](some/file.txt)...", ""),
    ("[x](chaps/a.md#section-1.2)", "chaps/a.md"),
]


class TestMarkdownLinks:
    @pytest.mark.parametrize(("line", "expected"), LINK_CASES)
    def test_first_link_target(self, line: str, expected: str) -> None:
        links = markdown_links(line)
        assert (links[0].target if links else "") == expected

    def test_all_links_with_offsets(self) -> None:
        line = "See [one](a.md) and [two](sub/b.md#top)."
        links = markdown_links(line)
        assert [link.target for link in links] == ["a.md", "sub/b.md"]
        assert links[1].fragment == "#top"
        for link in links:
            assert line[link.start:link.end] == link.target


class TestSmallHelpers:
    def test_coding_language(self) -> None:
        assert coding_language("main.go") == "go"
        assert coding_language("Chunk.two") == "two"
        assert coding_language("Chunk one") == "one"
        assert coding_language("notes.") == ""
        assert coding_language("") == ""

    def test_leading_backticks(self) -> None:
        assert leading_backticks("```Chunk 1a") == "```"
        assert leading_backticks("```` four") == "````"
        assert leading_backticks("none") == ""

    def test_initial_whitespace(self) -> None:
        assert initial_whitespace("  \tcode  ") == "  \t"
        assert initial_whitespace("code") == ""
