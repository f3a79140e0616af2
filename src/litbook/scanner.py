"""Single forward pass over literate sources.

Builds, per input file:
- the accumulated Markdown lines
- chunk starts, post-chunk reference points and section starts (by line)

and, across all files, the chunk table. In book mode the root file's links to
other ``.md`` files are queued and scanned in discovery order.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from typing import TypeAlias

from litbook.errors import ScanError
from litbook.io_utils import STDIN_NAME, Reader, file_reader, iter_lines
from litbook.lattice import Lattice
from litbook.lexer import classify_line, markdown_links
from litbook.sections import next_section
from litbook.types import Chunk, ChunkDef, ChunkLine, PostChunkRef, ScanWarning, Section

log = logging.getLogger(__name__)

DEFAULT_OUT_NAME = "out.html"


@dataclass(slots=True)
class Document:
    """Everything collected from the inputs, shared by tangling and weaving."""

    markdown: dict[str, list[str]] = field(default_factory=dict)
    chunks: dict[str, Chunk] = field(default_factory=dict)
    chunk_starts: dict[str, dict[int, str]] = field(default_factory=dict)
    chunk_refs: dict[str, dict[int, PostChunkRef]] = field(default_factory=dict)
    sec_starts: dict[str, dict[int, Section]] = field(default_factory=dict)
    lat: Lattice | None = None
    line_dir: str = ""
    doc_out_dir: str | None = None
    in_names: list[str] = field(default_factory=list)

    def markdown_text(self, in_name: str) -> str:
        return "".join(line + "\n" for line in self.markdown.get(in_name, []))

    def chunk(self, name: str) -> Chunk:
        ch = self.chunks.get(name)
        if ch is None:
            ch = Chunk(name=name)
            self.chunks[name] = ch
        return ch

    def output_name(self, in_name: str) -> str:
        """Rendered documentation file name for an input file."""
        root = self.in_names[0] if self.in_names else in_name
        return output_name_for(self.doc_out_dir, root, in_name)


@dataclass(slots=True)
class ScanState:
    """Cursor of the scan: where we are and what is open."""

    in_name: str = STDIN_NAME
    book: str = ""
    in_names: list[str] = field(default_factory=list)
    line_num: int = 0
    chunk_name: str = ""
    in_chunk: bool = False
    sec: Section = field(default_factory=Section)
    warnings: list[ScanWarning] = field(default_factory=list)

    @classmethod
    def for_root(cls, name: str, *, book: bool = False) -> ScanState:
        state = cls()
        state.set_first_in_name(name)
        if book:
            state.book = state.in_name
        return state

    def set_in_name(self, name: str) -> None:
        self.in_name = name
        self.sec = replace(self.sec, in_name=name)

    def set_first_in_name(self, name: str) -> None:
        # Chapter links are queued normalised; the root must compare equal.
        if name and name != STDIN_NAME:
            name = posixpath.normpath(name)
        self.set_in_name(name)
        self.in_names = [name]

    def warn(self, message: str) -> None:
        self.warnings.append(ScanWarning(self.in_name, self.line_num, message))


LineProc: TypeAlias = Callable[[ScanState, Document, str], None]


def process_line(state: ScanState, doc: Document, line: str) -> None:
    """Consume one input line, updating the scan state and the document."""
    state.line_num += 1
    in_name = state.in_name

    if state.book and not state.in_chunk:
        for link in markdown_links(line):
            _schedule_chapter(state, link.target)

    token = classify_line(line, in_chunk=state.in_chunk)

    if token.kind == "heading":
        state.sec, changed = next_section(state.sec, line)
        if changed:
            doc.sec_starts.setdefault(in_name, {})[state.line_num] = state.sec

    elif token.kind == "chunk_close":
        state.in_chunk = False
        doc.chunk_refs.setdefault(in_name, {})[state.line_num] = PostChunkRef(
            state.chunk_name, state.sec
        )

    elif token.kind == "chunk_open":
        state.chunk_name = token.name
        if not token.name:
            state.warn("Chunk has no name")
        doc.chunk_starts.setdefault(in_name, {})[state.line_num] = token.name
        doc.chunk(token.name).defs.append(ChunkDef(in_name, state.line_num, state.sec))
        state.in_chunk = True

    elif state.in_chunk:
        doc.chunk(state.chunk_name).lines.append(ChunkLine(in_name, state.line_num, line))

    doc.markdown.setdefault(in_name, []).append(line)


def _schedule_chapter(state: ScanState, target: str) -> None:
    base = posixpath.dirname(state.in_name) if state.in_name != STDIN_NAME else ""
    name = posixpath.normpath(posixpath.join(base, target))
    if name in state.in_names:
        return
    log.debug("%s: %d: queued chapter %s", state.in_name, state.line_num, name)
    state.in_names.append(name)


def scan_content(
    stream: Iterable[str],
    state: ScanState,
    doc: Document,
    proc: LineProc = process_line,
) -> None:
    """Feed every line of ``stream`` to ``proc``.

    A chunk still open at the end is only a warning here; the per-file driver
    decides whether that is fatal.
    """
    for line in iter_lines(stream):
        proc(state, doc, line)

    if state.in_chunk:
        state.warn("Content finished but chunk not closed")


def start_file(state: ScanState, doc: Document, name: str) -> None:
    """Reset the per-file cursor; the current section carries over."""
    state.set_in_name(name)
    state.line_num = 0
    state.in_chunk = False
    state.chunk_name = ""
    doc.markdown.setdefault(name, [])
    doc.sec_starts.setdefault(name, {})[1] = state.sec


def first_pass(
    state: ScanState,
    doc: Document,
    name: str,
    reader: Reader = file_reader,
    proc: LineProc = process_line,
) -> None:
    start_file(state, doc, name)
    log.debug("scanning %s", name)
    try:
        with reader(name) as stream:
            scan_content(stream, state, doc, proc)
    except (OSError, UnicodeDecodeError) as exc:
        raise ScanError(f"Cannot read {name}: {exc}", in_name=name) from exc

    if state.in_chunk:
        raise ScanError(
            f"{name}: file ended while in chunk {state.chunk_name!r}",
            in_name=name,
        )


def first_pass_for_all(
    state: ScanState,
    doc: Document,
    reader: Reader = file_reader,
    proc: LineProc = process_line,
) -> None:
    """Scan the root file then every chapter it queued, strictly in order.

    Only the root file's links are followed.
    """
    idx = 0
    try:
        while idx < len(state.in_names):
            first_pass(state, doc, state.in_names[idx], reader, proc)
            state.book = ""
            idx += 1
    finally:
        doc.in_names = list(state.in_names)


# ---------------------------------------------------------------------------
# Output names
# ---------------------------------------------------------------------------


def out_name(name: str) -> str:
    """Replace the extension with ``.html``; stdin or empty becomes ``out.html``."""
    if name in ("", STDIN_NAME):
        return DEFAULT_OUT_NAME
    head, base = posixpath.split(name)
    if base in ("", ".", ".."):
        return posixpath.join(head, DEFAULT_OUT_NAME) if head else DEFAULT_OUT_NAME
    stem, _ = posixpath.splitext(base)
    return posixpath.join(head, stem + ".html")


def chapter_out_name(out_dir: str, found_in_name: str) -> str:
    """Output name for a file found at ``found_in_name`` relative to the book."""
    return posixpath.normpath(posixpath.join(out_dir, out_name(found_in_name)))


def output_name_for(out_dir: str | None, root_name: str, in_name: str) -> str:
    if not out_dir:
        return out_name(in_name)
    if in_name == STDIN_NAME:
        return chapter_out_name(out_dir, in_name)
    root_dir = posixpath.dirname(root_name) if root_name != STDIN_NAME else ""
    rel = posixpath.relpath(in_name, root_dir or ".")
    return chapter_out_name(out_dir, rel)


def out_names(out_dir: str | None, in_names: list[str]) -> list[str]:
    """Output names for every input, mirroring layout under ``out_dir``."""
    if not in_names:
        return []
    root = in_names[0]
    return [output_name_for(out_dir, root, name) for name in in_names]
