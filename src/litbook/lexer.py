"""Line classifier for literate Markdown sources.

Only the constructs the build needs are recognised:
- ATX headings (``## Title``)
- chunk fences (````` Name`` opens, a bare ````` closes)
- chunk reference lines (``  @{Name}``) inside chunks
- Markdown links whose target is a ``.md`` file
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from litbook.types import LineToken


FENCE = "```"

_HEADING_RE = re.compile(r"^(#+)\s+(.*)$")
_REFERENCE_RE = re.compile(r"^(\s*)@\{(.*)\}\s*$")
_FILENAME_RE = re.compile(r"\.\S+$")
_LANGUAGE_RE = re.compile(r"[-_a-zA-Z0-9]*$")

# [text](path/file.md#fragment "Title")
_MD_LINK_RE = re.compile(
    r"\]\("
    r"(?P<target>[^)#]+\.md)"
    r"(?P<fragment>#[-\w.]*)?"
    r"(?P<title>\s+\"[^\"]*\")?"
    r"\)"
)


@dataclass(frozen=True, slots=True)
class MarkdownLink:
    """A ``.md`` link found in a line, with character offsets of its target."""

    target: str
    fragment: str
    start: int
    end: int


def classify_line(line: str, *, in_chunk: bool) -> LineToken:
    """Classify one line given whether a chunk is currently open."""
    if in_chunk:
        if line == FENCE:
            return LineToken(kind="chunk_close", raw=line)
        ref = parse_chunk_reference(line)
        if ref is not None:
            indent, name = ref
            return LineToken(kind="chunk_reference", raw=line, name=name, indent=indent)
        return LineToken(kind="plain", raw=line)

    if line.startswith(FENCE):
        return LineToken(kind="chunk_open", raw=line, name=line[len(FENCE):].strip())
    if line.startswith("#"):
        m = _HEADING_RE.match(line)
        if m:
            return LineToken(kind="heading", raw=line, level=len(m.group(1)), text=m.group(2))
    return LineToken(kind="plain", raw=line)


def parse_chunk_reference(code: str) -> tuple[str, str] | None:
    """Return ``(indent, name)`` if the whole line is ``@{name}``.

    Surrounding whitespace is allowed; any other text before or after the
    reference makes the line literal code.
    """
    m = _REFERENCE_RE.match(code)
    if not m:
        return None
    name = m.group(2).strip()
    if not name:
        return None
    return m.group(1), name


def heading_match(line: str) -> tuple[int, str] | None:
    m = _HEADING_RE.match(line)
    if not m:
        return None
    return len(m.group(1)), m.group(2)


def is_filename(name: str) -> bool:
    return bool(_FILENAME_RE.search(name))


def coding_language(name: str) -> str:
    """Trailing extension-like suffix of a chunk name (``main.go`` -> ``go``)."""
    m = _LANGUAGE_RE.search(name)
    return m.group(0) if m else ""


def leading_backticks(line: str) -> str:
    return line[: len(line) - len(line.lstrip("`"))]


def initial_whitespace(code: str) -> str:
    return code[: len(code) - len(code.lstrip())]


def markdown_links(line: str) -> list[MarkdownLink]:
    """All links to ``.md`` targets in a line, in order of appearance."""
    return [
        MarkdownLink(
            target=m.group("target"),
            fragment=m.group("fragment") or "",
            start=m.start("target"),
            end=m.end("target"),
        )
        for m in _MD_LINK_RE.finditer(line)
    ]
