"""Core types for literate document scanning, tangling and weaving."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias


LineKind: TypeAlias = Literal["heading", "chunk_open", "chunk_close", "chunk_reference", "plain"]


@dataclass(frozen=True, slots=True)
class Section:
    """A numbered section of one input file (``nums == ()`` is section 0)."""

    in_name: str = ""
    nums: tuple[int, ...] = ()
    text: str = ""

    def __post_init__(self) -> None:
        for n in self.nums:
            if n < 0:
                raise ValueError(f"section numbers must be >= 0, got {self.nums!r}")

    @property
    def depth(self) -> int:
        return len(self.nums)

    def nums_string(self) -> str:
        """Dotted numbering, e.g. ``2.1.3``; ``0`` for the root section."""
        if not self.nums:
            return "0"
        return ".".join(str(n) for n in self.nums)

    def label(self) -> str:
        """Heading label as rendered in documentation, e.g. ``2.1 Setup``."""
        if not self.nums:
            return "0"
        return f"{self.nums_string()} {self.text}"

    def anchor(self) -> str:
        return f"section-{self.nums_string()}"

    def sort_key(self) -> tuple[int, ...]:
        return self.nums


@dataclass(frozen=True, slots=True)
class ChunkDef:
    """Where a chunk fence was opened: input file, line number and section."""

    in_name: str
    line: int
    sec: Section


@dataclass(frozen=True, slots=True)
class ChunkLine:
    """One line of chunk content as it appeared in its input file."""

    in_name: str
    line: int
    code: str


@dataclass(slots=True)
class Chunk:
    """All definitions and content lines collected under one chunk name."""

    name: str
    defs: list[ChunkDef] = field(default_factory=list)
    lines: list[ChunkLine] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class PostChunkRef:
    """Chunk closed at a given line, with the section active at closure."""

    name: str
    sec: Section


@dataclass(frozen=True, slots=True)
class ScanWarning:
    in_name: str
    line: int
    message: str

    def __str__(self) -> str:
        return f"{self.in_name}: {self.line}: {self.message}"


@dataclass(frozen=True, slots=True)
class LineToken:
    """Classification of a single input line.

    ``name`` is set for ``chunk_open`` and ``chunk_reference``; ``level`` and
    ``text`` for ``heading``; ``indent`` is the whitespace before ``@`` on a
    ``chunk_reference``.
    """

    kind: LineKind
    raw: str
    name: str = ""
    level: int = 0
    text: str = ""
    indent: str = ""

    def __post_init__(self) -> None:
        if self.kind == "heading" and self.level < 1:
            raise ValueError("heading tokens need level >= 1")
