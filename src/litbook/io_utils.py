"""I/O providers for reading sources and writing generated files.

Readers and writers are plain callables taking a file name, so the build can
run against real files, stdin or in-memory buffers. JSON goes through orjson.
"""
from __future__ import annotations

import contextlib
import sys
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import IO, Any, ContextManager, TypeAlias

import orjson

STDIN_NAME = "-"

Reader: TypeAlias = Callable[[str], ContextManager[Iterable[str]]]
Writer: TypeAlias = Callable[[str], ContextManager[IO[str]]]


def file_reader(name: str) -> ContextManager[Iterable[str]]:
    """Open an input file for reading; ``-`` means stdin (left open)."""
    if name == STDIN_NAME:
        return contextlib.nullcontext(sys.stdin)
    return open(name, encoding="utf-8", newline="")


def file_writer(name: str) -> ContextManager[IO[str]]:
    """Open an output file for writing, creating parent directories."""
    path = Path(name)
    path.parent.mkdir(parents=True, exist_ok=True)
    return open(path, "w", encoding="utf-8", newline="")


def iter_lines(stream: Iterable[str]) -> Iterator[str]:
    """Yield lines without their terminators (``\\n`` or ``\\r\\n``)."""
    for raw in stream:
        line = raw[:-1] if raw.endswith("\n") else raw
        if line.endswith("\r"):
            line = line[:-1]
        yield line


def load_json(path: Path) -> Any:
    return orjson.loads(path.read_bytes())


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON with sorted keys."""
    path.parent.mkdir(parents=True, exist_ok=True)
    opts = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS if pretty else orjson.OPT_SORT_KEYS
    path.write_bytes(orjson.dumps(obj, option=opts))
