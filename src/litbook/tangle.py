"""Expand root chunks into source files.

Each root chunk's content is emitted in order, with every ``@{name}`` line
replaced by the expansion of ``name``. The whitespace before ``@`` is added
to the indent of every line of that expansion, so indents compound through
nested references.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from litbook.errors import GenerationError, LatticeError
from litbook.io_utils import Writer
from litbook.lexer import classify_line, initial_whitespace
from litbook.types import Chunk

log = logging.getLogger(__name__)

MAX_DEPTH = 500


def line_directive(pattern: str, indent: str, f_name: str, line: int) -> str:
    """Format a line directive; ``""`` when no pattern is configured.

    ``%f`` file name, ``%l`` line number, ``%i`` indentation, ``%%`` a
    percent sign; ``%`` before anything else yields that character.
    """
    if not pattern:
        return ""

    out: list[str] = []
    percent = False
    for ch in pattern:
        if percent:
            if ch == "i":
                out.append(indent)
            elif ch == "f":
                out.append(f_name)
            elif ch == "l":
                out.append(str(line))
            else:
                out.append(ch)
            percent = False
        elif ch == "%":
            percent = True
        else:
            out.append(ch)
    return "".join(out) + "\n"


def tangle_chunk(
    chunks: Mapping[str, Chunk],
    name: str,
    *,
    line_dir: str = "",
    f_name: str | None = None,
    indent: str = "",
    _stack: tuple[str, ...] = (),
) -> Iterator[str]:
    """Yield the output text of ``name``, one physical line (or directive) at a time.

    ``f_name`` fills ``%f`` in directives; when ``None`` each line's own
    source file is used.
    """
    if name in _stack or len(_stack) >= MAX_DEPTH:
        raise LatticeError(
            "Found cyclic chunks: " + " -> ".join(_stack + (name,)),
            names=_stack + (name,),
        )
    chunk = chunks.get(name)
    if chunk is None:
        raise LatticeError(f"Chunk not defined: {name}", names=(name,))

    stack = _stack + (name,)
    for line in chunk.lines:
        token = classify_line(line.code, in_chunk=True)
        if token.kind == "chunk_reference":
            yield from tangle_chunk(
                chunks,
                token.name,
                line_dir=line_dir,
                f_name=f_name,
                indent=token.indent + indent,
                _stack=stack,
            )
            continue
        directive = line_directive(
            line_dir,
            indent + initial_whitespace(line.code),
            line.in_name if f_name is None else f_name,
            line.line,
        )
        if directive:
            yield directive
        yield indent + line.code + "\n"


def tangle_to_string(
    chunks: Mapping[str, Chunk],
    name: str,
    *,
    line_dir: str = "",
    f_name: str | None = None,
) -> str:
    return "".join(tangle_chunk(chunks, name, line_dir=line_dir, f_name=f_name))


def write_chunks(
    chunks: Mapping[str, Chunk],
    top: list[str],
    writer: Writer,
    *,
    line_dir: str = "",
    f_name: str | None = None,
) -> list[str]:
    """Write one file per root chunk, named after it. Returns names written.

    Pass ``f_name`` to stamp every ``%f`` with one name (such as the root
    input file); ``None`` uses the input file each code line came from.
    A failing sink aborts immediately; whatever was already written stays.
    """
    written: list[str] = []
    for name in top:
        try:
            with writer(name) as sink:
                for text in tangle_chunk(chunks, name, line_dir=line_dir, f_name=f_name):
                    sink.write(text)
        except OSError as exc:
            raise GenerationError(f"Cannot write {name}: {exc}", out_name=name) from exc
        log.info("wrote %s", name)
        written.append(name)
    return written
