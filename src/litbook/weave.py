"""Annotate scanned Markdown for documentation output.

Per input file, line by line:
- numbered headings with ``section-N`` anchors (or a bare anchor at the top
  of a file that does not open with a heading)
- the chunk name above each chunk fence, and a language tag on the fence
  taken from the chunk's root file name
- "Added to in ..." / "Used in ..." paragraphs after each closing fence
- links to other input ``.md`` files rewritten to their ``.html`` outputs
"""

from __future__ import annotations

import posixpath

from litbook.lattice import Lattice, compile_lattice, top_of
from litbook.lexer import (
    FENCE,
    classify_line,
    coding_language,
    heading_match,
    leading_backticks,
    markdown_links,
)
from litbook.scanner import Document
from litbook.sections import sections_as_english, sorted_sections
from litbook.types import PostChunkRef, Section


def final_markdown(in_name: str, doc: Document) -> str:
    """Return the fully annotated Markdown for one input file."""
    lat = _lattice(doc)
    sec_starts = doc.sec_starts.get(in_name, {})
    chunk_starts = doc.chunk_starts.get(in_name, {})
    chunk_refs = doc.chunk_refs.get(in_name, {})
    hrefs = _hrefs_from(in_name, doc)

    out: list[str] = []
    in_chunk = False
    for count, line in enumerate(doc.markdown.get(in_name, []), start=1):
        mkup = line

        sec = sec_starts.get(count)
        if sec is not None and not in_chunk:
            found = heading_match(line)
            if found is not None:
                mkup = amend_heading(sec, found[0])
            else:
                out.append(section_anchor(sec))

        name = chunk_starts.get(count)
        if name is not None:
            out.append(name)
            out.append("")
            mkup = leading_backticks(line) + coding_language(top_of(name, lat))
        elif not in_chunk:
            mkup = amend_chapter_links(mkup, in_name, doc)

        out.append(mkup)

        if name is not None:
            in_chunk = True
        elif in_chunk and line == FENCE:
            in_chunk = False

        ref = chunk_refs.get(count)
        if ref is not None:
            out.extend(_paragraph(added_to_chunk_ref(doc, ref, hrefs=hrefs, from_name=in_name)))
            out.extend(_paragraph(used_in_chunk_ref(doc, ref, lat, hrefs=hrefs, from_name=in_name)))

    return "".join(text + "\n" for text in out)


def section_anchor(sec: Section) -> str:
    return f'<a name="{sec.anchor()}"></a>'


def amend_heading(sec: Section, depth: int) -> str:
    return "#" * depth + " " + section_anchor(sec) + sec.label()


def amend_chapter_links(line: str, in_name: str, doc: Document) -> str:
    """Point links at other input files to their rendered outputs."""
    links = markdown_links(line)
    if not links:
        return line
    known = set(doc.in_names) | set(doc.markdown)
    base = posixpath.dirname(in_name)
    pieces: list[str] = []
    pos = 0
    for link in links:
        target = posixpath.normpath(posixpath.join(base, link.target))
        if target not in known:
            continue
        pieces.append(line[pos:link.start])
        pieces.append(relative_output(in_name, target, doc))
        pos = link.end
    pieces.append(line[pos:])
    return "".join(pieces)


def relative_output(from_name: str, to_name: str, doc: Document) -> str:
    """Path from ``from_name``'s output to ``to_name``'s output."""
    src = doc.output_name(from_name)
    dst = doc.output_name(to_name)
    return posixpath.relpath(dst, posixpath.dirname(src) or ".")


def added_to_chunk_ref(
    doc: Document,
    ref: PostChunkRef,
    *,
    hrefs: dict[str, str] | None = None,
    from_name: str = "",
) -> str:
    """"Added to in ..." for the chunk's other definition sites, in definition order."""
    chunk = doc.chunks.get(ref.name)
    if chunk is None:
        return ""
    secs = [d.sec for d in chunk.defs]
    if ref.sec in secs:
        secs.remove(ref.sec)
    if not secs:
        return ""
    english = sections_as_english(secs, link=hrefs is not None, from_name=from_name, href_for=hrefs)
    return f"Added to in {english}."


def used_in_chunk_ref(
    doc: Document,
    ref: PostChunkRef,
    lat: Lattice | None = None,
    *,
    hrefs: dict[str, str] | None = None,
    from_name: str = "",
) -> str:
    """"Used in ..." for every reference to the chunk, sorted by section."""
    lat = lat or _lattice(doc)
    secs: list[Section] = []
    for parent_name in sorted(lat.parents_of.get(ref.name, ())):
        parent = doc.chunks.get(parent_name)
        if parent is None:
            continue
        for line in parent.lines:
            token = classify_line(line.code, in_chunk=True)
            if token.kind != "chunk_reference" or token.name != ref.name:
                continue
            sec = Section()
            for d in parent.defs:
                if d.in_name == line.in_name and d.line < line.line:
                    sec = d.sec
            secs.append(sec)
    if not secs:
        return ""
    english = sections_as_english(
        sorted_sections(secs), link=hrefs is not None, from_name=from_name, href_for=hrefs
    )
    return f"Used in {english}."


def _paragraph(text: str) -> list[str]:
    if not text:
        return []
    return ["", text, ""]


def _hrefs_from(in_name: str, doc: Document) -> dict[str, str]:
    names = set(doc.markdown) | set(doc.in_names) | {in_name}
    return {name: relative_output(in_name, name, doc) for name in names}


def _lattice(doc: Document) -> Lattice:
    if doc.lat is None:
        doc.lat = compile_lattice(doc.chunks)
    return doc.lat
