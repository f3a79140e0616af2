"""Render annotated Markdown to HTML pages with markdown-it-py."""

from __future__ import annotations

import html
import logging
from functools import lru_cache

from markdown_it import MarkdownIt

from litbook.errors import GenerationError
from litbook.io_utils import Writer
from litbook.lexer import classify_line
from litbook.scanner import Document
from litbook.weave import final_markdown

log = logging.getLogger(__name__)

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
{body}</body>
</html>
"""


@lru_cache(maxsize=1)
def _markdown() -> MarkdownIt:
    # CommonMark keeps inline HTML, which the section anchors rely on.
    return MarkdownIt("commonmark").enable("table").enable("strikethrough")


def render_markdown(text: str) -> str:
    """Markdown text in, HTML fragment out."""
    return _markdown().render(text)


def page_title(in_name: str, doc: Document) -> str:
    """First heading of the file, else its name."""
    in_chunk = False
    for line in doc.markdown.get(in_name, []):
        token = classify_line(line, in_chunk=in_chunk)
        if token.kind == "chunk_open":
            in_chunk = True
        elif token.kind == "chunk_close":
            in_chunk = False
        elif token.kind == "heading":
            return token.text.strip()
    return in_name


def render_page(in_name: str, doc: Document) -> str:
    body = render_markdown(final_markdown(in_name, doc))
    return _PAGE_TEMPLATE.format(title=html.escape(page_title(in_name, doc)), body=body)


def write_html(in_name: str, out_name: str, doc: Document, writer: Writer) -> None:
    page = render_page(in_name, doc)
    try:
        with writer(out_name) as sink:
            sink.write(page)
    except OSError as exc:
        raise GenerationError(f"Cannot write {out_name}: {exc}", out_name=out_name) from exc
    log.info("wrote %s", out_name)


def write_all_markdown(in_names: list[str], doc: Document, writer: Writer) -> list[str]:
    """Render every input file to its output name. Returns names written."""
    written: list[str] = []
    for in_name in in_names:
        name = doc.output_name(in_name)
        write_html(in_name, name, doc, writer)
        written.append(name)
    return written
