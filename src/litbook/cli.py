"""Build tangled source files and HTML documentation from literate Markdown.

Usage:
    # Single document from a file (or stdin when omitted or "-")
    litbook program.md

    # A book: follow the root file's links to chapter .md files
    litbook --book --doc-out-dir site book.md

    # Prefix every generated code line with a line directive
    litbook --line-dir "//line %f:%l" program.md

    # Record a run manifest and diff it against an earlier one
    litbook --manifest run/new.json --compare-manifest run/old.json program.md
"""
from __future__ import annotations

import argparse
import logging
import sys

from litbook.config import BuildConfig
from litbook.errors import LitError
from litbook.io_utils import STDIN_NAME
from litbook.pipeline import build

log = logging.getLogger("litbook")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Tangle code chunks and weave HTML documentation from literate Markdown."
    )
    parser.add_argument(
        "input",
        nargs="?",
        default=STDIN_NAME,
        help="Input Markdown file; '-' or omitted reads stdin.",
    )
    parser.add_argument(
        "--book",
        action="store_true",
        help="Treat the input as a book and follow its links to .md chapter files.",
    )
    parser.add_argument(
        "--line-dir",
        default=None,
        help=(
            "Line directive written before each code line. "
            "Use %%f for filename, %%l for line number, %%i for indentation, "
            "%%%% for a percent sign."
        ),
    )
    parser.add_argument(
        "--code-out-dir",
        default=None,
        help="Directory for tangled source files (default: current directory).",
    )
    parser.add_argument(
        "--doc-out-dir",
        default=None,
        help="Directory for HTML output, mirroring the book layout (default: beside inputs).",
    )
    parser.add_argument(
        "--manifest",
        default=None,
        help="Optional path for a JSON run manifest.",
    )
    parser.add_argument(
        "--compare-manifest",
        default=None,
        help="Optional earlier run manifest to diff this build against.",
    )
    parser.add_argument("--no-html", action="store_true", help="Skip HTML documentation.")
    parser.add_argument("--no-code", action="store_true", help="Skip tangled source files.")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        config = BuildConfig.from_env(
            input_name=args.input,
            book=args.book,
            line_directive=args.line_dir,
            code_out_dir=args.code_out_dir,
            doc_out_dir=args.doc_out_dir,
            manifest_path=args.manifest,
            compare_manifest_path=args.compare_manifest,
            render_html=not args.no_html,
            write_code=not args.no_code,
        )
        result = build(config)
    except LitError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    log.info(
        "done: %d code file(s), %d doc file(s), %d warning(s)",
        len(result.code_outputs),
        len(result.doc_outputs),
        len(result.warnings),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
