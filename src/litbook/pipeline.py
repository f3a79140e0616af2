"""Full build: scan, check the lattice, tangle code, render documentation."""

from __future__ import annotations

import logging
import posixpath
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, ContextManager

from litbook.config import BuildConfig
from litbook.io_utils import Reader, Writer, file_reader, file_writer
from litbook.lattice import (
    Lattice,
    compile_lattice,
    summarize_lattice,
    summary_to_dict,
    top_level_chunks,
    validate_lattice,
)
from litbook.render import write_all_markdown
from litbook.run_manifest import (
    build_manifest,
    compare_manifests,
    generate_run_id,
    git_commit_hash,
    load_manifest,
    write_manifest,
)
from litbook.scanner import Document, ScanState, first_pass_for_all
from litbook.tangle import write_chunks
from litbook.types import ScanWarning

log = logging.getLogger(__name__)


@dataclass(slots=True)
class BuildResult:
    run_id: str
    doc: Document
    warnings: list[ScanWarning] = field(default_factory=list)
    code_outputs: list[str] = field(default_factory=list)
    doc_outputs: list[str] = field(default_factory=list)
    timings_sec: dict[str, float] = field(default_factory=dict)
    manifest_path: Path | None = None
    manifest_delta: dict[str, Any] | None = None


def scan(
    config: BuildConfig, reader: Reader = file_reader
) -> tuple[ScanState, Document, Lattice]:
    """Scan the root file (and chapters, in book mode) into a Document and its lattice."""
    state = ScanState.for_root(config.input_name, book=config.book)
    doc = Document(line_dir=config.line_directive, doc_out_dir=config.doc_out_dir)
    first_pass_for_all(state, doc, reader)
    lat = compile_lattice(doc.chunks)
    doc.lat = lat
    return state, doc, lat


def _code_path(out_dir: str, name: str) -> str:
    return posixpath.normpath(posixpath.join(out_dir, name))


def _code_writer(out_dir: str, writer: Writer) -> Writer:
    def open_code(name: str) -> ContextManager[IO[str]]:
        return writer(_code_path(out_dir, name))

    return open_code


def build(
    config: BuildConfig,
    *,
    reader: Reader = file_reader,
    writer: Writer = file_writer,
) -> BuildResult:
    """Run a complete build.

    Raises ScanError, ValidationError or GenerationError; warnings are logged
    and returned, never raised.
    """
    run_id = generate_run_id()
    timings: dict[str, float] = {}

    t0 = time.monotonic()
    state, doc, lat = scan(config, reader)
    timings["scan"] = round(time.monotonic() - t0, 4)
    log.info("scanned %d file(s), %d chunk(s)", len(doc.in_names), len(doc.chunks))

    for warning in state.warnings:
        log.warning("%s: %d: %s", warning.in_name, warning.line, warning.message)

    validate_lattice(doc.chunks, lat)

    result = BuildResult(run_id=run_id, doc=doc, warnings=list(state.warnings), timings_sec=timings)

    if config.write_code:
        t0 = time.monotonic()
        names = write_chunks(
            doc.chunks,
            top_level_chunks(lat),
            _code_writer(config.code_out_dir, writer),
            line_dir=doc.line_dir,
        )
        result.code_outputs = [_code_path(config.code_out_dir, name) for name in names]
        timings["tangle"] = round(time.monotonic() - t0, 4)

    if config.render_html:
        t0 = time.monotonic()
        result.doc_outputs = write_all_markdown(doc.in_names, doc, writer)
        timings["weave"] = round(time.monotonic() - t0, 4)

    if config.manifest_path or config.compare_manifest_path:
        manifest = build_manifest(
            run_id=run_id,
            inputs=doc.in_names,
            code_outputs=result.code_outputs,
            doc_outputs=result.doc_outputs,
            warnings=result.warnings,
            timings_sec=timings,
            lattice=summary_to_dict(summarize_lattice(lat)),
            config=config.to_dict(),
            git_commit=git_commit_hash(),
        )
        if config.compare_manifest_path:
            result.manifest_delta = compare_with_previous(manifest, Path(config.compare_manifest_path))
            if result.manifest_delta is not None:
                manifest["comparison"] = result.manifest_delta
        if config.manifest_path:
            result.manifest_path = write_manifest(Path(config.manifest_path), manifest)
            log.info("wrote manifest %s", result.manifest_path)

    return result


def compare_with_previous(manifest: dict[str, Any], previous_path: Path) -> dict[str, Any] | None:
    """Diff this build's manifest against an earlier one; ``None`` if unreadable."""
    if not previous_path.exists():
        log.warning("compare manifest not found: %s", previous_path)
        return None
    try:
        previous = load_manifest(previous_path)
    except (OSError, ValueError) as exc:
        log.warning("failed to read compare manifest %s: %s", previous_path, exc)
        return None
    delta = compare_manifests(manifest, previous)
    delta["previous_manifest_path"] = str(previous_path)
    log.info(
        "vs %s: %d output(s) added, %d removed, warnings %+d",
        delta["previous_run_id"],
        len(delta["outputs_added"]),
        len(delta["outputs_removed"]),
        delta["warnings_count_delta"],
    )
    return delta
