"""Literate programming from Markdown: tangle code chunks, weave documentation."""

from litbook.config import BuildConfig
from litbook.errors import GenerationError, LatticeError, LitError, ScanError, ValidationError
from litbook.lattice import (
    Lattice,
    compile_lattice,
    top_level_chunks,
    validate_lattice,
)
from litbook.pipeline import BuildResult, build
from litbook.scanner import Document, ScanState, first_pass_for_all, process_line, scan_content
from litbook.sections import next_section
from litbook.tangle import line_directive, tangle_chunk, write_chunks
from litbook.types import Chunk, ChunkDef, ChunkLine, PostChunkRef, ScanWarning, Section
from litbook.weave import final_markdown

__all__ = [
    "BuildConfig",
    "BuildResult",
    "Chunk",
    "ChunkDef",
    "ChunkLine",
    "Document",
    "GenerationError",
    "Lattice",
    "LatticeError",
    "LitError",
    "PostChunkRef",
    "ScanError",
    "ScanState",
    "ScanWarning",
    "Section",
    "ValidationError",
    "build",
    "compile_lattice",
    "final_markdown",
    "first_pass_for_all",
    "line_directive",
    "next_section",
    "process_line",
    "scan_content",
    "tangle_chunk",
    "top_level_chunks",
    "validate_lattice",
    "write_chunks",
]
