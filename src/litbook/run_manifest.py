"""Run-manifest utilities for build reproducibility and comparison."""
from __future__ import annotations

import subprocess
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from litbook.io_utils import load_json, save_json
from litbook.types import ScanWarning

MANIFEST_VERSION = "1.0"


def utc_now_iso() -> str:
    """Return current UTC timestamp in ISO-8601 format."""
    return datetime.now(UTC).isoformat()


def generate_run_id(prefix: str = "litbook") -> str:
    """Generate a compact run id suitable for artifact naming."""
    ts = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    return f"{prefix}_{ts}_{uuid4().hex[:8]}"


def git_commit_hash(*, search_from: Path | None = None) -> str | None:
    """Best-effort current git commit hash for reproducibility metadata."""
    cwd = (search_from or Path.cwd())
    if cwd.is_file():
        cwd = cwd.parent
    try:
        proc = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    if proc.returncode != 0:
        return None
    out = proc.stdout.strip()
    return out if out else None


def warnings_to_rows(warnings: list[ScanWarning]) -> list[dict[str, Any]]:
    return [{"file": w.in_name, "line": w.line, "message": w.message} for w in warnings]


def build_manifest(
    *,
    run_id: str,
    inputs: list[str],
    code_outputs: list[str],
    doc_outputs: list[str],
    warnings: list[ScanWarning],
    timings_sec: dict[str, float],
    lattice: dict[str, Any] | None = None,
    config: dict[str, Any] | None = None,
    git_commit: str | None = None,
) -> dict[str, Any]:
    """Build canonical manifest payload for one build."""
    return {
        "manifest_version": MANIFEST_VERSION,
        "created_at": utc_now_iso(),
        "run_id": run_id,
        "git_commit": git_commit,
        "inputs": list(inputs),
        "code_outputs": list(code_outputs),
        "doc_outputs": list(doc_outputs),
        "warnings": warnings_to_rows(warnings),
        "warnings_count": len(warnings),
        "lattice": lattice or {},
        "timings_sec": timings_sec,
        "config": config or {},
    }


def write_manifest(path: Path, manifest: dict[str, Any]) -> Path:
    save_json(manifest, path, pretty=True)
    return path


def load_manifest(path: Path) -> dict[str, Any]:
    """Load a manifest from JSON."""
    data = load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"Invalid manifest payload in {path}")
    return data


def compare_manifests(
    current: dict[str, Any],
    previous: dict[str, Any],
) -> dict[str, Any]:
    """Compare two manifests: outputs added/removed and warning delta."""
    curr_outputs = set(current.get("code_outputs", [])) | set(current.get("doc_outputs", []))
    prev_outputs = set(previous.get("code_outputs", [])) | set(previous.get("doc_outputs", []))
    curr_warnings = int(current.get("warnings_count", 0) or 0)
    prev_warnings = int(previous.get("warnings_count", 0) or 0)
    return {
        "current_run_id": current.get("run_id"),
        "previous_run_id": previous.get("run_id"),
        "outputs_added": sorted(curr_outputs - prev_outputs),
        "outputs_removed": sorted(prev_outputs - curr_outputs),
        "warnings_count_delta": curr_warnings - prev_warnings,
    }
