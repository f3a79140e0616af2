"""Chunk dependency lattice and its consistency checks.

- compile parent/child relations from ``@{name}`` reference lines
- check that roots are filenames, that there are no cycles, and that every
  referenced chunk is defined
- summary counts for run manifests
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from litbook.errors import LatticeError, ValidationError
from litbook.lexer import classify_line, is_filename
from litbook.types import Chunk


@dataclass(slots=True)
class Lattice:
    children_of: dict[str, set[str]] = field(default_factory=dict)
    parents_of: dict[str, set[str]] = field(default_factory=dict)

    def ensure(self, name: str) -> None:
        self.children_of.setdefault(name, set())
        self.parents_of.setdefault(name, set())

    def link(self, parent: str, child: str) -> None:
        self.ensure(parent)
        self.ensure(child)
        self.children_of[parent].add(child)
        self.parents_of[child].add(parent)


@dataclass(frozen=True, slots=True)
class LatticeSummary:
    node_count: int
    edge_count: int
    roots: tuple[str, ...]
    leaves: tuple[str, ...]


def compile_lattice(chunks: Mapping[str, Chunk]) -> Lattice:
    """Build the lattice from every reference line of every chunk."""
    lat = Lattice()
    for name, chunk in chunks.items():
        lat.ensure(name)
        for line in chunk.lines:
            token = classify_line(line.code, in_chunk=True)
            if token.kind == "chunk_reference":
                lat.link(name, token.name)
    return lat


def top_level_chunks(lat: Lattice) -> list[str]:
    return sorted(name for name, parents in lat.parents_of.items() if not parents)


def top_of(name: str, lat: Lattice) -> str:
    """Follow parents upward until reaching a chunk nobody references."""
    seen = {name}
    while lat.parents_of.get(name):
        name = min(lat.parents_of[name])
        if name in seen:
            break
        seen.add(name)
    return name


def summarize_lattice(lat: Lattice) -> LatticeSummary:
    edge_count = sum(len(children) for children in lat.children_of.values())
    leaves = sorted(name for name, children in lat.children_of.items() if not children)
    return LatticeSummary(
        node_count=len(lat.children_of),
        edge_count=edge_count,
        roots=tuple(top_level_chunks(lat)),
        leaves=tuple(leaves),
    )


def summary_to_dict(summary: LatticeSummary) -> dict[str, Any]:
    return {
        "node_count": summary.node_count,
        "edge_count": summary.edge_count,
        "roots": list(summary.roots),
        "leaves": list(summary.leaves),
    }


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def assert_top_level_chunks_are_filenames(lat: Lattice) -> None:
    bad = [name for name in top_level_chunks(lat) if not is_filename(name)]
    if not bad:
        return
    if len(bad) > 1:
        msg = "Found top level chunks which aren't filenames: "
    else:
        msg = "Found top level chunk which isn't a filename: "
    raise LatticeError(msg + ", ".join(bad), names=tuple(bad))


def assert_no_cycles(lat: Lattice) -> None:
    """Breadth-first path enumeration from every root.

    A path whose last chunk already appears earlier in it is a cycle; the
    error names the repeating segment, e.g. ``dd -> ee -> ff -> dd``. Chunks
    not reachable from any root can only sit on or below a cycle, so they
    seed a second round.
    """
    roots = top_level_chunks(lat)
    reached = _check_paths_from(roots, lat)
    unreached = sorted(set(lat.children_of) - reached)
    if unreached:
        _check_paths_from(unreached, lat)


def _check_paths_from(starts: list[str], lat: Lattice) -> set[str]:
    reached: set[str] = set(starts)
    paths: list[list[str]] = [[name] for name in starts]
    while paths:
        next_paths: list[list[str]] = []
        for path in paths:
            last = path[-1]
            children = sorted(lat.children_of.get(last, ()))
            if not children:
                continue
            if last in path[:-1]:
                start = path.index(last)
                segment = path[start:]
                raise LatticeError(
                    "Found cyclic chunks: " + " -> ".join(segment),
                    names=tuple(segment),
                )
            for child in children:
                reached.add(child)
                next_paths.append(path + [child])
        paths = next_paths
    return reached


def assert_all_chunks_defined(chunks: Mapping[str, Chunk], lat: Lattice) -> None:
    missing = sorted(name for name in lat.children_of if name not in chunks)
    if not missing:
        return
    plural = "s" if len(missing) > 1 else ""
    raise LatticeError(
        f"Chunk{plural} not defined: " + ", ".join(missing),
        names=tuple(missing),
    )


def lattice_errors(chunks: Mapping[str, Chunk], lat: Lattice) -> list[LatticeError]:
    """Run every check; failures are collected, not short-circuited."""
    errors: list[LatticeError] = []
    for check in (
        lambda: assert_top_level_chunks_are_filenames(lat),
        lambda: assert_no_cycles(lat),
        lambda: assert_all_chunks_defined(chunks, lat),
    ):
        try:
            check()
        except LatticeError as exc:
            errors.append(exc)
    return errors


def validate_lattice(chunks: Mapping[str, Chunk], lat: Lattice) -> None:
    errors = lattice_errors(chunks, lat)
    if errors:
        raise ValidationError(errors)
