"""Shared in-memory readers and writers for litbook tests."""

from __future__ import annotations

import contextlib
import io
from collections.abc import Callable, Iterable
from typing import ContextManager

import pytest


class _MemorySink(io.StringIO):
    """StringIO that publishes its content into ``outputs`` when closed."""

    def __init__(self, outputs: dict[str, str], name: str, limit: int | None = None) -> None:
        super().__init__()
        self._outputs = outputs
        self._name = name
        self._limit = limit
        outputs[name] = ""

    def write(self, s: str) -> int:
        if self._limit is not None and self.tell() + len(s) >= self._limit:
            raise OSError("sink has given up writing")
        n = super().write(s)
        self._outputs[self._name] = self.getvalue()
        return n


def memory_reader(data: dict[str, str]) -> Callable[[str], ContextManager[Iterable[str]]]:
    def read(name: str) -> ContextManager[Iterable[str]]:
        if name not in data:
            raise FileNotFoundError(f"No content found for file name {name!r}")
        return contextlib.nullcontext(io.StringIO(data[name]))

    return read


class MemoryWriter:
    """Writer that keeps every output in ``outputs`` keyed by name."""

    def __init__(self, limit: int | None = None) -> None:
        self.outputs: dict[str, str] = {}
        self.limit = limit

    def __call__(self, name: str) -> _MemorySink:
        return _MemorySink(self.outputs, name, self.limit)


@pytest.fixture
def memory_writer() -> MemoryWriter:
    return MemoryWriter()


@pytest.fixture
def failing_writer() -> MemoryWriter:
    return MemoryWriter(limit=12)


@pytest.fixture
def make_reader() -> Callable[[dict[str, str]], Callable[[str], ContextManager[Iterable[str]]]]:
    return memory_reader
