"""Build configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

from litbook.io_utils import STDIN_NAME

LINE_DIR_ENV = "LITBOOK_LINE_DIR"


@dataclass(frozen=True, slots=True)
class BuildConfig:
    input_name: str = STDIN_NAME
    book: bool = False
    line_directive: str = ""
    code_out_dir: str = "."
    doc_out_dir: str | None = None
    manifest_path: str | None = None
    compare_manifest_path: str | None = None
    render_html: bool = True
    write_code: bool = True

    def __post_init__(self) -> None:
        if not self.input_name:
            raise ValueError("input_name cannot be empty")
        if not self.code_out_dir:
            raise ValueError("code_out_dir cannot be empty")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, **overrides: Any) -> BuildConfig:
        """Defaults from the environment, then explicit overrides."""
        env = os.environ if env is None else env
        values: dict[str, Any] = {}
        if env.get(LINE_DIR_ENV):
            values["line_directive"] = env[LINE_DIR_ENV]
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
