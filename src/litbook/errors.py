"""Exception types raised while scanning, validating and generating output."""

from __future__ import annotations


class LitError(RuntimeError):
    """Base class for every hard failure of a build."""


class ScanError(LitError):
    """Raised when an input file cannot be read or ends inside a chunk."""

    def __init__(self, message: str, *, in_name: str = "") -> None:
        super().__init__(message)
        self.in_name = in_name


class LatticeError(LitError):
    """One failed check over the chunk lattice."""

    def __init__(self, message: str, *, names: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.names = names


class ValidationError(LitError):
    """All lattice check failures of a build, reported together."""

    def __init__(self, errors: list[LatticeError]) -> None:
        self.errors = list(errors)
        super().__init__("\n".join(str(e) for e in self.errors))


class GenerationError(LitError):
    """Raised when writing a tangled file or rendered page fails."""

    def __init__(self, message: str, *, out_name: str = "") -> None:
        super().__init__(message)
        self.out_name = out_name
