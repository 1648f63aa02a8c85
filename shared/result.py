"""Success-or-error values handed between layers instead of exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar


T = TypeVar("T")
E = TypeVar("E")


@dataclass(slots=True, frozen=True)
class Result(Generic[T, E]):
    """Outcome of one fallible step.

    ``succeeded`` is stored explicitly so ``Result.ok(None)`` is still a
    success.  Per-package upgrade failures travel as ``Result.err`` values so
    one broken package never aborts the rest of a batch.
    """

    succeeded: bool
    value: T | None = None
    error: E | None = None

    @classmethod
    def ok(cls, value: T) -> Result[T, E]:
        return cls(True, value=value)

    @classmethod
    def err(cls, error: E) -> Result[T, E]:
        return cls(False, error=error)

    def is_ok(self) -> bool:
        return self.succeeded

    def is_err(self) -> bool:
        return not self.succeeded

    def unwrap(self) -> T:
        if not self.succeeded:
            raise RuntimeError(f"unwrap() called on a failed result: {self.error}")
        return self.value  # type: ignore[return-value]

    def unwrap_err(self) -> E:
        if self.succeeded:
            raise RuntimeError(f"unwrap_err() called on a successful result: {self.value}")
        return self.error  # type: ignore[return-value]


__all__ = ["Result"]
