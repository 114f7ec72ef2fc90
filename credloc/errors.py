"""
Error types for credloc.

Engine errors are plain values carried in an EvalResult, never raised:
a failure inside one location's pipeline only means "no credential here".
Configuration problems are detected at load time and raise
LocationConfigError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from credloc.models import Value


@dataclass(frozen=True)
class EngineError:
    """Base class for all evaluation errors."""

    @property
    def message(self) -> str:
        return "evaluation failed"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class SelectorUnresolved(EngineError):
    """The seed was not present in the request."""

    selector: str
    args: tuple[str, ...] = ()

    @property
    def message(self) -> str:
        return f"{self.selector} {'/'.join(self.args)} not found in request"


@dataclass(frozen=True)
class DecodeFailure(EngineError):
    kind: str
    reason: str

    @property
    def message(self) -> str:
        return f"error decoding {self.kind}: {self.reason}"


@dataclass(frozen=True)
class LookupIllegal(EngineError):
    """The lookup is not defined for the current value's shape."""

    selector: str
    value_kind: str

    @property
    def message(self) -> str:
        return f"cannot look up {self.selector} in a {self.value_kind} value"


@dataclass(frozen=True)
class LookupAbsent(EngineError):
    selector: str

    @property
    def message(self) -> str:
        return f"{self.selector} not found"


@dataclass(frozen=True)
class AlternationExhausted(EngineError):
    """Every branch of an alternation failed."""

    errors: tuple[EngineError, ...] = ()

    @property
    def message(self) -> str:
        reasons = "; ".join(error.message for error in self.errors)
        return f"all {len(self.errors)} alternatives failed: [{reasons}]"


@dataclass(frozen=True)
class InternalFailure(EngineError):
    """An operation handler raised unexpectedly."""

    operation: str
    reason: str

    @property
    def message(self) -> str:
        return f"{self.operation} failed: {self.reason}"


@dataclass(frozen=True)
class EvalResult:
    """Result of evaluating an operation or a pipeline."""

    value: Value | None = None
    error: EngineError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Value) -> EvalResult:
        return cls(value=value)

    @classmethod
    def failure(cls, error: EngineError) -> EvalResult:
        return cls(error=error)


class LocationConfigError(ValueError):
    """Raised when a location configuration is invalid."""

    def __init__(self, message: str, errors: list[str] | None = None):
        self.errors = errors or [message]
        if errors:
            message = message + ":\n" + "\n".join(errors)
        super().__init__(message)
