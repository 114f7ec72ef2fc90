"""
Pipeline executor that runs a location's operations against a seed value.

The Pipeline class:
1. Takes the compiled operations of a Location
2. Executes each operation in order, threading the value through
3. Stops at the first failure (no retries, no backtracking)
4. Returns an EvalResult; it never raises
"""

from __future__ import annotations

import logging
from typing import Any
from typing import Callable

from credloc.errors import EvalResult
from credloc.errors import InternalFailure
from credloc.models import Alternation
from credloc.models import Decode
from credloc.models import Location
from credloc.models import Lookup
from credloc.models import Operation
from credloc.models import to_value
from credloc.models import Value
from credloc.pipeline.operations import branch_op
from credloc.pipeline.operations import decode_op
from credloc.pipeline.operations import lookup_op

logger = logging.getLogger(__name__)


# Operation registry: operation type -> handler function
OPERATIONS: dict[type, Callable[[Value, Any], EvalResult]] = {
    Decode: decode_op,
    Lookup: lookup_op,
    Alternation: branch_op,
}


class Pipeline:
    """
    Executes a sequence of compiled operations on a value.

    Operations are conjoined: each one's output is the next one's input,
    and any failure fails the whole pipeline. Alternation operations are
    the only place where a failure is recovered from.
    """

    def __init__(self, operations: tuple[Operation, ...] | list[Operation]):
        self.operations = tuple(operations)

    def execute(self, seed: Value) -> EvalResult:
        """
        Execute all operations on the seed.

        Args:
            seed: Initial value, usually a TextValue captured from the request

        Returns:
            EvalResult with the final value, or the first error met
        """
        value = seed
        for op in self.operations:
            handler = OPERATIONS.get(type(op))
            if handler is None:
                return EvalResult.failure(
                    InternalFailure(type(op).__name__, "unknown operation")
                )

            try:
                result = handler(value, op)
            except Exception as e:
                logger.error(f"Pipeline operation '{type(op).__name__}' failed: {e}", exc_info=True)
                return EvalResult.failure(InternalFailure(type(op).__name__, str(e)))

            if not result.ok:
                return result
            assert result.value is not None
            value = result.value

        return EvalResult.success(value)


def run_operations(operations: tuple[Operation, ...], seed: Value) -> EvalResult:
    """Convenience function to execute operations against a seed."""
    return Pipeline(operations).execute(seed)


def evaluate(location: Location, seed: str | bytes | Any) -> EvalResult:
    """
    Run a location's pipeline.

    Args:
        location: Compiled location
        seed: Raw string or bytes captured by the location's selector, or
            an already structured value (Value, dict or list)

    Returns:
        EvalResult; a failure means no credential at this location
    """
    result = Pipeline(location.ops).execute(to_value(seed))
    if not result.ok:
        logger.debug(f"No value at {location.describe()}: {result.error}")
    return result
