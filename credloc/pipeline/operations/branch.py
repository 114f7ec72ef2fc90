"""
Alternation ("or") operation for the pipeline.

Tries each branch against the same input value and keeps the first one
that succeeds, in declared order. Used where an encoding is ambiguous,
e.g. a header that may be pairs data or may already be the plain key:

    {"or": [[{"decode": "pairs"}, {"lookup": {"position": 0}}],
            [{"decode": "text"}]]}
"""

from __future__ import annotations

import logging

from credloc.errors import AlternationExhausted
from credloc.errors import EngineError
from credloc.errors import EvalResult
from credloc.models import Alternation
from credloc.models import Value

logger = logging.getLogger(__name__)


def branch_op(value: Value, op: Alternation) -> EvalResult:
    """
    Evaluate alternation branches until one succeeds.

    Returns:
        The first successful branch result, or AlternationExhausted
        carrying every branch error in order
    """
    from credloc.pipeline.executor import run_operations

    errors: list[EngineError] = []
    for index, branch in enumerate(op.branches):
        result = run_operations(branch, value)
        if result.ok:
            if errors:
                logger.debug(f"Alternative {index} matched after {len(errors)} failed")
            return result
        assert result.error is not None
        errors.append(result.error)

    return EvalResult.failure(AlternationExhausted(tuple(errors)))
