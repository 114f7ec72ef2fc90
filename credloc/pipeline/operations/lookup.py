"""
Lookup operation for the pipeline.

Navigates into the current value by key or by position:

    value kind      Key(k)                          Position(i)
    text            itself if equal to k            itself if i == 0
    list of text    first element equal to k        element i
    other list      illegal                         element i
    struct          value of first entry keyed k    value of entry i

Anything not found is LookupAbsent; shape mismatches are LookupIllegal.
"""

from __future__ import annotations

import logging

from credloc.errors import EvalResult
from credloc.errors import LookupAbsent
from credloc.errors import LookupIllegal
from credloc.models import Key
from credloc.models import ListValue
from credloc.models import Lookup
from credloc.models import Position
from credloc.models import Selector
from credloc.models import StructValue
from credloc.models import TextValue
from credloc.models import Value

logger = logging.getLogger(__name__)


def lookup_op(value: Value, op: Lookup) -> EvalResult:
    """Pipeline handler for Lookup operations."""
    return lookup(op.selector, value)


def lookup(selector: Selector, value: Value) -> EvalResult:
    """
    Apply a key or position lookup to a value.

    Args:
        selector: Key or Position
        value: Current pipeline value

    Returns:
        EvalResult with the selected value, LookupAbsent or LookupIllegal
    """
    if isinstance(selector, Key):
        result = _lookup_key(selector, value)
    elif isinstance(selector, Position):
        result = _lookup_position(selector, value)
    else:
        raise TypeError(f"Unknown selector: {selector!r}")

    if not result.ok:
        logger.debug(f"Lookup failed: {result.error}")
    return result


def _lookup_key(selector: Key, value: Value) -> EvalResult:
    if isinstance(value, TextValue):
        if value.equals(selector.name):
            return EvalResult.success(value)
        return EvalResult.failure(LookupAbsent(str(selector)))

    elif isinstance(value, ListValue):
        if not value.all_text():
            return EvalResult.failure(LookupIllegal(str(selector), "list of non-text"))
        for item in value.items:
            if item.equals(selector.name):
                return EvalResult.success(item)
        return EvalResult.failure(LookupAbsent(str(selector)))

    elif isinstance(value, StructValue):
        found = value.get(selector.name)
        if found is None:
            return EvalResult.failure(LookupAbsent(str(selector)))
        return EvalResult.success(found)

    raise TypeError(f"Unknown value type: {type(value).__name__}")


def _lookup_position(selector: Position, value: Value) -> EvalResult:
    index = selector.index
    if index < 0:
        return EvalResult.failure(LookupIllegal(str(selector), value.kind))

    if isinstance(value, TextValue):
        if index == 0:
            return EvalResult.success(value)
        return EvalResult.failure(LookupAbsent(str(selector)))

    elif isinstance(value, ListValue):
        if index < len(value.items):
            return EvalResult.success(value.items[index])
        return EvalResult.failure(LookupAbsent(str(selector)))

    elif isinstance(value, StructValue):
        if index < len(value.entries):
            return EvalResult.success(value.entries[index][1])
        return EvalResult.failure(LookupAbsent(str(selector)))

    raise TypeError(f"Unknown value type: {type(value).__name__}")
