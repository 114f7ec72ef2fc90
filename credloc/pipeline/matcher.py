"""
Result matcher: tests a pipeline's final value against a target key.

matches() is the Key lookup observed as a predicate, so "does the output
contain this credential" and "navigate to this sub-value" agree.
"""

from __future__ import annotations

from credloc.models import Key
from credloc.models import ListValue
from credloc.models import TextValue
from credloc.models import Value
from credloc.pipeline.operations.lookup import lookup


def matches(value: Value, target: str) -> bool:
    """
    True iff value is Text(target), a list containing Text(target), or a
    struct with an entry keyed target.
    """
    return lookup(Key(target), value).ok


def extract_strings(value: Value) -> list[str]:
    """
    Get the final string(s) of a value.

    Text yields itself, a list yields its text elements, anything else
    yields nothing. Bytes that are not UTF-8 are skipped.
    """
    if isinstance(value, TextValue):
        candidates = [value]
    elif isinstance(value, ListValue):
        candidates = [item for item in value.items if isinstance(item, TextValue)]
    else:
        return []

    strings = []
    for candidate in candidates:
        text = candidate.as_str()
        if text is not None:
            strings.append(text)
    return strings
