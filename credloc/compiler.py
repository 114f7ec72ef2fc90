"""
Compiles location configs into immutable Location objects.

Compilation happens once, when the config is loaded:
1. The config is validated against locations.schema.json
2. Operations are turned into frozen Decode/Lookup/Alternation objects
3. The set of value shapes each step can see is tracked, and pipelines
   that can never succeed (a decode that can only ever receive a list or a
   struct) are rejected here instead of failing on every request
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from credloc.errors import LocationConfigError
from credloc.models import Alternation
from credloc.models import CredentialSpec
from credloc.models import Decode
from credloc.models import DecodeKind
from credloc.models import Key
from credloc.models import Location
from credloc.models import Lookup
from credloc.models import Operation
from credloc.models import Position
from credloc.models import SelectorKind
from credloc.schema_validator import SchemaValidator

logger = logging.getLogger(__name__)

TEXT = "text"
LIST = "list"
STRUCT = "struct"
ANY_SHAPE = frozenset({TEXT, LIST, STRUCT})

# Shapes a selector can hand to the first operation
SEED_SHAPES: dict[SelectorKind, frozenset[str]] = {
    SelectorKind.HEADER: frozenset({TEXT}),
    SelectorKind.QUERY_STRING: frozenset({TEXT}),
    SelectorKind.PROPERTY: ANY_SHAPE,
}

# Shapes each decoder can produce
DECODE_SHAPES: dict[DecodeKind, frozenset[str]] = {
    DecodeKind.TEXT: frozenset({TEXT}),
    DecodeKind.BASE64: frozenset({TEXT}),
    DecodeKind.BASE64URL: frozenset({TEXT}),
    DecodeKind.JSON: ANY_SHAPE,
    DecodeKind.PROTOBUF_STRUCT: frozenset({STRUCT}),
    DecodeKind.PROTOBUF_METADATA: frozenset({STRUCT}),
    DecodeKind.PAIRS: frozenset({STRUCT}),
}


def compile_credentials(
    config: Any,
    config_path: Path | str | None = None,
) -> tuple[CredentialSpec, ...]:
    """
    Compile a full credentials config.

    Args:
        config: Parsed config, {"credentials": [...]}
        config_path: Optional path for context in error messages

    Returns:
        Compiled credential specs, in declared order

    Raises:
        LocationConfigError: if the config is invalid
    """
    result = SchemaValidator.validate_locations_config(config, config_path)
    if not result.valid:
        raise LocationConfigError("Invalid credentials config", result.errors)

    errors: list[str] = []
    specs = []
    for index, credential in enumerate(config["credentials"]):
        keys = tuple(credential.get("keys", []))
        locations = []
        for loc_index, location in enumerate(credential["locations"]):
            where = f"credentials.{index}.locations.{loc_index}"
            try:
                locations.append(_compile_location(location, where, keys))
            except LocationConfigError as e:
                errors.extend(e.errors)
        specs.append(
            CredentialSpec(
                kind=credential["kind"],
                keys=keys,
                locations=tuple(locations),
            )
        )

    if errors:
        raise LocationConfigError("Invalid credentials config", errors)

    logger.debug(f"Compiled {len(specs)} credentials")
    return tuple(specs)


def compile_location(config: Any) -> Location:
    """
    Compile a single location config.

    Raises:
        LocationConfigError: if the location is invalid
    """
    result = SchemaValidator.validate_definition(config, "location")
    if not result.valid:
        raise LocationConfigError("Invalid location", result.errors)
    return _compile_location(config, "(root)")


def compile_operations(
    config: Any,
    seed_shapes: frozenset[str] = ANY_SHAPE,
) -> tuple[Operation, ...]:
    """
    Compile a list of operations.

    Args:
        config: List of operation dicts
        seed_shapes: Shapes the first operation may receive

    Raises:
        LocationConfigError: if the operations are invalid
    """
    result = SchemaValidator.validate_definition(config, "operations")
    if not result.valid:
        raise LocationConfigError("Invalid operations", result.errors)

    ops = _build_operations(config)
    errors: list[str] = []
    check_shapes(ops, seed_shapes, "ops", errors)
    if errors:
        raise LocationConfigError("Pipeline can never succeed", errors)
    return ops


def _compile_location(config: dict, where: str, keys: tuple[str, ...] = ()) -> Location:
    selector = SelectorKind(config["selector"])
    ops = _build_operations(config.get("ops", []))

    errors: list[str] = []
    check_shapes(ops, SEED_SHAPES[selector], f"{where}.ops", errors, keys)
    if errors:
        raise LocationConfigError("Pipeline can never succeed", errors)

    return Location(selector=selector, args=tuple(config["args"]), ops=ops)


def _build_operations(config: list) -> tuple[Operation, ...]:
    return tuple(_build_operation(op) for op in config)


def _build_operation(config: dict) -> Operation:
    if "decode" in config:
        return Decode(DecodeKind(config["decode"]))

    elif "lookup" in config:
        lookup = config["lookup"]
        if "key" in lookup:
            return Lookup(Key(lookup["key"]))
        return Lookup(Position(lookup["position"]))

    elif "or" in config:
        return Alternation(tuple(_build_operations(branch) for branch in config["or"]))

    raise LocationConfigError(f"Unknown operation: {config!r}")


def check_shapes(
    ops: tuple[Operation, ...],
    shapes: frozenset[str],
    where: str,
    errors: list[str],
    keys: tuple[str, ...] = (),
) -> frozenset[str]:
    """
    Track the shapes flowing through ops, appending any static error.

    With the credential's keys given, a key lookup that can only ever see
    text is rejected unless it names one of them: the lookup succeeds only
    on text equal to its key, so no declared key could match.

    Returns:
        The shapes the pipeline can produce
    """
    for index, op in enumerate(ops):
        path = f"{where}.{index}"

        if isinstance(op, Decode):
            if TEXT not in shapes:
                errors.append(
                    f"{path}: decode {op.kind.value} can only receive "
                    f"{', '.join(sorted(shapes))}, never text"
                )
                return frozenset()
            shapes = DECODE_SHAPES[op.kind]

        elif isinstance(op, Lookup):
            if (
                keys
                and shapes == {TEXT}
                and isinstance(op.selector, Key)
                and op.selector.name not in keys
            ):
                errors.append(
                    f"{path}: lookup {op.selector} on text can never match "
                    f"the declared keys {list(keys)}"
                )
                return frozenset()
            # lookups on text keep text; inside lists and structs anything goes
            shapes = frozenset({TEXT}) if shapes == {TEXT} else ANY_SHAPE

        elif isinstance(op, Alternation):
            if not op.branches:
                errors.append(f"{path}: alternation has no branches")
                return frozenset()
            produced: frozenset[str] = frozenset()
            for branch_index, branch in enumerate(op.branches):
                produced |= check_shapes(
                    branch, shapes, f"{path}.or.{branch_index}", errors, keys
                )
            shapes = produced

    return shapes
