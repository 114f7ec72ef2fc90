"""
Core type definitions for credloc.

Values model the shapes request data can take after progressive decoding:
- TextValue: an opaque string (or raw bytes captured from proxy properties)
- ListValue: a positionally ordered collection
- StructValue: an ordered sequence of (key, value) entries

Operations and Locations are the compiled, immutable form of the
location configuration (see schemas/locations.schema.json).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any
from typing import Union


# =============================================================================
# Values
# =============================================================================


@dataclass(frozen=True, eq=False)
class TextValue:
    """
    An opaque string.

    Proxy properties arrive as raw bytes, so data may be str or bytes.
    Equality compares the UTF-8 byte form.
    """

    data: str | bytes

    kind = "text"

    def as_bytes(self) -> bytes:
        if isinstance(self.data, bytes):
            return self.data
        return self.data.encode("utf-8")

    def as_str(self) -> str | None:
        """Return the text as str, or None if the bytes are not UTF-8."""
        if isinstance(self.data, str):
            return self.data
        try:
            return self.data.decode("utf-8")
        except UnicodeDecodeError:
            return None

    def equals(self, other: str) -> bool:
        return self.as_bytes() == other.encode("utf-8")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TextValue):
            return NotImplemented
        return self.as_bytes() == other.as_bytes()

    def __hash__(self) -> int:
        return hash(self.as_bytes())


@dataclass(frozen=True)
class ListValue:
    """A positionally ordered collection of values."""

    items: tuple[Value, ...] = ()

    kind = "list"

    def all_text(self) -> bool:
        return all(isinstance(item, TextValue) for item in self.items)


@dataclass(frozen=True)
class StructValue:
    """
    Ordered key/value entries.

    Keys are not guaranteed unique; key lookups match the first entry.
    """

    entries: tuple[tuple[str, Value], ...] = ()

    kind = "struct"

    def get(self, key: str) -> Value | None:
        for entry_key, value in self.entries:
            if entry_key == key:
                return value
        return None

    def keys(self) -> list[str]:
        return [key for key, _ in self.entries]


Value = Union[TextValue, ListValue, StructValue]


def to_value(obj: Any) -> Value:
    """
    Convert a plain Python tree into a Value.

    str/bytes become TextValue, list/tuple become ListValue, dicts become
    StructValue in iteration order. Other scalars are carried as their
    string form.
    """
    if isinstance(obj, (TextValue, ListValue, StructValue)):
        return obj
    if isinstance(obj, (str, bytes)):
        return TextValue(obj)
    if isinstance(obj, dict):
        return StructValue(tuple((str(k), to_value(v)) for k, v in obj.items()))
    if isinstance(obj, (list, tuple)):
        return ListValue(tuple(to_value(item) for item in obj))
    return TextValue(scalar_text(obj))


def scalar_text(obj: Any) -> str:
    """JSON-style text for numbers, booleans and null."""
    if obj is None:
        return "null"
    if isinstance(obj, bool):
        return "true" if obj else "false"
    if isinstance(obj, float) and obj.is_integer():
        return str(int(obj))
    return str(obj)


# =============================================================================
# Operations
# =============================================================================


class DecodeKind(str, Enum):
    TEXT = "text"
    BASE64 = "base64"
    BASE64URL = "base64url"
    JSON = "json"
    PROTOBUF_STRUCT = "protobuf_struct"
    PROTOBUF_METADATA = "protobuf_metadata"
    PAIRS = "pairs"


@dataclass(frozen=True)
class Key:
    name: str

    def __str__(self) -> str:
        return f"key {self.name!r}"


@dataclass(frozen=True)
class Position:
    index: int

    def __str__(self) -> str:
        return f"position {self.index}"


Selector = Union[Key, Position]


@dataclass(frozen=True)
class Decode:
    kind: DecodeKind


@dataclass(frozen=True)
class Lookup:
    selector: Selector


@dataclass(frozen=True)
class Alternation:
    """Try each branch against the same input; first success wins."""

    branches: tuple[tuple[Operation, ...], ...]


Operation = Union[Decode, Lookup, Alternation]


# =============================================================================
# Locations and credentials
# =============================================================================


class SelectorKind(str, Enum):
    HEADER = "header"
    QUERY_STRING = "query_string"
    PROPERTY = "property"


@dataclass(frozen=True)
class Location:
    """Where a credential lives and how to unwrap it."""

    selector: SelectorKind
    args: tuple[str, ...]
    ops: tuple[Operation, ...] = ()

    def describe(self) -> str:
        joined = "/".join(self.args)
        return f"{self.selector.value}:{joined}"


@dataclass(frozen=True)
class CredentialSpec:
    """
    A credential kind with accepted keys and ordered locations.

    With keys, a location yields the credential when its final value
    contains one of them. Without keys, the first final string is taken.
    """

    kind: str
    locations: tuple[Location, ...]
    keys: tuple[str, ...] = ()


@dataclass(frozen=True)
class CredentialMatch:
    """A resolved credential."""

    kind: str
    value: str
    location: Location
    index: int

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "value": self.value,
            "location": self.location.describe(),
            "index": self.index,
        }
