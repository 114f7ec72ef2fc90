"""
Decode operation for the pipeline.

Turns a TextValue into a (possibly structured) Value:
- text: pass-through, for branches that accept an already plain string
- base64, base64url: Base64 decoding (strict alphabet, canonical trailing
  bits, padding optional)
- json: JSON string/array/object, duplicate object keys kept in order
- protobuf_struct: serialized google.protobuf.Struct
- protobuf_metadata: serialized proxy Metadata envelope (filter name -> Struct)
- pairs: proxy pairs serialization

Decoders never raise; failures come back as DecodeFailure results.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any
from typing import Callable

from credloc.errors import DecodeFailure
from credloc.errors import EvalResult
from credloc.models import Decode
from credloc.models import DecodeKind
from credloc.models import ListValue
from credloc.models import scalar_text
from credloc.models import StructValue
from credloc.models import TextValue
from credloc.models import Value
from credloc.pipeline.codecs import decode_metadata
from credloc.pipeline.codecs import decode_pairs
from credloc.pipeline.codecs import decode_struct

logger = logging.getLogger(__name__)


def decode_op(value: Value, op: Decode) -> EvalResult:
    """Pipeline handler for Decode operations."""
    return decode(op.kind, value)


def decode(kind: DecodeKind, value: Value) -> EvalResult:
    """
    Decode a TextValue according to kind.

    Args:
        kind: Encoding to decode
        value: Current pipeline value, must be a TextValue

    Returns:
        EvalResult with the decoded value or a DecodeFailure
    """
    if not isinstance(value, TextValue):
        return EvalResult.failure(
            DecodeFailure(kind.value, f"can only decode text, got {value.kind}")
        )

    decoder = DECODERS[kind]
    data = value.as_bytes()
    logger.debug(f"Decoding {len(data)} bytes as {kind.value}")

    try:
        return EvalResult.success(decoder(data))
    except ValueError as e:
        # binascii.Error, JSONDecodeError, UnicodeDecodeError, PairsError
        # and ProtoStructError are all ValueErrors
        logger.debug(f"Failed to decode with {kind.value}: {e}")
        return EvalResult.failure(DecodeFailure(kind.value, str(e)))


def _decode_text(data: bytes) -> Value:
    return TextValue(data)


def _decode_base64(data: bytes) -> Value:
    decoded = base64.b64decode(_pad(data), validate=True)
    _check_canonical(data, base64.b64encode(decoded))
    return TextValue(decoded)


def _decode_base64url(data: bytes) -> Value:
    if b"+" in data or b"/" in data:
        raise ValueError("standard base64 characters in base64url data")
    decoded = base64.b64decode(_pad(data), altchars=b"-_", validate=True)
    _check_canonical(data, base64.urlsafe_b64encode(decoded))
    return TextValue(decoded)


def _pad(data: bytes) -> bytes:
    """Add missing '=' padding; a length of 1 mod 4 can never be valid."""
    remainder = len(data) % 4
    if remainder == 1:
        raise ValueError(f"invalid base64 length {len(data)}")
    if remainder:
        data += b"=" * (4 - remainder)
    return data


def _check_canonical(data: bytes, encoded: bytes) -> None:
    """Reject input whose unused trailing bits are not zero."""
    if encoded.rstrip(b"=") != data.rstrip(b"="):
        raise ValueError("non-canonical base64, trailing bits are set")


def _decode_json(data: bytes) -> Value:
    parsed = json.loads(data, object_pairs_hook=_json_object)
    if isinstance(parsed, (str, list, StructValue)):
        return _json_to_value(parsed)
    raise ValueError(f"top-level JSON {type(parsed).__name__} is not a string, array or object")


def _json_object(pairs: list[tuple[str, Any]]) -> StructValue:
    # every entry is kept, so duplicate keys resolve to the first one on lookup
    return StructValue(tuple((key, _json_to_value(item)) for key, item in pairs))


def _json_to_value(obj: Any) -> Value:
    if isinstance(obj, (StructValue, ListValue, TextValue)):
        return obj
    elif isinstance(obj, str):
        return TextValue(obj)
    elif isinstance(obj, list):
        return ListValue(tuple(_json_to_value(item) for item in obj))
    else:
        return TextValue(scalar_text(obj))


def _decode_protobuf_struct(data: bytes) -> Value:
    return decode_struct(data)


def _decode_protobuf_metadata(data: bytes) -> Value:
    return decode_metadata(data)


def _decode_pairs(data: bytes) -> Value:
    return StructValue(tuple((key, TextValue(item)) for key, item in decode_pairs(data)))


# Decoder registry: kind -> bytes -> Value
DECODERS: dict[DecodeKind, Callable[[bytes], Value]] = {
    DecodeKind.TEXT: _decode_text,
    DecodeKind.BASE64: _decode_base64,
    DecodeKind.BASE64URL: _decode_base64url,
    DecodeKind.JSON: _decode_json,
    DecodeKind.PROTOBUF_STRUCT: _decode_protobuf_struct,
    DecodeKind.PROTOBUF_METADATA: _decode_protobuf_metadata,
    DecodeKind.PAIRS: _decode_pairs,
}
