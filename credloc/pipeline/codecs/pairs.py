"""
Codec for the proxy "pairs" serialization.

Layout (all integers are little-endian u32):
    count
    key_len[0], value_len[0], ..., key_len[count-1], value_len[count-1]
    key[0] NUL value[0] NUL ... key[count-1] NUL value[count-1] NUL

Many short strings happen to parse as well-formed pairs data, which is why
pipelines wrap pairs decoding in an alternation.
"""

from __future__ import annotations

import struct

_U32 = struct.Struct("<I")


class PairsError(ValueError):
    """Raised when a buffer is not valid pairs data."""


def decode_pairs(data: bytes) -> list[tuple[str, bytes]]:
    """
    Decode pairs data.

    Keys must be UTF-8; values are returned as raw bytes.

    Raises:
        PairsError: on truncation, missing terminators or trailing bytes
    """
    buf_len = len(data)
    if buf_len < _U32.size:
        raise PairsError(f"need at least {_U32.size} bytes, got {buf_len}")

    (count,) = _U32.unpack_from(data, 0)
    header_len = _U32.size * (1 + 2 * count)
    # every pair takes at least two lengths and two terminators
    if buf_len < header_len + 2 * count:
        raise PairsError(f"{count} pairs need at least {header_len + 2 * count} bytes, got {buf_len}")

    lengths = []
    offset = _U32.size
    for _ in range(count):
        (key_len,) = _U32.unpack_from(data, offset)
        (value_len,) = _U32.unpack_from(data, offset + _U32.size)
        lengths.append((key_len, value_len))
        offset += 2 * _U32.size

    required = header_len + sum(k + v + 2 for k, v in lengths)
    if buf_len != required:
        raise PairsError(f"expected {required} bytes, got {buf_len}")

    pairs: list[tuple[str, bytes]] = []
    for key_len, value_len in lengths:
        key = _read_terminated(data, offset, key_len)
        offset += key_len + 1
        value = _read_terminated(data, offset, value_len)
        offset += value_len + 1
        try:
            pairs.append((key.decode("utf-8"), value))
        except UnicodeDecodeError as e:
            raise PairsError(f"key is not UTF-8: {e}") from e

    return pairs


def _read_terminated(data: bytes, offset: int, length: int) -> bytes:
    end = offset + length
    if data[end] != 0:
        raise PairsError(f"missing NUL terminator at offset {end}")
    return data[offset:end]


def encode_pairs(pairs: list[tuple[str | bytes, str | bytes]]) -> bytes:
    """Encode (key, value) pairs."""
    encoded = [(_to_bytes(k), _to_bytes(v)) for k, v in pairs]

    out = bytearray(_U32.pack(len(encoded)))
    for key, value in encoded:
        out += _U32.pack(len(key))
        out += _U32.pack(len(value))
    for key, value in encoded:
        out += key + b"\x00" + value + b"\x00"
    return bytes(out)


def _to_bytes(data: str | bytes) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return data
