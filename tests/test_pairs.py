"""Tests for the pairs codec."""

import struct

import pytest

from credloc.models import Decode
from credloc.models import DecodeKind
from credloc.models import Key
from credloc.models import Lookup
from credloc.models import TextValue
from credloc.pipeline import Pipeline
from credloc.pipeline.codecs import decode_pairs
from credloc.pipeline.codecs import encode_pairs
from credloc.pipeline.codecs import PairsError
from envoy_fixtures import METADATA_FILTER_JWT_AUTHN
from envoy_fixtures import METADATA_FILTER_METADATA
from envoy_fixtures import VERIFIED_JWT


def _u32(n: int) -> bytes:
    return struct.pack("<I", n)


VERIFIED_JWT_KEYS = [
    "at_hash",
    "exp",
    "aud",
    "sub",
    "jti",
    "auth_time",
    "email_verified",
    "azp",
    "session_state",
    "iss",
    "acr",
    "preferred_username",
    "iat",
    "typ",
]


class TestDecodePairs:
    """Tests for decode_pairs."""

    def test_verified_jwt(self):
        pairs = decode_pairs(VERIFIED_JWT)

        assert [key for key, _ in pairs] == VERIFIED_JWT_KEYS
        claims = dict(pairs)
        assert claims["aud"] == b"test"
        assert claims["iss"] == b"https://keycloak:8443/auth/realms/master"
        assert struct.unpack("<d", claims["iat"]) == (1614961604.0,)
        assert struct.unpack("<d", claims["exp"]) == (1614961664.0,)

    def test_jwt_authn_filter_metadata(self):
        assert decode_pairs(METADATA_FILTER_JWT_AUTHN) == [("verified_jwt", VERIFIED_JWT)]

    def test_filter_metadata(self):
        assert decode_pairs(METADATA_FILTER_METADATA) == [
            ("envoy.filters.http.jwt_authn", METADATA_FILTER_JWT_AUTHN)
        ]

    def test_nested_pipeline_reaches_claim(self):
        ops = [
            Decode(DecodeKind.PAIRS),
            Lookup(Key("envoy.filters.http.jwt_authn")),
            Decode(DecodeKind.PAIRS),
            Lookup(Key("verified_jwt")),
            Decode(DecodeKind.PAIRS),
            Lookup(Key("azp")),
        ]

        result = Pipeline(ops).execute(TextValue(METADATA_FILTER_METADATA))

        assert result.value == TextValue("test")

    def test_empty(self):
        assert decode_pairs(_u32(0)) == []

    def test_too_short_for_count(self):
        with pytest.raises(PairsError):
            decode_pairs(b"\x01\x00")

    def test_truncated(self):
        with pytest.raises(PairsError):
            decode_pairs(VERIFIED_JWT[:-1])

    def test_trailing_bytes(self):
        with pytest.raises(PairsError):
            decode_pairs(VERIFIED_JWT + b"\x00")

    def test_missing_terminator(self):
        data = _u32(1) + _u32(1) + _u32(1) + b"aXb\x00"
        with pytest.raises(PairsError, match="NUL terminator"):
            decode_pairs(data)

    def test_count_larger_than_buffer(self):
        with pytest.raises(PairsError):
            decode_pairs(_u32(1000) + b"\x00" * 16)

    def test_non_utf8_key(self):
        data = _u32(1) + _u32(1) + _u32(1) + b"\xff\x00v\x00"
        with pytest.raises(PairsError, match="UTF-8"):
            decode_pairs(data)


class TestEncodePairs:
    def test_layout(self):
        assert encode_pairs([("k", "vv")]) == _u32(1) + _u32(1) + _u32(2) + b"k\x00vv\x00"

    def test_reproduces_captured_metadata(self):
        assert encode_pairs(decode_pairs(VERIFIED_JWT)) == VERIFIED_JWT
