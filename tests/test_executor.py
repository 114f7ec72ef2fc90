"""Tests for the pipeline executor and alternation."""

from credloc.errors import AlternationExhausted
from credloc.errors import DecodeFailure
from credloc.errors import InternalFailure
from credloc.errors import LookupIllegal
from credloc.models import Alternation
from credloc.models import Decode
from credloc.models import DecodeKind
from credloc.models import Key
from credloc.models import ListValue
from credloc.models import Location
from credloc.models import Lookup
from credloc.models import Position
from credloc.models import SelectorKind
from credloc.models import StructValue
from credloc.models import TextValue
from credloc.pipeline import evaluate
from credloc.pipeline import matches
from credloc.pipeline import Pipeline
from credloc.pipeline.codecs import encode_pairs
from credloc.pipeline.executor import OPERATIONS

JWT_PAYLOAD_OPS = (
    Decode(DecodeKind.BASE64URL),
    Decode(DecodeKind.JSON),
    Lookup(Key("aud")),
    Lookup(Position(0)),
)


class TestEndToEnd:
    """Full pipelines over realistic seeds."""

    def test_jwt_payload_header(self):
        location = Location(SelectorKind.HEADER, ("x-jwt-payload",), JWT_PAYLOAD_OPS)

        # base64url of {"aud":["test"]}
        result = evaluate(location, "eyJhdWQiOlsidGVzdCJdfQ")

        assert result.ok
        assert result.value == TextValue("test")
        assert matches(result.value, "test")

    def test_invalid_base64_is_a_failure_value(self):
        location = Location(SelectorKind.HEADER, ("x-jwt-payload",), JWT_PAYLOAD_OPS)

        result = evaluate(location, "not-valid-base64!!")

        assert not result.ok
        assert isinstance(result.error, DecodeFailure)
        assert result.error.kind == "base64url"

    def test_structured_property_seed(self):
        seed = StructValue(
            (
                (
                    "filter_metadata",
                    StructValue(
                        (
                            (
                                "jwt_authn",
                                ListValue(
                                    (StructValue((("aud", ListValue((TextValue("x"),))),)),)
                                ),
                            ),
                        )
                    ),
                ),
            )
        )
        location = Location(
            SelectorKind.PROPERTY,
            ("metadata",),
            (
                Lookup(Key("filter_metadata")),
                Lookup(Key("jwt_authn")),
                Lookup(Position(0)),
                Lookup(Key("aud")),
                Lookup(Position(0)),
            ),
        )

        result = evaluate(location, seed)

        assert result.value == TextValue("x")

    def test_plain_dict_seed(self):
        location = Location(SelectorKind.PROPERTY, ("claims",), (Lookup(Key("azp")),))
        assert evaluate(location, {"azp": "client"}).value == TextValue("client")

    def test_empty_pipeline_returns_seed(self):
        location = Location(SelectorKind.HEADER, ("x-api-key",))
        assert evaluate(location, "k").value == TextValue("k")


class TestPipeline:
    """Tests for sequencing."""

    def test_stops_at_first_failure(self):
        pipeline = Pipeline([Lookup(Key("a")), Decode(DecodeKind.JSON)])

        result = pipeline.execute(ListValue((StructValue(()),)))

        assert isinstance(result.error, LookupIllegal)

    def test_handler_exception_becomes_internal_failure(self, monkeypatch):
        def broken(value, op):
            raise RuntimeError("boom")

        monkeypatch.setitem(OPERATIONS, Lookup, broken)

        result = Pipeline([Lookup(Key("a"))]).execute(TextValue("a"))

        assert isinstance(result.error, InternalFailure)
        assert "boom" in result.error.message


class TestAlternation:
    """Tests for ordered alternatives."""

    PAIRS_OR_TEXT = Alternation(
        (
            (Decode(DecodeKind.PAIRS), Lookup(Position(0))),
            (Decode(DecodeKind.TEXT),),
        )
    )

    def test_first_branch_wins(self):
        seed = TextValue(encode_pairs([("client_id", "abc")]))

        result = Pipeline([self.PAIRS_OR_TEXT]).execute(seed)

        assert result.value == TextValue("abc")

    def test_falls_back_to_later_branch(self):
        result = Pipeline([self.PAIRS_OR_TEXT]).execute(TextValue("plain-key"))
        assert result.value == TextValue("plain-key")

    def test_order_decides_ambiguous_input(self):
        seed = TextValue(encode_pairs([("client_id", "abc")]))
        reversed_alternation = Alternation(tuple(reversed(self.PAIRS_OR_TEXT.branches)))

        result = Pipeline([reversed_alternation]).execute(seed)

        assert result.value == seed

    def test_exhausted_keeps_every_error(self):
        alternation = Alternation(
            ((Decode(DecodeKind.JSON),), (Decode(DecodeKind.BASE64),))
        )

        result = Pipeline([alternation]).execute(TextValue("!!"))

        assert isinstance(result.error, AlternationExhausted)
        assert [e.kind for e in result.error.errors] == ["json", "base64"]
        assert "all 2 alternatives failed" in result.error.message

    def test_nested_in_pipeline(self):
        ops = [
            Decode(DecodeKind.JSON),
            Lookup(Key("aud")),
            Alternation(((Lookup(Position(0)),), (Decode(DecodeKind.TEXT),))),
        ]

        assert Pipeline(ops).execute(TextValue('{"aud": "x"}')).value == TextValue("x")
        assert Pipeline(ops).execute(TextValue('{"aud": ["y"]}')).value == TextValue("y")
