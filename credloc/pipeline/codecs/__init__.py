"""Wire codecs used by the decode operation."""

from credloc.pipeline.codecs.pairs import decode_pairs
from credloc.pipeline.codecs.pairs import encode_pairs
from credloc.pipeline.codecs.pairs import PairsError
from credloc.pipeline.codecs.proto import decode_metadata
from credloc.pipeline.codecs.proto import decode_struct
from credloc.pipeline.codecs.proto import ProtoStructError

__all__ = [
    "decode_pairs",
    "encode_pairs",
    "PairsError",
    "decode_metadata",
    "decode_struct",
    "ProtoStructError",
]
