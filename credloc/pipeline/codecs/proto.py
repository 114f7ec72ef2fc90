"""
Conversion of serialized protobuf messages into Values.

Two messages are understood:
- google.protobuf.Struct
- the proxy's Metadata envelope, map<string, Struct> filter_metadata = 1,
  which carries one Struct per filter name

Parsing is strict: bytes that only parse by parking fields as unknown, or
that leave a Value without a kind, are rejected instead of being converted
into partial data.
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2
from google.protobuf import descriptor_pool
from google.protobuf import message_factory
from google.protobuf import struct_pb2
from google.protobuf.message import DecodeError
from google.protobuf.message import Message

from credloc.models import ListValue
from credloc.models import scalar_text
from credloc.models import StructValue
from credloc.models import TextValue
from credloc.models import Value

_FIELD = descriptor_pb2.FieldDescriptorProto


class ProtoStructError(ValueError):
    """Raised when bytes are not a valid protobuf Struct or Metadata."""


def _build_metadata_class() -> type[Message]:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="credloc/metadata.proto",
        package="credloc",
        syntax="proto3",
        dependency=["google/protobuf/struct.proto"],
    )
    metadata = file_proto.message_type.add(name="Metadata")
    entry = metadata.nested_type.add(name="FilterMetadataEntry")
    entry.options.map_entry = True
    entry.field.add(name="key", number=1, type=_FIELD.TYPE_STRING, label=_FIELD.LABEL_OPTIONAL)
    entry.field.add(
        name="value",
        number=2,
        type=_FIELD.TYPE_MESSAGE,
        label=_FIELD.LABEL_OPTIONAL,
        type_name=".google.protobuf.Struct",
    )
    metadata.field.add(
        name="filter_metadata",
        number=1,
        type=_FIELD.TYPE_MESSAGE,
        label=_FIELD.LABEL_REPEATED,
        type_name=".credloc.Metadata.FilterMetadataEntry",
    )

    pool = descriptor_pool.Default()
    pool.AddSerializedFile(file_proto.SerializeToString())
    return message_factory.GetMessageClass(pool.FindMessageTypeByName("credloc.Metadata"))


Metadata = _build_metadata_class()


def decode_struct(data: bytes) -> StructValue:
    """
    Parse a serialized Struct.

    Map fields carry no order on the wire, so entries are sorted by key.
    """
    return _convert_struct(_parse(struct_pb2.Struct(), data))


def decode_metadata(data: bytes) -> StructValue:
    """Parse a serialized Metadata envelope into {filter name: struct}."""
    message = _parse(Metadata(), data)
    return StructValue(
        tuple(
            (name, _convert_struct(message.filter_metadata[name]))
            for name in sorted(message.filter_metadata)
        )
    )


def _parse(message: Message, data: bytes) -> Message:
    try:
        message.ParseFromString(data)
    except DecodeError as e:
        raise ProtoStructError(str(e)) from e

    if _has_unknown_fields(message):
        raise ProtoStructError(f"unexpected fields for {message.DESCRIPTOR.full_name}")
    return message


def _has_unknown_fields(message: Message) -> bool:
    """True if parsing kept any field the schema does not know, at any depth."""
    stripped = type(message)()
    stripped.CopyFrom(message)
    stripped.DiscardUnknownFields()
    return stripped.ByteSize() != message.ByteSize()


def _convert_struct(message: struct_pb2.Struct) -> StructValue:
    return StructValue(
        tuple((key, _convert_value(message.fields[key])) for key in sorted(message.fields))
    )


def _convert_value(value: struct_pb2.Value) -> Value:
    kind = value.WhichOneof("kind")
    if kind == "string_value":
        return TextValue(value.string_value)
    elif kind == "struct_value":
        return _convert_struct(value.struct_value)
    elif kind == "list_value":
        return ListValue(tuple(_convert_value(item) for item in value.list_value.values))
    elif kind == "number_value":
        return TextValue(scalar_text(value.number_value))
    elif kind == "bool_value":
        return TextValue(scalar_text(value.bool_value))
    elif kind == "null_value":
        return TextValue(scalar_text(None))
    raise ProtoStructError("value has no kind set")
