"""
CloudEvents v1.0 over Avro

Models CloudEvents and converts them to and from the CloudEvents Avro record
(an ``attribute`` map plus ``data``), delegating binary encoding to a codec
adapter:

    result = to_wire_message(event, "com.example.UserCreated")
    event = from_wire_message_or_raise(result.unwrap())
"""

from .adapters.base import AvroCodec, WireFormat
from .adapters.memory import InMemoryCodec
from .builder import EventBuilder
from .errors import (
    CodecError,
    DecodeError,
    EncodeError,
    MalformedBinaryError,
    ParseError,
    RegistryConnectionError,
    SchemaMismatchError,
    SchemaNotFoundError,
    TransformError,
)
from .event_models import Event, format_time, generate_id, parse_event
from .results import Result
from .services.wire import CloudEventCodec, get_default_codec, set_default_codec
from .transform import from_wire, to_wire


def to_wire_message(event: Event, schema_name: str, format: WireFormat | None = None) -> Result[bytes, CodecError]:
    """Encode an event with the named Avro schema using the default codec."""
    return get_default_codec().encode(event, schema_name, format)


def to_wire_message_or_raise(event: Event, schema_name: str, format: WireFormat | None = None) -> bytes:
    """Same as ``to_wire_message`` but raises EncodeError on failure."""
    return get_default_codec().encode_or_raise(event, schema_name, format)


def from_wire_message(binary: bytes, schema_name: str | None = None) -> Result[Event, DecodeError]:
    """Decode an Avro-encoded CloudEvent using the default codec."""
    return get_default_codec().decode(binary, schema_name)


def from_wire_message_or_raise(binary: bytes, schema_name: str | None = None) -> Event:
    """Same as ``from_wire_message`` but raises DecodeError on failure."""
    return get_default_codec().decode_or_raise(binary, schema_name)


__all__ = [
    "AvroCodec",
    "CloudEventCodec",
    "CodecError",
    "DecodeError",
    "EncodeError",
    "Event",
    "EventBuilder",
    "InMemoryCodec",
    "MalformedBinaryError",
    "ParseError",
    "RegistryConnectionError",
    "Result",
    "SchemaMismatchError",
    "SchemaNotFoundError",
    "TransformError",
    "WireFormat",
    "format_time",
    "from_wire",
    "from_wire_message",
    "from_wire_message_or_raise",
    "generate_id",
    "get_default_codec",
    "parse_event",
    "set_default_codec",
    "to_wire",
    "to_wire_message",
    "to_wire_message_or_raise",
]
