"""Encode and decode CloudEvents through a pluggable Avro codec adapter."""
import threading
from collections.abc import Mapping, Sequence
from typing import Any
import structlog
from ..adapters.base import AvroCodec, WireFormat
from ..adapters.memory import InMemoryCodec
from ..config import get_settings
from ..errors import (
    CodecError,
    DecodeError,
    EncodeError,
    MalformedBinaryError,
    RegistryConnectionError,
)
from ..event_models import Event
from ..results import Result
from ..transform import from_wire, to_wire

log = structlog.get_logger()


class CloudEventCodec:
    """
    Sequences the wire transformation with the codec adapter and maps codec
    failures onto the decode error taxonomy.
    """

    def __init__(self, adapter: AvroCodec | None = None):
        """
        Initialize with an optional adapter.

        Args:
            adapter: Codec adapter to use (defaults to the configured adapter)
        """
        if adapter is None:
            adapter = _create_default_adapter()
        self._adapter = adapter

    @property
    def adapter(self) -> AvroCodec:
        return self._adapter

    def encode(
        self, event: Event, schema_name: str, format: WireFormat | None = None
    ) -> Result[bytes, CodecError]:
        """
        Encode an event with the named schema.

        Codec failures are returned unchanged as the Result error.

        Raises:
            ValueError: If ``format`` is not a WireFormat value. The adapter
                is not called.
        """
        fmt = WireFormat(format) if format is not None else get_settings().DEFAULT_WIRE_FORMAT
        try:
            binary = self._adapter.encode(to_wire(event), schema_name, fmt)
        except CodecError as e:
            log.warning(
                "event.encode_failed",
                id=event.id,
                type=event.type,
                schema=schema_name,
                error=str(e),
                error_type=e.__class__.__name__,
            )
            return Result.failure(e)

        log.debug("event.encoded", id=event.id, type=event.type, schema=schema_name, format=fmt.value, size=len(binary))
        return Result.success(binary)

    def encode_or_raise(self, event: Event, schema_name: str, format: WireFormat | None = None) -> bytes:
        """
        Same as ``encode`` but returns the binary directly.

        Raises:
            EncodeError: With the codec's failure reason as the message
            ValueError: If ``format`` is not a WireFormat value
        """
        result = self.encode(event, schema_name, format)
        if not result.ok:
            raise EncodeError(str(result.error)) from result.error
        return result.value

    def decode(self, binary: bytes, schema_name: str | None = None) -> Result[Event, DecodeError]:
        """
        Decode a binary into an event.

        Args:
            binary: Encoded message body
            schema_name: Schema to decode with; None uses the embedded schema
        """
        try:
            decoded = self._adapter.decode(binary, schema_name)
        except MalformedBinaryError:
            return self._failed(DecodeError("Binary does not look like a valid Avro encoding"))
        except RegistryConnectionError as e:
            return self._failed(DecodeError(f"Failed to connect to schema registry: {e.reason!r}"))
        except CodecError as e:
            return self._failed(DecodeError(f"Failed to decode Avro binary: {e!r}"))

        record = _unpack_decoded(decoded)
        if record is None:
            return self._failed(DecodeError(f"Unexpected codec result shape: {_describe(decoded)}"))

        transformed = from_wire(record)
        if not transformed.ok:
            return self._failed(DecodeError(f"Failed to transform Avro format: {transformed.error}"))

        parsed = Event.parse(transformed.value)
        if not parsed.ok:
            return self._failed(DecodeError(parsed.error))

        event = parsed.value
        log.debug("event.decoded", id=event.id, type=event.type, schema=schema_name)
        return Result.success(event)

    def decode_or_raise(self, binary: bytes, schema_name: str | None = None) -> Event:
        """Same as ``decode`` but raises the DecodeError on failure."""
        return self.decode(binary, schema_name).unwrap()

    def _failed(self, error: DecodeError) -> Result[Event, DecodeError]:
        log.warning("event.decode_failed", cause=str(error.cause))
        return Result.failure(error)


def _unpack_decoded(decoded: Any) -> Mapping | None:
    # Container formats yield a block of records; a single one is expected
    if isinstance(decoded, Mapping):
        return decoded
    if isinstance(decoded, Sequence) and not isinstance(decoded, (str, bytes, bytearray)):
        if len(decoded) == 1 and isinstance(decoded[0], Mapping):
            return decoded[0]
    return None


def _describe(decoded: Any) -> str:
    if isinstance(decoded, Sequence) and not isinstance(decoded, (str, bytes, bytearray)):
        return f"{type(decoded).__name__} of {len(decoded)} items"
    return type(decoded).__name__


def _create_default_adapter() -> AvroCodec:
    """
    Create the default adapter based on configuration.

    Returns:
        AvroCodec instance based on the CODEC_ADAPTER setting
    """
    settings = get_settings()
    log.info("adapter.selected", type=settings.CODEC_ADAPTER)
    return InMemoryCodec()


_default_codec: CloudEventCodec | None = None
_default_lock = threading.Lock()


def get_default_codec() -> CloudEventCodec:
    """Return the process-wide codec, creating it on first use."""
    global _default_codec
    codec = _default_codec
    if codec is None:
        with _default_lock:
            if _default_codec is None:
                _default_codec = CloudEventCodec()
            codec = _default_codec
    return codec


def set_default_codec(codec: CloudEventCodec | None):
    """Replace the process-wide codec; None resets to the configured default."""
    global _default_codec
    with _default_lock:
        _default_codec = codec
