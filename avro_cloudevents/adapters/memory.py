"""In-process Avro codec adapter.

Frames wire maps the way an Avro codec would (object container header with
an embedded schema name, or a registry header carrying a schema id) but
serializes the record body with orjson instead of Avro binary encoding.
"""
import struct
from typing import Any, Iterable
import orjson
import structlog
from .base import AvroCodec, WireFormat
from ..errors import (
    CodecError,
    MalformedBinaryError,
    RegistryConnectionError,
    SchemaMismatchError,
    SchemaNotFoundError,
)

log = structlog.get_logger()

OCF_MAGIC = b"Obj\x01"
REGISTRY_MAGIC = b"\x00"

_SCALARS = (str, int, float, bool, type(None))


class InMemoryCodec(AvroCodec):
    """Deterministic codec that keeps its schema table in memory.

    ``registry_available`` models the schema registry: None means no
    registry is configured, False means one is configured but unreachable.
    """

    def __init__(self, registry_available: bool | None = None):
        self._registry_available = registry_available
        self._fields: dict[str, frozenset[str] | None] = {}
        self._ids: dict[str, int] = {}
        self._names: dict[int, str] = {}
        self._failure: CodecError | None = None

    def register_schema(self, name: str, fields: Iterable[str] | None = None) -> int:
        """
        Declare a schema and the data fields it accepts.

        Args:
            name: Fully qualified schema name
            fields: Allowed data keys; None accepts any data payload

        Returns:
            The schema id used in registry framing
        """
        schema_id = self._ids.get(name)
        if schema_id is None:
            schema_id = len(self._ids) + 1
            self._ids[name] = schema_id
            self._names[schema_id] = name
        self._fields[name] = frozenset(fields) if fields is not None else None
        return schema_id

    def fail_with(self, error: CodecError | None):
        """Make every subsequent call raise ``error``; None clears it."""
        self._failure = error

    def encode(self, payload: dict[str, Any], schema_name: str, format: WireFormat = WireFormat.GUESS) -> bytes:
        if self._failure is not None:
            raise self._failure
        if schema_name not in self._fields:
            raise SchemaNotFoundError(schema_name)
        self._check_conformance(schema_name, payload)

        fmt = WireFormat(format)
        if fmt is WireFormat.GUESS:
            fmt = WireFormat.OCF if self._registry_available is None else WireFormat.REGISTRY

        try:
            body = orjson.dumps(payload)
        except TypeError as e:
            raise SchemaMismatchError(f"payload is not serializable with {schema_name}: {e}") from e

        if fmt is WireFormat.REGISTRY:
            self._require_registry()
            binary = REGISTRY_MAGIC + struct.pack(">I", self._ids[schema_name]) + body
        else:
            name = schema_name.encode("utf-8")
            binary = OCF_MAGIC + struct.pack(">H", len(name)) + name + body

        log.debug("codec.encoded", schema=schema_name, format=fmt.value, size=len(binary), adapter="memory")
        return binary

    def decode(self, binary: bytes, schema_name: str | None = None) -> Any:
        if self._failure is not None:
            raise self._failure
        if not isinstance(binary, (bytes, bytearray, memoryview)):
            raise MalformedBinaryError(f"expected bytes, got {type(binary).__name__}")
        binary = bytes(binary)

        if binary.startswith(OCF_MAGIC):
            container = True
            embedded, body = self._read_ocf_header(binary)
        elif binary.startswith(REGISTRY_MAGIC) and len(binary) >= 5:
            container = False
            self._require_registry()
            (schema_id,) = struct.unpack(">I", binary[1:5])
            embedded = self._names.get(schema_id)
            if embedded is None:
                raise SchemaNotFoundError(f"id {schema_id}")
            body = binary[5:]
        else:
            raise MalformedBinaryError("unrecognized header")

        if schema_name is not None and schema_name != embedded:
            raise SchemaMismatchError(f"binary was written with {embedded}, not {schema_name}")

        try:
            record = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise MalformedBinaryError(f"corrupt record body: {e}") from e

        log.debug("codec.decoded", schema=embedded, size=len(binary), adapter="memory")
        # Object container files hold a block of records
        return [record] if container else record

    def _read_ocf_header(self, binary: bytes) -> tuple[str, bytes]:
        offset = len(OCF_MAGIC)
        if len(binary) < offset + 2:
            raise MalformedBinaryError("truncated container header")
        (length,) = struct.unpack(">H", binary[offset:offset + 2])
        start = offset + 2
        if len(binary) < start + length:
            raise MalformedBinaryError("truncated schema name")
        try:
            name = binary[start:start + length].decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedBinaryError("schema name is not utf-8") from e
        return name, binary[start + length:]

    def _require_registry(self):
        if not self._registry_available:
            reason = "schema registry unavailable" if self._registry_available is False else "no schema registry configured"
            raise RegistryConnectionError(ConnectionRefusedError(reason))

    def _check_conformance(self, schema_name: str, payload: Any):
        if not isinstance(payload, dict) or set(payload) != {"attribute", "data"}:
            raise SchemaMismatchError(f"{schema_name} expects an attribute/data record")

        attributes = payload["attribute"]
        if not isinstance(attributes, dict):
            raise SchemaMismatchError(f"{schema_name} expects attribute to be a map")
        for key, value in attributes.items():
            if not isinstance(value, _SCALARS):
                raise SchemaMismatchError(
                    f"attribute {key!r} has non-scalar value of type {type(value).__name__}"
                )

        fields = self._fields[schema_name]
        if fields is None:
            return
        data = payload["data"]
        if not isinstance(data, dict):
            raise SchemaMismatchError(f"{schema_name} expects data to be a record")
        missing = sorted(fields - set(data))
        unexpected = sorted(set(data) - fields)
        if missing or unexpected:
            raise SchemaMismatchError(
                f"data does not match {schema_name}: missing {missing}, unexpected {unexpected}"
            )
