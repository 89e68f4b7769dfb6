"""Base adapter interface for Avro codec backends."""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any


class WireFormat(str, Enum):
    """Binary framing requested from the codec."""
    GUESS = "guess"
    REGISTRY = "registry"
    OCF = "ocf"


class AvroCodec(ABC):
    """Abstract interface for Avro codec implementations.

    Implementations report every failure by raising a subclass of
    ``avro_cloudevents.errors.CodecError``.
    """

    @abstractmethod
    def encode(self, payload: dict[str, Any], schema_name: str, format: WireFormat = WireFormat.GUESS) -> bytes:
        """
        Encode a wire map with the named schema.

        Args:
            payload: The {"attribute": ..., "data": ...} record
            schema_name: Fully qualified Avro schema name
            format: Binary framing to produce

        Returns:
            The encoded binary

        Raises:
            SchemaNotFoundError: If the schema is unknown
            SchemaMismatchError: If the payload does not conform to the schema
        """
        pass

    @abstractmethod
    def decode(self, binary: bytes, schema_name: str | None = None) -> Any:
        """
        Decode a binary produced by ``encode``.

        Args:
            binary: The encoded message body
            schema_name: Schema to decode with; None uses the schema
                embedded in (or referenced by) the payload

        Returns:
            Either a decoded mapping or a sequence of decoded mappings

        Raises:
            MalformedBinaryError: If the binary is not valid codec output
            RegistryConnectionError: If the schema registry is unreachable
        """
        pass
