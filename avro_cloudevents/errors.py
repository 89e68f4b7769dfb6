"""
Error taxonomy for CloudEvent parsing, wire transformation and codec calls.
"""


class ParseError(ValueError):
    """Raised when fields fail a CloudEvents structural or naming check"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransformError(ValueError):
    """Raised when a decoded record is not shaped as {attribute, data}"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EncodeError(ValueError):
    """Raised by the fail-hard encode variant"""
    pass


class DecodeError(Exception):
    """
    Error while decoding a CloudEvent.

    The cause is either a human-readable string or the underlying
    exception (a ParseError when the decoded fields were invalid).
    """

    def __init__(self, cause: str | Exception):
        self.cause = cause
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return f"Failed to decode Cloudevent: {self.cause}"

    def __str__(self) -> str:
        return self.message


class CodecError(Exception):
    """Base exception for failures reported by an Avro codec"""
    pass


class MalformedBinaryError(CodecError):
    """Raised when the input does not look like codec output"""
    pass


class RegistryConnectionError(CodecError):
    """Raised when the schema registry cannot be reached"""

    def __init__(self, reason: Exception | str):
        super().__init__(f"failed to connect to schema registry: {reason!r}")
        self.reason = reason


class SchemaNotFoundError(CodecError):
    """Raised when the named schema is unknown to the codec"""

    def __init__(self, schema_name: str):
        super().__init__(f"schema not found: {schema_name}")
        self.schema_name = schema_name


class SchemaMismatchError(CodecError):
    """Raised when a payload does not conform to its schema"""
    pass
