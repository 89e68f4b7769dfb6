"""
CloudEvents v1.0 event model.

An Event is validated once, when it is created from a field mapping, and is
immutable afterwards.

Spec: https://github.com/cloudevents/spec/blob/v1.0/spec.md
"""
import copy
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Literal, Mapping, Optional

import orjson
import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import get_settings
from .errors import ParseError
from .results import Result

log = structlog.get_logger()

SPECVERSION = "1.0"
DEFAULT_DATACONTENTTYPE = "application/json"

RESERVED_ATTRIBUTES = (
    "specversion",
    "type",
    "source",
    "id",
    "subject",
    "time",
    "datacontenttype",
    "dataschema",
    "data",
)
OPTIONAL_ATTRIBUTES = ("subject", "time", "datacontenttype", "dataschema")

# Attribute names MUST consist of lower-case letters or digits from the ASCII
# character set and SHOULD NOT exceed 20 characters.
EXTENSION_NAME = re.compile(r"[a-z0-9]+")


class Event(BaseModel):
    """
    CloudEvents v1.0 event.

    Required attributes:
    - specversion: always "1.0"
    - type: event type, e.g. "com.example.user.created"
    - source: context in which the event happened, e.g. "/users/service"
    - id: identifier, unique per source

    Optional attributes:
    - subject, time (RFC3339), datacontenttype, dataschema
    - data: the domain payload
    - extensions: extra context attributes keyed by lowercase alphanumeric names
    """
    model_config = ConfigDict(frozen=True)

    specversion: Literal["1.0"] = SPECVERSION
    type: str = Field(..., min_length=1, description="Event type")
    source: str = Field(..., min_length=1, description="Event source URI-reference")
    id: str = Field(..., min_length=1, description="Event identifier")
    subject: Optional[str] = Field(None, min_length=1)
    time: Optional[str] = Field(None, min_length=1, description="RFC3339 timestamp")
    datacontenttype: Optional[str] = Field(None, min_length=1)
    dataschema: Optional[str] = Field(None, min_length=1)
    data: Any = None
    extensions: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("data")
    @classmethod
    def _data_not_empty(cls, v: Any) -> Any:
        if isinstance(v, str) and v == "":
            raise ValueError("data field given but empty")
        # The event owns its payload; later changes to the caller's object must not leak in
        return copy.deepcopy(v)

    @field_validator("extensions")
    @classmethod
    def _extension_names(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        invalid = invalid_extension_names(v)
        if invalid:
            raise ValueError(_invalid_extensions_message(invalid))
        reserved = sorted(name for name in v if name in RESERVED_ATTRIBUTES)
        if reserved:
            raise ValueError(
                "reserved attribute names used as extensions: " + ", ".join(repr(name) for name in reserved)
            )
        return copy.deepcopy(v)

    @classmethod
    def from_map(cls, fields: Mapping[str, Any]) -> "Event":
        """
        Create an event from a flat mapping of context attributes and data.

        Keys outside the reserved attribute names are treated as extensions.

        Raises:
            ParseError: If any attribute violates the CloudEvents rules
        """
        if not isinstance(fields, Mapping):
            raise ParseError(f"expected a mapping, got {type(fields).__name__}")

        attrs = dict(fields)
        data = attrs.pop("data", None)
        extension_attrs = {k: v for k, v in attrs.items() if k not in RESERVED_ATTRIBUTES}

        _check_specversion(attrs)
        type_ = _required(attrs, "type")
        source = _required(attrs, "source")
        id_ = _required(attrs, "id")
        subject, time, datacontenttype, dataschema = (
            _optional(attrs, name) for name in OPTIONAL_ATTRIBUTES
        )
        if isinstance(data, str) and data == "":
            raise ParseError("data field given but empty")
        extensions = _validated_extensions(extension_attrs)

        if datacontenttype is None and data is not None:
            datacontenttype = DEFAULT_DATACONTENTTYPE

        return cls(
            type=type_,
            source=source,
            id=id_,
            subject=subject,
            time=time,
            datacontenttype=datacontenttype,
            dataschema=dataschema,
            data=data,
            extensions=extensions,
        )

    @classmethod
    def parse(cls, fields: Mapping[str, Any]) -> Result["Event", ParseError]:
        """Same as ``from_map`` but returns the outcome as a Result."""
        try:
            return Result.success(cls.from_map(fields))
        except ParseError as e:
            return Result.failure(e)


def parse_event(fields: Mapping[str, Any]) -> Result[Event, ParseError]:
    return Event.parse(fields)


def format_time(value: datetime) -> str:
    """
    Format a datetime as ISO8601 for the ``time`` attribute.

    Naive datetimes are taken to be UTC; a UTC offset is rendered as "Z",
    e.g. 2023-01-01T12:00:00Z.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def generate_id() -> str:
    """Generate a random (version 4) UUID string to use as an event id."""
    return str(uuid.uuid4())


def invalid_extension_names(names: Iterable[Any]) -> list:
    return sorted((name for name in names if not _valid_extension_name(name)), key=str)


def _valid_extension_name(name: Any) -> bool:
    return isinstance(name, str) and EXTENSION_NAME.fullmatch(name) is not None


def _invalid_extensions_message(invalid: list) -> str:
    return "invalid extension attributes: " + ", ".join(repr(name) for name in invalid)


def _check_specversion(attrs: Dict[str, Any]):
    value = attrs.get("specversion")
    if value is None:
        raise ParseError("missing specversion")
    if value != SPECVERSION:
        raise ParseError(f"unexpected specversion {value}")


def _required(attrs: Dict[str, Any], name: str) -> str:
    value = attrs.get(name)
    if not isinstance(value, str) or not value:
        raise ParseError(f"missing {name}")
    return value


def _optional(attrs: Dict[str, Any], name: str) -> Optional[str]:
    value = attrs.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ParseError(f"{name} must be a string")
    if not value:
        raise ParseError(f"{name} given but empty")
    return value


def _validated_extensions(extension_attrs: Dict[Any, Any]) -> Dict[str, Any]:
    # Every name is checked before any value is decoded
    invalid = invalid_extension_names(extension_attrs)
    if invalid:
        raise ParseError(_invalid_extensions_message(invalid))

    max_length = get_settings().EXTENSION_NAME_MAX_LENGTH
    for name in extension_attrs:
        if len(name) > max_length:
            log.warning("extension.name_too_long", name=name, length=len(name), max_length=max_length)

    return {name: _try_decode(value) for name, value in extension_attrs.items()}


def _try_decode(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return orjson.loads(value)
    except orjson.JSONDecodeError:
        return value
