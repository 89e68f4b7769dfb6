"""Immutable builder for CloudEvents."""
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import ParseError
from .event_models import SPECVERSION, Event, format_time, generate_id
from .results import Result

_ATTRIBUTES = ("specversion", "type", "source", "id", "subject", "time", "datacontenttype", "dataschema")


class EventBuilder(BaseModel):
    """
    Accumulates event attributes; every ``with_*`` call returns a new builder.

    Nothing is validated until ``build``, which applies the same rules as
    ``Event.from_map``.

    Example:
        result = (
            EventBuilder.new()
            .with_type("com.example.user.created")
            .with_source("/users")
            .with_data({"userid": "123"})
            .build()
        )
    """
    model_config = ConfigDict(frozen=True)

    specversion: str = SPECVERSION
    type: Optional[str] = None
    source: Optional[str] = None
    id: Optional[str] = None
    subject: Optional[str] = None
    time: Optional[str] = None
    datacontenttype: Optional[str] = None
    dataschema: Optional[str] = None
    data: Any = None
    extensions: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def new(cls) -> "EventBuilder":
        """Builder preset with a generated id and the current UTC time."""
        return cls(id=generate_id(), time=format_time(datetime.now(timezone.utc)))

    def with_type(self, type: str) -> "EventBuilder":
        return self.model_copy(update={"type": type})

    def with_source(self, source: str) -> "EventBuilder":
        return self.model_copy(update={"source": source})

    def with_id(self, id: str) -> "EventBuilder":
        return self.model_copy(update={"id": id})

    def with_subject(self, subject: str) -> "EventBuilder":
        return self.model_copy(update={"subject": subject})

    def with_time(self, time: datetime | str) -> "EventBuilder":
        """Set the timestamp; datetimes are formatted with ``format_time``."""
        if isinstance(time, datetime):
            time = format_time(time)
        return self.model_copy(update={"time": time})

    def with_datacontenttype(self, content_type: str) -> "EventBuilder":
        return self.model_copy(update={"datacontenttype": content_type})

    def with_dataschema(self, schema: str) -> "EventBuilder":
        return self.model_copy(update={"dataschema": schema})

    def with_data(self, data: Any) -> "EventBuilder":
        return self.model_copy(update={"data": data})

    def with_extension(self, name: str, value: Any) -> "EventBuilder":
        """Add one extension attribute; the name is checked by ``build``."""
        return self.model_copy(update={"extensions": {**self.extensions, name: value}})

    def with_extensions(self, extensions: Mapping[str, Any]) -> "EventBuilder":
        return self.model_copy(update={"extensions": {**self.extensions, **extensions}})

    def to_map(self) -> Dict[str, Any]:
        """Flatten the builder into the mapping ``Event.from_map`` accepts."""
        fields = dict(self.extensions)
        for name in _ATTRIBUTES:
            value = getattr(self, name)
            if value is not None:
                fields[name] = value
        if self.data is not None:
            fields["data"] = self.data
        return fields

    def build(self) -> Result[Event, ParseError]:
        return Event.parse(self.to_map())

    def build_or_raise(self) -> Event:
        return self.build().unwrap()
