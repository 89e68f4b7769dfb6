"""
Mapping between Events and the CloudEvents Avro record.

The record has two fields: ``attribute``, a map holding every context
attribute (extensions included), and ``data``, the payload.
"""
import copy
from typing import Any, Dict, Mapping

from .errors import TransformError
from .event_models import OPTIONAL_ATTRIBUTES, Event
from .results import Result

WIRE_KEYS = frozenset({"attribute", "data"})


def to_wire(event: Event) -> Dict[str, Any]:
    """Build the {"attribute": ..., "data": ...} record for an event."""
    attributes: Dict[str, Any] = {
        "specversion": event.specversion,
        "type": event.type,
        "source": event.source,
        "id": event.id,
    }
    for name in OPTIONAL_ATTRIBUTES:
        value = getattr(event, name)
        if value is not None:
            attributes[name] = value
    attributes.update(copy.deepcopy(event.extensions))

    return {"attribute": attributes, "data": copy.deepcopy(event.data)}


def from_wire(wire: Any) -> Result[Dict[str, Any], TransformError]:
    """
    Flatten a decoded record into the mapping ``Event.from_map`` accepts.

    CloudEvents rules are not checked here; only the record shape is.
    """
    if not isinstance(wire, Mapping):
        return Result.failure(
            TransformError(f"Invalid CloudEvents Avro format, expected a map, got: {type(wire).__name__}")
        )
    if set(wire) != WIRE_KEYS:
        keys = sorted(wire, key=str)
        return Result.failure(
            TransformError(
                f"Invalid CloudEvents Avro format, expected 'attribute' and 'data' fields, got: {keys!r}"
            )
        )

    attributes = wire["attribute"]
    if not isinstance(attributes, Mapping):
        return Result.failure(
            TransformError(
                f"Invalid CloudEvents Avro format, expected 'attribute' to be a map, got: {type(attributes).__name__}"
            )
        )

    fields = {str(key): value for key, value in attributes.items()}
    if wire["data"] is not None:
        fields["data"] = wire["data"]
    return Result.success(fields)
