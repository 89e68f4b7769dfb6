"""Tests for the Event <-> Avro record transformation."""
from avro_cloudevents.errors import TransformError
from avro_cloudevents.event_models import Event
from avro_cloudevents.transform import from_wire, to_wire


def make_event(**overrides):
    fields = {
        "specversion": "1.0",
        "type": "com.example.user.created",
        "source": "/users/service",
        "id": "user-123",
    }
    fields.update(overrides)
    return Event.from_map(fields)


def test_to_wire_required_only():
    """Test that absent optional attributes are omitted, not null"""
    wire = to_wire(make_event())

    assert wire == {
        "attribute": {
            "specversion": "1.0",
            "type": "com.example.user.created",
            "source": "/users/service",
            "id": "user-123",
        },
        "data": None,
    }


def test_to_wire_optional_and_extensions():
    """Test that set attributes and extensions land in the attribute map"""
    event = make_event(
        subject="user/456",
        time="2023-01-01T12:00:00Z",
        dataschema="https://example.com/schema",
        traceid="abc-123",
        priority="high",
        data={"userid": "456"},
    )

    wire = to_wire(event)

    assert wire["attribute"] == {
        "specversion": "1.0",
        "type": "com.example.user.created",
        "source": "/users/service",
        "id": "user-123",
        "subject": "user/456",
        "time": "2023-01-01T12:00:00Z",
        "datacontenttype": "application/json",
        "dataschema": "https://example.com/schema",
        "traceid": "abc-123",
        "priority": "high",
    }
    assert wire["data"] == {"userid": "456"}


def test_to_wire_idempotent():
    """Test that transforming the same event twice yields equal records"""
    event = make_event(traceid="abc", data={"k": [1, 2]})
    assert to_wire(event) == to_wire(event)


def test_to_wire_does_not_share_attribute_map():
    event = make_event(traceid="abc")
    first = to_wire(event)
    first["attribute"]["traceid"] = "changed"
    assert event.extensions["traceid"] == "abc"


def test_to_wire_does_not_share_payload():
    """Test that mutating the record's data and extension values leaves the event unchanged"""
    event = Event(
        type="com.example.user.created",
        source="/users/service",
        id="user-123",
        data={"userid": "456", "tags": ["a"]},
        extensions={"meta": {"region": "eu"}},
    )
    wire = to_wire(event)

    wire["data"]["userid"] = "changed"
    wire["data"]["tags"].append("b")
    wire["attribute"]["meta"]["region"] = "us"

    assert event.data == {"userid": "456", "tags": ["a"]}
    assert event.extensions == {"meta": {"region": "eu"}}


def test_from_wire_flattens_attributes():
    """Test that attribute keys become top-level fields"""
    result = from_wire(
        {
            "attribute": {"specversion": "1.0", "type": "t", "source": "/s", "id": "1", "traceid": "x"},
            "data": {"userid": "456"},
        }
    )

    assert result.ok
    assert result.value == {
        "specversion": "1.0",
        "type": "t",
        "source": "/s",
        "id": "1",
        "traceid": "x",
        "data": {"userid": "456"},
    }


def test_from_wire_omits_null_data():
    result = from_wire({"attribute": {"id": "1"}, "data": None})
    assert result.value == {"id": "1"}


def test_from_wire_stringifies_keys():
    result = from_wire({"attribute": {1: "one"}, "data": None})
    assert result.value == {"1": "one"}


def test_from_wire_does_not_validate_cloudevents_rules():
    """Test that attribute contents are passed through unchecked"""
    result = from_wire({"attribute": {"type": "", "Bad-Key": 1}, "data": ""})
    assert result.ok
    assert result.value == {"type": "", "Bad-Key": 1, "data": ""}


def test_from_wire_rejects_extra_keys():
    result = from_wire({"attribute": {}, "data": None, "extra": 1})

    assert not result.ok
    assert isinstance(result.error, TransformError)
    assert "expected 'attribute' and 'data' fields" in result.error.message
    assert "['attribute', 'data', 'extra']" in result.error.message


def test_from_wire_rejects_flat_record():
    """Test that a record without the attribute/data split is rejected"""
    result = from_wire({"type": "t", "source": "/s"})
    assert not result.ok
    assert "got: ['source', 'type']" in result.error.message


def test_from_wire_rejects_missing_data_key():
    result = from_wire({"attribute": {}})
    assert not result.ok
    assert "['attribute']" in result.error.message


def test_from_wire_rejects_non_mapping():
    result = from_wire(["attribute", "data"])
    assert not result.ok
    assert "expected a map, got: list" in result.error.message


def test_from_wire_rejects_non_mapping_attribute():
    result = from_wire({"attribute": "specversion=1.0", "data": None})
    assert not result.ok
    assert "expected 'attribute' to be a map, got: str" in result.error.message


def test_round_trip():
    """Test that parse(from_wire(to_wire(e))) reproduces e"""
    event = make_event(
        subject="user/456",
        time="2023-01-01T12:00:00Z",
        traceid="abc-123",
        customerid="456",
        data={"userid": "456", "email": "test@example.com", "createdat": 1640000000000},
    )

    rebuilt = Event.from_map(from_wire(to_wire(event)).unwrap())

    assert rebuilt == event
    assert rebuilt.extensions == {"traceid": "abc-123", "customerid": 456}
