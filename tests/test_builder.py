"""Tests for the immutable event builder."""
from datetime import datetime, timezone

import pytest

from avro_cloudevents.builder import EventBuilder
from avro_cloudevents.errors import ParseError


class TestNew:
    """Test the builder preset with generated id and timestamp"""

    def test_builds_with_generated_id_and_time(self):
        result = (
            EventBuilder.new()
            .with_type("com.example.user.created")
            .with_source("/users")
            .with_data({"userId": "456", "email": "test@example.com"})
            .build()
        )

        assert result.ok
        event = result.value
        assert len(event.id) == 36
        assert event.time
        assert event.time.endswith("Z")
        assert event.type == "com.example.user.created"
        assert event.source == "/users"
        assert event.data == {"userId": "456", "email": "test@example.com"}

    def test_generated_ids_differ(self):
        assert EventBuilder.new().id != EventBuilder.new().id

    def test_override_generated_id(self):
        event = (
            EventBuilder.new()
            .with_type("com.example.test")
            .with_source("/test")
            .with_id("custom-id-123")
            .build_or_raise()
        )
        assert event.id == "custom-id-123"

    def test_override_generated_time(self):
        event = (
            EventBuilder.new()
            .with_type("com.example.test")
            .with_source("/test")
            .with_time("2020-01-01T00:00:00Z")
            .build_or_raise()
        )
        assert event.time == "2020-01-01T00:00:00Z"


class TestBuilderFlow:
    """Test the basic builder flow"""

    def test_required_fields(self):
        event = (
            EventBuilder()
            .with_type("com.example.user.created")
            .with_source("/users")
            .with_id("user-123")
            .build_or_raise()
        )

        assert event.specversion == "1.0"
        assert event.type == "com.example.user.created"
        assert event.source == "/users"
        assert event.id == "user-123"
        assert event.time is None

    def test_all_optional_fields(self):
        event = (
            EventBuilder.new()
            .with_type("com.example.user.created")
            .with_source("/users")
            .with_id("user-123")
            .with_subject("user/456")
            .with_time("2023-01-01T12:00:00Z")
            .with_datacontenttype("application/json")
            .with_dataschema("https://example.com/schema")
            .with_data({"userId": "456", "email": "test@example.com"})
            .build_or_raise()
        )

        assert event.subject == "user/456"
        assert event.time == "2023-01-01T12:00:00Z"
        assert event.datacontenttype == "application/json"
        assert event.dataschema == "https://example.com/schema"
        assert event.data == {"userId": "456", "email": "test@example.com"}

    def test_setters_overwrite(self):
        event = (
            EventBuilder.new()
            .with_type("first")
            .with_type("second")
            .with_source("/test")
            .build_or_raise()
        )
        assert event.type == "second"

    def test_builder_is_not_mutated(self):
        """Test that each step returns a new builder"""
        base = EventBuilder.new()
        typed = base.with_type("com.example.test")
        extended = typed.with_extension("traceid", "abc")

        assert base.type is None
        assert typed.type == "com.example.test"
        assert typed.extensions == {}
        assert extended.extensions == {"traceid": "abc"}

    def test_with_time_accepts_datetime(self):
        value = datetime(2023, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        event = (
            EventBuilder()
            .with_type("com.example.test")
            .with_source("/test")
            .with_id("123")
            .with_time(value)
            .build_or_raise()
        )
        assert event.time == "2023-01-01T12:00:00Z"


class TestExtensions:
    """Test extension attributes on the builder"""

    def test_single_extension(self):
        event = (
            EventBuilder.new()
            .with_type("com.example.test")
            .with_source("/test")
            .with_extension("traceid", "abc-123")
            .with_extension("priority", "high")
            .build_or_raise()
        )
        assert event.extensions == {"traceid": "abc-123", "priority": "high"}

    def test_with_extensions_merges_later_wins(self):
        event = (
            EventBuilder.new()
            .with_type("com.example.test")
            .with_source("/test")
            .with_extension("priority", "low")
            .with_extensions({"traceid": "abc-123", "priority": "high"})
            .build_or_raise()
        )
        assert event.extensions == {"traceid": "abc-123", "priority": "high"}

    def test_invalid_extension_name_fails_build(self):
        result = (
            EventBuilder.new()
            .with_type("com.example.test")
            .with_source("/test")
            .with_extension("invalid-name", "v")
            .build()
        )

        assert not result.ok
        assert isinstance(result.error, ParseError)
        assert "'invalid-name'" in result.error.message

    def test_typed_field_takes_precedence(self):
        builder = (
            EventBuilder.new()
            .with_extension("type", "from-extension")
            .with_type("com.example.test")
            .with_source("/test")
        )
        assert builder.to_map()["type"] == "com.example.test"
        assert builder.build_or_raise().extensions == {}


class TestValidationErrors:
    """Test validation failures surfaced by build"""

    def test_missing_type(self):
        result = EventBuilder.new().with_source("/test").with_id("123").build()
        assert result.error.message == "missing type"

    def test_missing_source(self):
        result = EventBuilder.new().with_type("com.example.test").with_id("123").build()
        assert result.error.message == "missing source"

    def test_missing_id(self):
        result = EventBuilder().with_type("com.example.test").with_source("/test").build()
        assert result.error.message == "missing id"

    def test_empty_subject(self):
        result = (
            EventBuilder.new()
            .with_type("com.example.test")
            .with_source("/test")
            .with_subject("")
            .build()
        )
        assert result.error.message == "subject given but empty"

    def test_build_or_raise(self):
        with pytest.raises(ParseError, match="missing type"):
            EventBuilder.new().with_source("/test").build_or_raise()
