"""Tests for atomic counter tags and their resolution."""

from typing import Annotated

import pytest
from conftest import CounterRecord
from pydantic import BaseModel

from docmap.core.modules.counter.models import DEFAULT_COUNTER, AtomicCounter
from docmap.core.modules.counter.tag import AtomicCounterTag, atomic_counter
from docmap.core.modules.schema.models import AttributeValueType, TableMetadataBuilder
from docmap.core.modules.schema.schema import TableSchema
from docmap.core.modules.schema.tags import partition_key
from docmap.errors import SchemaError


class TestAtomicCounterConfig:
    """Tests for the AtomicCounter value."""

    def test_defaults(self):
        """Test the default counter starts at 0 and increments by 1."""
        assert DEFAULT_COUNTER.delta == 1
        assert DEFAULT_COUNTER.start_value == 0
        assert AtomicCounter() == DEFAULT_COUNTER

    def test_is_immutable(self):
        """Test counter configuration cannot be changed after creation."""
        counter = AtomicCounter(delta=2, start_value=3)
        with pytest.raises(ValueError):
            counter.delta = 5  # type: ignore[misc]

    def test_equal_values_are_equal(self):
        """Test independently built configurations with equal values compare equal."""
        assert AtomicCounter(delta=-5, start_value=15) == AtomicCounter(delta=-5, start_value=15)
        assert AtomicCounter(delta=-5, start_value=15) != AtomicCounter(delta=5, start_value=15)


class TestAtomicCounterTag:
    """Tests for tag construction."""

    def test_create_uses_default_counter(self):
        assert AtomicCounterTag.create().counter == DEFAULT_COUNTER

    def test_from_values(self):
        tag = AtomicCounterTag.from_values(-5, 15)
        assert tag.counter == AtomicCounter(delta=-5, start_value=15)

    def test_from_values_accepts_zero_delta_and_negative_start(self):
        tag = AtomicCounterTag.from_values(0, -100)
        assert tag.counter.delta == 0
        assert tag.counter.start_value == -100

    def test_declarative_helper_matches_static_tag(self):
        """Test atomic_counter() builds the same tag as the static constructors."""
        assert atomic_counter() == AtomicCounterTag.create()
        assert atomic_counter(delta=-5, start_value=15) == AtomicCounterTag.from_values(-5, 15)

    def test_modify_metadata_binds_counter_and_marks_key(self):
        """Test applying the tag records the counter and marks the attribute as key-like."""
        builder = TableMetadataBuilder()
        AtomicCounterTag.from_values(3, 7).modify_metadata(builder, "hits", AttributeValueType.NUMBER)
        metadata = builder.build()

        assert metadata.attribute_config("hits", AtomicCounter) == AtomicCounter(delta=3, start_value=7)
        assert metadata.key_attributes["hits"] == AttributeValueType.NUMBER

    def test_tagging_attribute_twice_fails(self):
        builder = TableMetadataBuilder()
        AtomicCounterTag.create().modify_metadata(builder, "hits", AttributeValueType.NUMBER)
        with pytest.raises(SchemaError):
            AtomicCounterTag.create().modify_metadata(builder, "hits", AttributeValueType.NUMBER)


class TestResolveForAttribute:
    """Tests for resolving counter configuration from table metadata."""

    def test_default_counter_resolves_start_zero(self, counter_schema):
        counter = AtomicCounterTag.resolve_for_attribute("default_counter", counter_schema.table_metadata)
        assert counter is not None
        assert counter.start_value == 0
        assert counter.delta == 1

    def test_custom_counter_resolves_configured_values(self, counter_schema):
        counter = AtomicCounterTag.resolve_for_attribute("custom_counter", counter_schema.table_metadata)
        assert counter == AtomicCounter(delta=5, start_value=10)

    def test_non_counter_attribute_resolves_none(self, counter_schema):
        assert AtomicCounterTag.resolve_for_attribute("attribute1", counter_schema.table_metadata) is None
        assert AtomicCounterTag.resolve_for_attribute("id", counter_schema.table_metadata) is None

    def test_unknown_attribute_resolves_none(self, counter_schema):
        assert AtomicCounterTag.resolve_for_attribute("missing", counter_schema.table_metadata) is None

    def test_other_metadata_does_not_collide(self):
        """Test custom metadata stored under the attribute's name is not mistaken for a counter."""
        builder = TableMetadataBuilder().add_custom_metadata_object("hits", AtomicCounter(delta=9, start_value=9))
        builder.add_attribute_config("hits", "not a counter")
        metadata = builder.build()

        assert AtomicCounterTag.resolve_for_attribute("hits", metadata) is None

    def test_declarative_and_static_schemas_resolve_equally(self):
        """Test annotation tags and builder tags produce identical bindings."""

        class StaticRecord(BaseModel):
            id: str
            default_counter: int = 0
            custom_counter: int = 0

        declarative = TableSchema.from_model(CounterRecord)
        static = (
            TableSchema.builder(StaticRecord)
            .add_attribute("id", tags=[partition_key()])
            .add_attribute("default_counter", tags=[AtomicCounterTag.create()])
            .add_attribute("custom_counter", tags=[AtomicCounterTag.from_values(5, 10)])
            .build()
        )

        for name in ("default_counter", "custom_counter"):
            assert AtomicCounterTag.resolve_for_attribute(name, declarative.table_metadata) == (
                AtomicCounterTag.resolve_for_attribute(name, static.table_metadata)
            )

    def test_optional_counter_field_is_resolved(self):
        class OptionalCounter(BaseModel):
            id: Annotated[str, partition_key()]
            count: Annotated[int | None, atomic_counter(start_value=1)] = None

        schema = TableSchema.from_model(OptionalCounter)
        assert AtomicCounterTag.resolve_for_attribute("count", schema.table_metadata) == AtomicCounter(start_value=1)
        assert schema.table_metadata.key_attributes["count"] == AttributeValueType.NUMBER

    def test_counter_subclass_is_resolved(self):
        """Test a specialised counter configuration is still found as an AtomicCounter."""

        class AuditedCounter(AtomicCounter):
            label: str = "audited"

        builder = TableMetadataBuilder()
        AtomicCounterTag(AuditedCounter(delta=2, start_value=4)).modify_metadata(builder, "hits", AttributeValueType.NUMBER)

        counter = AtomicCounterTag.resolve_for_attribute("hits", builder.build())
        assert isinstance(counter, AuditedCounter)
        assert counter.start_value == 4
