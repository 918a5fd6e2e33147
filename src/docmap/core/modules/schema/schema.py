"""Table schemas built from pydantic record models."""

import types
from collections.abc import Iterable, Mapping
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field

from docmap.core.modules.schema.models import AttributeValueType, TableMetadata, TableMetadataBuilder
from docmap.core.modules.schema.tags import AttributeTag
from docmap.errors import SchemaError


def infer_value_type(annotation: Any) -> AttributeValueType:
    """Classify a field annotation into a stored value type.

    Optional annotations are unwrapped; unions of several concrete types
    are classified as ANY.
    """
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return infer_value_type(args[0])
        return AttributeValueType.ANY
    if origin in (list, set, frozenset, tuple):
        return AttributeValueType.LIST
    if origin is dict:
        return AttributeValueType.MAP
    if not isinstance(annotation, type):
        return AttributeValueType.ANY

    # bool is a subclass of int, check it first
    if issubclass(annotation, bool):
        return AttributeValueType.BOOLEAN
    if issubclass(annotation, int | float):
        return AttributeValueType.NUMBER
    if issubclass(annotation, str):
        return AttributeValueType.STRING
    if issubclass(annotation, bytes):
        return AttributeValueType.BINARY
    if issubclass(annotation, list | set | frozenset | tuple):
        return AttributeValueType.LIST
    if issubclass(annotation, dict | BaseModel):
        return AttributeValueType.MAP
    return AttributeValueType.ANY


class Attribute(BaseModel):
    """Attribute definition in a table schema."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="Attribute name (must be unique within the schema)")
    value_type: AttributeValueType = Field(..., description="Stored value type")
    tags: tuple[AttributeTag, ...] = Field(default=(), description="Tags applied to the attribute")


class TableSchema[M: BaseModel]:
    """Maps records of a pydantic model to stored items and back."""

    def __init__(self, model_cls: type[M], attributes: tuple[Attribute, ...], table_metadata: TableMetadata) -> None:
        self.model_cls = model_cls
        self.attributes = attributes
        self.table_metadata = table_metadata

    @classmethod
    def from_model(cls, model_cls: type[M]) -> "TableSchema[M]":
        """Build a schema by reflecting the model's fields.

        Tags are read from ``Annotated`` metadata, e.g.
        ``count: Annotated[int, atomic_counter()] = 0``.
        """
        builder = TableSchemaBuilder(model_cls)
        for name, field in model_cls.model_fields.items():
            tags = [item for item in field.metadata if isinstance(item, AttributeTag)]
            builder.add_attribute(name, infer_value_type(field.annotation), tags=tags)
        return builder.build()

    @staticmethod
    def builder(model_cls: type[M]) -> "TableSchemaBuilder[M]":
        """Start an explicit schema definition for the model."""
        return TableSchemaBuilder(model_cls)

    @property
    def attribute_names(self) -> tuple[str, ...]:
        return self.table_metadata.attribute_names

    def item_to_map(self, record: M, ignore_nulls: bool = False) -> dict[str, Any]:
        """Convert a record into an item of attribute name to value.

        Args:
            record: The record to convert
            ignore_nulls: If True, attributes whose value is None are left out

        Returns:
            A new item dict containing only schema attributes
        """
        data = record.model_dump(include=set(self.attribute_names))
        return {
            name: data[name] for name in self.attribute_names if name in data and not (ignore_nulls and data[name] is None)
        }

    def map_to_item(self, item: Mapping[str, Any]) -> M:
        """Convert a stored item back into a record.

        Attributes unknown to the schema are dropped. Type mismatches raise
        pydantic's ValidationError.
        """
        return self.model_cls.model_validate({name: value for name, value in item.items() if name in self.attribute_names})

    def partition_key_value(self, item: Mapping[str, Any]) -> Any:
        """Get the partition key value of an item, or None if unset."""
        return item.get(self.table_metadata.partition_key or "")


class TableSchemaBuilder[M: BaseModel]:
    """Explicit schema definition for a model."""

    def __init__(self, model_cls: type[M]) -> None:
        self._model_cls = model_cls
        self._attributes: list[Attribute] = []

    def add_attribute(
        self, name: str, value_type: AttributeValueType | None = None, tags: Iterable[AttributeTag] = ()
    ) -> "TableSchemaBuilder[M]":
        """Add an attribute backed by a model field.

        Args:
            name: Model field name
            value_type: Stored value type, inferred from the field annotation when omitted
            tags: Tags to apply to the attribute

        Raises:
            SchemaError: If the model has no such field or the attribute was already added
        """
        field = self._model_cls.model_fields.get(name)
        if field is None:
            raise SchemaError(f"Model '{self._model_cls.__name__}' has no field '{name}'")
        if any(attribute.name == name for attribute in self._attributes):
            raise SchemaError(f"Attribute '{name}' is defined more than once")
        if value_type is None:
            value_type = infer_value_type(field.annotation)
        self._attributes.append(Attribute(name=name, value_type=value_type, tags=tuple(tags)))
        return self

    def build(self) -> TableSchema[M]:
        """Apply all tags and build the schema.

        Raises:
            SchemaError: If tags conflict or no partition key was declared
        """
        metadata = TableMetadataBuilder()
        for attribute in self._attributes:
            metadata.add_attribute_name(attribute.name)
            for tag in attribute.tags:
                tag.modify_metadata(metadata, attribute.name, attribute.value_type)

        table_metadata = metadata.build()
        if table_metadata.partition_key is None:
            raise SchemaError(f"Schema for '{self._model_cls.__name__}' has no partition key")
        return TableSchema(self._model_cls, tuple(self._attributes), table_metadata)
