"""Attribute tags that attach special behavior to schema attributes."""

from abc import ABC, abstractmethod

from docmap.core.modules.schema.models import AttributeValueType, TableMetadataBuilder


class AttributeTag(ABC):
    """Base class for attribute tags.

    A tag is applied once, while the schema is built. It records whatever
    configuration it carries in the table metadata; at runtime the
    configuration is looked up by its type, not through the tag object.

    Tags are used either as ``Annotated`` metadata on a model field or
    passed explicitly to ``TableSchemaBuilder.add_attribute``.
    """

    @abstractmethod
    def modify_metadata(self, metadata: TableMetadataBuilder, attribute_name: str, value_type: AttributeValueType) -> None:
        """Record this tag's configuration for an attribute.

        Args:
            metadata: Builder of the table metadata being constructed
            attribute_name: Name of the tagged attribute
            value_type: Value type of the tagged attribute

        Raises:
            SchemaError: If the tag conflicts with configuration already recorded
        """


class PartitionKeyTag(AttributeTag):
    """Marks the attribute holding the record's primary key."""

    def modify_metadata(self, metadata: TableMetadataBuilder, attribute_name: str, value_type: AttributeValueType) -> None:
        metadata.set_partition_key(attribute_name).mark_attribute_as_key(attribute_name, value_type)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PartitionKeyTag)

    def __hash__(self) -> int:
        return hash(PartitionKeyTag)


def partition_key() -> PartitionKeyTag:
    return PartitionKeyTag()
