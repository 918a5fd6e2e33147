"""Table metadata describing how record attributes are stored."""

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType
from typing import Any, TypeVar

from docmap.errors import SchemaError

T = TypeVar("T")


class AttributeValueType(StrEnum):
    """Classification of a stored attribute value."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    BINARY = "binary"
    LIST = "list"
    MAP = "map"
    ANY = "any"  # Anything the store accepts as-is


class TableMetadata:
    """Read-only schema-level configuration for a table.

    Per-attribute configuration lives in a side table keyed by the
    configuration type and the attribute name, so different tag kinds
    can configure the same attribute without colliding.
    """

    def __init__(
        self,
        attribute_names: tuple[str, ...],
        partition_key: str | None,
        key_attributes: Mapping[str, AttributeValueType],
        attribute_configs: Mapping[tuple[type, str], object],
        custom_metadata: Mapping[str, Any],
    ) -> None:
        self._attribute_names = attribute_names
        self._partition_key = partition_key
        self._key_attributes = MappingProxyType(dict(key_attributes))
        self._attribute_configs = MappingProxyType(dict(attribute_configs))
        self._custom_metadata = MappingProxyType(dict(custom_metadata))

    @property
    def attribute_names(self) -> tuple[str, ...]:
        return self._attribute_names

    @property
    def partition_key(self) -> str | None:
        return self._partition_key

    @property
    def key_attributes(self) -> Mapping[str, AttributeValueType]:
        """Attributes marked as key-like, with their value type."""
        return self._key_attributes

    def attribute_config(self, attribute_name: str, config_type: type[T]) -> T | None:
        """Get the configuration bound to an attribute under the given kind, if any.

        The lookup is by the kind the configuration was bound under, not by
        its runtime class.
        """
        config = self._attribute_configs.get((config_type, attribute_name))
        if isinstance(config, config_type):
            return config
        return None

    def custom_metadata_object(self, key: str, object_type: type[T]) -> T | None:
        """Get a table-level custom metadata object by key, if present and of the expected type."""
        value = self._custom_metadata.get(key)
        if isinstance(value, object_type):
            return value
        return None


class TableMetadataBuilder:
    """Mutable collector used while a schema is being built."""

    def __init__(self) -> None:
        self._attribute_names: list[str] = []
        self._partition_key: str | None = None
        self._key_attributes: dict[str, AttributeValueType] = {}
        self._attribute_configs: dict[tuple[type, str], object] = {}
        self._custom_metadata: dict[str, Any] = {}

    def add_attribute_name(self, attribute_name: str) -> "TableMetadataBuilder":
        if attribute_name in self._attribute_names:
            raise SchemaError(f"Attribute '{attribute_name}' is defined more than once")
        self._attribute_names.append(attribute_name)
        return self

    def add_attribute_config(
        self, attribute_name: str, config: object, config_type: type | None = None
    ) -> "TableMetadataBuilder":
        """Bind a configuration object to an attribute.

        Args:
            attribute_name: The configured attribute
            config: The configuration object
            config_type: Kind the configuration is looked up by, defaults to ``type(config)``.
                Pass the base kind when binding a subclass instance.

        Raises:
            SchemaError: If the config is not an instance of its kind, or a configuration
                of the same kind is already bound to the attribute
        """
        kind = config_type or type(config)
        if not isinstance(config, kind):
            raise SchemaError(f"Configuration for '{attribute_name}' is not a {kind.__name__}")
        key = (kind, attribute_name)
        if key in self._attribute_configs:
            raise SchemaError(f"Attribute '{attribute_name}' already has a {kind.__name__} configuration")
        self._attribute_configs[key] = config
        return self

    def add_custom_metadata_object(self, key: str, value: Any) -> "TableMetadataBuilder":
        self._custom_metadata[key] = value
        return self

    def mark_attribute_as_key(self, attribute_name: str, value_type: AttributeValueType) -> "TableMetadataBuilder":
        self._key_attributes[attribute_name] = value_type
        return self

    def set_partition_key(self, attribute_name: str) -> "TableMetadataBuilder":
        if self._partition_key is not None and self._partition_key != attribute_name:
            raise SchemaError(f"Partition key already set to '{self._partition_key}', cannot also use '{attribute_name}'")
        self._partition_key = attribute_name
        return self

    def build(self) -> TableMetadata:
        return TableMetadata(
            attribute_names=tuple(self._attribute_names),
            partition_key=self._partition_key,
            key_attributes=self._key_attributes,
            attribute_configs=self._attribute_configs,
            custom_metadata=self._custom_metadata,
        )
