from docmap.core.modules.counter.models import DEFAULT_COUNTER, DEFAULT_DELTA, DEFAULT_START_VALUE, AtomicCounter
from docmap.core.modules.schema.models import AttributeValueType, TableMetadata, TableMetadataBuilder
from docmap.core.modules.schema.tags import AttributeTag


class AtomicCounterTag(AttributeTag):
    """Tags an attribute as an atomic counter."""

    def __init__(self, counter: AtomicCounter) -> None:
        self.counter = counter

    @classmethod
    def create(cls) -> "AtomicCounterTag":
        """Counter starting at 0 and incremented by 1."""
        return cls(DEFAULT_COUNTER)

    @classmethod
    def from_values(cls, delta: int, start_value: int) -> "AtomicCounterTag":
        return cls(AtomicCounter(delta=delta, start_value=start_value))

    @staticmethod
    def resolve_for_attribute(attribute_name: str, table_metadata: TableMetadata) -> AtomicCounter | None:
        """Get the counter configuration of an attribute, or None if it is not a counter."""
        return table_metadata.attribute_config(attribute_name, AtomicCounter)

    def modify_metadata(self, metadata: TableMetadataBuilder, attribute_name: str, value_type: AttributeValueType) -> None:
        metadata.add_attribute_config(attribute_name, self.counter, AtomicCounter)
        metadata.mark_attribute_as_key(attribute_name, value_type)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, AtomicCounterTag) and other.counter == self.counter

    def __hash__(self) -> int:
        return hash(self.counter)

    def __repr__(self) -> str:
        return f"AtomicCounterTag(delta={self.counter.delta}, start_value={self.counter.start_value})"


def atomic_counter(delta: int = DEFAULT_DELTA, start_value: int = DEFAULT_START_VALUE) -> AtomicCounterTag:
    """Counter tag for use as field metadata.

    Example:
        class PageViews(BaseModel):
            id: Annotated[str, partition_key()]
            views: Annotated[int, atomic_counter()] = 0
            stock: Annotated[int, atomic_counter(delta=-1, start_value=100)] = 0
    """
    return AtomicCounterTag.from_values(delta, start_value)
