"""Write extension that initializes atomic counters on unconditional writes."""

from types import MappingProxyType

import structlog

from docmap.core.modules.counter.models import AtomicCounter
from docmap.core.modules.counter.tag import AtomicCounterTag
from docmap.core.modules.extension.models import BeforeWriteContext, Extension, WriteModification

logger = structlog.get_logger(__name__)


class AtomicCounterExtension(Extension):
    """Writes counter start values when a record is put.

    Updates do not need this extension: the update pipeline advances
    counters on the store side using their delta. A put replaces the whole
    record, so every counter attribute present in the item is reset to its
    start value, whatever value the record carried.

    Not registered by default; pass it to ``Core`` explicitly or enable
    ``atomic_counter`` in ``Config.extensions``.
    """

    @classmethod
    def create(cls) -> "AtomicCounterExtension":
        return cls()

    def before_write(self, context: BeforeWriteContext) -> WriteModification:
        counters: dict[str, AtomicCounter] = {}
        for attribute_name in context.items:
            counter = AtomicCounterTag.resolve_for_attribute(attribute_name, context.table_metadata)
            if counter is not None:
                counters[attribute_name] = counter

        if not counters:
            return WriteModification()

        item = dict(context.items)
        for attribute_name, counter in counters.items():
            item[attribute_name] = counter.start_value

        logger.debug(
            "atomic_counters_reset",
            table=context.table_name,
            operation=context.operation_name,
            attributes=sorted(counters),
        )
        return WriteModification(transformed_item=MappingProxyType(item))
