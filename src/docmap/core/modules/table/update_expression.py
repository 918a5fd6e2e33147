"""Pure functions for building MongoDB update pipelines from items."""

from collections.abc import Mapping
from typing import Any

from docmap.core.modules.counter.models import AtomicCounter
from docmap.core.modules.counter.tag import AtomicCounterTag
from docmap.core.modules.schema.models import TableMetadata


def build_counter_expression(attribute_name: str, counter: AtomicCounter) -> dict[str, Any]:
    """Build the aggregation expression that advances a counter by its delta.

    A missing attribute is treated as ``start_value - delta``, so the first
    update stores exactly ``start_value``.

    Args:
        attribute_name: The counter attribute
        counter: Its counter configuration

    Returns:
        Aggregation expression for a ``$set`` stage
    """
    return {"$add": [{"$ifNull": [f"${attribute_name}", counter.start_value - counter.delta]}, counter.delta]}


def build_update_pipeline(
    item: Mapping[str, Any], table_metadata: TableMetadata, ignore_nulls: bool = False
) -> list[dict[str, Any]]:
    """Build the update pipeline for a partial update of one record.

    Every counter declared in the table metadata is advanced, whether or not
    the item carries a value for it; values supplied for counters are ignored.
    Other attributes are set to their literal value. Attributes whose value is
    None are removed from the stored record, or skipped when ``ignore_nulls``.

    Args:
        item: The outgoing item, attribute name -> value
        table_metadata: Metadata of the record's schema
        ignore_nulls: If True, None values leave the stored attribute untouched

    Returns:
        List of pipeline stages for ``find_one_and_update``
    """
    set_fields: dict[str, Any] = {}
    unset_fields: list[str] = []

    counters: dict[str, AtomicCounter] = {}
    for attribute_name in (*table_metadata.attribute_names, *item):
        counter = AtomicCounterTag.resolve_for_attribute(attribute_name, table_metadata)
        if counter is not None:
            counters[attribute_name] = counter

    for attribute_name, value in item.items():
        if attribute_name in counters:
            continue
        if value is None:
            if not ignore_nulls:
                unset_fields.append(attribute_name)
            continue
        # $literal keeps strings starting with "$" from being read as field paths
        set_fields[attribute_name] = {"$literal": value}

    for attribute_name, counter in counters.items():
        set_fields[attribute_name] = build_counter_expression(attribute_name, counter)

    pipeline: list[dict[str, Any]] = []
    if set_fields:
        pipeline.append({"$set": set_fields})
    if unset_fields:
        pipeline.append({"$unset": unset_fields})
    return pipeline
