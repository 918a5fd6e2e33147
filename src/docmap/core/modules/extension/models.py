"""Hooks invoked by tables around write operations."""

from abc import ABC
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from docmap.core.modules.schema.models import TableMetadata


class OperationName(StrEnum):
    """Table operations that write items."""

    PUT_ITEM = "put_item"
    UPDATE_ITEM = "update_item"


@dataclass(frozen=True)
class BeforeWriteContext:
    """State of a write operation before the item is sent to the store."""

    items: Mapping[str, Any]  # Outgoing item, attribute name -> value
    table_metadata: TableMetadata
    operation_name: OperationName
    table_name: str = ""


@dataclass(frozen=True)
class WriteModification:
    """Result of a before-write hook.

    ``transformed_item`` is None when the hook leaves the item alone, otherwise
    it is the complete item to write instead of the original.
    """

    transformed_item: Mapping[str, Any] | None = None


class Extension(ABC):
    """Base class for table extensions. Override the hooks you need."""

    def before_write(self, context: BeforeWriteContext) -> WriteModification:
        """Inspect or replace the item about to be written."""
        return WriteModification()
