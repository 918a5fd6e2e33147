from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel
from pymongo import ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection

from docmap.core.modules.extension.models import BeforeWriteContext, Extension, OperationName
from docmap.core.modules.schema.schema import TableSchema
from docmap.core.modules.table.update_expression import build_update_pipeline
from docmap.errors import MissingKeyError

logger = structlog.get_logger(__name__)


class MappedTable[M: BaseModel]:
    """Reads and writes records of one schema in a MongoDB collection.

    The document ``_id`` holds the partition key value; every attribute is
    also stored under its own name.
    """

    def __init__(
        self, collection: AsyncCollection[dict[str, Any]], schema: TableSchema[M], extension: Extension | None = None
    ) -> None:
        self._collection = collection
        self.schema = schema
        self.extension = extension

    @property
    def table_name(self) -> str:
        return self._collection.name

    def _key_filter(self, key: Any) -> dict[str, Any]:
        if key is None:
            raise MissingKeyError
        return {"_id": key}

    def _before_write(self, item: dict[str, Any], operation_name: OperationName) -> Mapping[str, Any]:
        """Give the registered extension a chance to replace the outgoing item."""
        if self.extension is None:
            return item
        context = BeforeWriteContext(
            items=item,
            table_metadata=self.schema.table_metadata,
            operation_name=operation_name,
            table_name=self.table_name,
        )
        modification = self.extension.before_write(context)
        if modification.transformed_item is None:
            return item
        return modification.transformed_item

    async def put_item(self, record: M) -> None:
        """Write the whole record, replacing any stored version."""
        item = self._before_write(self.schema.item_to_map(record), OperationName.PUT_ITEM)
        key_filter = self._key_filter(self.schema.partition_key_value(item))

        await self._collection.replace_one(key_filter, {**key_filter, **item}, upsert=True)
        logger.debug("put_item", table=self.table_name, key=key_filter["_id"])

    async def update_item(self, record: M, ignore_nulls: bool = False) -> M:
        """Update the record in place, creating it if missing.

        Counter attributes are advanced by the store using their delta.

        Args:
            record: The record carrying the new attribute values
            ignore_nulls: If True, None attributes are left untouched instead of removed

        Returns:
            The record as stored after the update
        """
        item = self._before_write(self.schema.item_to_map(record, ignore_nulls=ignore_nulls), OperationName.UPDATE_ITEM)
        key_filter = self._key_filter(self.schema.partition_key_value(item))
        pipeline = build_update_pipeline(item, self.schema.table_metadata, ignore_nulls=ignore_nulls)

        doc = await self._collection.find_one_and_update(
            key_filter,
            pipeline,
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        logger.debug("update_item", table=self.table_name, key=key_filter["_id"])
        return self.schema.map_to_item(doc)

    async def get_item(self, key: Any) -> M | None:
        """Get a record by partition key value."""
        doc = await self._collection.find_one(self._key_filter(key))
        if doc is None:
            return None
        return self.schema.map_to_item(doc)

    async def delete_item(self, key: Any) -> M | None:
        """Delete a record by partition key value and return it, if it existed."""
        doc = await self._collection.find_one_and_delete(self._key_filter(key))
        if doc is None:
            return None
        logger.debug("delete_item", table=self.table_name, key=key)
        return self.schema.map_to_item(doc)

    async def delete_table(self) -> None:
        """Drop the underlying collection."""
        await self._collection.drop()
        logger.info("table_deleted", table=self.table_name)
