"""Shared pytest fixtures."""

import copy
from typing import Annotated, Any

import pytest
from pydantic import BaseModel

from docmap.core.modules.counter.tag import atomic_counter
from docmap.core.modules.schema.schema import TableSchema
from docmap.core.modules.schema.tags import partition_key


class CounterRecord(BaseModel):
    """Record with default, custom and decreasing counters."""

    id: Annotated[str, partition_key()]
    attribute1: str | None = None
    default_counter: Annotated[int, atomic_counter()] = 0
    custom_counter: Annotated[int, atomic_counter(delta=5, start_value=10)] = 0
    decreasing_counter: Annotated[int, atomic_counter(delta=-1, start_value=-20)] = 0


class PlainRecord(BaseModel):
    """Record without counters."""

    id: Annotated[str, partition_key()]
    name: str = ""
    size: int = 0


class _UpdateResult:
    def __init__(self, matched_count: int, upserted_id: Any) -> None:
        self.matched_count = matched_count
        self.upserted_id = upserted_id


def _evaluate(expression: Any, doc: dict[str, Any]) -> Any:
    """Evaluate the subset of aggregation expressions produced by the update pipeline."""
    if isinstance(expression, str) and expression.startswith("$"):
        return doc.get(expression[1:])
    if isinstance(expression, dict) and len(expression) == 1:
        operator, args = next(iter(expression.items()))
        if operator == "$literal":
            return args
        if operator == "$ifNull":
            value = _evaluate(args[0], doc)
            return _evaluate(args[1], doc) if value is None else value
        if operator == "$add":
            return sum(_evaluate(arg, doc) for arg in args)
        raise NotImplementedError(operator)
    return expression


class FakeCollection:
    """In-memory stand-in for the pymongo AsyncCollection calls used by MappedTable."""

    def __init__(self, name: str = "records") -> None:
        self.name = name
        self.docs: dict[Any, dict[str, Any]] = {}
        self.dropped = False

    async def replace_one(self, filter: dict[str, Any], replacement: dict[str, Any], upsert: bool = False) -> _UpdateResult:
        key = filter["_id"]
        matched = key in self.docs
        if matched or upsert:
            self.docs[key] = copy.deepcopy(replacement)
        return _UpdateResult(int(matched), None if matched else key)

    async def find_one(self, filter: dict[str, Any]) -> dict[str, Any] | None:
        doc = self.docs.get(filter["_id"])
        return copy.deepcopy(doc) if doc is not None else None

    async def find_one_and_update(
        self, filter: dict[str, Any], update: list[dict[str, Any]], upsert: bool = False, return_document: Any = None
    ) -> dict[str, Any] | None:
        key = filter["_id"]
        if key not in self.docs and not upsert:
            return None
        doc = copy.deepcopy(self.docs.get(key, {"_id": key}))
        for stage in update:
            if "$set" in stage:
                values = {name: _evaluate(expression, doc) for name, expression in stage["$set"].items()}
                doc.update(values)
            if "$unset" in stage:
                for name in stage["$unset"]:
                    doc.pop(name, None)
        self.docs[key] = doc
        return copy.deepcopy(doc)

    async def find_one_and_delete(self, filter: dict[str, Any]) -> dict[str, Any] | None:
        return self.docs.pop(filter["_id"], None)

    async def drop(self) -> None:
        self.docs.clear()
        self.dropped = True


@pytest.fixture
def counter_schema() -> TableSchema[CounterRecord]:
    return TableSchema.from_model(CounterRecord)


@pytest.fixture
def plain_schema() -> TableSchema[PlainRecord]:
    return TableSchema.from_model(PlainRecord)


@pytest.fixture
def collection() -> FakeCollection:
    return FakeCollection()
