from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from typing import Any, cast
from urllib.parse import urlparse

import structlog
from pydantic import BaseModel
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from docmap.config import Config
from docmap.core.modules.extension.chain import resolve_extensions
from docmap.core.modules.extension.models import Extension
from docmap.core.modules.schema.schema import TableSchema
from docmap.core.modules.table.table import MappedTable
from docmap.errors import ConfigError
from docmap.logging import setup_logging

logger = structlog.get_logger(__name__)

# Extensions that can be enabled by name: name -> (module_path, class_name)
EXTENSION_CONFIGS: dict[str, tuple[str, str]] = {
    "atomic_counter": ("docmap.core.modules.counter.extension", "AtomicCounterExtension"),
}


def load_extensions(names: Sequence[str]) -> list[Extension]:
    """Instantiate extensions by configured name, keeping their order.

    Raises:
        ConfigError: If a name is not a known extension
    """
    extensions: list[Extension] = []
    for name in names:
        if name not in EXTENSION_CONFIGS:
            raise ConfigError(f"Unknown extension: {name}")
        module_path, class_name = EXTENSION_CONFIGS[name]
        module = importlib.import_module(module_path)
        extension_class = cast(type[Extension], getattr(module, class_name))
        extensions.append(extension_class())
    return extensions


class Core:
    """Container providing config, database and the registered write extensions."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]]
    database: AsyncDatabase[dict[str, Any]]
    extension: Extension | None

    def __init__(self, config: Config, extensions: Sequence[Extension] | None = None) -> None:
        """Configure logging, register extensions and open the MongoDB client.

        Args:
            config: Mapper configuration
            extensions: Extensions to register, in call order. When omitted,
                the extensions named in ``config.extensions`` are loaded.
        """
        setup_logging(config.debug)
        if extensions is None:
            extensions = load_extensions(config.extensions)

        self.config = config
        self.extension = resolve_extensions(extensions)
        self.mongo_client = AsyncMongoClient(config.database_url, uuidRepresentation="standard")
        self.database = self.mongo_client.get_database(urlparse(config.database_url).path[1:])
        logger.debug("core_initialized", extensions=[type(extension).__name__ for extension in extensions])

    def table[M: BaseModel](self, name: str, schema: TableSchema[M]) -> MappedTable[M]:
        """Get a mapped table for the named collection."""
        return MappedTable(self.database.get_collection(name), schema, self.extension)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Keep the MongoDB client open for the duration of the block."""
        try:
            yield
        finally:
            await self.on_stop()

    async def on_stop(self) -> None:
        """Close MongoDB connection."""
        await self.mongo_client.aclose()
