from abc import ABC


class DocmapError(ABC, Exception):
    """Base class for mapping layer errors.

    Raised for problems in how a schema or record was put together,
    never for normal control flow such as an attribute that carries
    no counter configuration.
    """


class SchemaError(DocmapError):
    """Raised when a table schema definition is invalid."""


class MissingKeyError(DocmapError):
    """Raised when a record reaches a table operation without a partition key value."""

    def __init__(self, message: str = "Record has no partition key value") -> None:
        super().__init__(message)


class ConfigError(DocmapError):
    """Raised when the configuration names something that does not exist."""
