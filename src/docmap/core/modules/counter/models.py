"""Atomic counter configuration."""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DELTA = 1
DEFAULT_START_VALUE = 0


class AtomicCounter(BaseModel):
    """Delta and start value of a counter attribute.

    The start value is written on unconditional (put) writes. The delta is
    applied by the store itself on every update of the record.
    """

    model_config = ConfigDict(frozen=True)

    delta: int = Field(DEFAULT_DELTA, description="Increment (or decrement, if negative) applied on each update")
    start_value: int = Field(DEFAULT_START_VALUE, description="Value written when the record is put")


DEFAULT_COUNTER = AtomicCounter(delta=DEFAULT_DELTA, start_value=DEFAULT_START_VALUE)
