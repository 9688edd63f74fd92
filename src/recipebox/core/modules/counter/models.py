"""Named auto-incrementing sequences backing integer ids."""

from enum import StrEnum

from pydantic import BaseModel, Field


class Sequence(StrEnum):
    """Entities whose ids are drawn from a counter."""

    USER = "users"
    RECIPE = "recipes"


class Counter(BaseModel):
    """Atomic counter document, keyed by sequence name.

    seq holds the last issued value; the next id is seq + 1.
    """

    name: Sequence = Field(alias="_id")
    seq: int = 0
