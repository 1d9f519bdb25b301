"""Vector index models: records written to and matches read from a vector backend."""

from typing import Any

from pydantic import BaseModel


class VectorRecord(BaseModel):
    """A vector plus the metadata stored alongside it.

    Attributes:
        id:       Record id assigned at insert time (e.g. "doc-1718000000000-0").
        values:   The embedding vector.
        metadata: Flat metadata dict; keys without a value are left out.
    """

    id: str
    values: list[float]
    metadata: dict[str, Any] = {}


class VectorMatch(BaseModel):
    """One ranked result of a similarity query."""

    id: str
    score: float
    metadata: dict[str, Any] = {}
