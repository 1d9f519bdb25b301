"""Interaction history models.

Records are stored with their wire aliases (``usedRAG``) so the stored list
can be returned by /agent/history without reshaping.
"""

from pydantic import BaseModel, ConfigDict, Field


class InteractionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str
    answer: str
    used_rag: bool = Field(alias="usedRAG")
    timestamp: str


class HistoryResponse(BaseModel):
    history: list[InteractionRecord]


class HistoryStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_interactions: int = Field(alias="totalInteractions")
    rag_usage: int = Field(alias="ragUsage")
    general_usage: int = Field(alias="generalUsage")
    rag_percentage: int = Field(alias="ragPercentage")
