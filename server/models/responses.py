from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SourceItem(BaseModel):
    """A vector match reported back to the caller of /chat."""

    id: str
    score: float
    title: Any = None
    content: str | None = None


class ChatResult(BaseModel):
    """Output of either answering pipeline."""

    model_config = ConfigDict(populate_by_name=True)

    question: str
    answer: str
    used_rag: bool = Field(alias="usedRAG")
    sources: list[SourceItem] = []
    context_used: bool = False


class ChatResponse(ChatResult):
    agent_decision: str = Field(alias="agentDecision")
    timestamp: str


class InsertResponse(BaseModel):
    success: bool
    inserted: int
    message: str


class SearchMatch(BaseModel):
    id: str
    score: float
    title: Any = None
    content: Any = None
    source: Any = None
    timestamp: Any = None


class SearchResponse(BaseModel):
    query: str
    matches: list[SearchMatch]


class AgentDecisionResponse(BaseModel):
    question: str
    decision: str
    reasoning: str
