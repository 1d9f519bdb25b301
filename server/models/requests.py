from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str | None = None
    top_k: int = Field(default=3, alias="topK")
    force_rag: bool = Field(default=False, alias="forceRAG")


class InsertRequest(BaseModel):
    # validated by the router so a non-list yields "Documents array is required"
    documents: Any = None


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str | None = None
    top_k: int = Field(default=5, alias="topK")


class AgentTestRequest(BaseModel):
    question: str | None = None
