"""Response shape of the knowledge-retrieval service (POST /retrieve)."""

from typing import Any

from pydantic import BaseModel, Field


class RetrievalHit(BaseModel):
    id: str = ""
    score: float = 0.0
    text: str = ""
    document_id: str = ""
    source: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


class RetrievalResponse(BaseModel):
    query: str = ""
    results: list[RetrievalHit] = Field(default_factory=list)
    count: int = 0
    process_time_ms: float = 0.0
