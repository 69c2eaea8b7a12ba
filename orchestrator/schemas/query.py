"""Schemas for the agent query, plan and history endpoints."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class AgentQueryRequest(BaseModel):
    """Request body for POST /agent/query and /agent/query/stream."""

    query: str = Field(..., min_length=1, description="User question for the agent.")
    conversation_id: str | None = Field(None, description="Conversation to append to; a new id is generated when omitted.")
    max_iterations: int | None = Field(None, ge=0, description="Iteration cap for this request. 0 or omitted uses the server default.")
    context: dict[str, str] = Field(default_factory=dict, description="Extra key/value context passed to the analyze and plan prompts.")

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Query cannot be empty")
        return value


class PlanRequest(BaseModel):
    """Request body for POST /agent/plan (dry run, nothing is executed)."""

    query: str = Field(..., min_length=1, description="User question to plan for.")
    context: dict[str, str] = Field(default_factory=dict)

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Query cannot be empty")
        return value


class StepType(str, Enum):
    ANALYZE = "analyze"
    PLAN = "plan"
    EXECUTE = "execute"
    SYNTHESIZE = "synthesize"
    VERIFY = "verify"


class StepRecord(BaseModel):
    """One phase of one iteration. step_number keeps counting across iterations."""

    step_number: int
    type: StepType
    description: str
    result: str = ""
    success: bool
    duration_ms: float = 0.0


class AgentResult(BaseModel):
    """Response for POST /agent/query."""

    conversation_id: str
    query: str = Field(..., description="The query as sent by the caller (not the refined one).")
    answer: str = Field(..., description="Final answer, or a diagnostic string when planning failed.")
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    iterations: int = Field(0, description="Completed iterations (recorded steps // 5).")
    tools_used: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    process_time_ms: float = 0.0
    steps: list[StepRecord] = Field(default_factory=list)
    need_more_info: bool = False
    follow_up_question: str | None = None
