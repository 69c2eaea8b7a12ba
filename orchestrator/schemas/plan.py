"""
Plan and action models.

Action.type is kept as a plain string so that whatever kind the model invents
survives parsing; the executor decides what to do with unknown kinds.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ActionType(str, Enum):
    RETRIEVE = "search_rag"
    INVOKE_TOOL = "call_tool"
    SYNTHESIZE = "synthesize"


class ActionStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    DEFERRED = "deferred"


class Action(BaseModel):
    """One unit of planned work."""

    model_config = ConfigDict(frozen=True)

    type: str
    description: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)

    @field_validator("description", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("parameters", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def kind(self) -> ActionType | None:
        """Known action kind, or None when the type is not one we dispatch."""
        try:
            return ActionType(self.type)
        except ValueError:
            return None


class ExecutionPlan(BaseModel):
    original_query: str
    rewritten_queries: list[str] = Field(default_factory=list)
    actions: list[Action] = Field(default_factory=list)
    reasoning: str = ""

    @field_validator("rewritten_queries", "actions", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("reasoning", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class ActionResult(BaseModel):
    """Outcome of one action. data carries the collaborator payload untouched."""

    action_type: str
    status: ActionStatus
    data: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None
    source: str | None = None
    tool: str | None = None

    @property
    def failed(self) -> bool:
        return self.status == ActionStatus.FAILED


class Verification(BaseModel):
    """Verifier's assessment of a draft answer."""

    is_complete: bool = False
    confidence: float = 0.0
    missing_info: str = ""

    @field_validator("confidence", mode="after")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return min(1.0, max(0.0, value))

    @field_validator("missing_info", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    def is_satisfied(self, threshold: float) -> bool:
        return self.is_complete and self.confidence >= threshold
