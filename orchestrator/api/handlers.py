"""
API handlers: call the orchestrator, map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Marshalling and exception-to-HTTP mapping.
Lives in the API layer so services stay free of FastAPI/HTTP types.
"""

import json
import logging
from functools import lru_cache
from typing import Iterator

from fastapi import HTTPException

from orchestrator.core.conversation_store import conversation_store
from orchestrator.core.errors import ServiceUnavailableError
from orchestrator.schemas.plan import ExecutionPlan
from orchestrator.schemas.query import AgentQueryRequest, PlanRequest
from orchestrator.services.agent_service import AgentOrchestrator

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_orchestrator() -> AgentOrchestrator:
    """Process-wide orchestrator wired to the real collaborators and the shared conversation store."""
    return AgentOrchestrator(store=conversation_store)


def handle_plan(orchestrator: AgentOrchestrator, body: PlanRequest) -> ExecutionPlan:
    """Dry-run planning. LLM unavailable maps to 503."""
    try:
        return orchestrator.plan(body.query, body.context)
    except ServiceUnavailableError as e:
        raise HTTPException(status_code=503, detail=f"Failed to create plan: {e.message}") from e


def _sse(event: str, data: str) -> str:
    return f"event: {event}\ndata: {data}\n\n"


def sse_generator(orchestrator: AgentOrchestrator, body: AgentQueryRequest) -> Iterator[str]:
    """Yield Server-Sent Events for a streamed agent run: step*, then done (or error)."""
    try:
        for evt in orchestrator.stream(
            body.query,
            conversation_id=body.conversation_id,
            max_iterations=body.max_iterations,
            context=body.context,
        ):
            if evt["event"] == "step":
                yield _sse("step", evt["step"].model_dump_json())
            elif evt["event"] == "done":
                yield _sse("done", evt["result"].model_dump_json())
    except Exception as e:
        logger.exception("SSE stream failed")
        yield _sse("error", json.dumps({"message": str(e)}))
