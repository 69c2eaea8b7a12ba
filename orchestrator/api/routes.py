"""
API route aggregator: register endpoints and delegate to handlers.
"""

import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from orchestrator.api.handlers import get_orchestrator, handle_plan, sse_generator
from orchestrator.schemas.conversation import Conversation
from orchestrator.schemas.plan import ExecutionPlan
from orchestrator.schemas.query import AgentQueryRequest, AgentResult, PlanRequest

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Agent orchestrator running"}


@router.get("/health", tags=["system"])
def health():
    return {"status": "healthy", "service": "agent-orchestrator"}


# --- Agent ---

@router.post(
    "/agent/query",
    response_model=AgentResult,
    tags=["agent"],
    summary="Run the agent loop (sync)",
    description="Plan, execute, synthesize and verify until confident or out of iterations. 422 on empty query or malformed body.",
)
def post_query(body: AgentQueryRequest) -> AgentResult:
    logger.info("[api:post_query] IN  query=%r conversation_id=%s", body.query, body.conversation_id)
    result = get_orchestrator().run(
        body.query,
        conversation_id=body.conversation_id,
        max_iterations=body.max_iterations,
        context=body.context,
    )
    logger.info(
        "[api:post_query] OUT iterations=%d confidence=%.2f time_ms=%.2f",
        result.iterations, result.confidence, result.process_time_ms,
    )
    return result


@router.post(
    "/agent/query/stream",
    tags=["agent"],
    summary="Run the agent loop (SSE stream)",
    description="Stream each recorded step via Server-Sent Events. Events: step, done, error.",
)
def post_query_stream(body: AgentQueryRequest) -> StreamingResponse:
    logger.info("[api:post_query_stream] IN  query=%r conversation_id=%s", body.query, body.conversation_id)
    return StreamingResponse(
        sse_generator(get_orchestrator(), body),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post(
    "/agent/plan",
    response_model=ExecutionPlan,
    tags=["agent"],
    summary="Create an execution plan without running it",
    description="Dry run of the planning phase. 503 if the LLM is unavailable.",
)
def post_plan(body: PlanRequest) -> ExecutionPlan:
    logger.info("[api:post_plan] IN  query=%r", body.query)
    return handle_plan(get_orchestrator(), body)


@router.get(
    "/agent/history/{conversation_id}",
    response_model=Conversation,
    tags=["agent"],
    summary="Conversation history",
)
def get_history(conversation_id: str) -> Conversation:
    conversation = get_orchestrator().store.get(conversation_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation
