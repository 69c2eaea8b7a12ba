"""
Agent: orchestrate query analysis, planning, action execution, synthesis and verification.

Responsibility: Run the agent loop for one request, assemble the AgentResult and
record the exchange in the conversation store. Called by the API; no HTTP here.
"""

import logging
import time
import uuid
from typing import Any, Iterator

from orchestrator.agent import llm
from orchestrator.agent.executor import InvokeToolFn, RetrieveFn
from orchestrator.agent.graph import (
    STEPS_PER_ITERATION,
    LoopState,
    LoopStatus,
    build_graph,
    initial_state,
    recursion_limit,
)
from orchestrator.agent.llm import CompleteFn
from orchestrator.agent.planner import create_plan
from orchestrator.core.config import CONFIDENCE_THRESHOLD, MAX_ITERATIONS
from orchestrator.core.conversation_store import ConversationStore
from orchestrator.schemas.plan import ExecutionPlan
from orchestrator.schemas.query import AgentResult
from orchestrator.services import retrieval_client, tool_client

logger = logging.getLogger(__name__)


class AgentOrchestrator:
    """Runs the agent loop against injected collaborators and a conversation store."""

    def __init__(
        self,
        complete: CompleteFn = llm.complete,
        retrieve: RetrieveFn = retrieval_client.retrieve,
        invoke_tool: InvokeToolFn = tool_client.invoke_tool,
        store: ConversationStore | None = None,
        confidence_threshold: float = CONFIDENCE_THRESHOLD,
        default_max_iterations: int = MAX_ITERATIONS,
    ) -> None:
        self.store = store if store is not None else ConversationStore()
        self.confidence_threshold = confidence_threshold
        self.default_max_iterations = default_max_iterations
        self._complete = complete
        self._graph = build_graph(complete, retrieve, invoke_tool, confidence_threshold)

    def plan(self, query: str, context: dict[str, str] | None = None) -> ExecutionPlan:
        """Dry run: build the plan without executing it. Raises ServiceUnavailableError if the LLM is down."""
        return create_plan(query, context, self._complete)

    def run(
        self,
        query: str,
        conversation_id: str | None = None,
        max_iterations: int | None = None,
        context: dict[str, str] | None = None,
    ) -> AgentResult:
        """Run the loop to completion and return the final result."""
        started = time.perf_counter()
        conversation_id, state = self._start(query, conversation_id, max_iterations, context)
        final: LoopState = self._graph.invoke(state, config={"recursion_limit": recursion_limit(state["max_iterations"])})
        return self._finish(final, conversation_id, started)

    def stream(
        self,
        query: str,
        conversation_id: str | None = None,
        max_iterations: int | None = None,
        context: dict[str, str] | None = None,
    ) -> Iterator[dict[str, Any]]:
        """
        Run the loop and yield events as it goes:
        {"event": "step", "step": StepRecord} for each recorded step, then
        {"event": "done", "result": AgentResult}.
        """
        started = time.perf_counter()
        conversation_id, state = self._start(query, conversation_id, max_iterations, context)
        final = state
        emitted = 0
        for values in self._graph.stream(
            state,
            config={"recursion_limit": recursion_limit(state["max_iterations"])},
            stream_mode="values",
        ):
            steps = values.get("steps") or []
            for step in steps[emitted:]:
                yield {"event": "step", "step": step}
            emitted = len(steps)
            final = values
        yield {"event": "done", "result": self._finish(final, conversation_id, started)}

    def _start(
        self,
        query: str,
        conversation_id: str | None,
        max_iterations: int | None,
        context: dict[str, str] | None,
    ) -> tuple[str, LoopState]:
        if not query or not str(query).strip():
            raise ValueError("query is required")
        q = str(query).strip()
        cap = max_iterations if max_iterations and max_iterations > 0 else self.default_max_iterations
        conversation_id = conversation_id or str(uuid.uuid4())
        logger.info("[agent_service] START query=%r conversation_id=%s max_iterations=%d", q, conversation_id, cap)
        return conversation_id, initial_state(q, context, cap)

    def _finish(self, final: LoopState, conversation_id: str, started: float) -> AgentResult:
        status = final["status"]
        steps = final.get("steps") or []
        verification = final.get("verification")
        answer = final.get("answer") or ""
        confidence = verification.confidence if verification is not None and status != LoopStatus.FAILED else 0.0
        result = AgentResult(
            conversation_id=conversation_id,
            query=final["original_query"],
            answer=answer,
            confidence=confidence,
            # Integer division: a run aborted mid-iteration is not counted
            iterations=len(steps) // STEPS_PER_ITERATION,
            tools_used=list(final.get("tools_used") or []),
            sources=list(final.get("sources") or []),
            process_time_ms=round((time.perf_counter() - started) * 1000, 2),
            steps=steps,
            need_more_info=status == LoopStatus.NEEDS_INFO,
            follow_up_question=final.get("follow_up_question") if status == LoopStatus.NEEDS_INFO else None,
        )
        if status != LoopStatus.FAILED:
            self.store.append(conversation_id, final["original_query"], answer)
        logger.info(
            "[agent_service] END status=%s iterations=%d confidence=%.2f steps=%d time_ms=%.2f",
            status.value, result.iterations, result.confidence, len(steps), result.process_time_ms,
        )
        return result
