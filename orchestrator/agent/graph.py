"""
LangGraph agent loop: analyze → plan → execute → synthesize → verify → decide → (loop or stop).

Each iteration records exactly five steps (decide records none). The loop stops when
the verifier is satisfied, when the iteration cap is reached (need more info), or
immediately when planning cannot reach the LLM.
"""

import logging
import time
from enum import Enum
from typing import Literal, TypedDict

from langgraph.graph import END, StateGraph

from orchestrator.agent.analyzer import ANALYSIS_FALLBACK, analyze_query
from orchestrator.agent.executor import InvokeToolFn, RetrieveFn, execute_actions
from orchestrator.agent.llm import CompleteFn
from orchestrator.agent.planner import create_plan
from orchestrator.agent.synthesizer import SYNTHESIS_FALLBACK, synthesize_answer
from orchestrator.agent.verifier import verify_answer
from orchestrator.core.errors import ServiceUnavailableError
from orchestrator.schemas.plan import ActionResult, ExecutionPlan, Verification
from orchestrator.schemas.query import StepRecord, StepType

logger = logging.getLogger(__name__)

FOLLOW_UP_PREFIX = "I need more information to answer completely. Can you provide more context about: "
STEPS_PER_ITERATION = 5


class LoopStatus(str, Enum):
    RUNNING = "running"
    DONE = "done"
    NEEDS_INFO = "needs_info"
    FAILED = "failed"


class LoopState(TypedDict):
    original_query: str
    query: str  # refined between iterations
    context: dict[str, str]
    max_iterations: int
    iteration: int
    analysis: str
    plan: ExecutionPlan | None
    results: list[ActionResult]
    answer: str
    verification: Verification | None
    steps: list[StepRecord]
    tools_used: list[str]
    sources: list[str]
    status: LoopStatus
    follow_up_question: str | None


def initial_state(query: str, context: dict[str, str] | None, max_iterations: int) -> LoopState:
    return {
        "original_query": query,
        "query": query,
        "context": dict(context or {}),
        "max_iterations": max_iterations,
        "iteration": 0,
        "analysis": "",
        "plan": None,
        "results": [],
        "answer": "",
        "verification": None,
        "steps": [],
        "tools_used": [],
        "sources": [],
        "status": LoopStatus.RUNNING,
        "follow_up_question": None,
    }


def recursion_limit(max_iterations: int) -> int:
    """Enough graph supersteps for max_iterations full passes (six nodes each) plus slack."""
    return max_iterations * 6 + 5


def refine_query(query: str, missing_info: str) -> str:
    """Query for the next iteration: ask specifically about what the verifier found missing."""
    if not missing_info:
        return query
    return f"{query} (specifically about: {missing_info})"


def _merge_unique(existing: list[str], new: list[str | None]) -> list[str]:
    out = list(existing)
    for item in new:
        if item and item not in out:
            out.append(item)
    return out


def _with_step(
    state: LoopState,
    step_type: StepType,
    description: str,
    started: float,
    result: str = "",
    success: bool = True,
) -> list[StepRecord]:
    steps = list(state.get("steps") or [])
    steps.append(
        StepRecord(
            step_number=len(steps) + 1,
            type=step_type,
            description=description,
            result=result,
            success=success,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
    )
    return steps


def build_graph(
    complete: CompleteFn,
    retrieve: RetrieveFn,
    invoke_tool: InvokeToolFn,
    confidence_threshold: float,
):
    """
    Build and compile the agent loop graph around the given collaborators.
    analyze → plan → (END on plan failure) → execute → synthesize → verify → decide → (analyze | END).
    """

    def _analyze(state: LoopState) -> dict:
        iteration = (state.get("iteration") or 0) + 1
        logger.info("[graph:analyze] iteration %d/%d query=%r", iteration, state["max_iterations"], state["query"])
        started = time.perf_counter()
        analysis = analyze_query(state["query"], state.get("context"), complete)
        steps = _with_step(
            state, StepType.ANALYZE, "Analyze user query and intent", started,
            result=analysis, success=analysis != ANALYSIS_FALLBACK,
        )
        return {"iteration": iteration, "analysis": analysis, "steps": steps}

    def _plan(state: LoopState) -> dict:
        started = time.perf_counter()
        try:
            plan = create_plan(state["query"], state.get("context"), complete)
        except ServiceUnavailableError as e:
            logger.error("[graph:plan] planning failed, stopping: %s", e.message)
            steps = _with_step(state, StepType.PLAN, "Create execution plan", started, result=e.message, success=False)
            return {
                "plan": None,
                "steps": steps,
                "status": LoopStatus.FAILED,
                "answer": f"Failed to create plan: {e.message}",
            }
        steps = _with_step(state, StepType.PLAN, "Create execution plan", started, result=plan.reasoning)
        logger.info("[graph:plan] plan created with %d actions", len(plan.actions))
        return {"plan": plan, "steps": steps}

    def _execute(state: LoopState) -> dict:
        started = time.perf_counter()
        actions = state["plan"].actions if state.get("plan") else []
        results = execute_actions(actions, retrieve, invoke_tool)
        failed = sum(1 for r in results if r.failed)
        steps = _with_step(
            state, StepType.EXECUTE, f"Execute {len(actions)} actions", started,
            result=f"Executed {len(results)} actions ({failed} failed)",
            success=not results or failed < len(results),
        )
        return {
            "results": results,
            "steps": steps,
            "tools_used": _merge_unique(state.get("tools_used") or [], [r.tool for r in results]),
            "sources": _merge_unique(state.get("sources") or [], [r.source for r in results]),
        }

    def _synthesize(state: LoopState) -> dict:
        started = time.perf_counter()
        answer = synthesize_answer(state["query"], state.get("results") or [], complete)
        steps = _with_step(
            state, StepType.SYNTHESIZE, "Synthesize final answer", started,
            result=f"Generated answer ({len(answer)} chars)", success=answer != SYNTHESIS_FALLBACK,
        )
        return {"answer": answer, "steps": steps}

    def _verify(state: LoopState) -> dict:
        started = time.perf_counter()
        verification = verify_answer(state["query"], state.get("answer") or "", complete)
        steps = _with_step(
            state, StepType.VERIFY, "Verify answer quality", started,
            result=f"Confidence: {verification.confidence:.2f}, Complete: {verification.is_complete}",
        )
        return {"verification": verification, "steps": steps}

    def _decide(state: LoopState) -> dict:
        verification = state["verification"]
        iteration = state["iteration"]
        if verification.is_satisfied(confidence_threshold):
            logger.info("[graph:decide] answer satisfactory (confidence=%.2f)", verification.confidence)
            return {"status": LoopStatus.DONE}
        if iteration >= state["max_iterations"]:
            logger.info("[graph:decide] max iterations reached (confidence=%.2f)", verification.confidence)
            return {
                "status": LoopStatus.NEEDS_INFO,
                "follow_up_question": FOLLOW_UP_PREFIX + verification.missing_info,
            }
        refined = refine_query(state["query"], verification.missing_info)
        logger.info("[graph:decide] not satisfactory (confidence=%.2f), iterating with query=%r", verification.confidence, refined)
        return {"query": refined}

    def _route_after_plan(state: LoopState) -> Literal["execute", "__end__"]:
        return END if state.get("status") == LoopStatus.FAILED else "execute"

    def _route_after_decide(state: LoopState) -> Literal["analyze", "__end__"]:
        return "analyze" if state.get("status") == LoopStatus.RUNNING else END

    graph = StateGraph(LoopState)

    graph.add_node("analyze", _analyze)
    graph.add_node("plan", _plan)
    graph.add_node("execute", _execute)
    graph.add_node("synthesize", _synthesize)
    graph.add_node("verify", _verify)
    graph.add_node("decide", _decide)

    graph.set_entry_point("analyze")
    graph.add_edge("analyze", "plan")
    graph.add_conditional_edges("plan", _route_after_plan, {"execute": "execute", END: END})
    graph.add_edge("execute", "synthesize")
    graph.add_edge("synthesize", "verify")
    graph.add_edge("verify", "decide")
    graph.add_conditional_edges("decide", _route_after_decide, {"analyze": "analyze", END: END})

    return graph.compile()
