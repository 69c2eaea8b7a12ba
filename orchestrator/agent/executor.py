"""
Execute phase: run each planned action against its collaborator.

Best effort: one result per action, in order. A failing action becomes a
failed ActionResult and never stops its siblings.
"""

import logging
from typing import Any, Callable

from orchestrator.core.config import DEFAULT_COLLECTION, DEFAULT_TOP_K, RETRIEVAL_SOURCE_NAME
from orchestrator.core.errors import CollaboratorError
from orchestrator.schemas.plan import Action, ActionResult, ActionStatus, ActionType

logger = logging.getLogger(__name__)

RetrieveFn = Callable[[str, str, int], dict[str, Any]]
InvokeToolFn = Callable[[str, dict[str, Any]], dict[str, Any]]


def _as_top_k(value: Any) -> int:
    """Model output may give top_k as int, float or string; anything unusable means the default."""
    try:
        top_k = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_TOP_K
    return top_k if top_k > 0 else DEFAULT_TOP_K


def _as_str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _failed(action: Action, message: str) -> ActionResult:
    return ActionResult(action_type=action.type, status=ActionStatus.FAILED, error=message)


def _run_retrieve(action: Action, retrieve: RetrieveFn) -> ActionResult:
    params = action.parameters
    query = _as_str(params.get("query")) or "default query"
    collection = _as_str(params.get("collection")) or DEFAULT_COLLECTION
    top_k = _as_top_k(params.get("top_k"))
    data = retrieve(query, collection, top_k)
    return ActionResult(
        action_type=action.type,
        status=ActionStatus.SUCCESS,
        data=data,
        source=RETRIEVAL_SOURCE_NAME,
    )


def _run_tool(action: Action, invoke_tool: InvokeToolFn) -> ActionResult:
    tool_name = _as_str(action.parameters.get("tool"))
    if not tool_name:
        return _failed(action, "tool name required")
    data = invoke_tool(tool_name, dict(action.parameters))
    return ActionResult(action_type=action.type, status=ActionStatus.SUCCESS, data=data, tool=tool_name)


def execute_action(action: Action, retrieve: RetrieveFn, invoke_tool: InvokeToolFn) -> ActionResult:
    kind = action.kind
    try:
        if kind is ActionType.RETRIEVE:
            return _run_retrieve(action, retrieve)
        if kind is ActionType.INVOKE_TOOL:
            return _run_tool(action, invoke_tool)
    except CollaboratorError as e:
        return _failed(action, e.message)
    if kind is ActionType.SYNTHESIZE:
        # Synthesis happens in its own phase
        return ActionResult(action_type=action.type, status=ActionStatus.DEFERRED)
    return _failed(action, f"unknown action type: {action.type}")


def execute_actions(
    actions: list[Action],
    retrieve: RetrieveFn,
    invoke_tool: InvokeToolFn,
) -> list[ActionResult]:
    """Return exactly one ActionResult per action, preserving order."""
    results: list[ActionResult] = []
    for i, action in enumerate(actions, 1):
        logger.info("[executor:execute_actions] action %d/%d type=%s", i, len(actions), action.type)
        result = execute_action(action, retrieve, invoke_tool)
        if result.failed:
            logger.warning("[executor:execute_actions] action %d failed: %s", i, result.error)
        results.append(result)
    logger.info(
        "[executor:execute_actions] OUT results=%d failed=%d",
        len(results), sum(1 for r in results if r.failed),
    )
    return results
