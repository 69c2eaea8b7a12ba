"""
Plan phase: ask the LLM for a JSON execution plan.

Parse problems never fail the request: an unreadable plan becomes the default
single-search plan. Transport problems (ServiceUnavailableError) are raised to
the caller, which stops the loop.
"""

import logging
from typing import Any

from pydantic import ValidationError

from orchestrator.agent.analyzer import format_context
from orchestrator.agent.json_payload import extract_json_object
from orchestrator.agent.llm import CompleteFn
from orchestrator.core.config import (
    AVAILABLE_TOOLS,
    DEFAULT_COLLECTION,
    DEFAULT_TOP_K,
    KNOWLEDGE_COLLECTIONS,
    PLAN_MAX_TOKENS,
)
from orchestrator.core.errors import PayloadParseError
from orchestrator.schemas.plan import Action, ActionType, ExecutionPlan

logger = logging.getLogger(__name__)

DEFAULT_PLAN_REASONING = "Default plan: search knowledge base"


def build_plan_prompt(query: str, context: dict[str, str] | None = None) -> str:
    collections = ", ".join(KNOWLEDGE_COLLECTIONS)
    tools = ", ".join(AVAILABLE_TOOLS)
    prompt = f"""You are an AI agent planning how to answer a user query.

Query: "{query}"

Available actions:
1. {ActionType.RETRIEVE.value} - Search knowledge base (collections: {collections})
2. {ActionType.INVOKE_TOOL.value} - Call MCP tools (tools: {tools}); put the tool name in parameters.tool
3. {ActionType.SYNTHESIZE.value} - Combine information

Create a plan with 2-4 actions. For each action specify:
- type (one of above)
- description (what this action does)
- parameters (what parameters to pass)

Respond ONLY in JSON format:
{{
  "rewritten_queries": ["query1", "query2"],
  "actions": [
    {{"type": "{ActionType.RETRIEVE.value}", "description": "...", "parameters": {{"query": "...", "collection": "...", "top_k": {DEFAULT_TOP_K}}}}}
  ],
  "reasoning": "Why this plan will work"
}}"""
    context_block = format_context(context)
    if context_block:
        prompt += f"\n\nAdditional context:\n{context_block}"
    return prompt


def default_plan(query: str) -> ExecutionPlan:
    """Single knowledge-base search with the original query."""
    return ExecutionPlan(
        original_query=query,
        rewritten_queries=[query],
        actions=[
            Action(
                type=ActionType.RETRIEVE.value,
                description="Search knowledge base",
                parameters={"query": query, "collection": DEFAULT_COLLECTION, "top_k": DEFAULT_TOP_K},
            )
        ],
        reasoning=DEFAULT_PLAN_REASONING,
    )


def parse_plan(query: str, response_text: str) -> ExecutionPlan:
    """Decode the model's plan; fall back to default_plan() on any decode or shape error."""
    try:
        data: dict[str, Any] = extract_json_object(response_text)
        data["original_query"] = query
        return ExecutionPlan.model_validate(data)
    except (PayloadParseError, ValidationError) as e:
        logger.warning("[planner:parse_plan] failed to parse plan JSON, using default: %s", e)
        return default_plan(query)


def create_plan(query: str, context: dict[str, str] | None, complete: CompleteFn) -> ExecutionPlan:
    """Build an ExecutionPlan for the query. Raises ServiceUnavailableError if the LLM is unreachable."""
    logger.info("[planner:create_plan] IN  query=%r", query)
    prompt = build_plan_prompt(query, context)
    response_text = complete(prompt, PLAN_MAX_TOKENS)
    plan = parse_plan(query, response_text)
    logger.info(
        "[planner:create_plan] OUT actions=%s rewritten=%d",
        [a.type for a in plan.actions], len(plan.rewritten_queries),
    )
    return plan
