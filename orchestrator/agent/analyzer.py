"""Analyze phase: a short free-text reading of the query, recorded in the step trace."""

import logging

from orchestrator.agent.llm import CompleteFn
from orchestrator.core.config import ANALYZE_MAX_TOKENS
from orchestrator.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)

ANALYSIS_FALLBACK = "Unable to analyze query"
ANALYSIS_EMPTY = "Query analysis completed"


def format_context(context: dict[str, str] | None) -> str:
    """Render context entries one per line, sorted by key so prompts are deterministic."""
    if not context:
        return ""
    return "\n".join(f"- {key}: {context[key]}" for key in sorted(context))


def analyze_query(query: str, context: dict[str, str] | None, complete: CompleteFn) -> str:
    """Return the model's analysis, or ANALYSIS_FALLBACK when the LLM is unreachable."""
    logger.info("[analyzer:analyze_query] IN  query=%r context_keys=%s", query, sorted(context or {}))
    prompt = f"""Analyze this user query and provide a brief analysis:

Query: "{query}"

Provide:
1. Query type (question, request, command)
2. Domain (compliance, kyc, risk, general)
3. Intent (what user wants)
4. Complexity (simple, medium, complex)

Answer in 2-3 sentences."""
    context_block = format_context(context)
    if context_block:
        prompt += f"\n\nAdditional context:\n{context_block}"
    try:
        analysis = complete(prompt, ANALYZE_MAX_TOKENS).strip()
    except ServiceUnavailableError as e:
        logger.warning("[analyzer:analyze_query] analysis failed: %s", e.message)
        return ANALYSIS_FALLBACK
    logger.info("[analyzer:analyze_query] OUT analysis_len=%d", len(analysis))
    return analysis or ANALYSIS_EMPTY
