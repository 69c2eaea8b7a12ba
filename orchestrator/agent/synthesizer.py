"""Synthesize phase: draft an answer from every action result, failures included."""

import json
import logging

from orchestrator.agent.llm import CompleteFn
from orchestrator.core.config import SYNTHESIZE_MAX_TOKENS
from orchestrator.core.errors import ServiceUnavailableError
from orchestrator.schemas.plan import ActionResult

logger = logging.getLogger(__name__)

SYNTHESIS_FALLBACK = "Unable to synthesize answer from available information."
SYNTHESIS_EMPTY = "No answer could be generated."


def format_results(results: list[ActionResult]) -> str:
    """Number each result by position and embed it verbatim as JSON."""
    lines = ["Information gathered:", ""]
    for i, result in enumerate(results, 1):
        payload = json.dumps(result.model_dump(mode="json", exclude_none=True), default=str, ensure_ascii=False)
        lines.append(f"{i}. {payload}")
        lines.append("")
    return "\n".join(lines)


def synthesize_answer(query: str, results: list[ActionResult], complete: CompleteFn) -> str:
    logger.info("[synthesizer:synthesize_answer] IN  query=%r results=%d", query, len(results))
    prompt = f"""Based on the information below, answer this question:

Question: "{query}"

{format_results(results)}
Provide a clear, concise answer. If information is insufficient, say so explicitly."""
    try:
        answer = complete(prompt, SYNTHESIZE_MAX_TOKENS).strip()
    except ServiceUnavailableError as e:
        logger.warning("[synthesizer:synthesize_answer] synthesis failed: %s", e.message)
        return SYNTHESIS_FALLBACK
    logger.info("[synthesizer:synthesize_answer] OUT answer_len=%d", len(answer))
    return answer or SYNTHESIS_EMPTY
