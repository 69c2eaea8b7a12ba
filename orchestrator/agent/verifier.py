"""
Verify phase: ask the LLM whether the draft answer is complete.

The two fallbacks are kept apart on purpose: an unreachable LLM yields
TRANSPORT_FAILURE_CONFIDENCE, an unreadable assessment yields
PARSE_FAILURE_CONFIDENCE. Both report is_complete=True.
"""

import logging

from pydantic import ValidationError

from orchestrator.agent.json_payload import extract_json_object
from orchestrator.agent.llm import CompleteFn
from orchestrator.core.config import VERIFY_MAX_TOKENS
from orchestrator.core.errors import PayloadParseError, ServiceUnavailableError
from orchestrator.schemas.plan import Verification

logger = logging.getLogger(__name__)

TRANSPORT_FAILURE_CONFIDENCE = 0.5
PARSE_FAILURE_CONFIDENCE = 0.7


def build_verify_prompt(query: str, answer: str) -> str:
    return f"""Evaluate this answer:

Question: "{query}"
Answer: "{answer}"

Is the answer:
1. Complete (addresses the question fully)
2. Accurate (based on the information)
3. Relevant (stays on topic)

Respond in JSON:
{{
  "is_complete": true/false,
  "confidence": 0.0-1.0,
  "missing_info": "what's missing (if not complete)"
}}"""


def verify_answer(query: str, answer: str, complete: CompleteFn) -> Verification:
    logger.info("[verifier:verify_answer] IN  query=%r answer_len=%d", query, len(answer))
    try:
        response_text = complete(build_verify_prompt(query, answer), VERIFY_MAX_TOKENS)
    except ServiceUnavailableError as e:
        logger.warning("[verifier:verify_answer] verification failed: %s", e.message)
        return Verification(is_complete=True, confidence=TRANSPORT_FAILURE_CONFIDENCE, missing_info="")
    try:
        verification = Verification.model_validate(extract_json_object(response_text))
    except (PayloadParseError, ValidationError) as e:
        logger.warning("[verifier:verify_answer] failed to parse verification: %s", e)
        return Verification(is_complete=True, confidence=PARSE_FAILURE_CONFIDENCE, missing_info="")
    logger.info(
        "[verifier:verify_answer] OUT confidence=%.2f complete=%s missing_info=%r",
        verification.confidence, verification.is_complete, verification.missing_info,
    )
    return verification
