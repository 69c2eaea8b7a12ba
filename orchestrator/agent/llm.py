"""
Agent LLM: OpenAI (primary) or Hugging Face (fallback).
When OPENAI_API_KEY is set, uses OpenAI chat completions; otherwise uses HF router.
complete() raises ServiceUnavailableError when no provider answers.
"""

import logging
from typing import Callable

import httpx
from openai import OpenAI, OpenAIError

from orchestrator.core.config import (
    HF_API_KEY,
    HF_CHAT_URL,
    HF_LLM_MODEL,
    LLM_API_TIMEOUT,
    OPENAI_API_KEY,
    OPENAI_LLM_MODEL,
)
from orchestrator.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)

# (prompt, max_new_tokens) -> text; every agent phase takes one of these
CompleteFn = Callable[[str, int], str]


def _http_client() -> httpx.Client:
    return httpx.Client(timeout=LLM_API_TIMEOUT)


def _call_openai(prompt: str, max_new_tokens: int) -> str:
    """Call OpenAI chat completions. Returns generated text."""
    client = OpenAI(api_key=OPENAI_API_KEY, timeout=LLM_API_TIMEOUT)
    try:
        response = client.chat.completions.create(
            model=OPENAI_LLM_MODEL,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_new_tokens,
        )
    except OpenAIError as e:
        raise ServiceUnavailableError(f"OpenAI request failed: {e}") from e
    msg = response.choices[0].message if response.choices else None
    out = (getattr(msg, "content", None) or "").strip()
    logger.info("[llm:openai] OUT response_len=%d", len(out))
    logger.debug("[llm:openai] OUT response_full=%r", out)
    return out


def _call_hf(prompt: str, max_new_tokens: int) -> str:
    """Call Hugging Face router chat completions. Returns generated text."""
    headers = {"Authorization": f"Bearer {HF_API_KEY}", "Content-Type": "application/json"}
    payload = {
        "model": HF_LLM_MODEL,
        "messages": [{"role": "user", "content": prompt}],
        "max_tokens": max_new_tokens,
    }
    try:
        with _http_client() as client:
            response = client.post(HF_CHAT_URL, json=payload, headers=headers)
        if response.status_code != 200:
            raise ServiceUnavailableError(f"HF LLM error {response.status_code}: {response.text[:200]}")
        data = response.json()
    except httpx.HTTPError as e:
        raise ServiceUnavailableError(f"HF LLM request failed: {e}") from e
    except ValueError as e:
        raise ServiceUnavailableError(f"HF LLM returned invalid JSON: {e}") from e
    choices = (data.get("choices") or []) if isinstance(data, dict) else []
    out = ""
    if choices and isinstance(choices[0], dict):
        msg = choices[0].get("message") or {}
        out = (msg.get("content") or "").strip()
    logger.info("[llm:hf] OUT response_len=%d", len(out))
    logger.debug("[llm:hf] OUT response_full=%r", out)
    return out


def complete(prompt: str, max_new_tokens: int = 512) -> str:
    """
    Text completion used by every phase of the agent loop.
    Uses OpenAI when OPENAI_API_KEY is set, else Hugging Face. If OpenAI fails or
    returns empty and HF_API_KEY is set, falls back to HF. Raises ServiceUnavailableError when no
    provider is configured or the last one tried fails.
    """
    logger.info("[llm] IN  prompt_len=%d max_new_tokens=%d", len(prompt), max_new_tokens)
    logger.debug("[llm] prompt_sample=%r", prompt[:500] if len(prompt) > 500 else prompt)
    if not OPENAI_API_KEY and not HF_API_KEY:
        raise ServiceUnavailableError("No LLM configured: set OPENAI_API_KEY or HF_API_KEY")
    if OPENAI_API_KEY:
        try:
            out = _call_openai(prompt, max_new_tokens)
        except ServiceUnavailableError as e:
            if not HF_API_KEY:
                raise
            logger.warning("[llm] OpenAI failed (%s); falling back to Hugging Face", e.message)
        else:
            if out or not HF_API_KEY:
                return out
            logger.info("[llm] OpenAI returned empty; falling back to Hugging Face")
    return _call_hf(prompt, max_new_tokens)
