"""
Shared fakes for the three collaborators so tests need no LLM, retrieval or tool service.
"""

import json
from typing import Any

import pytest

from orchestrator.core.conversation_store import ConversationStore
from orchestrator.core.errors import ServiceUnavailableError
from orchestrator.services.agent_service import AgentOrchestrator

KYC_QUERY = "What are the KYC requirements?"

PLAN_JSON = json.dumps(
    {
        "rewritten_queries": ["KYC requirements merchants", "merchant identity verification"],
        "actions": [
            {
                "type": "search_rag",
                "description": "Search KYC docs",
                "parameters": {"query": "KYC requirements", "collection": "kyc_docs", "top_k": 3},
            },
            {
                "type": "call_tool",
                "description": "Score merchant risk",
                "parameters": {"tool": "risk-score", "merchant_id": "m-1"},
            },
            {"type": "synthesize", "description": "Combine findings", "parameters": {}},
        ],
        "reasoning": "Search the KYC partition and score the merchant.",
    }
)


def verification_json(confidence: float, is_complete: bool, missing_info: str = "") -> str:
    return json.dumps({"is_complete": is_complete, "confidence": confidence, "missing_info": missing_info})


class ScriptedLLM:
    """
    Fake text-completion collaborator. Recognizes the phase from the prompt's
    opening line and returns the scripted reply. A list of verifications is
    consumed one per call (the last one repeats).
    """

    MARKERS = {
        "analyze": "Analyze this user query",
        "plan": "You are an AI agent planning",
        "synthesize": "Based on the information below",
        "verify": "Evaluate this answer",
    }

    def __init__(
        self,
        analysis: str = "A KYC compliance question of medium complexity.",
        plan: str = PLAN_JSON,
        answer: str = "Merchants must provide government ID and proof of address.",
        verification: str | list[str] | None = None,
        fail: tuple[str, ...] = (),
    ) -> None:
        self.replies = {"analyze": analysis, "plan": plan, "synthesize": answer}
        if verification is None:
            verification = verification_json(0.9, True)
        self.verifications = verification if isinstance(verification, list) else [verification]
        self.fail = set(fail)
        self.prompts: dict[str, list[str]] = {phase: [] for phase in self.MARKERS}

    def __call__(self, prompt: str, max_new_tokens: int = 512) -> str:
        phase = next(p for p, marker in self.MARKERS.items() if prompt.startswith(marker))
        self.prompts[phase].append(prompt)
        if phase in self.fail:
            raise ServiceUnavailableError(f"{phase} model unreachable")
        if phase == "verify":
            idx = min(len(self.prompts["verify"]), len(self.verifications)) - 1
            return self.verifications[idx]
        return self.replies[phase]


class FakeRetrieval:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, int]] = []

    def __call__(self, query: str, collection: str, top_k: int) -> dict[str, Any]:
        self.calls.append((query, collection, top_k))
        return {
            "query": query,
            "results": [
                {
                    "id": "chunk-1",
                    "score": 0.91,
                    "text": "Merchants must submit government-issued ID.",
                    "document_id": "doc-7",
                    "source": "kyc_policy.pdf",
                    "metadata": {"document_type": "policy"},
                }
            ],
            "count": 1,
            "process_time_ms": 3.2,
        }


class FakeTools:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def __call__(self, tool_name: str, parameters: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((tool_name, parameters))
        return {"tool": tool_name, "risk_score": 42, "risk_level": "medium"}


@pytest.fixture
def retrieval() -> FakeRetrieval:
    return FakeRetrieval()


@pytest.fixture
def tools() -> FakeTools:
    return FakeTools()


@pytest.fixture
def store() -> ConversationStore:
    return ConversationStore()


@pytest.fixture
def make_orchestrator(retrieval: FakeRetrieval, tools: FakeTools, store: ConversationStore):
    def _make(llm: ScriptedLLM, **kwargs: Any) -> AgentOrchestrator:
        kwargs.setdefault("confidence_threshold", 0.7)
        return AgentOrchestrator(complete=llm, retrieve=retrieval, invoke_tool=tools, store=store, **kwargs)

    return _make
