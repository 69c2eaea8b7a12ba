"""
Tests for the retrieval, tool-gateway and LLM HTTP clients.

Uses httpx.MockTransport so no network is touched.
"""

import json
from unittest.mock import patch

import httpx
import pytest

from orchestrator.agent import llm
from orchestrator.core.errors import ServiceUnavailableError, ToolNotFoundError
from orchestrator.services.retrieval_client import retrieve
from orchestrator.services.tool_client import invoke_tool


def mock_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


class TestRetrieve:
    def test_posts_query_and_returns_results(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "query": "KYC",
                    "results": [{"id": "c1", "score": 0.8, "text": "ID required", "document_id": "d1", "source": "kyc.pdf", "metadata": {}}],
                    "count": 1,
                    "process_time_ms": 12.5,
                },
            )

        with patch("orchestrator.services.retrieval_client._http_client", return_value=mock_client(handler)):
            out = retrieve("KYC", "kyc_docs", 3)

        assert seen[0].url.path == "/retrieve"
        assert json.loads(seen[0].content) == {"query": "KYC", "collection": "kyc_docs", "top_k": 3}
        assert out["count"] == 1
        assert out["results"][0]["source"] == "kyc.pdf"

    @pytest.mark.parametrize(
        "handler",
        [
            refuse,
            lambda request: httpx.Response(500, text="boom"),
            lambda request: httpx.Response(200, text="<html>not json</html>"),
            lambda request: httpx.Response(200, json={"results": "nope"}),
        ],
    )
    def test_failures_are_service_unavailable(self, handler) -> None:
        with patch("orchestrator.services.retrieval_client._http_client", return_value=mock_client(handler)):
            with pytest.raises(ServiceUnavailableError):
                retrieve("KYC", "kyc_docs", 3)


class TestInvokeTool:
    def test_posts_tool_and_params(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"risk_score": 61, "risk_level": "high"})

        with patch("orchestrator.services.tool_client._http_client", return_value=mock_client(handler)):
            out = invoke_tool("risk-score", {"tool": "risk-score", "merchant_data": {"mcc": "7995"}})

        assert seen[0].url.path == "/tools/call"
        assert json.loads(seen[0].content) == {
            "tool": "risk-score",
            "params": {"tool": "risk-score", "merchant_data": {"mcc": "7995"}},
        }
        assert out == {"risk_score": 61, "risk_level": "high"}

    def test_non_object_result_is_wrapped(self) -> None:
        with patch("orchestrator.services.tool_client._http_client", return_value=mock_client(lambda r: httpx.Response(200, json=[1, 2]))):
            assert invoke_tool("web-search", {}) == {"result": [1, 2]}

    def test_unknown_tool(self) -> None:
        handler = lambda request: httpx.Response(404, json={"error": "Tool not found"})
        with patch("orchestrator.services.tool_client._http_client", return_value=mock_client(handler)):
            with pytest.raises(ToolNotFoundError) as exc:
                invoke_tool("fax-machine", {})
        assert exc.value.tool_name == "fax-machine"

    def test_gateway_unreachable(self) -> None:
        with patch("orchestrator.services.tool_client._http_client", return_value=mock_client(refuse)):
            with pytest.raises(ServiceUnavailableError):
                invoke_tool("risk-score", {})


class TestComplete:
    def test_no_provider_configured(self) -> None:
        with patch.object(llm, "OPENAI_API_KEY", ""), patch.object(llm, "HF_API_KEY", ""):
            with pytest.raises(ServiceUnavailableError):
                llm.complete("hello")

    def test_hugging_face_reply(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"choices": [{"message": {"content": "  hi there  "}}]})

        with patch.object(llm, "OPENAI_API_KEY", ""), patch.object(llm, "HF_API_KEY", "hf_test"), \
                patch.object(llm, "_http_client", return_value=mock_client(handler)):
            assert llm.complete("hello", 50) == "hi there"

        body = json.loads(seen[0].content)
        assert body["messages"] == [{"role": "user", "content": "hello"}]
        assert body["max_tokens"] == 50
        assert seen[0].headers["Authorization"] == "Bearer hf_test"

    @pytest.mark.parametrize(
        "handler",
        [refuse, lambda request: httpx.Response(503, text="overloaded")],
    )
    def test_hugging_face_failure_raises(self, handler) -> None:
        with patch.object(llm, "OPENAI_API_KEY", ""), patch.object(llm, "HF_API_KEY", "hf_test"), \
                patch.object(llm, "_http_client", return_value=mock_client(handler)):
            with pytest.raises(ServiceUnavailableError):
                llm.complete("hello")

    def test_openai_failure_falls_back_to_hugging_face(self) -> None:
        handler = lambda request: httpx.Response(200, json={"choices": [{"message": {"content": "from hf"}}]})
        with patch.object(llm, "OPENAI_API_KEY", "sk-test"), patch.object(llm, "HF_API_KEY", "hf_test"), \
                patch.object(llm, "_call_openai", side_effect=ServiceUnavailableError("openai down")), \
                patch.object(llm, "_http_client", return_value=mock_client(handler)):
            assert llm.complete("hello") == "from hf"

    def test_openai_failure_without_fallback_raises(self) -> None:
        with patch.object(llm, "OPENAI_API_KEY", "sk-test"), patch.object(llm, "HF_API_KEY", ""), \
                patch.object(llm, "_call_openai", side_effect=ServiceUnavailableError("openai down")):
            with pytest.raises(ServiceUnavailableError):
                llm.complete("hello")

    def test_empty_openai_reply_falls_back_to_hugging_face(self) -> None:
        handler = lambda request: httpx.Response(200, json={"choices": [{"message": {"content": "from hf"}}]})
        with patch.object(llm, "OPENAI_API_KEY", "sk-test"), patch.object(llm, "HF_API_KEY", "hf_test"), \
                patch.object(llm, "_call_openai", return_value=""), \
                patch.object(llm, "_http_client", return_value=mock_client(handler)):
            assert llm.complete("hello") == "from hf"

    def test_empty_openai_reply_without_fallback_is_returned(self) -> None:
        with patch.object(llm, "OPENAI_API_KEY", "sk-test"), patch.object(llm, "HF_API_KEY", ""), \
                patch.object(llm, "_call_openai", return_value=""):
            assert llm.complete("hello") == ""
