"""
Tool invocation through the MCP gateway.

The gateway forwards {tool, params} to the registered tool endpoint and relays
its JSON result. A 404 means the tool is not registered.
"""

import logging
from typing import Any

import httpx

from orchestrator.core.config import MCP_GATEWAY_URL, TOOLS_HTTP_TIMEOUT
from orchestrator.core.errors import ServiceUnavailableError, ToolNotFoundError

logger = logging.getLogger(__name__)


def _http_client() -> httpx.Client:
    return httpx.Client(timeout=TOOLS_HTTP_TIMEOUT)


def invoke_tool(tool_name: str, parameters: dict[str, Any]) -> dict[str, Any]:
    """
    Call a tool by name. Returns the tool's JSON object (non-object results are
    wrapped as {"result": value}). Raises ToolNotFoundError or ServiceUnavailableError.
    """
    logger.info("[tools:invoke_tool] IN  tool=%r params=%r", tool_name, parameters)
    try:
        with _http_client() as client:
            response = client.post(
                f"{MCP_GATEWAY_URL}/tools/call",
                json={"tool": tool_name, "params": parameters},
            )
        if response.status_code == 404:
            raise ToolNotFoundError(tool_name)
        if response.status_code >= 400:
            raise ServiceUnavailableError(f"tool gateway error {response.status_code}: {response.text[:200]}")
        data = response.json()
    except httpx.HTTPError as e:
        raise ServiceUnavailableError(f"tool call failed: {e}") from e
    except ValueError as e:
        raise ServiceUnavailableError(f"tool gateway returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        data = {"result": data}
    logger.info("[tools:invoke_tool] OUT tool=%s keys=%s", tool_name, sorted(data)[:8])
    return data
