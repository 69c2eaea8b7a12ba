"""
Application errors for clean API error handling.

CollaboratorError covers anything that goes wrong talking to the retrieval,
tool-invocation or text-completion services. The executor turns these into
failed action results; the planner lets ServiceUnavailableError propagate so
the loop can stop.
"""


class CollaboratorError(Exception):
    """Base class for failures reported by an external collaborator."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ServiceUnavailableError(CollaboratorError):
    """Raised when a required service (LLM, retrieval, tool gateway) is unreachable, misconfigured or returns garbage."""


class ToolNotFoundError(CollaboratorError):
    """Raised when the tool gateway does not know the requested tool."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"tool not found: {tool_name}")


class PayloadParseError(ValueError):
    """Raised when no JSON object can be extracted from model output."""
