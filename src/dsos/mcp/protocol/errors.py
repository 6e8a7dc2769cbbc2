"""Protocol error types and error codes."""

import dataclasses
from dataclasses import dataclass
from typing import Any, ClassVar

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Implementation-defined range (-32000 to -32099)
SERVER_ERROR = -32000
REQUEST_TIMEOUT = -32001

ERROR_MESSAGES = {
    PARSE_ERROR: "Parse error",
    INVALID_REQUEST: "Invalid Request",
    METHOD_NOT_FOUND: "Method not found",
    INVALID_PARAMS: "Invalid params",
    INTERNAL_ERROR: "Internal error",
    SERVER_ERROR: "Server error",
    REQUEST_TIMEOUT: "Request timeout",
}

INITIALIZATION_GUIDANCE = (
    "The Figma MCP server rejected the handshake. Restart the desktop MCP "
    "server from Dev Mode (Shift + D) and try again."
)

SESSION_LOST_GUIDANCE = "MCP connection lost. Please try again."

TOOL_GUIDANCE = (
    "The Figma MCP server could not complete the request. Check that the file "
    "is open in the Figma desktop app and that the selection still exists."
)


@dataclass(eq=False)
class MCPError(Exception):
    """
    MCP protocol error.

    Represents an error object returned by the server (code and message
    preserved verbatim) plus remediation text for the user.
    """

    code: int
    message: str
    data: dict[str, Any] | None = None
    guidance: str | None = None

    retryable: ClassVar[bool] = False

    def __post_init__(self):
        # Set exception message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-RPC error object."""
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            error["data"] = self.data
        return error

    @classmethod
    def from_dict(cls, error: dict[str, Any], guidance: str | None = None) -> "MCPError":
        """Create from JSON-RPC error object."""
        data = error.get("data")
        if data is not None and not isinstance(data, dict):
            data = {"value": data}
        extra = {"guidance": guidance} if guidance is not None else {}
        return cls(
            code=error.get("code", INTERNAL_ERROR),
            message=error.get("message", "Unknown error"),
            data=data,
            **extra,
        )

    @classmethod
    def timeout(cls, timeout_seconds: float) -> "MCPError":
        """Create a request timeout error."""
        return cls(
            code=REQUEST_TIMEOUT,
            message=f"Request timed out after {timeout_seconds}s",
            data={"timeout": timeout_seconds},
        )

    def with_guidance(self, guidance: str) -> "MCPError":
        """Return a copy of this error (same type) carrying new guidance."""
        return dataclasses.replace(self, guidance=guidance)

    def __str__(self) -> str:
        base = f"MCP error: {self.message} (code: {self.code})"
        if self.guidance:
            base += f"\n\n{self.guidance}"
        return base

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code}, message={self.message!r}, "
            f"data={self.data})"
        )


@dataclass(eq=False, repr=False)
class InitializationError(MCPError):
    """The initialize exchange failed at the application level."""

    guidance: str | None = INITIALIZATION_GUIDANCE


@dataclass(eq=False, repr=False)
class SessionLostError(MCPError):
    """
    The server forgot or invalidated the handshake.

    The session has already been reset when this is raised; calling again
    performs a fresh handshake.
    """

    guidance: str | None = SESSION_LOST_GUIDANCE

    retryable: ClassVar[bool] = True


@dataclass(eq=False, repr=False)
class ToolInvocationError(MCPError):
    """A tool call failed; the server's code and message are preserved."""

    guidance: str | None = TOOL_GUIDANCE

    @classmethod
    def timeout(cls, timeout_seconds: float) -> "ToolInvocationError":
        """Create a tool-call timeout error."""
        return cls(
            code=REQUEST_TIMEOUT,
            message=f"Tool call timed out after {timeout_seconds}s",
            data={"timeout": timeout_seconds},
        )
