"""JSON-RPC 2.0 message types for MCP protocol."""

from dataclasses import dataclass, field
from typing import Any
import uuid


@dataclass
class JSONRPCRequest:
    """
    JSON-RPC 2.0 request message.

    Requests expect a response from the recipient.
    """

    method: str
    params: dict[str, Any] | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    jsonrpc: str = field(default="2.0", init=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        msg: dict[str, Any] = {
            "jsonrpc": self.jsonrpc,
            "method": self.method,
            "id": self.id,
        }
        if self.params is not None:
            msg["params"] = self.params
        return msg

    def __str__(self) -> str:
        return f"Request({self.method}, id={self.id})"


@dataclass
class JSONRPCError:
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            error["data"] = self.data
        return error

    @classmethod
    def from_dict(cls, data: Any) -> "JSONRPCError":
        """
        Create from a JSON value.

        Servers are not always well behaved, so a bare string or a
        non-integer code is tolerated rather than rejected.
        """
        if not isinstance(data, dict):
            return cls(code=-32603, message=str(data))
        code = data.get("code", -32603)
        if not isinstance(code, int) or isinstance(code, bool):
            code = -32603
        message = data.get("message")
        return cls(
            code=code,
            message=message if isinstance(message, str) else "Unknown error",
            data=data.get("data"),
        )


@dataclass
class JSONRPCResponse:
    """
    JSON-RPC 2.0 response message.

    Either result or error must be present, but not both.
    """

    id: str | int | None
    result: Any = None
    error: JSONRPCError | None = None
    jsonrpc: str = field(default="2.0", init=False)

    @property
    def is_error(self) -> bool:
        """Check if this is an error response."""
        return self.error is not None

    @property
    def is_success(self) -> bool:
        """Check if this is a success response."""
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        msg: dict[str, Any] = {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
        }
        if self.error is not None:
            msg["error"] = self.error.to_dict()
        else:
            msg["result"] = self.result
        return msg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JSONRPCResponse":
        """Create from JSON dict."""
        error = None
        if data.get("error") is not None:
            error = JSONRPCError.from_dict(data["error"])
        return cls(
            id=data.get("id"),
            result=data.get("result"),
            error=error,
        )

    def __str__(self) -> str:
        if self.is_error:
            return f"Response(id={self.id}, error={self.error.code})"
        return f"Response(id={self.id}, success)"


@dataclass
class JSONRPCNotification:
    """
    JSON-RPC 2.0 notification message.

    Notifications do not expect a response (no id field).
    """

    method: str
    params: dict[str, Any] | None = None
    jsonrpc: str = field(default="2.0", init=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        msg: dict[str, Any] = {
            "jsonrpc": self.jsonrpc,
            "method": self.method,
        }
        if self.params is not None:
            msg["params"] = self.params
        return msg

    def __str__(self) -> str:
        return f"Notification({self.method})"
