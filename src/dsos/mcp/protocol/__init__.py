"""
MCP Protocol Core.

JSON-RPC 2.0 messages, response decoding, the handshake session and the
tool-call dialect fallback.
"""

from dsos.mcp.protocol.messages import (
    JSONRPCRequest,
    JSONRPCResponse,
    JSONRPCNotification,
    JSONRPCError,
)
from dsos.mcp.protocol.errors import (
    MCPError,
    InitializationError,
    SessionLostError,
    ToolInvocationError,
    PARSE_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    INTERNAL_ERROR,
    SERVER_ERROR,
    REQUEST_TIMEOUT,
)
from dsos.mcp.protocol.codec import ParseFailure, decode
from dsos.mcp.protocol.session import (
    Session,
    SessionState,
    InvalidStateTransition,
)
from dsos.mcp.protocol.connection import (
    ConnectionManager,
    ConnectionStatus,
    SERVER_UNAVAILABLE_GUIDANCE,
)
from dsos.mcp.protocol.dialect import (
    Dialect,
    DialectNegotiator,
    ErrorSignal,
    classify_error,
    shape_request,
)

__all__ = [
    # Messages
    "JSONRPCRequest",
    "JSONRPCResponse",
    "JSONRPCNotification",
    "JSONRPCError",
    # Errors
    "MCPError",
    "InitializationError",
    "SessionLostError",
    "ToolInvocationError",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "SERVER_ERROR",
    "REQUEST_TIMEOUT",
    # Codec
    "ParseFailure",
    "decode",
    # Session
    "Session",
    "SessionState",
    "InvalidStateTransition",
    # Connection
    "ConnectionManager",
    "ConnectionStatus",
    "SERVER_UNAVAILABLE_GUIDANCE",
    # Dialect
    "Dialect",
    "DialectNegotiator",
    "ErrorSignal",
    "classify_error",
    "shape_request",
]
