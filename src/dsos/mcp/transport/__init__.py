"""
MCP Transport Layer.

HTTP POST transport for the Figma desktop MCP server.
"""

from dsos.mcp.transport.types import HTTPReply, TransportConfig, TransportEvent, TransportEventType
from dsos.mcp.transport.base import (
    SERVER_UNREACHABLE_GUIDANCE,
    Transport,
    TransportError,
    ServerUnreachableError,
    TransportTimeoutError,
    SessionError,
)
from dsos.mcp.transport.http import StreamableHTTPTransport

__all__ = [
    "HTTPReply",
    "SERVER_UNREACHABLE_GUIDANCE",
    "Transport",
    "TransportConfig",
    "TransportEvent",
    "TransportEventType",
    "TransportError",
    "ServerUnreachableError",
    "TransportTimeoutError",
    "SessionError",
    "StreamableHTTPTransport",
]
