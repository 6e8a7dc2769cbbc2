"""
Client for the Figma desktop app's embedded MCP server.

Pulls design context, variable bindings and screenshots for a selected
node so they can be stored by the design system backend.

Submodules:
- transport: HTTP POST transport
- protocol: JSON-RPC messages, envelope codec, handshake and dialect fallback
- tools: typed Figma tool calls and URL helpers
- extraction: concurrent component extraction
- normalize: helpers for reading tool payloads
- config: server settings
"""

# Transport layer
from dsos.mcp.transport import (
    StreamableHTTPTransport,
    TransportConfig,
    Transport,
    TransportError,
    ServerUnreachableError,
    TransportTimeoutError,
    SessionError,
)

# Protocol layer
from dsos.mcp.protocol import (
    MCPError,
    InitializationError,
    SessionLostError,
    ToolInvocationError,
    ParseFailure,
    decode,
    Session,
    SessionState,
    ConnectionManager,
    ConnectionStatus,
    Dialect,
    DialectNegotiator,
    ErrorSignal,
    classify_error,
)

from dsos.mcp.config import FigmaMCPConfig, load_figma_config
from dsos.mcp.tools import FigmaTools, extract_file_key, extract_node_id
from dsos.mcp.extraction import (
    ComponentExtractor,
    EmptyResultError,
    ExtractionResult,
    ServerUnavailableError,
    UsageError,
)
from dsos.mcp.client import (
    FigmaMCPClient,
    extract_component,
    get_default_client,
    set_default_client,
)
from dsos.mcp.normalize import (
    DesignNode,
    InvalidDesignContext,
    collections_from_defs,
    format_variable_value,
    node_data_from_context,
    to_design_node,
    variables_from_defs,
)

__all__ = [
    # Transport
    "StreamableHTTPTransport",
    "TransportConfig",
    "Transport",
    "TransportError",
    "ServerUnreachableError",
    "TransportTimeoutError",
    "SessionError",
    # Protocol
    "MCPError",
    "InitializationError",
    "SessionLostError",
    "ToolInvocationError",
    "ParseFailure",
    "decode",
    "Session",
    "SessionState",
    "ConnectionManager",
    "ConnectionStatus",
    "Dialect",
    "DialectNegotiator",
    "ErrorSignal",
    "classify_error",
    # Config
    "FigmaMCPConfig",
    "load_figma_config",
    # Tools
    "FigmaTools",
    "extract_file_key",
    "extract_node_id",
    # Extraction
    "ComponentExtractor",
    "EmptyResultError",
    "ExtractionResult",
    "ServerUnavailableError",
    "UsageError",
    # Client
    "FigmaMCPClient",
    "extract_component",
    "get_default_client",
    "set_default_client",
    # Normalization
    "DesignNode",
    "InvalidDesignContext",
    "collections_from_defs",
    "format_variable_value",
    "node_data_from_context",
    "to_design_node",
    "variables_from_defs",
]
