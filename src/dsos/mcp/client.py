"""Figma desktop MCP client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from dsos.mcp.config import FigmaMCPConfig, load_figma_config
from dsos.mcp.extraction import ComponentExtractor, ExtractionResult
from dsos.mcp.protocol.connection import ConnectionManager, ConnectionStatus
from dsos.mcp.protocol.dialect import DialectNegotiator
from dsos.mcp.protocol.session import Session, SessionState
from dsos.mcp.tools import FigmaTools
from dsos.mcp.transport.http import StreamableHTTPTransport

logger = logging.getLogger(__name__)


class FigmaMCPClient:
    """
    Client for the MCP server embedded in the Figma desktop app.

    Owns one transport and one Session. Safe to share between concurrent
    tasks on the same event loop.

    Example:
        async with FigmaMCPClient() as client:
            result = await client.extract_component(url)
    """

    def __init__(
        self,
        config: FigmaMCPConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            config: Server settings (defaults to load_figma_config()).
            http_transport: Optional httpx transport, mainly for tests.
        """
        self.config = config or load_figma_config()
        self.transport = StreamableHTTPTransport(
            self.config.to_transport_config(),
            http_transport=http_transport,
        )
        self.session = Session()
        self.connection = ConnectionManager(self.transport, self.config, self.session)
        self.negotiator = DialectNegotiator(
            self.connection,
            request_timeout=self.config.request_timeout,
        )
        self.tools = FigmaTools(self.connection, self.negotiator, self.config)
        self.extractor = ComponentExtractor(self.connection, self.tools)

    @property
    def state(self) -> SessionState:
        return self.connection.state

    @property
    def is_ready(self) -> bool:
        return self.connection.is_ready

    async def ensure_ready(self) -> None:
        await self.connection.ensure_ready()

    async def check_connection(self) -> ConnectionStatus:
        return await self.connection.check_connection()

    async def invoke(
        self,
        tool_name: str,
        params: dict[str, Any],
        timeout: float | None = None,
    ) -> Any:
        """Call any tool by name after ensuring the session."""
        await self.connection.ensure_ready()
        return await self.negotiator.invoke(tool_name, params, timeout=timeout)

    async def get_design_context(
        self,
        node_id: str,
        client_languages: str | None = None,
        client_frameworks: str | None = None,
    ) -> Any:
        return await self.tools.get_design_context(
            node_id, client_languages, client_frameworks
        )

    async def get_variable_defs(self, node_id: str) -> Any:
        return await self.tools.get_variable_defs(node_id)

    async def get_screenshot(self, node_id: str) -> Any:
        return await self.tools.get_screenshot(node_id)

    async def extract_component(self, url: str) -> ExtractionResult:
        return await self.extractor.extract_component(url)

    def reset(self) -> None:
        """Force a fresh handshake on the next call."""
        self.connection.reset()

    async def close(self) -> None:
        """Release the HTTP client and forget the session."""
        await self.connection.close()

    async def __aenter__(self) -> "FigmaMCPClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


_default_client: FigmaMCPClient | None = None


def get_default_client() -> FigmaMCPClient:
    """Process-wide client, created on first use."""
    global _default_client
    if _default_client is None:
        _default_client = FigmaMCPClient()
        logger.debug(f"Created default Figma MCP client for {_default_client.config.url}")
    return _default_client


def set_default_client(client: FigmaMCPClient | None) -> None:
    """Replace (or clear, with None) the process-wide client."""
    global _default_client
    _default_client = client


async def extract_component(url: str) -> ExtractionResult:
    """Extract a component using the process-wide client."""
    return await get_default_client().extract_component(url)
