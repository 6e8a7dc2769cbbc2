"""Typed wrappers for the Figma desktop MCP tools."""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import unquote, urlsplit

from dsos.mcp.config import FigmaMCPConfig
from dsos.mcp.protocol.connection import ConnectionManager
from dsos.mcp.protocol.dialect import DialectNegotiator

logger = logging.getLogger(__name__)

DESIGN_CONTEXT_TOOL = "mcp_figma-desktop_get_design_context"
VARIABLE_DEFS_TOOL = "mcp_figma-desktop_get_variable_defs"
SCREENSHOT_TOOL = "mcp_figma-desktop_get_screenshot"

NODE_ID_PARAM = "node-id"
FILE_KEY_PATTERN = re.compile(r"figma\.com/(?:file|design)/([a-zA-Z0-9]+)")


def extract_node_id(url: str) -> str | None:
    """
    Get the protocol-form node id from a Figma share URL.

    Share URLs separate node id segments with dashes (``node-id=12-34``);
    the MCP tools expect colons (``12:34``).

    The value is percent-decoded only; ``+`` is kept as is.

    Returns:
        The node id, or None if the URL is malformed or has no non-empty
        ``node-id`` parameter.
    """
    try:
        query = urlsplit(url).query
    except ValueError:
        return None

    for pair in query.split("&"):
        name, _, value = pair.partition("=")
        if unquote(name) == NODE_ID_PARAM and value:
            return unquote(value).replace("-", ":")
    return None


def extract_file_key(url: str) -> str | None:
    """File key from a ``figma.com/file/...`` or ``figma.com/design/...`` URL."""
    match = FILE_KEY_PATTERN.search(url)
    return match.group(1) if match else None


class FigmaTools:
    """
    The three Figma tools used for component extraction.

    Every call completes the handshake first, then goes through the
    dialect negotiator, so the failure surface is that of
    ``DialectNegotiator.invoke`` plus handshake errors.
    """

    def __init__(
        self,
        connection: ConnectionManager,
        negotiator: DialectNegotiator,
        config: FigmaMCPConfig,
    ):
        self.connection = connection
        self.negotiator = negotiator
        self.config = config

    async def call(self, tool_name: str, params: dict[str, Any]) -> Any:
        """Ensure the session and invoke one tool."""
        await self.connection.ensure_ready()
        return await self.negotiator.invoke(tool_name, params)

    async def get_design_context(
        self,
        node_id: str,
        client_languages: str | None = None,
        client_frameworks: str | None = None,
    ) -> Any:
        """
        Get layout and code context for a node.

        Args:
            node_id: Protocol-form node id (``12:34``).
            client_languages: Comma separated target languages.
            client_frameworks: Comma separated target frameworks.
        """
        return await self.call(
            DESIGN_CONTEXT_TOOL,
            {
                "nodeId": node_id,
                "clientLanguages": client_languages or self.config.client_languages,
                "clientFrameworks": client_frameworks or self.config.client_frameworks,
            },
        )

    async def get_variable_defs(self, node_id: str) -> Any:
        """Get the variables bound to a node."""
        return await self.call(VARIABLE_DEFS_TOOL, {"nodeId": node_id})

    async def get_screenshot(self, node_id: str) -> Any:
        """Get a rendered screenshot of a node."""
        return await self.call(SCREENSHOT_TOOL, {"nodeId": node_id})
