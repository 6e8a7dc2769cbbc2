"""Component extraction: one required and two optional tool calls."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from dsos.mcp.protocol.connection import ConnectionManager
from dsos.mcp.protocol.errors import MCPError, ToolInvocationError, INTERNAL_ERROR
from dsos.mcp.tools import FigmaTools, extract_node_id
from dsos.mcp.transport.base import TransportError

logger = logging.getLogger(__name__)

MISSING_NODE_GUIDANCE = (
    "No node ID found in Figma URL. Please select a specific component in Figma."
)

VERIFY_NODE_GUIDANCE = (
    "Please verify:\n"
    "1. The node ID is correct\n"
    "2. The component exists in the Figma file\n"
    "3. You have access to the file"
)

EMPTY_CONTEXT_GUIDANCE = (
    "Design context is empty. The component may not exist or may not be accessible."
)


def _append_guidance(existing: str | None, extra: str) -> str:
    if existing and extra not in existing:
        return f"{existing}\n\n{extra}"
    return existing or extra


class UsageError(Exception):
    """The request cannot be served as given; no retry will help."""

    def __init__(self, message: str, guidance: str | None = None):
        super().__init__(message)
        self.guidance = guidance

    def __str__(self) -> str:
        if self.guidance and self.guidance != self.args[0]:
            return f"{self.args[0]}\n\n{self.guidance}"
        return self.args[0]


class EmptyResultError(UsageError):
    """The required tool answered, but with nothing."""

    pass


class ServerUnavailableError(Exception):
    """The availability probe failed; no tool calls were made."""

    def __init__(self, guidance: str, cause: Exception | None = None):
        super().__init__(guidance)
        self.guidance = guidance
        self.cause = cause


@dataclass(frozen=True)
class ExtractionResult:
    """Data pulled for one node. Built once per extraction, never cached."""

    node_id: str
    design_context: Any
    variables: Any = None
    screenshot: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Payload for downstream storage, as the tools returned it."""
        return {
            "designContext": self.design_context,
            "variables": self.variables,
            "screenshot": self.screenshot,
        }


class ComponentExtractor:
    """
    Pulls design context, variables and a screenshot for a Figma node.

    The three tool calls run concurrently and are all awaited before the
    outcome is decided. Only the design context is required.
    """

    def __init__(self, connection: ConnectionManager, tools: FigmaTools):
        self.connection = connection
        self.tools = tools

    async def extract_component(self, url: str) -> ExtractionResult:
        """
        Extract a component from a Figma URL.

        Args:
            url: Share URL of a selected node (must carry ``node-id``).

        Returns:
            ExtractionResult with optional parts set to None on failure.

        Raises:
            UsageError: The URL has no node id (no network call is made).
            ServerUnavailableError: The server could not be reached or
                refused the handshake.
            EmptyResultError: Design context came back empty.
            MCPError: The design context call failed; the error type is
                kept and verification guidance appended to its own.
            TransportError: The design context request could not be sent;
                type kept, guidance appended.
        """
        node_id = extract_node_id(url)
        if not node_id:
            raise UsageError(MISSING_NODE_GUIDANCE)

        logger.info(f"Extracting component with node ID: {node_id}")

        status = await self.connection.check_connection()
        if not status.available:
            raise ServerUnavailableError(status.guidance, cause=status.error)

        design_context, variables, screenshot = await asyncio.gather(
            self.tools.get_design_context(node_id),
            self.tools.get_variable_defs(node_id),
            self.tools.get_screenshot(node_id),
            return_exceptions=True,
        )

        if isinstance(design_context, BaseException):
            self._raise_required_failure(design_context)

        if not design_context:
            raise EmptyResultError(EMPTY_CONTEXT_GUIDANCE)

        variables = self._optional("variables", variables)
        screenshot = self._optional("screenshot", screenshot)

        logger.info(
            f"Extracted node {node_id}: design context ✓, "
            f"variables {'✓' if variables else '✗'}, "
            f"screenshot {'✓' if screenshot else '✗'}"
        )

        return ExtractionResult(
            node_id=node_id,
            design_context=design_context,
            variables=variables,
            screenshot=screenshot,
        )

    def _raise_required_failure(self, error: BaseException) -> None:
        if not isinstance(error, Exception):
            # Cancellation and interpreter exits are not extraction failures
            raise error

        logger.error(f"Design context extraction failed: {error}")
        if isinstance(error, (MCPError, TransportError)):
            augmented = error.with_guidance(
                _append_guidance(error.guidance, VERIFY_NODE_GUIDANCE)
            )
        else:
            augmented = ToolInvocationError(
                code=INTERNAL_ERROR,
                message=f"Failed to extract design context: {error}",
                guidance=VERIFY_NODE_GUIDANCE,
            )
        raise augmented from error

    @staticmethod
    def _optional(name: str, value: Any) -> Any:
        if isinstance(value, BaseException):
            if not isinstance(value, Exception):
                raise value
            logger.warning(f"Failed to get {name} (optional): {value}")
            return None
        return value
