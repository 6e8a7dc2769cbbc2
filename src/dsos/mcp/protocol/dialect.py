"""Tool-call request shaping and the Direct -> Wrapped fallback.

Depending on version, the Figma desktop server accepts tool calls either as
direct JSON-RPC methods named after the tool, or wrapped in the standard
``tools/call`` method. Which one is in effect is not advertised, so a call is
tried Direct first and retried once Wrapped when the server's error says it
did not recognise the request as part of an initialized session.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum, auto
from typing import Any

from dsos.mcp.protocol.codec import ParseFailure, decode
from dsos.mcp.protocol.connection import ConnectionManager
from dsos.mcp.protocol.errors import (
    SessionLostError,
    ToolInvocationError,
    INTERNAL_ERROR,
    PARSE_ERROR,
    SERVER_ERROR,
)
from dsos.mcp.protocol.messages import JSONRPCError, JSONRPCRequest
from dsos.mcp.transport.types import HTTPReply

logger = logging.getLogger(__name__)

TOOLS_CALL_METHOD = "tools/call"
PROTOCOL_VERSION_HEADER = "MCP-Protocol-Version"

# Observed server wording, not a documented contract.
# TODO: replace with a capability check once the server advertises its dialect.
DIALECT_MISMATCH_HINT = "initialize request"
SESSION_LOST_HINT = "initialize"
SESSION_LOST_CODE = SERVER_ERROR


class Dialect(Enum):
    """Request-shaping convention for tool calls."""

    DIRECT = auto()
    WRAPPED = auto()


class ErrorSignal(Enum):
    """What a server error means for the caller."""

    DIALECT_MISMATCH = auto()
    SESSION_LOST = auto()
    OTHER = auto()


def classify_error(error: JSONRPCError, http_ok: bool) -> ErrorSignal:
    """
    Classify a server error by its code and message.

    Args:
        error: The decoded error object.
        http_ok: Whether the reply carrying it had a 2xx status.

    Returns:
        DIALECT_MISMATCH for a rejected Direct call (non-2xx reply asking for
        an initialize request), SESSION_LOST for a 2xx reply whose error says
        the handshake is missing, OTHER for everything else.
    """
    message = (error.message or "").lower()
    if not http_ok and DIALECT_MISMATCH_HINT in message:
        return ErrorSignal.DIALECT_MISMATCH
    if http_ok and error.code == SESSION_LOST_CODE and SESSION_LOST_HINT in message:
        return ErrorSignal.SESSION_LOST
    return ErrorSignal.OTHER


def shape_request(dialect: Dialect, tool_name: str, params: dict[str, Any]) -> JSONRPCRequest:
    """Build the request for a tool call in the given dialect."""
    if dialect is Dialect.DIRECT:
        return JSONRPCRequest(method=tool_name, params=params)
    return JSONRPCRequest(
        method=TOOLS_CALL_METHOD,
        params={"name": tool_name, "arguments": params},
    )


class DialectNegotiator:
    """
    Performs single tool calls against a READY session.

    Each call is Attempt(DIRECT), then on DIALECT_MISMATCH Attempt(WRAPPED),
    which is terminal. Nothing else is retried.
    """

    def __init__(self, connection: ConnectionManager, request_timeout: float = 60.0):
        self.connection = connection
        self.request_timeout = request_timeout

    async def invoke(
        self,
        tool_name: str,
        params: dict[str, Any],
        timeout: float | None = None,
    ) -> Any:
        """
        Call a tool and return its result.

        The caller must have completed ``ensure_ready()``.

        Args:
            tool_name: Tool identifier, sent as the method (DIRECT) or as
                ``name`` (WRAPPED).
            params: Tool arguments.
            timeout: Bound for the whole call including the fallback
                (defaults to ``request_timeout``).

        Returns:
            The ``result`` member of the response.

        Raises:
            SessionLostError: The server dropped the session; it has been
                reset and the call may be repeated.
            ToolInvocationError: Any other server-reported failure.
            TransportError: The request could not be sent.
        """
        effective_timeout = timeout if timeout is not None else self.request_timeout
        try:
            return await asyncio.wait_for(
                self._invoke(tool_name, params),
                timeout=effective_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Tool {tool_name} timed out after {effective_timeout}s")
            raise ToolInvocationError.timeout(effective_timeout) from e

    async def _invoke(self, tool_name: str, params: dict[str, Any]) -> Any:
        logger.debug(f"Calling tool {tool_name} with params {params}")
        reply = await self._attempt(Dialect.DIRECT, tool_name, params)

        if not reply.ok:
            error = self._error_from_failed_reply(reply)
            if classify_error(error, http_ok=False) is ErrorSignal.DIALECT_MISMATCH:
                logger.warning(
                    f"Direct call to {tool_name} rejected, retrying as {TOOLS_CALL_METHOD}"
                )
                reply = await self._attempt(Dialect.WRAPPED, tool_name, params)
            else:
                raise ToolInvocationError.from_dict(error.to_dict())

        return self._settle(tool_name, reply)

    async def _attempt(
        self,
        dialect: Dialect,
        tool_name: str,
        params: dict[str, Any],
    ) -> HTTPReply:
        request = shape_request(dialect, tool_name, params)
        return await self.connection.send(
            request.to_dict(),
            headers={PROTOCOL_VERSION_HEADER: self.connection.config.protocol_version},
        )

    def _error_from_failed_reply(self, reply: HTTPReply) -> JSONRPCError:
        """Error object carried by a non-2xx reply, or one built from the status."""
        envelope = decode(reply.text)
        if not isinstance(envelope, ParseFailure) and envelope.is_error:
            return envelope.error
        return JSONRPCError(
            code=INTERNAL_ERROR,
            message=f"MCP server error: HTTP {reply.status_code}",
            data={"body": reply.text[:100]} if reply.text else None,
        )

    def _settle(self, tool_name: str, reply: HTTPReply) -> Any:
        """Turn the final reply into a result or a classified error."""
        if not reply.ok:
            error = self._error_from_failed_reply(reply)
            logger.error(f"Tool {tool_name} failed: {error.message} (code: {error.code})")
            raise ToolInvocationError.from_dict(error.to_dict())

        envelope = decode(reply.text)
        if isinstance(envelope, ParseFailure):
            logger.error(f"Tool {tool_name} returned an unreadable body: {envelope.preview!r}")
            raise ToolInvocationError(
                code=PARSE_ERROR,
                message=str(envelope),
                data={"preview": envelope.preview},
            )

        if envelope.is_error:
            error = envelope.error
            if classify_error(error, http_ok=True) is ErrorSignal.SESSION_LOST:
                logger.warning(f"Session lost during {tool_name}: {error.message}")
                self.connection.reset()
                raise SessionLostError.from_dict(error.to_dict())
            logger.error(f"Tool {tool_name} error: {error.message} (code: {error.code})")
            raise ToolInvocationError.from_dict(error.to_dict())

        return envelope.result
