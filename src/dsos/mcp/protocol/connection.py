"""Handshake management for the Figma MCP server."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from dsos.mcp.config import FigmaMCPConfig
from dsos.mcp.transport.base import Transport, TransportError, ServerUnreachableError
from dsos.mcp.transport.types import HTTPReply
from dsos.mcp.protocol.codec import ParseFailure, decode
from dsos.mcp.protocol.errors import (
    MCPError,
    InitializationError,
    INTERNAL_ERROR,
    PARSE_ERROR,
    REQUEST_TIMEOUT,
)
from dsos.mcp.protocol.messages import JSONRPCNotification, JSONRPCRequest
from dsos.mcp.protocol.session import Session, SessionState

logger = logging.getLogger(__name__)

SERVER_UNAVAILABLE_GUIDANCE = (
    "Figma MCP server is not available. Please:\n"
    "1. Open Figma desktop app\n"
    "2. Enable Dev Mode (Shift + D)\n"
    '3. Click "Enable desktop MCP server" in the right sidebar\n'
    "4. Make sure the file is open in desktop app"
)


@dataclass
class ConnectionStatus:
    """Outcome of an availability probe."""

    available: bool
    guidance: str | None = None
    error: Exception | None = None


class ConnectionManager:
    """
    Owns the Session and performs the initialize/initialized handshake.

    Any number of concurrent ``ensure_ready()`` callers share a single
    handshake attempt and all see its outcome. Other components may read
    ``is_ready`` or call ``reset()`` but never touch the Session directly.
    """

    def __init__(
        self,
        transport: Transport,
        config: FigmaMCPConfig,
        session: Session | None = None,
    ):
        self.transport = transport
        self.config = config
        self._session = session or Session()

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def is_ready(self) -> bool:
        """Check if a handshake has completed and not been invalidated."""
        return self._session.is_ready

    @property
    def handshake_count(self) -> int:
        """Number of handshakes started by this manager."""
        return self._session.handshakes

    async def ensure_ready(self) -> None:
        """
        Make sure the handshake has completed.

        Raises:
            ServerUnreachableError: If the server could not be reached.
            InitializationError: If the server rejected the handshake.
            TransportError: For other transport failures.
        """
        # A handshake discarded by reset() finishes without making the
        # session READY; its waiters start or join the current one
        while not self._session.is_ready:
            if self._session.pending is None:
                self._session.transition(SessionState.INITIALIZING)
                self._session.handshakes += 1
                self._session.pending = asyncio.create_task(
                    self._handshake(),
                    name="figma-mcp-handshake",
                )
            else:
                logger.debug("Handshake already in flight, waiting for it")

            # Shielded so one caller's cancellation does not abort the
            # handshake the other callers are waiting on
            await asyncio.shield(self._session.pending)

    async def check_connection(self) -> ConnectionStatus:
        """
        Probe the server by completing the handshake.

        Returns:
            ConnectionStatus; failures become ``available=False`` with
            guidance instead of being raised.
        """
        try:
            await self.ensure_ready()
        except ServerUnreachableError as e:
            logger.error(f"Cannot reach Figma MCP server: {e.args[0]}")
            return ConnectionStatus(available=False, guidance=e.guidance, error=e)
        except (TransportError, MCPError) as e:
            logger.error(f"Figma MCP connection check failed: {e}")
            return ConnectionStatus(
                available=False,
                guidance=SERVER_UNAVAILABLE_GUIDANCE,
                error=e,
            )
        return ConnectionStatus(available=True)

    def reset(self) -> None:
        """Forget the handshake so the next ensure_ready() performs a new one."""
        if self._session.state != SessionState.UNINITIALIZED:
            logger.info("Resetting Figma MCP session")
        self._session.reset()
        self.transport.reset_session()

    async def send(
        self,
        message: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> HTTPReply:
        """Send one message, connecting the transport if needed."""
        if not self.transport.is_connected():
            await self.transport.connect()
        return await self.transport.send(message, headers=headers)

    async def close(self) -> None:
        """Cancel any in-flight handshake and release the transport."""
        pending = self._session.pending
        if pending and not pending.done():
            pending.cancel()
            try:
                await pending
            except asyncio.CancelledError:
                pass
        self._session.reset()
        await self.transport.disconnect()

    def _owns_session(self) -> bool:
        # False once reset() has discarded this handshake
        return self._session.pending is asyncio.current_task()

    async def _handshake(self) -> None:
        """Run the handshake; on any failure return to UNINITIALIZED."""
        try:
            await asyncio.wait_for(
                self._initialize(),
                timeout=self.config.handshake_timeout,
            )
        except asyncio.TimeoutError as e:
            if self._owns_session():
                self._session.reset()
            logger.error(
                f"Figma MCP handshake timed out after {self.config.handshake_timeout}s"
            )
            raise InitializationError(
                code=REQUEST_TIMEOUT,
                message=f"Handshake timed out after {self.config.handshake_timeout}s",
            ) from e
        except BaseException as e:
            if self._owns_session():
                self._session.reset()
            if not isinstance(e, asyncio.CancelledError):
                logger.error(f"Failed to initialize Figma MCP session: {e}")
            raise

        if self._owns_session():
            self._session.transition(SessionState.READY)
            self._session.pending = None
        logger.info("Figma MCP session initialized")

    async def _initialize(self) -> None:
        request = JSONRPCRequest(
            method="initialize",
            params={
                "protocolVersion": self.config.protocol_version,
                "capabilities": {},
                "clientInfo": self.config.client_info(),
            },
        )
        reply = await self.send(request.to_dict())

        envelope = decode(reply.text)
        if isinstance(envelope, ParseFailure):
            if not reply.ok:
                raise InitializationError(
                    code=INTERNAL_ERROR,
                    message=f"MCP initialization failed: HTTP {reply.status_code}",
                    data={"body": envelope.preview},
                )
            raise InitializationError(
                code=PARSE_ERROR,
                message=str(envelope),
            )

        if envelope.is_error:
            raise InitializationError.from_dict(envelope.error.to_dict())

        if not reply.ok:
            raise InitializationError(
                code=INTERNAL_ERROR,
                message=f"MCP initialization failed: HTTP {reply.status_code}",
            )

        result = envelope.result if isinstance(envelope.result, dict) else {}
        server_info = result.get("serverInfo") or {}
        logger.debug(
            f"Server responded: {server_info.get('name', 'unknown')} "
            f"v{server_info.get('version', 'unknown')}, "
            f"protocol {result.get('protocolVersion', 'unknown')}"
        )

        # Fire and forget: the reply to the notification is not inspected
        notification = JSONRPCNotification(method="notifications/initialized")
        await self.send(notification.to_dict())
        logger.debug("Sent initialized notification")
