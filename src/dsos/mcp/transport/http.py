"""Streamable HTTP transport implementation for MCP."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx

from dsos.lib import oj
from dsos.mcp.transport.base import (
    Transport,
    TransportError,
    ServerUnreachableError,
    TransportTimeoutError,
    SessionError,
)
from dsos.mcp.transport.types import (
    HTTPReply,
    TransportConfig,
    TransportEvent,
    TransportEventType,
)

logger = logging.getLogger(__name__)


class StreamableHTTPTransport(Transport):
    """
    Request/response HTTP transport for a local MCP server.

    This transport supports:
    - HTTP POST for every client-to-server message
    - Replies as plain JSON or as a single SSE-framed message
    - Session tracking via the Mcp-Session-Id header
    - Bounded concurrent requests
    """

    MCP_SESSION_HEADER = "Mcp-Session-Id"
    ACCEPT = "application/json, text/event-stream"

    def __init__(
        self,
        config: TransportConfig,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            config: Transport configuration.
            http_transport: Optional httpx transport to route requests
                through instead of the network (used by tests).
        """
        super().__init__(config)
        self._http_transport = http_transport
        self._client: httpx.AsyncClient | None = None
        self._session_id: str | None = None
        self._connected: bool = False
        self._request_semaphore: asyncio.Semaphore | None = None
        self._closing: bool = False

    async def connect(self) -> None:
        """Create the HTTP client. No request is made until send()."""
        if self._connected:
            return

        self._emit_event(
            TransportEvent(
                type=TransportEventType.CONNECTING,
                timestamp=time.time(),
                data={"url": self.config.url},
            )
        )

        timeout = httpx.Timeout(
            connect=self.config.connect_timeout,
            read=self.config.timeout,
            write=self.config.timeout,
            pool=self.config.timeout,
        )

        # Don't use base_url as httpx adds trailing slashes which break some servers
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers=self.config.headers,
            verify=self.config.verify_ssl,
            transport=self._http_transport,
        )

        self._request_semaphore = asyncio.Semaphore(
            self.config.max_concurrent_requests
        )
        self._connected = True
        self._closing = False

        self._emit_event(
            TransportEvent(
                type=TransportEventType.CONNECTED,
                timestamp=time.time(),
            )
        )

    async def disconnect(self) -> None:
        """Close the HTTP client and forget the session."""
        if not self._connected and self._client is None:
            return

        self._closing = True

        self._emit_event(
            TransportEvent(
                type=TransportEventType.DISCONNECTING,
                timestamp=time.time(),
            )
        )

        if self._client:
            await self._client.aclose()
            self._client = None

        self._connected = False
        self._session_id = None

        self._emit_event(
            TransportEvent(
                type=TransportEventType.DISCONNECTED,
                timestamp=time.time(),
            )
        )

    async def send(
        self,
        message: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> HTTPReply:
        """POST one JSON-RPC message and return the raw reply."""
        if not self._client or not self._connected:
            raise SessionError("Transport not connected")

        if self._closing:
            raise SessionError("Transport is closing")

        if self._request_semaphore:
            await self._request_semaphore.acquire()

        try:
            return await self._send_internal(message, headers)
        finally:
            if self._request_semaphore:
                self._request_semaphore.release()

    async def _send_internal(
        self,
        message: dict[str, Any],
        extra_headers: dict[str, str] | None,
    ) -> HTTPReply:
        """Internal send implementation."""
        headers = {
            "Content-Type": "application/json",
            "Accept": self.ACCEPT,
        }
        if extra_headers:
            headers.update(extra_headers)

        if self._session_id:
            headers[self.MCP_SESSION_HEADER] = self._session_id

        body = oj.dumps(message)

        self._emit_event(
            TransportEvent(
                type=TransportEventType.MESSAGE_SENT,
                timestamp=time.time(),
                data={"method": message.get("method"), "id": message.get("id")},
            )
        )
        logger.debug(f"POST {self.config.url} method={message.get('method')}")

        try:
            # Use full URL to avoid trailing slash issues with base_url
            response = await self._client.post(
                self.config.url,
                content=body,
                headers=headers,
            )
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            self._emit_error(e)
            raise ServerUnreachableError(
                f"Cannot reach MCP server at {self.config.url}: {e}", cause=e
            )
        except httpx.TimeoutException as e:
            self._emit_error(e)
            raise TransportTimeoutError(f"Request timed out: {e}", cause=e)
        except httpx.HTTPError as e:
            self._emit_error(e)
            raise TransportError(f"HTTP error: {e}", cause=e)

        if self.MCP_SESSION_HEADER in response.headers:
            new_session = response.headers[self.MCP_SESSION_HEADER]
            if self._session_id != new_session:
                self._session_id = new_session
                self._emit_event(
                    TransportEvent(
                        type=TransportEventType.SESSION_ESTABLISHED,
                        timestamp=time.time(),
                        data={"session_id": self._session_id},
                    )
                )

        reply = HTTPReply(
            status_code=response.status_code,
            text=response.text,
            content_type=response.headers.get("Content-Type", ""),
        )

        self._emit_event(
            TransportEvent(
                type=TransportEventType.MESSAGE_RECEIVED,
                timestamp=time.time(),
                data={"status": reply.status_code, "id": message.get("id")},
            )
        )
        logger.debug(f"HTTP {reply.status_code} ({reply.content_type or 'no content type'})")
        return reply

    def _emit_error(self, error: Exception) -> None:
        self._emit_event(
            TransportEvent(
                type=TransportEventType.ERROR,
                timestamp=time.time(),
                error=error,
            )
        )

    def is_connected(self) -> bool:
        """Check if transport is connected."""
        return self._connected and not self._closing

    @property
    def session_id(self) -> str | None:
        """Current MCP session ID."""
        return self._session_id

    def reset_session(self) -> None:
        """Drop the session id so the next handshake starts a new session."""
        self._session_id = None
