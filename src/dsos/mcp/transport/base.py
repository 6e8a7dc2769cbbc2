"""Abstract base transport and error types."""

from abc import ABC, abstractmethod
from typing import Any, Callable

from dsos.mcp.transport.types import HTTPReply, TransportConfig, TransportEvent

SERVER_UNREACHABLE_GUIDANCE = (
    "Cannot connect to the Figma MCP server. Please ensure:\n"
    "1. Figma desktop app is running\n"
    "2. Dev Mode is enabled (Shift + D)\n"
    "3. The desktop MCP server is enabled in the right sidebar\n"
    "4. The file is open in the Figma desktop app"
)


class TransportError(Exception):
    """Base exception for transport errors."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        guidance: str | None = None,
    ):
        super().__init__(message)
        self.cause = cause
        self.guidance = guidance

    def with_guidance(self, guidance: str) -> "TransportError":
        """Return a copy of this error (same type) carrying new guidance."""
        return type(self)(self.args[0], cause=self.cause, guidance=guidance)

    def __str__(self) -> str:
        if self.guidance:
            return f"{self.args[0]}\n\n{self.guidance}"
        return self.args[0]


class ServerUnreachableError(TransportError):
    """The request could not reach the server (refused, unreachable host)."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        guidance: str = SERVER_UNREACHABLE_GUIDANCE,
    ):
        super().__init__(message, cause=cause, guidance=guidance)


class TransportTimeoutError(TransportError):
    """Request timed out after the connection was made."""

    pass


class SessionError(TransportError):
    """Transport used while not connected or while closing."""

    pass


class Transport(ABC):
    """
    Abstract base class for MCP transports.

    A transport moves one JSON-RPC message per request and hands back the
    raw reply. Framing and error semantics live in the protocol layer.
    """

    def __init__(self, config: TransportConfig):
        self.config = config
        self._event_handlers: list[Callable[[TransportEvent], None]] = []

    def on_event(self, handler: Callable[[TransportEvent], None]) -> None:
        """
        Register an event handler for transport events.

        Args:
            handler: Callback invoked when transport events occur.
        """
        self._event_handlers.append(handler)

    def _emit_event(self, event: TransportEvent) -> None:
        """Emit an event to all registered handlers."""
        for handler in self._event_handlers:
            try:
                handler(event)
            except Exception:
                # Don't let handler errors affect transport
                pass

    @abstractmethod
    async def connect(self) -> None:
        """
        Prepare the transport for sending.

        Safe to call more than once.
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """
        Close connection and release all resources.

        This method should be safe to call multiple times.
        """
        pass

    @abstractmethod
    async def send(
        self,
        message: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> HTTPReply:
        """
        Send a JSON-RPC message to the server.

        Args:
            message: JSON-RPC request or notification.
            headers: Extra headers for this request only.

        Returns:
            The raw reply, whatever its status.

        Raises:
            ServerUnreachableError: If the server cannot be reached.
            TransportTimeoutError: If the exchange times out.
            TransportError: For any other HTTP-level failure.
            SessionError: If the transport is not connected.
        """
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if transport is ready to send."""
        pass

    @property
    @abstractmethod
    def session_id(self) -> str | None:
        """Server-assigned session id, if the server issued one."""
        pass

    @abstractmethod
    def reset_session(self) -> None:
        """Forget the server-assigned session id."""
        pass

    async def __aenter__(self) -> "Transport":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.disconnect()
