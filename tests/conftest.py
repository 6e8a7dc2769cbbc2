"""Pytest configuration and fixtures."""

import asyncio
import json
from typing import Any

import httpx
import pytest
import pytest_asyncio

from dsos.mcp.client import FigmaMCPClient
from dsos.mcp.config import FigmaMCPConfig


class FakeFigmaServer:
    """
    In-process stand-in for the Figma desktop MCP server.

    Speaks enough of the protocol for the client: initialize, the initialized
    notification, and tool calls in either the direct or wrapped dialect.
    """

    DIALECT_MISMATCH_ERROR = {
        "code": -32600,
        "message": "Bad Request: Server not initialized, expected an initialize request",
    }

    SESSION_LOST_ERROR = {
        "code": -32000,
        "message": "Server not initialized. Please send initialize first.",
    }

    def __init__(self) -> None:
        self.requests: list[dict[str, Any]] = []
        self.headers: list[httpx.Headers] = []

        self.dialect = "direct"
        """'direct' accepts tool names as methods; 'wrapped' only tools/call."""

        self.sse = False
        self.unreachable = False
        self.session_id: str | None = None

        self.init_error: dict[str, Any] | None = None
        self.init_status = 200
        self.init_delay = 0.0

        self.results: dict[str, Any] = {}
        self.errors: dict[str, dict[str, Any]] = {}
        self.delays: dict[str, float] = {}
        self.raw_replies: dict[str, tuple[int, str]] = {}
        """Tool name -> (status, body) returned verbatim."""
        self.wrapped_errors: dict[str, dict[str, Any]] = {}

    # Inspection helpers

    def methods(self) -> list[str]:
        return [r.get("method") for r in self.requests]

    @property
    def initialize_calls(self) -> int:
        return self.methods().count("initialize")

    def tool_requests(self) -> list[dict[str, Any]]:
        skip = {"initialize", "notifications/initialized"}
        return [r for r in self.requests if r.get("method") not in skip]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # Protocol

    def _reply(
        self,
        body: dict[str, Any],
        result: Any = None,
        error: dict[str, Any] | None = None,
        status: int = 200,
    ) -> httpx.Response:
        message: dict[str, Any] = {"jsonrpc": "2.0", "id": body.get("id")}
        if error is not None:
            message["error"] = error
        else:
            message["result"] = result

        headers = {}
        if self.session_id:
            headers["Mcp-Session-Id"] = self.session_id

        if self.sse:
            headers["Content-Type"] = "text/event-stream"
            text = f"event: message\ndata: {json.dumps(message)}\n\n"
            return httpx.Response(status, text=text, headers=headers)
        return httpx.Response(status, json=message, headers=headers)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        self.headers.append(request.headers)

        if self.unreachable:
            raise httpx.ConnectError("Connection refused", request=request)

        method = body.get("method")
        params = body.get("params") or {}

        if method == "initialize":
            if self.init_delay:
                await asyncio.sleep(self.init_delay)
            if self.init_error is not None:
                return self._reply(body, error=self.init_error, status=self.init_status)
            return self._reply(
                body,
                result={
                    "protocolVersion": params.get("protocolVersion"),
                    "capabilities": {"tools": {}},
                    "serverInfo": {"name": "Figma Dev Mode MCP Server", "version": "1.0.0"},
                },
            )

        if method == "notifications/initialized":
            return httpx.Response(202)

        if method == "tools/call":
            if self.dialect != "wrapped":
                return self._reply(
                    body,
                    error={"code": -32601, "message": "Method not found: tools/call"},
                    status=404,
                )
            name, arguments = params["name"], params["arguments"]
            if name in self.wrapped_errors:
                return self._reply(body, error=self.wrapped_errors[name], status=400)
        else:
            if self.dialect == "wrapped":
                return self._reply(body, error=self.DIALECT_MISMATCH_ERROR, status=400)
            name, arguments = method, params

        if name in self.delays:
            await asyncio.sleep(self.delays[name])
        if name in self.raw_replies:
            status, text = self.raw_replies[name]
            return httpx.Response(status, text=text)
        if name in self.errors:
            return self._reply(body, error=self.errors[name])
        if name in self.results:
            result = self.results[name]
            if callable(result):
                result = result(arguments)
            return self._reply(body, result=result)
        return self._reply(body, error={"code": -32601, "message": f"Unknown tool: {name}"})


@pytest.fixture
def server() -> FakeFigmaServer:
    return FakeFigmaServer()


@pytest.fixture
def config() -> FigmaMCPConfig:
    return FigmaMCPConfig(handshake_timeout=2.0, request_timeout=2.0)


@pytest_asyncio.fixture
async def client(server, config):
    client = FigmaMCPClient(config, http_transport=server.transport())
    yield client
    await client.close()
