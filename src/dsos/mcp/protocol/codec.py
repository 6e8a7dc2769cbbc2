"""Response envelope decoding.

The Figma desktop server answers a POST either with a bare JSON-RPC object
or with the same object wrapped in a single Server-Sent Events frame::

    event: message
    data: {"jsonrpc": "2.0", "id": 1, "result": {...}}

``decode`` accepts both and never raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from dsos.lib import oj
from dsos.mcp.protocol.messages import JSONRPCResponse

SSE_DATA_PREFIX = "data:"
PREVIEW_LENGTH = 100


@dataclass(frozen=True)
class ParseFailure:
    """A body that was neither a JSON-RPC object nor an SSE-framed one."""

    reason: str
    preview: str

    def __str__(self) -> str:
        return f"Failed to parse MCP response ({self.reason}): {self.preview}"


def _load_object(text: str) -> dict[str, Any] | None:
    try:
        value = oj.loads(text)
    except (oj.JSONDecodeError, ValueError, TypeError):
        return None
    return value if isinstance(value, dict) else None


def _sse_payload(body: str) -> str | None:
    """Return the payload of the first ``data:`` line, if any."""
    for line in body.splitlines():
        if line.startswith(SSE_DATA_PREFIX):
            payload = line[len(SSE_DATA_PREFIX):]
            if payload.startswith(" "):
                payload = payload[1:]
            return payload
    return None


def decode(body: str) -> JSONRPCResponse | ParseFailure:
    """
    Decode an HTTP response body into a JSON-RPC response envelope.

    Args:
        body: The raw response text.

    Returns:
        The envelope, or a ParseFailure carrying a truncated preview.
    """
    if not isinstance(body, str):
        return ParseFailure("body is not text", repr(body)[:PREVIEW_LENGTH])

    preview = body[:PREVIEW_LENGTH]

    data = _load_object(body)
    if data is None:
        payload = _sse_payload(body)
        if payload is None:
            return ParseFailure("not JSON and no SSE data line", preview)
        data = _load_object(payload)
        if data is None:
            return ParseFailure("SSE data line is not a JSON object", preview)

    if "result" not in data and "error" not in data:
        return ParseFailure("object has neither result nor error", preview)

    return JSONRPCResponse.from_dict(data)
