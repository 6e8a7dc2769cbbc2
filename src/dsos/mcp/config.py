"""Figma MCP server configuration loading."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dsos.lib import oj
from dsos.mcp.transport.types import TransportConfig

logger = logging.getLogger(__name__)

# Config file locations
MCP_CONFIG_FILENAME = "mcp.json"
GLOBAL_MCP_CONFIG = Path.home() / ".dsos" / MCP_CONFIG_FILENAME
LOCAL_MCP_CONFIG_DIR = ".dsos"
FIGMA_SERVER_NAME = "figma-desktop"

# Environment overrides
URL_ENV = "DSOS_FIGMA_MCP_URL"
TIMEOUT_ENV = "DSOS_FIGMA_MCP_TIMEOUT"

DEFAULT_URL = "http://127.0.0.1:3845/mcp"
PROTOCOL_VERSION = "2024-11-05"


@dataclass
class FigmaMCPConfig:
    """Settings for talking to the Figma desktop MCP server."""

    url: str = DEFAULT_URL
    headers: dict[str, str] = field(default_factory=dict)

    timeout: float = 30.0
    """HTTP read/write timeout in seconds."""

    connect_timeout: float = 5.0
    handshake_timeout: float = 10.0

    request_timeout: float = 60.0
    """Upper bound for one tool call, including the dialect fallback."""

    max_concurrent_requests: int = 10

    protocol_version: str = PROTOCOL_VERSION
    client_name: str = "ds-os"
    client_version: str = "1.0.0"

    client_languages: str = "typescript,html,css"
    client_frameworks: str = "react"

    def client_info(self) -> dict[str, str]:
        """clientInfo block sent with initialize."""
        return {"name": self.client_name, "version": self.client_version}

    def to_transport_config(self) -> TransportConfig:
        return TransportConfig(
            url=self.url,
            timeout=self.timeout,
            connect_timeout=self.connect_timeout,
            headers=dict(self.headers),
            max_concurrent_requests=self.max_concurrent_requests,
        )

    def merge(self, data: dict) -> "FigmaMCPConfig":
        """
        Apply a server entry from mcp.json.

        Recognised keys: url, headers, timeout, connectTimeout,
        handshakeTimeout, requestTimeout, clientLanguages, clientFrameworks.
        """
        if data.get("url"):
            self.url = data["url"]
        if isinstance(data.get("headers"), dict):
            self.headers = {**self.headers, **data["headers"]}
        for key, attr in (
            ("timeout", "timeout"),
            ("connectTimeout", "connect_timeout"),
            ("handshakeTimeout", "handshake_timeout"),
            ("requestTimeout", "request_timeout"),
        ):
            if isinstance(data.get(key), (int, float)):
                setattr(self, attr, float(data[key]))
        if data.get("clientLanguages"):
            self.client_languages = data["clientLanguages"]
        if data.get("clientFrameworks"):
            self.client_frameworks = data["clientFrameworks"]
        return self


def _read_server_entry(path: Path) -> dict | None:
    if not path.exists():
        return None
    try:
        data = oj.loads(path.read_bytes())
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable MCP config {path}: {e}")
        return None
    servers = data.get("mcpServers", {}) if isinstance(data, dict) else {}
    entry = servers.get(FIGMA_SERVER_NAME)
    return entry if isinstance(entry, dict) else None


def load_figma_config(working_dir: Path | None = None) -> FigmaMCPConfig:
    """Load Figma MCP settings from config files and the environment.

    Global config (~/.dsos/mcp.json) is applied first, then the local
    config ({working_dir}/.dsos/mcp.json), then environment overrides.

    Returns:
        The merged configuration.
    """
    config = FigmaMCPConfig()

    global_entry = _read_server_entry(GLOBAL_MCP_CONFIG)
    if global_entry:
        config.merge(global_entry)

    if working_dir:
        local_entry = _read_server_entry(
            working_dir / LOCAL_MCP_CONFIG_DIR / MCP_CONFIG_FILENAME
        )
        if local_entry:
            config.merge(local_entry)

    if os.getenv(URL_ENV):
        config.url = os.environ[URL_ENV]
    if os.getenv(TIMEOUT_ENV):
        try:
            config.timeout = float(os.environ[TIMEOUT_ENV])
        except ValueError:
            logger.warning(f"Ignoring non-numeric {TIMEOUT_ENV}={os.environ[TIMEOUT_ENV]!r}")

    return config
