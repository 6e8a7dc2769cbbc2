"""Tests for Figma URL helpers and typed tool calls."""

import pytest

from dsos.mcp.tools import (
    DESIGN_CONTEXT_TOOL,
    SCREENSHOT_TOOL,
    VARIABLE_DEFS_TOOL,
    extract_file_key,
    extract_node_id,
)


class TestExtractNodeId:

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://www.figma.com/design/abc123/Kit?node-id=12-34", "12:34"),
            ("https://www.figma.com/file/abc123/Kit?node-id=12-34&t=xyz", "12:34"),
            ("https://www.figma.com/design/abc/Kit?t=1&node-id=1-2-3", "1:2:3"),
            ("https://www.figma.com/design/abc/Kit?node-id=12%3A34", "12:34"),
            ("https://www.figma.com/design/abc/Kit?node-id=7", "7"),
            ("https://www.figma.com/design/abc/Kit?node-id=1+2", "1+2"),
            ("https://www.figma.com/design/abc/Kit?node-id=&node-id=3-4", "3:4"),
        ],
    )
    def test_node_id_found(self, url, expected):
        assert extract_node_id(url) == expected

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.figma.com/design/abc123/Kit",
            "https://www.figma.com/design/abc123/Kit?node-id=",
            "https://www.figma.com/design/abc123/Kit?nodeid=1-2",
            "not a url",
            "https://[figma.com/file/x?node-id=1-2",
            "",
        ],
    )
    def test_node_id_missing(self, url):
        assert extract_node_id(url) is None


class TestExtractFileKey:

    def test_design_url(self):
        assert extract_file_key("https://www.figma.com/design/AbC123/Kit?node-id=1-2") == "AbC123"

    def test_file_url(self):
        assert extract_file_key("https://figma.com/file/xyz789/Kit") == "xyz789"

    def test_other_url(self):
        assert extract_file_key("https://example.com/design/abc") is None


class TestFigmaTools:

    @pytest.mark.asyncio
    async def test_design_context_defaults(self, client, server):
        server.results[DESIGN_CONTEXT_TOOL] = {"document": {"id": "1:2"}}

        await client.get_design_context("1:2")

        assert server.tool_requests()[0]["params"] == {
            "nodeId": "1:2",
            "clientLanguages": "typescript,html,css",
            "clientFrameworks": "react",
        }

    @pytest.mark.asyncio
    async def test_design_context_overrides(self, client, server):
        server.results[DESIGN_CONTEXT_TOOL] = {}

        await client.get_design_context("1:2", client_languages="python", client_frameworks="vue")

        params = server.tool_requests()[0]["params"]
        assert params["clientLanguages"] == "python"
        assert params["clientFrameworks"] == "vue"

    @pytest.mark.asyncio
    async def test_variables_and_screenshot(self, client, server):
        server.results[VARIABLE_DEFS_TOOL] = {"variables": {}}
        server.results[SCREENSHOT_TOOL] = {"image": "data:image/png;base64,AAA"}

        assert await client.get_variable_defs("1:2") == {"variables": {}}
        assert await client.get_screenshot("1:2") == {"image": "data:image/png;base64,AAA"}

        requests = server.tool_requests()
        assert [r["method"] for r in requests] == [VARIABLE_DEFS_TOOL, SCREENSHOT_TOOL]
        assert all(r["params"] == {"nodeId": "1:2"} for r in requests)

    @pytest.mark.asyncio
    async def test_call_performs_handshake(self, client, server):
        server.results[SCREENSHOT_TOOL] = {}
        await client.tools.get_screenshot("1:2")
        assert server.methods()[:2] == ["initialize", "notifications/initialized"]
