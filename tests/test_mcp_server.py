"""
Tests for the MCP server tool registration.
"""
import asyncio
import inspect
import json

from tomorrowdao_skill import mcp_server
from tomorrowdao_skill.domains import TOOLS, tools_by_domain


def _spec(domain, command):
    return tools_by_domain()[domain][command]


class TestToolRegistry:
    """Test the shared tool table"""

    def test_tool_names_are_unique(self):
        names = [spec.tool_name for spec in TOOLS]
        assert len(names) == len(set(names))
        assert all(name.startswith("tomorrowdao_") for name in names)

    def test_domain_prefix_added_once(self):
        assert _spec("dao", "vote").tool_name == "tomorrowdao_dao_vote"
        assert _spec("dao", "discussion-list").tool_name == "tomorrowdao_dao_discussion_list"

    def test_accepts_mode(self):
        assert _spec("dao", "vote").accepts_mode is True
        assert _spec("dao", "discussion-list").accepts_mode is False


class TestServer:
    """Test create_server"""

    def test_all_tools_listed(self):
        server = mcp_server.create_server()

        tools = asyncio.run(server.list_tools())

        assert len(tools) == len(TOOLS)
        names = {tool.name for tool in tools}
        assert "tomorrowdao_dao_vote" in names
        assert "tomorrowdao_network_contract_flow_status" in names
        assert "tomorrowdao_resource_buy" in names

    def test_tool_schema_uses_operation_parameters(self):
        server = mcp_server.create_server()

        tools = {tool.name: tool for tool in asyncio.run(server.list_tools())}
        properties = tools["tomorrowdao_dao_proposal_create"].inputSchema["properties"]

        assert {"method_name", "args", "chain_id", "mode"} <= set(properties)


class TestJsonTool:
    """Test the JSON wrapper around operations"""

    def test_returns_json_text(self):
        tool = mcp_server._json_tool(_spec("resource", "sell"))

        payload = json.loads(tool(symbol="CPU", amount=3))

        assert payload["success"] is True
        assert payload["data"]["methodName"] == "Sell"

    def test_failure_is_json_too(self):
        tool = mcp_server._json_tool(_spec("dao", "vote"))

        payload = json.loads(tool())

        assert payload["success"] is False
        assert payload["error"]["code"] == "INVALID_INPUT"

    def test_signature(self):
        tool = mcp_server._json_tool(_spec("dao", "execute"))
        signature = inspect.signature(tool)

        assert list(signature.parameters) == ["proposal_id", "chain_id", "mode"]
        assert signature.return_annotation is str
        assert tool.__name__ == "dao_execute"
