"""
MCP stdio server exposing every domain operation as a tool.

Each tool returns the ToolResult serialized as JSON text.
"""
import functools
import inspect
import json
import logging
from typing import Callable

from mcp.server.fastmcp import FastMCP

from .domains import TOOLS, ToolSpec
from .logging_utils import configure_logging

logger = logging.getLogger(__name__)

SERVER_NAME = "tomorrowdao-agent-skills"


def _json_tool(spec: ToolSpec) -> Callable[..., str]:
    """Wrap an operation so the tool returns JSON text with the same parameters"""
    operation = spec.operation

    @functools.wraps(operation)
    def tool(**kwargs) -> str:
        return json.dumps(operation(**kwargs).to_dict())

    signature = inspect.signature(operation)
    tool.__signature__ = signature.replace(return_annotation=str)
    tool.__annotations__ = {**getattr(operation, "__annotations__", {}), "return": str}
    return tool


def create_server(name: str = SERVER_NAME) -> FastMCP:
    """Build a FastMCP server with all tools registered"""
    server = FastMCP(name)
    for spec in TOOLS:
        server.add_tool(_json_tool(spec), name=spec.tool_name, description=spec.description)
    logger.info(f"Registered {len(TOOLS)} tools on {name}")
    return server


def main() -> None:
    """Entry point for the tomorrowdao-skill-mcp console script"""
    configure_logging()
    create_server().run(transport="stdio")


if __name__ == "__main__":
    main()
