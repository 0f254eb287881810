"""
Client integration: OpenClaw tool manifests and MCP server registration
for Claude Desktop and Cursor.
"""
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .domains import TOOLS
from .exceptions import ErrorCode, InputError
from .mcp_server import SERVER_NAME, create_server

logger = logging.getLogger(__name__)

CLI_COMMAND = "tomorrowdao-skill"
MANIFEST_DESCRIPTION = "TomorrowDAO governance tools for aelf: DAO, network governance, BP election and resources"

# Placeholders written into a fresh MCP entry; users fill in their own key
DEFAULT_MCP_ENV = {
    "TMRW_PRIVATE_KEY": "<YOUR_PRIVATE_KEY>",
    "TMRW_API_BASE": "https://api.tmrwdao.com",
    "TMRW_CHAIN_DEFAULT_DAO": "tDVV",
    "TMRW_CHAIN_DEFAULT_NETWORK": "AELF",
}


def platform_paths(home: Optional[Path] = None, cwd: Optional[Path] = None,
                   system: Optional[str] = None) -> Dict[str, Path]:
    """
    Default config file locations per client.

    Args:
        home: Home directory (defaults to the current user's)
        cwd: Project directory for the Cursor project config
        system: sys.platform value to resolve paths for

    Returns:
        Mapping with "claude", "cursor_global" and "cursor_project" paths
    """
    home = home or Path.home()
    cwd = cwd or Path.cwd()
    system = system or sys.platform

    if system == "darwin":
        claude = home / "Library" / "Application Support" / "Claude" / "claude_desktop_config.json"
    elif system == "win32":
        appdata = Path(os.environ.get("APPDATA") or home / "AppData" / "Roaming")
        claude = appdata / "Claude" / "claude_desktop_config.json"
    else:
        claude = home / ".config" / "Claude" / "claude_desktop_config.json"

    return {
        "claude": claude,
        "cursor_global": home / ".cursor" / "mcp.json",
        "cursor_project": cwd / ".cursor" / "mcp.json",
    }


def read_json_file(path: Path) -> Dict[str, Any]:
    """
    Read a client config file; a missing file reads as {}.

    Raises:
        InputError: INVALID_JSON if the file exists but is not a JSON object
    """
    path = Path(path)
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as e:
        raise InputError(ErrorCode.INVALID_JSON, f"cannot parse {path}: {e}")
    if not isinstance(data, dict):
        raise InputError(ErrorCode.INVALID_JSON, f"{path} must contain a JSON object")
    return data


def write_json_file(path: Path, data: Dict[str, Any]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")


def mcp_entry(command: Optional[str] = None) -> Dict[str, Any]:
    """The mcpServers entry that launches this package's stdio server"""
    if command:
        return {"command": command, "args": [], "env": dict(DEFAULT_MCP_ENV)}
    return {
        "command": sys.executable,
        "args": ["-m", "tomorrowdao_skill.mcp_server"],
        "env": dict(DEFAULT_MCP_ENV),
    }


def merge_mcp_config(existing: Dict[str, Any], name: str, entry: Dict[str, Any],
                     force: bool = False) -> Tuple[Dict[str, Any], str]:
    """
    Add an mcpServers entry.

    Returns:
        The new config and one of "created", "updated" or "skipped"
        (an existing entry is only replaced with force)
    """
    config = dict(existing)
    servers = dict(config.get("mcpServers") or {})
    if name in servers and not force:
        return config, "skipped"
    action = "updated" if name in servers else "created"
    servers[name] = entry
    config["mcpServers"] = servers
    return config, action


def remove_mcp_config(existing: Dict[str, Any], name: str) -> Tuple[Dict[str, Any], bool]:
    config = dict(existing)
    servers = dict(config.get("mcpServers") or {})
    if name not in servers:
        return config, False
    del servers[name]
    config["mcpServers"] = servers
    return config, True


def install_mcp_server(config_path: Path, force: bool = False, command: Optional[str] = None) -> str:
    """Register the MCP server in a Claude or Cursor config file"""
    config, action = merge_mcp_config(read_json_file(config_path), SERVER_NAME, mcp_entry(command), force)
    if action != "skipped":
        write_json_file(config_path, config)
    logger.info(f"{action} {SERVER_NAME} in {config_path}")
    return action


def uninstall_mcp_server(config_path: Path) -> bool:
    config, removed = remove_mcp_config(read_json_file(config_path), SERVER_NAME)
    if removed:
        write_json_file(config_path, config)
    return removed


def build_openclaw_manifest(cwd: str = ".") -> Dict[str, Any]:
    """
    OpenClaw manifest with one CLI-backed tool per operation.

    Tool names and input schemas are taken from the MCP server so both
    surfaces stay in step.
    """
    tools = []
    server = create_server()
    schemas = {tool.name: tool for tool in asyncio.run(server.list_tools())}
    for spec in TOOLS:
        tool = schemas[spec.tool_name]
        tools.append({
            "name": spec.tool_name,
            "description": spec.description,
            "command": CLI_COMMAND,
            "args": [spec.domain, spec.command],
            "cwd": cwd,
            "inputSchema": tool.inputSchema or {"type": "object", "properties": {}},
        })
    return {"name": SERVER_NAME, "description": MANIFEST_DESCRIPTION, "tools": tools}


def merge_openclaw_tools(target: Dict[str, Any], tools: List[Dict[str, Any]],
                         force: bool = False) -> Tuple[Dict[str, Any], int]:
    """
    Merge manifest tools into an existing OpenClaw config by name.

    Returns:
        The merged config and the number of tools written
    """
    merged = dict(target)
    existing = list(merged.get("tools") or [])
    names = {tool.get("name") for tool in existing}
    added = 0
    for tool in tools:
        if tool["name"] in names and not force:
            continue
        existing = [t for t in existing if t.get("name") != tool["name"]]
        existing.append(tool)
        added += 1
    merged["tools"] = existing
    return merged, added
