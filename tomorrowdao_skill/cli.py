"""
Command-line interface: ``tomorrowdao-skill <domain> <command> --input '<json>'``.

``tomorrowdao-skill setup <client>`` registers the MCP server with Claude
Desktop or Cursor and emits the OpenClaw tool manifest.

Prints the ToolResult as JSON on stdout and exits 1 when it reports failure.
"""
import argparse
import inspect
import json
import logging
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import platforms
from .domains import ToolSpec, tools_by_domain
from .exceptions import ErrorCode, InputError, SkillError
from .logging_utils import configure_logging, new_trace_id
from .models import ToolResult
from .results import fail
from .version import __version__

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake_case(key: str) -> str:
    """chainId -> chain_id; snake_case keys are returned unchanged"""
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def parse_json_input(raw: Optional[str]) -> Dict[str, Any]:
    """
    Parse the --input payload.

    Raises:
        InputError: INVALID_JSON if the payload is not a JSON object
    """
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise InputError(ErrorCode.INVALID_JSON, f"invalid json input: {e}")
    if not isinstance(payload, dict):
        raise InputError(ErrorCode.INVALID_JSON, "json input must be an object")
    return payload


def build_kwargs(spec: ToolSpec, payload: Dict[str, Any], mode: Optional[str]) -> Dict[str, Any]:
    """
    Map the JSON payload onto the operation's keyword arguments.

    Raises:
        InputError: INVALID_INPUT for keys the operation does not accept
    """
    accepted = inspect.signature(spec.operation).parameters
    kwargs = {to_snake_case(key): value for key, value in payload.items()}
    unknown = sorted(key for key in kwargs if key not in accepted)
    if unknown:
        raise InputError(ErrorCode.INVALID_INPUT, f"unknown input fields: {', '.join(unknown)}")
    if mode and spec.accepts_mode:
        kwargs["mode"] = mode
    return kwargs


def run_tool(spec: ToolSpec, raw_input: Optional[str], mode: Optional[str] = None) -> ToolResult:
    try:
        kwargs = build_kwargs(spec, parse_json_input(raw_input), mode)
    except InputError as e:
        return fail(e, new_trace_id())
    return spec.operation(**kwargs)


def _add_setup_parser(domains) -> None:
    setup = domains.add_parser("setup", help="register the MCP server or OpenClaw tools with a client")
    targets = setup.add_subparsers(dest="target", required=True)

    claude = targets.add_parser("claude", help="add the MCP server to Claude Desktop")
    claude.add_argument("--config-path", default=None)
    claude.add_argument("--server-command", default=None, help="command that starts the MCP server")
    claude.add_argument("--force", action="store_true", help="overwrite an existing entry")

    cursor = targets.add_parser("cursor", help="add the MCP server to Cursor")
    cursor.add_argument("--global", dest="global_config", action="store_true", help="use ~/.cursor/mcp.json")
    cursor.add_argument("--config-path", default=None)
    cursor.add_argument("--server-command", default=None, help="command that starts the MCP server")
    cursor.add_argument("--force", action="store_true", help="overwrite an existing entry")

    openclaw = targets.add_parser("openclaw", help="print the OpenClaw manifest or merge it into a config")
    openclaw.add_argument("--config-path", default=None, help="OpenClaw config to merge tools into")
    openclaw.add_argument("--cwd", default=".", help="working directory recorded for each tool")
    openclaw.add_argument("--force", action="store_true", help="replace tools that already exist")

    targets.add_parser("list", help="show where the MCP server is configured")

    uninstall = targets.add_parser("uninstall", help="remove the MCP server from a client")
    uninstall.add_argument("platform", choices=["claude", "cursor"])
    uninstall.add_argument("--global", dest="global_config", action="store_true")
    uninstall.add_argument("--config-path", default=None)


def _config_path(args: argparse.Namespace, platform: str) -> Path:
    if args.config_path:
        return Path(args.config_path)
    paths = platforms.platform_paths()
    if platform == "claude":
        return paths["claude"]
    return paths["cursor_global"] if args.global_config else paths["cursor_project"]


def run_setup(args: argparse.Namespace) -> int:
    """Handle ``tomorrowdao-skill setup ...``; prints plain status lines"""
    out = sys.stdout
    if args.target in ("claude", "cursor"):
        path = _config_path(args, args.target)
        action = platforms.install_mcp_server(path, force=args.force, command=args.server_command)
        if action == "skipped":
            out.write(f"[SKIP] {platforms.SERVER_NAME} already exists in {path}. Use --force to overwrite.\n")
        else:
            out.write(f"[DONE] {action} {platforms.SERVER_NAME} in {path}\n")
        return 0

    if args.target == "openclaw":
        manifest = platforms.build_openclaw_manifest(cwd=args.cwd)
        if not args.config_path:
            out.write(json.dumps(manifest, indent=2) + "\n")
            return 0
        path = Path(args.config_path)
        merged, added = platforms.merge_openclaw_tools(platforms.read_json_file(path), manifest["tools"], args.force)
        platforms.write_json_file(path, merged)
        out.write(f"[DONE] merged {added} tools into {path}\n")
        return 0

    if args.target == "uninstall":
        path = _config_path(args, args.platform)
        if platforms.uninstall_mcp_server(path):
            out.write(f"[DONE] removed {platforms.SERVER_NAME} from {path}\n")
        else:
            out.write(f"[INFO] {platforms.SERVER_NAME} not found in {path}\n")
        return 0

    for label, path in platforms.platform_paths().items():
        if not path.exists():
            status = "CONFIG FILE NOT FOUND"
        elif platforms.SERVER_NAME in (platforms.read_json_file(path).get("mcpServers") or {}):
            status = "CONFIGURED"
        else:
            status = "NOT CONFIGURED"
        out.write(f"{label}: {status}\n    {path}\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tomorrowdao-skill",
        description="TomorrowDAO skill CLI (DAO / Network / BP / Resource)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", choices=["error", "warn", "info", "debug"], default=None,
                        help="log level for stderr JSON logs (default: TMRW_LOG_LEVEL or error)")
    domains = parser.add_subparsers(dest="domain", required=True)

    for domain, commands in tools_by_domain().items():
        domain_parser = domains.add_parser(domain, help=f"{domain} domain tools")
        command_parsers = domain_parser.add_subparsers(dest="command", required=True)
        for command, spec in commands.items():
            sub = command_parsers.add_parser(command, help=spec.description, description=spec.description)
            sub.add_argument("--input", default="{}", help="json input (camelCase or snake_case keys)")
            if spec.accepts_mode:
                sub.add_argument("--mode", choices=["simulate", "send"], default="simulate",
                                 help="execution mode (default: simulate)")
            sub.set_defaults(spec=spec)
    _add_setup_parser(domains)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the tomorrowdao-skill console script"""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.domain == "setup":
        try:
            return run_setup(args)
        except SkillError as e:
            result = fail(e, new_trace_id())
    else:
        result = run_tool(args.spec, args.input, getattr(args, "mode", None))
    sys.stdout.write(json.dumps(result.to_dict(), indent=2) + "\n")
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
