"""
Tests for version information and declared dependency ranges.
"""
import re
from pathlib import Path

import tomli

import tomorrowdao_skill
from tomorrowdao_skill.version import __version__

PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


def _dependencies():
    with open(PYPROJECT, "rb") as f:
        return tomli.load(f)["project"]["dependencies"]


def test_version_format():
    assert re.match(r"^\d+\.\d+\.\d+", __version__)


def test_exported_from_package():
    assert tomorrowdao_skill.__version__ == __version__


def test_mcp_capped_below_2():
    # mcp 2.x no longer ships mcp.server.fastmcp
    mcp = [dep for dep in _dependencies() if re.match(r"^mcp\b", dep)]
    assert mcp == ["mcp>=1.2,<2"]
