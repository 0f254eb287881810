"""
Resource token trading (RAM, CPU, NET, DISK, ...) through the TokenConverter contract.
"""
from typing import Optional

from ..config import get_network_contract
from ..models import ToolResult
from ..results import ok, require_field, tool_operation
from .common import Mode, api_get, ensure_main_chain, network_chain, paging, send_contract

DOMAIN = "resource domain"


def _trade(method_name: str, symbol: Optional[str], amount: Optional[int], chain_id: Optional[str],
           mode: Optional[Mode]) -> ToolResult:
    require_field(symbol, "symbol")
    require_field(amount, "amount")
    chain_id = ensure_main_chain(network_chain(chain_id), DOMAIN)
    return send_contract(
        chain_id,
        get_network_contract("tokenConverter"),
        method_name,
        {"symbol": symbol, "amount": amount},
        mode,
    )


@tool_operation
def resource_buy(symbol: Optional[str] = None, amount: Optional[int] = None, chain_id: Optional[str] = None,
                 mode: Optional[Mode] = None) -> ToolResult:
    """Buy a resource token with ELF"""
    return _trade("Buy", symbol, amount, chain_id, mode)


@tool_operation
def resource_sell(symbol: Optional[str] = None, amount: Optional[int] = None, chain_id: Optional[str] = None,
                  mode: Optional[Mode] = None) -> ToolResult:
    """Sell a resource token for ELF"""
    return _trade("Sell", symbol, amount, chain_id, mode)


@tool_operation
def resource_realtime_records(skip_count: Optional[int] = None, max_result_count: Optional[int] = None,
                              chain_id: Optional[str] = None) -> ToolResult:
    data = api_get("/resource/realtime-records", {
        "chainId": network_chain(chain_id),
        **paging(skip_count, max_result_count),
    })
    return ok(data)


@tool_operation
def resource_turnover(symbol: Optional[str] = None, chain_id: Optional[str] = None) -> ToolResult:
    data = api_get("/resource/turnover", {"chainId": network_chain(chain_id), "symbol": symbol})
    return ok(data)


@tool_operation
def resource_records(symbol: Optional[str] = None, skip_count: Optional[int] = None,
                     max_result_count: Optional[int] = None, chain_id: Optional[str] = None) -> ToolResult:
    data = api_get("/resource/records", {
        "chainId": network_chain(chain_id),
        **paging(skip_count, max_result_count),
        "symbol": symbol,
    })
    return ok(data)
