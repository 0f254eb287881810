"""
Shared plumbing for the domain operations.
"""
from typing import Any, Collection, Dict, Optional, Union

from ..api import http as api_http
from ..chain import client as chain_client
from ..config import get_config
from ..exceptions import ConfigError, ErrorCode, InputError
from ..models import ContractCallRequest, ExecutionMode, ToolResult
from ..results import ok

DEFAULT_SKIP_COUNT = 0
DEFAULT_MAX_RESULT_COUNT = 20

Mode = Union[ExecutionMode, str]


def dao_chain(chain_id: Optional[str]) -> str:
    return chain_id or get_config().default_dao_chain


def network_chain(chain_id: Optional[str]) -> str:
    return chain_id or get_config().default_network_chain


def ensure_main_chain(chain_id: str, domain: str) -> str:
    """
    Raises:
        ConfigError: UNSUPPORTED_CHAIN unless chain_id is AELF
    """
    if chain_id != "AELF":
        raise ConfigError(ErrorCode.UNSUPPORTED_CHAIN, f"{domain} only supports AELF, got {chain_id}")
    return chain_id


def require_choice(value: Any, name: str, choices: Collection[str]) -> str:
    if value not in choices:
        raise InputError(ErrorCode.INVALID_INPUT, f"{name} must be one of {', '.join(choices)}")
    return value


def require_non_empty_list(value: Any, name: str) -> list:
    if not isinstance(value, list) or not value:
        raise InputError(ErrorCode.INVALID_INPUT, f"{name} must be a non-empty array")
    return value


def paging(skip_count: Optional[int], max_result_count: Optional[int]) -> Dict[str, int]:
    return {
        "skipCount": skip_count or DEFAULT_SKIP_COUNT,
        "maxResultCount": max_result_count or DEFAULT_MAX_RESULT_COUNT,
    }


def send_contract(chain_id: str, contract_address: str, method_name: str, args: Any,
                  mode: Optional[Mode]) -> ToolResult:
    """Run a contract write (simulated unless mode is send) and wrap the outcome"""
    result = chain_client.call_send(
        ContractCallRequest(
            chain_id=chain_id,
            contract_address=contract_address,
            method_name=method_name,
            args=args,
        ),
        mode=mode or ExecutionMode.SIMULATE,
    )
    return ok(result.result, tx=result.tx)


def view_contract(chain_id: str, contract_address: str, method_name: str, args: Any) -> Any:
    return chain_client.call_view(
        ContractCallRequest(
            chain_id=chain_id,
            contract_address=contract_address,
            method_name=method_name,
            args=args,
        )
    )


def api_get(path: str, query: Dict[str, Any], auth: bool = False) -> Any:
    return api_http.api_get(path, query, auth=auth)


def api_post(path: str, body: Dict[str, Any], auth: bool = False) -> Any:
    return api_http.api_post(path, body, auth=auth)
