"""
TomorrowDAO skill: aelf governance operations as agent tools.
"""
from .chain import ChainClient, RpcClientPool, call_send, call_view, clear_rpc_pool, pack_input, wait_for_tx_result
from .api import HttpPolicyClient, TokenCache, api_get, api_post, clear_token_cache, get_access_token
from .config import SkillConfig, get_config, reset_config_cache
from .exceptions import (
    ApiError,
    AuthError,
    ChainError,
    ConfigError,
    ErrorCode,
    InputError,
    SkillError,
)
from .models import (
    ContractCallRequest,
    ExecutionMode,
    SendResult,
    ToolError,
    ToolResult,
    TxReceipt,
)
from .version import __version__

__all__ = [
    "ApiError",
    "AuthError",
    "ChainClient",
    "ChainError",
    "ConfigError",
    "ContractCallRequest",
    "ErrorCode",
    "ExecutionMode",
    "HttpPolicyClient",
    "InputError",
    "RpcClientPool",
    "SendResult",
    "SkillConfig",
    "SkillError",
    "TokenCache",
    "ToolError",
    "ToolResult",
    "TxReceipt",
    "__version__",
    "api_get",
    "api_post",
    "call_send",
    "call_view",
    "clear_rpc_pool",
    "clear_token_cache",
    "get_access_token",
    "get_config",
    "pack_input",
    "reset_config_cache",
    "wait_for_tx_result",
]
