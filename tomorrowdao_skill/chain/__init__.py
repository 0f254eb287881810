"""
aelf chain access: node clients, contract codec, transactions and orchestration.
"""
from .client import ChainClient, call_send, call_view, pack_input
from .contract import ContractInterface, ContractMethod
from .node import AElfNodeClient
from .pool import RpcClientPool, clear_rpc_pool, get_aelf_client
from .tx_waiter import wait_for_tx_result

__all__ = [
    "AElfNodeClient",
    "ChainClient",
    "ContractInterface",
    "ContractMethod",
    "RpcClientPool",
    "call_send",
    "call_view",
    "clear_rpc_pool",
    "get_aelf_client",
    "pack_input",
    "wait_for_tx_result",
]
