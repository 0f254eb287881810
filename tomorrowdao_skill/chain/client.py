"""
Chain call orchestration: view, send, simulate and input packing.
"""
import base64
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from ..config import SkillConfig, get_config
from ..exceptions import ChainError, ErrorCode, InputError
from ..models import ChainSimulatePayload, ContractCallRequest, ExecutionMode, SendResult, TxReceipt
from ..signing import Wallet, create_new_wallet, get_wallet_by_private_key
from .contract import ContractMethod
from .node import AElfNodeClient, has_error_marker
from .pool import RpcClientPool, get_default_pool
from .transaction import build_transaction, sign_transaction, to_raw_transaction
from .tx_waiter import wait_for_tx_result

logger = logging.getLogger(__name__)

DEFAULT_POLL_MS = 1000
DEFAULT_MAX_POLL_ATTEMPTS = 30


@dataclass
class _ResolvedCall:
    rpc_url: str
    node: AElfNodeClient
    method: ContractMethod
    wallet: Optional[Wallet] = None


def _extract_tx_id(raw: Any) -> Optional[str]:
    if not isinstance(raw, dict):
        return None
    nested = raw.get("result") if isinstance(raw.get("result"), dict) else {}
    return raw.get("transactionId") or raw.get("TransactionId") or nested.get("TransactionId")


def _parse_mode(mode: Union[ExecutionMode, str, None]) -> ExecutionMode:
    if not mode:
        return ExecutionMode.SIMULATE
    try:
        return ExecutionMode(mode)
    except ValueError:
        raise InputError(ErrorCode.INVALID_INPUT, f"mode must be simulate or send, got {mode!r}")


class ChainClient:
    """
    Turns ContractCallRequests into node calls.

    Example:
        ```python
        client = ChainClient()
        balance = client.call_view(ContractCallRequest(
            chain_id="AELF",
            contract_address=get_token_contract_address("AELF"),
            method_name="GetBalance",
            args={"symbol": "ELF", "owner": address},
        ))
        ```
    """

    def __init__(self, pool: Optional[RpcClientPool] = None,
                 config_provider: Callable[[], SkillConfig] = get_config):
        """
        Args:
            pool: Node client pool (defaults to the process-wide pool)
            config_provider: Returns the active configuration
        """
        self._pool = pool
        self._config_provider = config_provider

    @property
    def pool(self) -> RpcClientPool:
        return self._pool if self._pool is not None else get_default_pool()

    def _resolve(self, request: ContractCallRequest,
                 wallet_factory: Optional[Callable[[], Wallet]] = None) -> _ResolvedCall:
        # Chain support is checked before any handle or socket exists
        rpc_url = self._config_provider().rpc_url(request.chain_id)
        node = self.pool.get(rpc_url)
        wallet = wallet_factory() if wallet_factory else None
        method = node.contract_at(request.contract_address).method(request.method_name)
        return _ResolvedCall(rpc_url=rpc_url, node=node, method=method, wallet=wallet)

    def _signed_raw(self, call: _ResolvedCall, args: Any) -> str:
        params = call.method.encode_input(args)
        transaction = build_transaction(
            call.wallet.address,
            call.method.contract_address,
            call.method.name,
            params,
            call.node.get_chain_status(),
        )
        sign_transaction(transaction, call.wallet.private_key)
        return to_raw_transaction(transaction)

    def call_view(self, request: ContractCallRequest) -> Any:
        """
        Execute a read-only contract method.

        Returns:
            Decoded method output

        Raises:
            ChainError: UNSUPPORTED_CHAIN, CONTRACT_DESCRIPTOR_ERROR,
                METHOD_NOT_FOUND or CONTRACT_VIEW_ERROR
        """
        call = self._resolve(request, create_new_wallet)
        raw = call.node.execute_transaction(self._signed_raw(call, request.args))

        if has_error_marker(raw):
            raise ChainError(
                ErrorCode.CONTRACT_VIEW_ERROR,
                f"view call failed: {request.method_name}",
                raw,
            )
        if isinstance(raw, dict) and "result" in raw:
            raw = raw["result"]
        if not isinstance(raw, str):
            return raw

        try:
            output = bytes.fromhex(raw)
        except ValueError:
            raise ChainError(
                ErrorCode.CONTRACT_VIEW_ERROR,
                f"view call returned non-hex output: {request.method_name}",
                raw,
            )
        return call.method.decode_output(output)

    def call_send(self, request: ContractCallRequest,
                  mode: Union[ExecutionMode, str, None] = ExecutionMode.SIMULATE,
                  wait_for_mined: bool = True,
                  private_key: Optional[str] = None,
                  poll_ms: int = DEFAULT_POLL_MS,
                  max_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS) -> SendResult:
        """
        Execute a contract write, or preview it in simulate mode.

        Args:
            request: The contract invocation
            mode: simulate (default) returns a preview without any network I/O
            wait_for_mined: Poll for a terminal status after submission
            private_key: Signing key (defaults to TMRW_PRIVATE_KEY)
            poll_ms: Delay between status polls
            max_attempts: Maximum number of status polls

        Returns:
            SendResult; tx is set only for sends

        Raises:
            ChainError: SEND_PRIVATE_KEY_REQUIRED, CONTRACT_SEND_ERROR,
                TX_ID_MISSING or TX_TIMEOUT, plus the resolution errors of call_view
        """
        if _parse_mode(mode) is ExecutionMode.SIMULATE:
            return SendResult(
                simulated=True,
                result=ChainSimulatePayload(
                    chain_id=request.chain_id,
                    contract_address=request.contract_address,
                    method_name=request.method_name,
                    args=request.args,
                ),
            )

        config = self._config_provider()
        key = private_key or config.private_key
        if not key:
            raise ChainError(
                ErrorCode.SEND_PRIVATE_KEY_REQUIRED,
                "TMRW_PRIVATE_KEY is required for execution_mode=send",
            )

        call = self._resolve(request, lambda: get_wallet_by_private_key(key))
        raw = call.node.send_transaction(self._signed_raw(call, request.args))

        if has_error_marker(raw):
            raise ChainError(
                ErrorCode.CONTRACT_SEND_ERROR,
                f"send failed: {request.method_name}",
                raw,
            )

        tx_id = _extract_tx_id(raw)
        if not tx_id:
            raise ChainError(ErrorCode.TX_ID_MISSING, "send succeeded but transactionId is missing", raw)
        logger.info(f"Submitted {request.method_name} on {request.chain_id}: {tx_id}")

        status = "SUBMITTED"
        logs = None
        if wait_for_mined is not False:
            mined = wait_for_tx_result(call.rpc_url, tx_id, poll_ms=poll_ms, max_attempts=max_attempts, pool=self.pool)
            status = mined.status
            logs = mined.raw.get("Logs") or mined.raw.get("logs") or []

        explorer = config.explorer.get(request.chain_id)
        return SendResult(
            simulated=False,
            result=raw,
            tx=TxReceipt(
                tx_id=tx_id,
                status=status,
                logs=logs,
                explorer_url=f"{explorer}/tx/{tx_id}" if explorer else None,
            ),
        )

    def pack_input(self, chain_id: str, contract_address: str, method_name: str, args: Any) -> str:
        """
        Encode method arguments without sending anything.

        Returns:
            base64 of the protobuf-encoded input

        Raises:
            ChainError: PACK_INPUT_UNSUPPORTED if the method has no input encoder
        """
        request = ContractCallRequest(
            chain_id=chain_id,
            contract_address=contract_address,
            method_name=method_name,
            args=args,
        )
        call = self._resolve(request)
        return base64.b64encode(call.method.encode_input(args)).decode("ascii")


_default_client = ChainClient()


def call_view(request: ContractCallRequest) -> Any:
    return _default_client.call_view(request)


def call_send(request: ContractCallRequest, mode: Union[ExecutionMode, str, None] = ExecutionMode.SIMULATE,
              wait_for_mined: bool = True, private_key: Optional[str] = None) -> SendResult:
    return _default_client.call_send(request, mode=mode, wait_for_mined=wait_for_mined, private_key=private_key)


def pack_input(chain_id: str, contract_address: str, method_name: str, args: Any) -> str:
    return _default_client.pack_input(chain_id, contract_address, method_name, args)
