"""
Polling for a transaction's terminal status.
"""
import logging
import time
from typing import Any, Dict, Optional

from ..exceptions import ChainError, ErrorCode
from ..models import TxResult
from .pool import RpcClientPool, get_default_pool

logger = logging.getLogger(__name__)

NON_TERMINAL_STATUSES = frozenset({"PENDING", "PENDING_VALIDATION", "NOTEXISTED"})


def _normalize(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, dict) and isinstance(raw.get("result"), dict):
        return raw["result"]
    return raw if isinstance(raw, dict) else {}


def wait_for_tx_result(rpc_url: str, tx_id: str, poll_ms: int = 1000, max_attempts: int = 30,
                       pool: Optional[RpcClientPool] = None) -> TxResult:
    """
    Poll the node until the transaction reaches a terminal status.

    Args:
        rpc_url: Node URL the transaction was submitted to
        tx_id: Transaction id
        poll_ms: Delay between polls in milliseconds
        max_attempts: Maximum number of polls

    Returns:
        TxResult with the upper-cased status and the raw result

    Raises:
        ChainError: TX_TIMEOUT if no terminal status was seen
    """
    client = (pool if pool is not None else get_default_pool()).get(rpc_url)

    for attempt in range(1, max_attempts + 1):
        try:
            result = _normalize(client.get_transaction_result(tx_id))
        except ChainError as e:
            if e.code != ErrorCode.RPC_HTTP_ERROR.value:
                raise
            logger.warning(f"Polling {tx_id} failed on attempt {attempt}: {e.message}")
            result = {}

        status = str(result.get("Status") or result.get("status") or "").upper()
        if status and status not in NON_TERMINAL_STATUSES:
            logger.info(f"Transaction {tx_id} reached {status} after {attempt} poll(s)")
            return TxResult(status=status, raw=result)

        if attempt < max_attempts:
            time.sleep(poll_ms / 1000)

    raise ChainError(
        ErrorCode.TX_TIMEOUT,
        f"transaction polling timeout: {tx_id}",
        {"txId": tx_id, "attempts": max_attempts},
    )
