"""
HTTP client for the aelf node REST API.

One ``AElfNodeClient`` is bound to one node URL. Constructing it only sets up
a ``requests.Session``; nothing touches the network until a method is called.
"""
import base64
import logging
import threading
from typing import Any, Dict, Optional

import requests

from ..exceptions import ChainError, ErrorCode
from .contract import ContractInterface

logger = logging.getLogger(__name__)

API_PREFIX = "/api/blockChain"


def has_error_marker(raw: Any) -> bool:
    """Whether a node response reports a failure in its body"""
    return isinstance(raw, dict) and bool(raw.get("error") or raw.get("Error") or raw.get("code"))


class AElfNodeClient:
    """
    Client for a single aelf node.

    Contract interfaces resolved through ``contract_at`` are cached on the
    client, so they live exactly as long as the pooled handle.
    """

    DEFAULT_TIMEOUT = 20  # seconds

    def __init__(self, rpc_url: str, timeout: Optional[float] = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        """
        Initialize the node client

        Args:
            rpc_url: Base URL of the node (e.g., "https://aelf-public-node.aelf.io")
            timeout: Request timeout in seconds
            session: Optional requests session to reuse
        """
        self.rpc_url = rpc_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self._contracts: Dict[str, ContractInterface] = {}
        self._contracts_lock = threading.RLock()

    def __repr__(self) -> str:
        return f"AElfNodeClient({self.rpc_url!r})"

    def close(self) -> None:
        """Release pooled connections"""
        self.session.close()

    def _request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                 json_body: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.rpc_url}{API_PREFIX}{path}"
        try:
            response = self.session.request(method, url, params=params, json=json_body, timeout=self.timeout)
        except requests.RequestException as e:
            raise ChainError(ErrorCode.RPC_HTTP_ERROR, f"node request failed: {method} {path}: {e}")

        try:
            body = response.json()
        except ValueError:
            body = None

        if 200 <= response.status_code < 300:
            if body is None:
                raise ChainError(ErrorCode.RPC_HTTP_ERROR, f"invalid JSON from node: {path}", response.text[:500])
            return body

        # Nodes report contract failures as JSON bodies on 4xx/5xx; callers inspect them
        if has_error_marker(body):
            return body

        raise ChainError(ErrorCode.RPC_HTTP_ERROR, f"{response.status_code} {path}", response.text[:500])

    def get_chain_status(self) -> Dict[str, Any]:
        """
        Get the current chain status (best chain height and hash).

        Raises:
            ChainError: RPC_HTTP_ERROR if the node does not report a status
        """
        status = self._request("GET", "/chainStatus")
        if not isinstance(status, dict) or has_error_marker(status) or "BestChainHash" not in status:
            raise ChainError(ErrorCode.RPC_HTTP_ERROR, "chain status unavailable", status)
        return status

    def get_contract_file_descriptor_set(self, address: str) -> bytes:
        """
        Get the serialized protobuf FileDescriptorSet of a contract.

        Raises:
            ChainError: CONTRACT_DESCRIPTOR_ERROR if the node has no descriptor for the address
        """
        body = self._request("GET", "/contractFileDescriptorSet", params={"address": address})
        if not isinstance(body, str) or not body:
            raise ChainError(
                ErrorCode.CONTRACT_DESCRIPTOR_ERROR,
                f"no contract descriptor for {address}",
                body,
            )
        try:
            return base64.b64decode(body, validate=True)
        except ValueError:
            raise ChainError(ErrorCode.CONTRACT_DESCRIPTOR_ERROR, f"malformed contract descriptor for {address}")

    def execute_transaction(self, raw_transaction: str) -> Any:
        """Run a signed transaction read-only; returns the hex-encoded output or an error body"""
        return self._request("POST", "/executeTransaction", json_body={"RawTransaction": raw_transaction})

    def send_transaction(self, raw_transaction: str) -> Any:
        """Broadcast a signed transaction"""
        return self._request("POST", "/sendTransaction", json_body={"RawTransaction": raw_transaction})

    def get_transaction_result(self, tx_id: str) -> Any:
        """Get the execution result of a transaction"""
        return self._request("GET", "/transactionResult", params={"transactionId": tx_id})

    def contract_at(self, address: str) -> ContractInterface:
        """
        Resolve the method table of a contract.

        Args:
            address: base58 contract address

        Returns:
            ContractInterface built from the node's descriptors (cached)
        """
        with self._contracts_lock:
            contract = self._contracts.get(address)
        if contract is not None:
            return contract

        descriptor_set = self.get_contract_file_descriptor_set(address)
        contract = ContractInterface.from_descriptor_set(address, descriptor_set)
        logger.debug(f"Resolved contract {address} with {len(contract)} methods")

        with self._contracts_lock:
            return self._contracts.setdefault(address, contract)
