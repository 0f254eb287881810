"""
Bounded pool of aelf node clients keyed by RPC URL.
"""
import logging
import threading
from typing import Callable, Optional

from cachetools import FIFOCache

from ..config import get_config
from .node import AElfNodeClient

logger = logging.getLogger(__name__)


class _ClientCache(FIFOCache):
    """FIFOCache that closes clients as they leave the cache"""

    def popitem(self):
        rpc_url, client = super().popitem()
        logger.debug(f"Released node client for {rpc_url}")
        client.close()
        return rpc_url, client


class RpcClientPool:
    """
    Cache of node clients, at most one per RPC URL.

    When full, the oldest inserted client is evicted (FIFO, hits do not
    refresh an entry).
    """

    def __init__(self, max_size: int = 8, client_factory: Callable[[str], AElfNodeClient] = AElfNodeClient):
        """
        Args:
            max_size: Maximum number of cached clients (clamped to at least 1)
            client_factory: Builds a client for an RPC URL
        """
        self.max_size = max(1, int(max_size or 1))
        self._client_factory = client_factory
        self._clients = _ClientCache(maxsize=self.max_size)
        self._lock = threading.RLock()

    def get(self, rpc_url: str) -> AElfNodeClient:
        """Return the client for rpc_url, creating (and possibly evicting) under the lock"""
        with self._lock:
            client = self._clients.get(rpc_url)
            if client is None:
                client = self._client_factory(rpc_url)
                self._clients[rpc_url] = client
                logger.debug(f"Created node client for {rpc_url} ({len(self._clients)}/{self.max_size})")
            return client

    def clear(self) -> None:
        with self._lock:
            self._clients.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def __contains__(self, rpc_url: object) -> bool:
        with self._lock:
            return rpc_url in self._clients


_default_pool: Optional[RpcClientPool] = None
_default_pool_lock = threading.RLock()


def get_default_pool() -> RpcClientPool:
    """Process-wide pool sized from TMRW_AELF_CACHE_MAX"""
    global _default_pool
    with _default_pool_lock:
        if _default_pool is None:
            _default_pool = RpcClientPool(get_config().aelf_cache_max)
        return _default_pool


def get_aelf_client(rpc_url: str) -> AElfNodeClient:
    return get_default_pool().get(rpc_url)


def clear_rpc_pool() -> None:
    """Drop every pooled client; the next use rebuilds the pool from config"""
    global _default_pool
    with _default_pool_lock:
        if _default_pool is not None:
            _default_pool.clear()
        _default_pool = None
