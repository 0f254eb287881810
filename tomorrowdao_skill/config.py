"""
Environment-driven configuration for the TomorrowDAO skill.

Values are read from ``TMRW_*`` environment variables once and cached until
``reset_config_cache()`` is called.
"""
import copy
import json
import logging
import math
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .exceptions import ConfigError, ErrorCode

logger = logging.getLogger(__name__)

SUPPORTED_CHAINS = ("AELF", "tDVV", "tDVW")

PROPOSAL_TYPES = ("Parliament", "Association", "Referendum")

DEFAULTS: Dict[str, Any] = {
    "api_base": "https://api.tmrwdao.com",
    "auth_base": "https://api.tmrwdao.com",
    "dao_chain": "tDVV",
    "network_chain": "AELF",
    "auth_chain": "AELF",
    "source": "nightElf",
    "rpc_aelf": "https://aelf-public-node.aelf.io",
    "rpc_tdvv": "https://tdvv-public-node.aelf.io",
    "http_timeout_ms": 10_000,
    "http_retry_max": 1,
    "http_retry_base_ms": 200,
    "http_retry_post": False,
    "aelf_cache_max": 8,
}

CONTRACTS: Dict[str, Any] = {
    "dao": {
        "daoAddress": "2izSidAeMiZ6tmD7FKmnoWbygjFSmH5nko3cGJ9EtbfC44BycC",
        "proposalAddress": "2tCM3oV6dTCmwFxSiFGPEVhGngdMwBV741wi156vj8kmqfp6da",
        "voteAddress": "2A8h4hLynLt86RxqvpNY43x6Js8CYhgyuAzj7sDGQ2ecP77Zgp",
    },
    "network": {
        "AELF": {
            "parliament": "2JT8xzjR5zJ8xnBvdgBZdSjfbokFSbF5hDdpUCbXeWaJfPDmsK",
            "association": "XyRN9VNabpBiVUFeX2t7ZUR2b3tWV7U31exufJ2AUepVb5t56",
            "referendum": "NxSBGHE3zs85tpnX1Ns4awQUtFL8Dnr6Hux4C4E18WZsW4zzJ",
            "election": "NrVf8B7XUduXn1oGHZeF1YANFXEXAhvCymz2WPyKZt4DE2zSg",
            "tokenConverter": "SietKh9cArYub9ox6E4rU94LrzPad6TB72rCwe3X1jQ5m1C34",
            "profit": "2ZUgaDqWSh4aJ5s5Ker2tRczhJSNep4bVVfrRBRJTRQdMTbA5W",
            "token": "JRmBduh4nXWi1aXgdUsj5gJrzeZb2LxmrAbf7W99faZSvoAaE",
            "genesis": "pykr77ft9UUKJZLVq15wCH8PinBSjVRQ12sD1Ayq92mKFsJ1i",
        },
        "tDVV": {
            "token": "7RzVGiuVWkvL4VfVHdZfQF2Tri3sgLe9U991bohHFfSRZXuGX",
        },
    },
}

EXPLORERS: Dict[str, str] = {
    "AELF": "https://aelfscan.io/AELF",
    "tDVV": "https://aelfscan.io/tDVV",
}


class SkillConfig(BaseModel):
    """Resolved runtime configuration"""
    api_base: str
    auth_base: str
    default_dao_chain: str
    default_network_chain: str
    auth_chain_id: str
    source: str
    ca_hash: Optional[str] = None
    private_key: Optional[str] = Field(None, repr=False)
    http_timeout_ms: int
    http_retry_max: int
    http_retry_base_ms: int
    http_retry_post: bool
    aelf_cache_max: int
    rpc: Dict[str, str]
    contracts: Dict[str, Any]
    explorer: Dict[str, str]

    def rpc_url(self, chain_id: str) -> str:
        """
        Get the node URL configured for a chain.

        Raises:
            ConfigError: UNSUPPORTED_CHAIN if no node is configured
        """
        url = self.rpc.get(chain_id)
        if not url:
            raise ConfigError(ErrorCode.UNSUPPORTED_CHAIN, f"No rpc configured for {chain_id}")
        return url


_config_cache: Optional[SkillConfig] = None


def _must_chain(value: str, field: str) -> str:
    if value in SUPPORTED_CHAINS:
        return value
    raise ConfigError(ErrorCode.INVALID_CONFIG, f"{field} must be one of {'/'.join(SUPPORTED_CHAINS)}")


def _trim_slash(url: str) -> str:
    return url[:-1] if url.endswith("/") else url


def _read_int(value: Optional[str], fallback: int) -> int:
    if value is None or value.strip() == "":
        return fallback
    try:
        parsed = float(value)
    except ValueError:
        return fallback
    if not math.isfinite(parsed) or parsed < 0:
        return fallback
    return int(parsed)


def _read_bool(value: Optional[str], fallback: bool) -> bool:
    if not value:
        return fallback
    return value == "1" or value.lower() == "true"


def _read_json_object(name: str) -> Dict[str, Any]:
    raw = os.environ.get(name)
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError as e:
        raise ConfigError(ErrorCode.INVALID_CONFIG, f"{name} is not valid JSON: {e}")
    if not isinstance(parsed, dict):
        raise ConfigError(ErrorCode.INVALID_CONFIG, f"{name} must be a JSON object")
    return parsed


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_config() -> SkillConfig:
    """
    Build (or return the cached) configuration from the environment.

    Returns:
        SkillConfig instance

    Raises:
        ConfigError: INVALID_CONFIG on a bad chain id or malformed override JSON
    """
    global _config_cache
    if _config_cache is not None:
        return _config_cache

    env = os.environ
    rpc = {
        "AELF": env.get("TMRW_RPC_AELF") or DEFAULTS["rpc_aelf"],
        "tDVV": env.get("TMRW_RPC_TDVV") or DEFAULTS["rpc_tdvv"],
    }
    if env.get("TMRW_RPC_TDVW"):
        rpc["tDVW"] = env["TMRW_RPC_TDVW"]

    explorer_overrides = _read_json_object("TMRW_EXPLORER_OVERRIDES")
    for chain_id, url in explorer_overrides.items():
        if not isinstance(url, str):
            raise ConfigError(ErrorCode.INVALID_CONFIG, f"explorer override for {chain_id} must be a string")

    config = SkillConfig(
        api_base=_trim_slash(env.get("TMRW_API_BASE") or DEFAULTS["api_base"]),
        auth_base=_trim_slash(env.get("TMRW_AUTH_BASE") or DEFAULTS["auth_base"]),
        default_dao_chain=_must_chain(
            env.get("TMRW_CHAIN_DEFAULT_DAO") or DEFAULTS["dao_chain"], "TMRW_CHAIN_DEFAULT_DAO"
        ),
        default_network_chain=_must_chain(
            env.get("TMRW_CHAIN_DEFAULT_NETWORK") or DEFAULTS["network_chain"], "TMRW_CHAIN_DEFAULT_NETWORK"
        ),
        auth_chain_id=_must_chain(env.get("TMRW_AUTH_CHAIN_ID") or DEFAULTS["auth_chain"], "TMRW_AUTH_CHAIN_ID"),
        source=env.get("TMRW_SOURCE") or DEFAULTS["source"],
        ca_hash=env.get("TMRW_CA_HASH") or None,
        private_key=env.get("TMRW_PRIVATE_KEY") or None,
        http_timeout_ms=_read_int(env.get("TMRW_HTTP_TIMEOUT_MS"), DEFAULTS["http_timeout_ms"]),
        http_retry_max=_read_int(env.get("TMRW_HTTP_RETRY_MAX"), DEFAULTS["http_retry_max"]),
        http_retry_base_ms=_read_int(env.get("TMRW_HTTP_RETRY_BASE_MS"), DEFAULTS["http_retry_base_ms"]),
        http_retry_post=_read_bool(env.get("TMRW_HTTP_RETRY_POST"), DEFAULTS["http_retry_post"]),
        aelf_cache_max=_read_int(env.get("TMRW_AELF_CACHE_MAX"), DEFAULTS["aelf_cache_max"]),
        rpc=rpc,
        contracts=_deep_merge(CONTRACTS, _read_json_object("TMRW_CONTRACT_OVERRIDES")),
        explorer={**EXPLORERS, **explorer_overrides},
    )

    logger.debug(f"Loaded configuration for chains: {', '.join(sorted(rpc))}")
    _config_cache = config
    return config


def reset_config_cache() -> None:
    """Drop the cached configuration so the next call re-reads the environment"""
    global _config_cache
    _config_cache = None


def get_proposal_contract_address(chain_id: str, proposal_type: str) -> str:
    """
    Get the governance contract for a proposal type.

    Args:
        chain_id: Chain identifier; network governance lives on AELF only
        proposal_type: Parliament, Association or Referendum

    Returns:
        Contract address
    """
    if chain_id != "AELF":
        raise ConfigError(
            ErrorCode.UNSUPPORTED_CHAIN,
            f"network governance currently supports AELF only, got {chain_id}",
        )
    contracts = get_config().contracts["network"]["AELF"]
    if proposal_type == "Parliament":
        return contracts["parliament"]
    if proposal_type == "Association":
        return contracts["association"]
    return contracts["referendum"]


def get_token_contract_address(chain_id: str) -> str:
    """Get the MultiToken contract address for a chain"""
    address = get_config().contracts["network"].get(chain_id, {}).get("token")
    if not address:
        raise ConfigError(ErrorCode.UNSUPPORTED_CHAIN, f"token contract not configured for {chain_id}")
    return address


def get_network_contract(name: str) -> str:
    """Get a system contract address on the AELF main chain"""
    return get_config().contracts["network"]["AELF"][name]
