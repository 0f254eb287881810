"""
Bearer token cache for the TomorrowDAO REST API.

Tokens are obtained by signing ``"{address}-{timestamp}"`` with the configured
key and exchanging the signature at ``{auth_base}/connect/token``.
"""
import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from ..config import SkillConfig, get_config
from ..exceptions import AuthError, ErrorCode
from ..models import AuthToken
from ..signing import build_signature_payload

logger = logging.getLogger(__name__)

TOKEN_SCOPE = "TomorrowDAOServer"
TOKEN_CLIENT_ID = "TomorrowDAOServer_App"
TOKEN_REFRESH_MARGIN_MS = 30_000


def _now_ms() -> int:
    return int(time.time() * 1000)


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class TokenCache:
    """
    Single-slot token cache.

    The cached token is replaced by one assignment; concurrent refreshes
    may both hit the token endpoint and the last one wins.
    """

    def __init__(self, config_provider: Callable[[], SkillConfig] = get_config,
                 session: Optional[requests.Session] = None):
        self._config_provider = config_provider
        self.session = session or requests.Session()
        self._token: Optional[AuthToken] = None

    @property
    def token(self) -> Optional[AuthToken]:
        return self._token

    @staticmethod
    def is_valid(token: Optional[AuthToken], now_ms: Optional[int] = None) -> bool:
        """A token is usable while more than 30 seconds remain before expiry"""
        if token is None:
            return False
        now_ms = _now_ms() if now_ms is None else now_ms
        return token.expires_at - now_ms > TOKEN_REFRESH_MARGIN_MS

    def clear(self) -> None:
        self._token = None

    def get_access_token(self, force_refresh: bool = False) -> AuthToken:
        """
        Return a valid token, exchanging a new one when needed.

        Args:
            force_refresh: Skip the cache and always hit the token endpoint

        Returns:
            AuthToken

        Raises:
            AuthError: AUTH_PRIVATE_KEY_REQUIRED, AUTH_HTTP_ERROR or AUTH_RESPONSE_INVALID
        """
        cached = self._token
        if not force_refresh and self.is_valid(cached):
            return cached

        config = self._config_provider()
        if not config.private_key:
            raise AuthError(
                ErrorCode.AUTH_PRIVATE_KEY_REQUIRED,
                "TMRW_PRIVATE_KEY is required for authenticated APIs",
            )

        payload = build_signature_payload(config.private_key)
        form = {
            "grant_type": "signature",
            "scope": TOKEN_SCOPE,
            "client_id": TOKEN_CLIENT_ID,
            "timestamp": str(payload.timestamp),
            "signature": payload.signature,
            "source": config.source,
            "publickey": payload.public_key,
            "chain_id": config.auth_chain_id,
            "address": payload.address,
        }
        if config.ca_hash:
            form["ca_hash"] = config.ca_hash

        timeout = config.http_timeout_ms / 1000 if config.http_timeout_ms > 0 else None
        url = f"{config.auth_base}/connect/token"
        try:
            response = self.session.post(url, data=form, timeout=timeout)
        except requests.RequestException as e:
            raise AuthError(ErrorCode.AUTH_HTTP_ERROR, f"token request failed: {type(e).__name__}")

        if not 200 <= response.status_code < 300:
            raise AuthError(
                ErrorCode.AUTH_HTTP_ERROR,
                f"token request failed: {response.status_code}",
                response.text[:500],
            )

        try:
            body = response.json()
        except ValueError:
            raise AuthError(ErrorCode.AUTH_RESPONSE_INVALID, "token response is not valid JSON")
        if not isinstance(body, dict):
            raise AuthError(ErrorCode.AUTH_RESPONSE_INVALID, "token response is not a JSON object")

        nested: Dict[str, Any] = body["data"] if isinstance(body.get("data"), dict) else {}
        access_token = body.get("access_token") or nested.get("access_token")
        token_type = body.get("token_type") or nested.get("token_type") or "Bearer"
        expires_in = _to_int(body.get("expires_in") or nested.get("expires_in"))

        if not access_token or not expires_in:
            # Only field names go into details so a partial token never leaks
            raise AuthError(
                ErrorCode.AUTH_RESPONSE_INVALID,
                "token response missing access_token or expires_in",
                {"fields": sorted(set(body) | set(nested))},
            )

        token = AuthToken(
            access_token=access_token,
            token_type=token_type,
            expires_in=expires_in,
            expires_at=_now_ms() + expires_in * 1000,
        )
        self._token = token
        logger.info(f"Obtained access token for {payload.address}, expires in {expires_in}s")
        return token


_default_cache = TokenCache()


def get_access_token(force_refresh: bool = False) -> AuthToken:
    return _default_cache.get_access_token(force_refresh=force_refresh)


def clear_token_cache() -> None:
    _default_cache.clear()
