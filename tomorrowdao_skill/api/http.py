"""
REST client for the TomorrowDAO API with timeout, retry and envelope handling.
"""
import json
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from ..config import SkillConfig, get_config
from ..exceptions import ApiError, ErrorCode
from ..models import AuthToken
from . import auth as token_auth

logger = logging.getLogger(__name__)

API_PREFIX = "/api/app"
SUCCESS_CODE = "20000"
RETRYABLE_STATUSES = frozenset({408, 425, 429})
READ_CHUNK_SIZE = 8192

_now = time.monotonic


class OutcomeKind(str, Enum):
    OK = "ok"
    TIMED_OUT = "timed_out"
    NETWORK_ERROR = "network_error"


@dataclass
class AttemptOutcome:
    """Result of one HTTP attempt; exceptions are captured, not raised"""
    kind: OutcomeKind
    response: Optional[requests.Response] = None
    body: bytes = b""
    error: Optional[Exception] = None

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def should_retry_status(status: int) -> bool:
    return status in RETRYABLE_STATUSES or status >= 500


def build_url(api_base: str, path: str) -> str:
    """Join a path onto {api_base}/api/app; absolute URLs pass through"""
    if path.startswith("http://") or path.startswith("https://"):
        return path
    return f"{api_base}{API_PREFIX}/{path.lstrip('/')}"


def encode_query(query: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Drop None values and render the rest the way the backend parses them"""
    params = {}
    for key, value in (query or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            params[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            params[key] = ",".join(str(item) for item in value)
        else:
            params[key] = str(value)
    return params


def _drop_none(body: Any) -> Any:
    if isinstance(body, dict):
        return {k: v for k, v in body.items() if v is not None}
    return body


class HttpPolicyClient:
    """
    Client for the TomorrowDAO REST API.

    GETs are retried when TMRW_HTTP_RETRY_MAX > 0; POSTs additionally need
    TMRW_HTTP_RETRY_POST.
    """

    def __init__(self, config_provider: Callable[[], SkillConfig] = get_config,
                 token_provider: Optional[Callable[[], AuthToken]] = None,
                 session: Optional[requests.Session] = None):
        """
        Args:
            config_provider: Returns the active configuration
            token_provider: Returns a bearer token (defaults to the shared token cache)
            session: Optional requests session to reuse
        """
        self._config_provider = config_provider
        self._token_provider = token_provider
        self.session = session or requests.Session()

    def _headers(self, use_auth: bool, has_body: bool) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if has_body:
            headers["Content-Type"] = "application/json"
        if use_auth:
            token = (self._token_provider or token_auth.get_access_token)()
            headers["Authorization"] = token.authorization
        return headers

    def _attempt(self, method: str, url: str, timeout: Optional[float], **kwargs) -> AttemptOutcome:
        """
        Run one request with a hard deadline.

        The requests timeout only bounds connecting and each socket read, so
        the body is streamed and the whole attempt is checked against the
        deadline between chunks.
        """
        deadline = _now() + timeout if timeout is not None else None
        try:
            response = self.session.request(method, url, timeout=timeout, stream=True, **kwargs)
        except requests.Timeout as e:
            return AttemptOutcome(OutcomeKind.TIMED_OUT, error=e)
        except requests.RequestException as e:
            return AttemptOutcome(OutcomeKind.NETWORK_ERROR, error=e)

        chunks = []
        try:
            for chunk in response.iter_content(READ_CHUNK_SIZE):
                chunks.append(chunk)
                if deadline is not None and _now() > deadline:
                    return AttemptOutcome(OutcomeKind.TIMED_OUT, error=TimeoutError(f"deadline exceeded: {url}"))
        except requests.Timeout as e:
            return AttemptOutcome(OutcomeKind.TIMED_OUT, error=e)
        except requests.RequestException as e:
            return AttemptOutcome(OutcomeKind.NETWORK_ERROR, error=e)
        finally:
            response.close()
        return AttemptOutcome(OutcomeKind.OK, response=response, body=b"".join(chunks))

    def _send(self, method: str, path: str, retry_enabled: bool, **kwargs) -> AttemptOutcome:
        config = self._config_provider()
        url = build_url(config.api_base, path)
        max_attempts = config.http_retry_max + 1 if retry_enabled else 1
        timeout = config.http_timeout_ms / 1000 if config.http_timeout_ms > 0 else None

        outcome = None
        for attempt in range(1, max_attempts + 1):
            outcome = self._attempt(method, url, timeout, **kwargs)
            if outcome.kind is OutcomeKind.OK and not should_retry_status(outcome.response.status_code):
                return outcome
            if attempt >= max_attempts:
                break

            reason = outcome.response.status_code if outcome.response is not None else outcome.kind.value
            delay_ms = config.http_retry_base_ms * 2 ** (attempt - 1)
            logger.warning(f"Retrying {method} {path} after {delay_ms}ms ({reason}), attempt {attempt}/{max_attempts}")
            time.sleep(delay_ms / 1000)

        if outcome.kind is OutcomeKind.TIMED_OUT:
            raise ApiError(
                ErrorCode.API_HTTP_ERROR,
                f"request timeout after {config.http_timeout_ms}ms: {method} {path}",
                {"timeoutMs": config.http_timeout_ms},
            )
        if outcome.kind is OutcomeKind.NETWORK_ERROR:
            raise ApiError(
                ErrorCode.API_HTTP_ERROR,
                f"network error: {method} {path}: {type(outcome.error).__name__}",
            )
        return outcome

    @staticmethod
    def _unwrap(outcome: AttemptOutcome, path: str) -> Any:
        status = outcome.response.status_code
        if not 200 <= status < 300:
            raise ApiError(ErrorCode.API_HTTP_ERROR, f"{status} {path}", outcome.text[:500])

        try:
            body = json.loads(outcome.body)
        except ValueError:
            raise ApiError(ErrorCode.API_HTTP_ERROR, f"invalid JSON response: {path}", outcome.text[:500])

        if isinstance(body, dict):
            code = body.get("code")
            if code is not None and code != "" and str(code) != SUCCESS_CODE:
                raise ApiError(ErrorCode.API_BUSINESS_ERROR, body.get("message") or f"api error: {code}", body)
            if body.get("data") is not None:
                return body["data"]
        return body

    def get(self, path: str, query: Optional[Mapping[str, Any]] = None, auth: bool = False) -> Any:
        """
        GET a backend resource.

        Args:
            path: Path under /api/app, or an absolute URL
            query: Query parameters; None values are dropped
            auth: Send the bearer token

        Returns:
            The envelope's data, or the whole body when data is absent

        Raises:
            ApiError: API_HTTP_ERROR or API_BUSINESS_ERROR
        """
        config = self._config_provider()
        outcome = self._send(
            "GET",
            path,
            retry_enabled=config.http_retry_max > 0,
            params=encode_query(query),
            headers=self._headers(auth, has_body=False),
        )
        return self._unwrap(outcome, path)

    def post(self, path: str, body: Any = None, auth: bool = False) -> Any:
        """POST a JSON body; retried only when TMRW_HTTP_RETRY_POST is enabled"""
        config = self._config_provider()
        outcome = self._send(
            "POST",
            path,
            retry_enabled=config.http_retry_max > 0 and config.http_retry_post,
            json=_drop_none(body if body is not None else {}),
            headers=self._headers(auth, has_body=True),
        )
        return self._unwrap(outcome, path)


_default_client = HttpPolicyClient()


def api_get(path: str, query: Optional[Mapping[str, Any]] = None, auth: bool = False) -> Any:
    return _default_client.get(path, query, auth=auth)


def api_post(path: str, body: Any = None, auth: bool = False) -> Any:
    return _default_client.post(path, body, auth=auth)
