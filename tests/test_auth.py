"""
Tests for the bearer token cache.
"""
from urllib.parse import parse_qs

import pytest

from tomorrowdao_skill.api import auth
from tomorrowdao_skill.api.auth import TOKEN_CLIENT_ID, TOKEN_SCOPE, TokenCache
from tomorrowdao_skill.exceptions import AuthError
from tomorrowdao_skill.models import AuthToken

from tests.test_helpers.mock_chain import OWNER_ADDRESS, TEST_AUTH_BASE, TEST_PRIV_KEY

TOKEN_URL = f"{TEST_AUTH_BASE}/connect/token"


@pytest.fixture
def with_key(monkeypatch):
    monkeypatch.setenv("TMRW_PRIVATE_KEY", TEST_PRIV_KEY)


def _form(matcher):
    return {k: v[0] for k, v in parse_qs(matcher.last_request.text).items()}


@pytest.mark.usefixtures("with_key")
class TestTokenExchange:
    """Test TokenCache.get_access_token"""

    def test_token_is_cached(self, requests_mock):
        matcher = requests_mock.post(TOKEN_URL, json={"access_token": "tok-1", "token_type": "Bearer", "expires_in": 3600})
        cache = TokenCache()

        first = cache.get_access_token()
        second = cache.get_access_token()

        assert first is second
        assert first.authorization == "Bearer tok-1"
        assert matcher.call_count == 1

    def test_force_refresh(self, requests_mock):
        matcher = requests_mock.post(TOKEN_URL, [
            {"json": {"access_token": "tok-1", "expires_in": 3600}},
            {"json": {"access_token": "tok-2", "expires_in": 3600}},
        ])
        cache = TokenCache()

        cache.get_access_token()
        refreshed = cache.get_access_token(force_refresh=True)

        assert refreshed.access_token == "tok-2"
        assert matcher.call_count == 2

    def test_token_inside_margin_is_refreshed(self, requests_mock):
        matcher = requests_mock.post(TOKEN_URL, json={"access_token": "short", "expires_in": 20})
        cache = TokenCache()

        cache.get_access_token()
        cache.get_access_token()

        assert matcher.call_count == 2

    def test_form_fields(self, requests_mock):
        matcher = requests_mock.post(TOKEN_URL, json={"access_token": "tok", "expires_in": 3600})

        TokenCache().get_access_token()
        form = _form(matcher)

        assert matcher.last_request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert form["grant_type"] == "signature"
        assert form["scope"] == TOKEN_SCOPE
        assert form["client_id"] == TOKEN_CLIENT_ID
        assert form["source"] == "nightElf"
        assert form["chain_id"] == "AELF"
        assert form["address"] == OWNER_ADDRESS
        assert len(form["signature"]) == 130
        assert form["publickey"].startswith("04")
        assert form["timestamp"].isdigit()
        assert "ca_hash" not in form

    def test_ca_hash_sent_when_configured(self, monkeypatch, requests_mock):
        monkeypatch.setenv("TMRW_CA_HASH", "ca-123")
        matcher = requests_mock.post(TOKEN_URL, json={"access_token": "tok", "expires_in": 3600})

        TokenCache().get_access_token()

        assert _form(matcher)["ca_hash"] == "ca-123"

    def test_nested_data_envelope(self, requests_mock):
        requests_mock.post(TOKEN_URL, json={"data": {"access_token": "nested", "expires_in": "600"}})
        token = TokenCache().get_access_token()
        assert token.access_token == "nested"
        assert token.expires_in == 600

    def test_http_error(self, requests_mock):
        requests_mock.post(TOKEN_URL, status_code=401, text="invalid_grant")

        with pytest.raises(AuthError) as exc_info:
            TokenCache().get_access_token()

        assert exc_info.value.code == "AUTH_HTTP_ERROR"
        assert exc_info.value.details == "invalid_grant"

    def test_missing_expiry_does_not_leak_token(self, requests_mock):
        requests_mock.post(TOKEN_URL, json={"access_token": "secret-token"})

        with pytest.raises(AuthError) as exc_info:
            TokenCache().get_access_token()

        assert exc_info.value.code == "AUTH_RESPONSE_INVALID"
        assert exc_info.value.details == {"fields": ["access_token"]}
        assert "secret-token" not in repr(exc_info.value)
        assert "secret-token" not in exc_info.value.message

    def test_non_json_response(self, requests_mock):
        requests_mock.post(TOKEN_URL, text="<html>")

        with pytest.raises(AuthError) as exc_info:
            TokenCache().get_access_token()
        assert exc_info.value.code == "AUTH_RESPONSE_INVALID"

    def test_module_level_cache(self, requests_mock):
        matcher = requests_mock.post(TOKEN_URL, json={"access_token": "tok", "expires_in": 3600})

        auth.get_access_token()
        auth.get_access_token()
        auth.clear_token_cache()
        auth.get_access_token()

        assert matcher.call_count == 2


class TestWithoutKey:
    """Test behaviour when no private key is configured"""

    def test_private_key_required(self, requests_mock):
        with pytest.raises(AuthError) as exc_info:
            TokenCache().get_access_token()

        assert exc_info.value.code == "AUTH_PRIVATE_KEY_REQUIRED"
        assert requests_mock.call_count == 0


class TestTokenValidity:
    """Test the refresh margin"""

    @pytest.mark.parametrize("remaining_ms,valid", [(60_000, True), (30_001, True), (30_000, False), (-1, False)])
    def test_margin(self, remaining_ms, valid):
        token = AuthToken(access_token="t", expires_in=60, expires_at=1_000_000 + remaining_ms)
        assert TokenCache.is_valid(token, now_ms=1_000_000) is valid

    def test_none_is_invalid(self):
        assert TokenCache.is_valid(None) is False

    def test_repr_hides_token(self):
        token = AuthToken(access_token="very-secret", expires_in=60, expires_at=1)
        assert "very-secret" not in repr(token)
        assert "very-secret" not in str(token)
