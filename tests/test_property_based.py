"""
Property-based tests for pure helpers.
"""
from unittest.mock import MagicMock

from hypothesis import given, settings
from hypothesis import strategies as st

from tomorrowdao_skill.api.http import encode_query, should_retry_status
from tomorrowdao_skill.chain.pool import RpcClientPool
from tomorrowdao_skill.cli import to_snake_case
from tomorrowdao_skill.logging_utils import sanitize

urls = st.sampled_from([f"https://node{i}.test" for i in range(6)])


@given(st.integers(min_value=1, max_value=4), st.lists(urls, max_size=30))
@settings(deadline=None)
def test_pool_never_exceeds_capacity(max_size, requested):
    created = []

    def factory(url):
        client = MagicMock(name=url)
        created.append(client)
        return client

    pool = RpcClientPool(max_size=max_size, client_factory=factory)
    for url in requested:
        client = pool.get(url)
        assert len(pool) <= max_size
        # The returned client is the live one for its URL
        assert pool.get(url) is client

    closed = sum(1 for client in created if client.close.called)
    assert closed == len(created) - len(pool)


@given(st.dictionaries(st.text(min_size=1, max_size=8), st.one_of(st.none(), st.booleans(), st.integers())))
def test_encode_query_drops_only_none(query):
    encoded = encode_query(query)

    assert set(encoded) == {k for k, v in query.items() if v is not None}
    assert all(isinstance(v, str) for v in encoded.values())


@given(st.integers(min_value=100, max_value=599))
def test_retry_statuses(status):
    assert should_retry_status(status) == (status in (408, 425, 429) or status >= 500)


@given(st.from_regex(r"[a-z]+([A-Z][a-z]+)*", fullmatch=True))
def test_snake_case_has_no_capitals(key):
    snake = to_snake_case(key)
    assert snake == snake.lower()
    assert snake.replace("_", "") == key.lower()


@given(st.dictionaries(st.sampled_from(["privateKey", "accessToken", "authorization", "txId", "code"]), st.text()))
def test_sanitize_keeps_keys(fields):
    clean = sanitize(fields)
    assert set(clean) == set(fields)
    for key in ("privateKey", "accessToken", "authorization"):
        if key in clean:
            assert clean[key] == "[REDACTED]"
