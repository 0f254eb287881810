"""
TomorrowDAO REST API access.
"""
from .auth import TokenCache, clear_token_cache, get_access_token
from .http import AttemptOutcome, HttpPolicyClient, OutcomeKind, api_get, api_post

__all__ = [
    "AttemptOutcome",
    "HttpPolicyClient",
    "OutcomeKind",
    "TokenCache",
    "api_get",
    "api_post",
    "clear_token_cache",
    "get_access_token",
]
