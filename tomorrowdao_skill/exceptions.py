"""
Exceptions for the TomorrowDAO skill.

Every failure raised below the tool boundary is a ``SkillError`` carrying a
stable machine-readable code, a human-readable message and optional details.
"""
from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """
    Stable error codes reported in the ``error.code`` field of a ToolResult.
    """
    # Configuration
    INVALID_CONFIG = "INVALID_CONFIG"
    UNSUPPORTED_CHAIN = "UNSUPPORTED_CHAIN"

    # Keys and signing
    INVALID_PRIVATE_KEY = "INVALID_PRIVATE_KEY"
    SIGN_ERROR = "SIGN_ERROR"

    # Auth
    AUTH_PRIVATE_KEY_REQUIRED = "AUTH_PRIVATE_KEY_REQUIRED"
    AUTH_HTTP_ERROR = "AUTH_HTTP_ERROR"
    AUTH_RESPONSE_INVALID = "AUTH_RESPONSE_INVALID"

    # REST API
    API_HTTP_ERROR = "API_HTTP_ERROR"
    API_BUSINESS_ERROR = "API_BUSINESS_ERROR"

    # Chain
    RPC_HTTP_ERROR = "RPC_HTTP_ERROR"
    CONTRACT_DESCRIPTOR_ERROR = "CONTRACT_DESCRIPTOR_ERROR"
    METHOD_NOT_FOUND = "METHOD_NOT_FOUND"
    CONTRACT_VIEW_ERROR = "CONTRACT_VIEW_ERROR"
    CONTRACT_SEND_ERROR = "CONTRACT_SEND_ERROR"
    SEND_PRIVATE_KEY_REQUIRED = "SEND_PRIVATE_KEY_REQUIRED"
    TX_ID_MISSING = "TX_ID_MISSING"
    TX_TIMEOUT = "TX_TIMEOUT"
    PACK_INPUT_UNSUPPORTED = "PACK_INPUT_UNSUPPORTED"

    # Input
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_JSON = "INVALID_JSON"

    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class SkillError(Exception):
    """Base exception for all TomorrowDAO skill errors."""

    def __init__(self, code: str, message: str, details: Optional[Any] = None):
        self.code = code.value if isinstance(code, ErrorCode) else code
        self.message = message
        self.details = details
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ConfigError(SkillError):
    """Raised for missing or malformed configuration."""
    pass


class AuthError(SkillError):
    """Raised when the token exchange fails."""
    pass


class ApiError(SkillError):
    """Raised when the TomorrowDAO REST API fails or reports a business error."""
    pass


class ChainError(SkillError):
    """Raised for node, contract and transaction failures."""
    pass


class InputError(SkillError):
    """Raised when a tool request is missing required data."""
    pass
