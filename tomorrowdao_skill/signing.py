"""
Wallet derivation and secp256k1 signing for aelf accounts.

The curve arithmetic is delegated to ``eth_keys``; this module only shapes
keys, addresses and signatures the way aelf nodes and the TomorrowDAO
auth server expect them.
"""
import hashlib
import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Union

import base58
from eth_account import Account
from eth_keys import keys

from .ec_constants import PRIVATE_KEY_HEX_LENGTH, SECP256K1_MAX, SECP256K1_MIN, UNCOMPRESSED_PREFIX
from .exceptions import ErrorCode, SkillError
from .models import SignaturePayload

logger = logging.getLogger(__name__)

SIGN_TEXT_PREFIX = (
    "Welcome to TMRWDAO! Click to sign in to the TMRWDAO platform! This request will not "
    "trigger any blockchain transaction or cost any gas fees.\n\nsignature: "
)


@dataclass(frozen=True)
class Wallet:
    """
    An aelf account derived from a private key.

    Attributes:
        address: base58check aelf address
        public_key: Uncompressed public key as hex (130 chars, ``04`` prefix)
        private_key: Raw 32-byte private key (never printed)
    """
    address: str
    public_key: str
    private_key: bytes = field(repr=False)

    @property
    def address_bytes(self) -> bytes:
        return base58.b58decode_check(self.address)


def _normalize_private_key(private_key: Union[str, bytes, None]) -> bytes:
    if isinstance(private_key, bytes):
        raw = private_key
    else:
        hex_key = (private_key or "").strip()
        if hex_key.startswith("0x"):
            hex_key = hex_key[2:]
        if len(hex_key) != PRIVATE_KEY_HEX_LENGTH:
            raise SkillError(ErrorCode.INVALID_PRIVATE_KEY, "TMRW_PRIVATE_KEY is invalid or missing")
        try:
            raw = bytes.fromhex(hex_key)
        except ValueError:
            raise SkillError(ErrorCode.INVALID_PRIVATE_KEY, "TMRW_PRIVATE_KEY is invalid or missing")

    if len(raw) != 32 or not SECP256K1_MIN <= int.from_bytes(raw, "big") <= SECP256K1_MAX:
        raise SkillError(ErrorCode.INVALID_PRIVATE_KEY, "TMRW_PRIVATE_KEY is invalid or missing")
    return raw


def address_from_public_key(public_key: bytes) -> str:
    """
    Derive an aelf address from an uncompressed public key.

    Args:
        public_key: 65-byte uncompressed public key (with 0x04 prefix)

    Returns:
        base58check encoding of sha256(sha256(public_key))
    """
    digest = hashlib.sha256(hashlib.sha256(public_key).digest()).digest()
    return base58.b58encode_check(digest).decode("ascii")


def get_wallet_by_private_key(private_key: Union[str, bytes, None]) -> Wallet:
    """
    Derive the aelf wallet for a private key.

    Args:
        private_key: 64 hex characters, optionally ``0x``-prefixed

    Returns:
        Wallet with address and public key

    Raises:
        SkillError: INVALID_PRIVATE_KEY if the key is malformed or out of range
    """
    raw = _normalize_private_key(private_key)
    public_key = UNCOMPRESSED_PREFIX + keys.PrivateKey(raw).public_key.to_bytes()
    return Wallet(
        address=address_from_public_key(public_key),
        public_key=public_key.hex(),
        private_key=raw,
    )


def create_new_wallet() -> Wallet:
    """Generate a throwaway wallet, used to sign read-only calls"""
    return get_wallet_by_private_key(bytes(Account.create().key))


def _sign(private_key: Union[str, bytes], digest: bytes) -> keys.Signature:
    if len(digest) != 32:
        raise SkillError(ErrorCode.SIGN_ERROR, f"digest must be 32 bytes, got {len(digest)}")
    return keys.PrivateKey(_normalize_private_key(private_key)).sign_msg_hash(digest)


def sign_digest(private_key: Union[str, bytes], digest: bytes) -> str:
    """
    Sign a 32-byte digest.

    Returns:
        r (64 hex) + s (64 hex) + two-digit recovery parameter, 130 hex chars
    """
    signature = _sign(private_key, digest)
    return f"{signature.r:064x}{signature.s:064x}0{signature.v}"


def sign_digest_bytes(private_key: Union[str, bytes], digest: bytes) -> bytes:
    """Sign a digest, returning the 65-byte r || s || recovery form used in transactions"""
    return _sign(private_key, digest).to_bytes()


def build_signature_payload(private_key: str, timestamp: Optional[int] = None) -> SignaturePayload:
    """
    Build the signed payload for the token exchange.

    The auth server verifies a signature over sha256("{address}-{timestamp}");
    changing this message breaks authentication.

    Args:
        private_key: Signing key
        timestamp: Milliseconds since epoch (defaults to now)

    Returns:
        SignaturePayload
    """
    wallet = get_wallet_by_private_key(private_key)
    if timestamp is None:
        timestamp = int(time.time() * 1000)

    plain_text = f"{wallet.address}-{timestamp}"
    signature = sign_digest(wallet.private_key, hashlib.sha256(plain_text.encode("utf-8")).digest())

    if not wallet.public_key:
        raise SkillError(ErrorCode.SIGN_ERROR, "Failed to derive public key from private key")

    return SignaturePayload(
        timestamp=timestamp,
        address=wallet.address,
        public_key=wallet.public_key,
        signature=signature,
    )


def build_legacy_timestamp_signature(private_key: str, timestamp: int) -> SignaturePayload:
    """
    Sign a bare timestamp for legacy endpoints.

    The decimal timestamp string is read as a hex number and left-padded to
    32 bytes, matching how the legacy web client fed it to its signer.
    """
    wallet = get_wallet_by_private_key(private_key)
    digest = int(str(timestamp), 16).to_bytes(32, "big")
    return SignaturePayload(
        timestamp=timestamp,
        address=wallet.address,
        public_key=wallet.public_key,
        signature=sign_digest(wallet.private_key, digest),
    )


def get_auth_signing_message(address: str, timestamp: int) -> str:
    """Human-readable sign-in text shown by wallets"""
    return f"{SIGN_TEXT_PREFIX}{address}-{timestamp}"
