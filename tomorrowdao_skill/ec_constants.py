"""
Constants for elliptic curve cryptography.
"""

# SECP256K1 constants
# Order of the SECP256K1 elliptic curve (N value)
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

# Minimum private key value (1)
SECP256K1_MIN = 1

# Maximum private key value (N-1)
SECP256K1_MAX = SECP256K1_N - 1

# Private keys are 32 bytes, written as 64 hex characters
PRIVATE_KEY_HEX_LENGTH = 64

# Uncompressed public key marker byte
UNCOMPRESSED_PREFIX = b"\x04"
