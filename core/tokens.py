# ============================================================================
# TOKEN UTILITIES
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Foundation - Token generation and Authorization header codec
# PURPOSE: Unpredictable credentials tokens, Token <base64> encoding
# CREATED: 18 OCT 2026
# ============================================================================
"""
Token Utilities

OCPI 2.2 transports credentials tokens base64-encoded in the Authorization
header: ``Authorization: Token <base64(token)>``.
"""

import base64
import binascii
import secrets
from typing import Optional

AUTHORIZATION_SCHEME = "Token"

# 32 random bytes -> 43 url-safe characters, inside the 64 char limit
TOKEN_BYTES = 32


def generate_token(nbytes: int = TOKEN_BYTES) -> str:
    """Create a fresh credentials token."""
    return secrets.token_urlsafe(nbytes)


def encode_authorization(token: str) -> str:
    """Build the Authorization header value for an outbound call."""
    encoded = base64.b64encode(token.encode("utf-8")).decode("ascii")
    return f"{AUTHORIZATION_SCHEME} {encoded}"


def decode_authorization(header_value: str) -> Optional[str]:
    """
    Extract the raw token from an Authorization header value.

    Returns None when the header is not ``Token <base64>`` or the payload is
    not valid base64 / UTF-8.
    """
    parts = header_value.strip().split(" ")
    if len(parts) != 2 or parts[0].lower() != AUTHORIZATION_SCHEME.lower():
        return None

    try:
        token = base64.b64decode(parts[1], validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    return token or None


def mask_token(token: Optional[str]) -> str:
    """Loggable form of a token: first four characters only."""
    if not token:
        return "<none>"
    return f"{token[:4]}***"


__all__ = [
    "AUTHORIZATION_SCHEME",
    "generate_token",
    "encode_authorization",
    "decode_authorization",
    "mask_token",
]
