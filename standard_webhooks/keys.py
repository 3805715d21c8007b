"""
Signing key decoding.

Secrets are shared as base64 strings, usually carrying a "whsec_" prefix.
Raw bytes are accepted as-is.
"""

import base64
import binascii
import secrets
from typing import Union

from standard_webhooks.errors import InvalidKeyError

SECRET_PREFIX = "whsec_"

KeyInput = Union[str, bytes, bytearray]


def decode_base64_key(value: str, prefix: str = "") -> bytes:
    """
    Base64-decode a key string, stripping an optional prefix first.

    Args:
        value: The encoded key
        prefix: Literal prefix to strip if present (e.g. "whsec_")

    Returns:
        The decoded key bytes

    Raises:
        InvalidKeyError: If the remainder is not valid base64 or is empty
    """
    if prefix and value.startswith(prefix):
        value = value[len(prefix):]

    try:
        key = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidKeyError(f"Signing key is not valid base64: {e}") from e

    if not key:
        raise InvalidKeyError("Signing key must not be empty")
    return key


def decode_signing_key(secret: KeyInput) -> bytes:
    """
    Decode a configured secret into raw HMAC key bytes.

    Strings are base64-decoded after stripping a "whsec_" prefix; bytes are
    used verbatim.

    Raises:
        InvalidKeyError: If decoding fails or the key is empty
        TypeError: If the secret is neither str nor bytes
    """
    if isinstance(secret, (bytes, bytearray)):
        if not secret:
            raise InvalidKeyError("Signing key must not be empty")
        return bytes(secret)

    if not isinstance(secret, str):
        raise TypeError(f"Signing key must be str or bytes, not {type(secret).__name__}")

    return decode_base64_key(secret, SECRET_PREFIX)


def generate_secret(num_bytes: int = 24) -> str:
    """Generate a new random "whsec_"-prefixed signing secret."""
    if num_bytes <= 0:
        raise ValueError(f"Invalid secret size: {num_bytes}")
    return SECRET_PREFIX + base64.b64encode(secrets.token_bytes(num_bytes)).decode("ascii")
