"""
Asymmetric (v1a) webhook signatures.

Signs the same "<id>.<timestamp>.<payload>" content as the HMAC scheme, but
with an Ed25519 private key, so receivers only ever hold the public key.
"""

import base64
import binascii
from typing import Callable, Optional, Tuple, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from standard_webhooks.config import WebhookConfigurationOptions
from standard_webhooks.errors import InvalidKeyError
from standard_webhooks.keys import decode_base64_key
from standard_webhooks.signing import Payload, Timestamp, build_signed_content
from standard_webhooks.webhook import _BaseWebhook

ASYMMETRIC_SIGNATURE_VERSION = "v1a"
PRIVATE_KEY_PREFIX = "whsk_"
PUBLIC_KEY_PREFIX = "whpk_"

_SEED_LENGTH = 32


def generate_key_pair() -> Tuple[str, str]:
    """
    Generate an Ed25519 key pair.

    Returns:
        Tuple of (private_key, public_key) as "whsk_"/"whpk_" prefixed base64 strings
    """
    private_key = ed25519.Ed25519PrivateKey.generate()

    private_bytes = private_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_bytes = _raw_public_bytes(private_key.public_key())

    return (
        PRIVATE_KEY_PREFIX + base64.b64encode(private_bytes).decode("ascii"),
        PUBLIC_KEY_PREFIX + base64.b64encode(public_bytes).decode("ascii"),
    )


def _raw_public_bytes(public_key: ed25519.Ed25519PublicKey) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def _load_private_key(key: Union[str, bytes]) -> ed25519.Ed25519PrivateKey:
    """Load a private key from a "whsk_" string or raw bytes (seed, or seed + public key)."""
    data = decode_base64_key(key, PRIVATE_KEY_PREFIX) if isinstance(key, str) else bytes(key)
    if len(data) == 2 * _SEED_LENGTH:
        data = data[:_SEED_LENGTH]
    try:
        return ed25519.Ed25519PrivateKey.from_private_bytes(data)
    except ValueError as e:
        raise InvalidKeyError(f"Invalid Ed25519 private key: {e}") from e


def _load_public_key(key: Union[str, bytes]) -> ed25519.Ed25519PublicKey:
    """Load a public key from a "whpk_" string or raw bytes."""
    data = decode_base64_key(key, PUBLIC_KEY_PREFIX) if isinstance(key, str) else bytes(key)
    try:
        return ed25519.Ed25519PublicKey.from_public_bytes(data)
    except ValueError as e:
        raise InvalidKeyError(f"Invalid Ed25519 public key: {e}") from e


class AsymmetricWebhook(_BaseWebhook):
    """
    Signs and verifies v1a (Ed25519) webhook signatures.

    A sender needs the private key; a receiver only needs the public key.
    When only the private key is given the public key is derived from it.
    """

    version = ASYMMETRIC_SIGNATURE_VERSION

    def __init__(
        self,
        private_key: Optional[Union[str, bytes]] = None,
        public_key: Optional[Union[str, bytes]] = None,
        options: Optional[WebhookConfigurationOptions] = None,
    ):
        if private_key is None and public_key is None:
            raise ValueError("At least one of private_key or public_key is required")

        super().__init__(options)
        self._private_key = _load_private_key(private_key) if private_key is not None else None
        if public_key is not None:
            self._public_key = _load_public_key(public_key)
        else:
            self._public_key = self._private_key.public_key()

        if self._private_key is not None:
            derived = _raw_public_bytes(self._private_key.public_key())
            if derived != _raw_public_bytes(self._public_key):
                raise InvalidKeyError("Public key does not match private key")

    @property
    def can_sign(self) -> bool:
        return self._private_key is not None

    def sign(self, msg_id: str, timestamp: Timestamp, payload: Payload) -> str:
        """
        Sign a webhook payload with the private key.

        Returns:
            Signature in the form "v1a,<base64>"

        Raises:
            ValueError: If this instance only holds a public key
        """
        if self._private_key is None:
            raise ValueError("No private key available for signing")

        signed_content = build_signed_content(msg_id, timestamp, payload)
        signature = self._private_key.sign(signed_content)
        return f"{self.version},{base64.b64encode(signature).decode('ascii')}"

    def _matcher(self, msg_id: str, timestamp: int, payload: Payload) -> Callable[[str], bool]:
        signed_content = build_signed_content(msg_id, timestamp, payload)

        def matches(passed: str) -> bool:
            try:
                signature = base64.b64decode(passed, validate=True)
                self._public_key.verify(signature, signed_content)
            except (binascii.Error, ValueError, InvalidSignature):
                return False
            return True

        return matches

    def __repr__(self) -> str:
        return f"AsymmetricWebhook(can_sign={self.can_sign}, options={self.options!r})"
