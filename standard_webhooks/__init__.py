"""
Standard Webhooks signing library.

Signs and verifies webhook deliveries following the Standard Webhooks
specification: HMAC-SHA256 over "<id>.<timestamp>.<payload>", sent as
"v1,<base64>" tokens alongside id and timestamp headers.

Basic Usage:
    from standard_webhooks import StandardWebhook

    wh = StandardWebhook("whsec_MfKQ9r8GKYqrTwjUPD8ILPZIo2LaLaSw")

    # Sender: sign a payload
    payload, headers = wh.create_signed_request({"type": "invoice.paid"}, msg_id="msg_1")

    # Receiver: verify a delivery
    result = wh.verify(payload, headers)
    if not result:
        print(result.kind, result.message)

Svix-style headers:
    from standard_webhooks import SVIX, StandardWebhook

    wh = StandardWebhook(secret, SVIX)

Asymmetric Usage:
    from standard_webhooks import AsymmetricWebhook, generate_key_pair

    private_key, public_key = generate_key_pair()
    signer = AsymmetricWebhook(private_key=private_key)
    verifier = AsymmetricWebhook(public_key=public_key)
"""

from standard_webhooks.config import (
    STANDARD_WEBHOOKS,
    SVIX,
    WebhookConfigurationOptions,
    get_profile,
)

from standard_webhooks.errors import (
    ErrorKind,
    InvalidKeyError,
    VerificationResult,
    WebhookVerificationError,
)

from standard_webhooks.keys import (
    decode_signing_key,
    generate_secret,
)

from standard_webhooks.signing import (
    build_signed_content,
    compute_signature,
    secure_compare,
)

from standard_webhooks.webhook import (
    TOLERANCE_IN_SECONDS,
    StandardWebhook,
    validate_webhook_event,
)

from standard_webhooks.asymmetric import (
    AsymmetricWebhook,
    generate_key_pair,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Configuration
    "STANDARD_WEBHOOKS",
    "SVIX",
    "WebhookConfigurationOptions",
    "get_profile",
    # Errors
    "ErrorKind",
    "InvalidKeyError",
    "VerificationResult",
    "WebhookVerificationError",
    # Keys
    "decode_signing_key",
    "generate_secret",
    # Signing
    "build_signed_content",
    "compute_signature",
    "secure_compare",
    # Webhooks
    "TOLERANCE_IN_SECONDS",
    "StandardWebhook",
    "validate_webhook_event",
    # Asymmetric
    "AsymmetricWebhook",
    "generate_key_pair",
]
