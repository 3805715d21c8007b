import base64
import binascii
import json
import logging
import os
import re
import time
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from standard_webhooks.config import STANDARD_WEBHOOKS, WebhookConfigurationOptions, get_profile
from standard_webhooks.errors import ErrorKind, VerificationResult
from standard_webhooks.keys import KeyInput, decode_signing_key
from standard_webhooks.signing import (
    MAX_TIMESTAMP,
    SIGNATURE_VERSION,
    Payload,
    Timestamp,
    compute_signature,
    secure_compare,
    to_unix_seconds,
)

logger = logging.getLogger(__name__)

TOLERANCE_IN_SECONDS = 5 * 60

_TIMESTAMP_PATTERN = re.compile(r"\s*[+-]?[0-9]{1,19}\s*")


def parse_timestamp(value: str) -> Optional[int]:
    """Parse a timestamp header value, or return None if it is not a valid epoch second count."""
    if not _TIMESTAMP_PATTERN.fullmatch(value):
        return None
    timestamp = int(value)
    if timestamp < 0 or timestamp > MAX_TIMESTAMP:
        return None
    return timestamp


class _BaseWebhook:
    """
    Header handling and verification flow shared by signature schemes.

    Subclasses set ``version`` and implement ``sign`` and ``_matcher``.
    """

    version = ""

    def __init__(self, options: Optional[WebhookConfigurationOptions] = None):
        self.options = options or STANDARD_WEBHOOKS

    def sign(self, msg_id: str, timestamp: Timestamp, payload: Payload) -> str:
        raise NotImplementedError

    def _matcher(self, msg_id: str, timestamp: int, payload: Payload) -> Callable[[str], bool]:
        """Return a predicate telling whether a candidate signature is valid."""
        raise NotImplementedError

    def verify(self, payload: Payload, headers: Mapping[str, str]) -> VerificationResult:
        """
        Verify a webhook delivery.

        Args:
            payload: The raw request body, exactly as received
            headers: Request headers, looked up case-sensitively

        Returns:
            VerificationResult; truthy when a signature matched
        """
        msg_id = headers.get(self.options.id_header)
        msg_signature = headers.get(self.options.signature_header)
        msg_timestamp = headers.get(self.options.timestamp_header)

        if not msg_id or not msg_signature or not msg_timestamp:
            return self._fail(
                msg_id,
                ErrorKind.MISSING_HEADER,
                f"Missing required headers; {self.options.id_header}, "
                f"{self.options.signature_header} and {self.options.timestamp_header} must be supplied",
            )

        timestamp = parse_timestamp(msg_timestamp)
        if timestamp is None:
            return self._fail(
                msg_id,
                ErrorKind.INVALID_TIMESTAMP,
                "Invalid timestamp header value; must be the number of seconds elapsed since 1970-01-01T00:00:00Z",
            )

        now = time.time()
        if timestamp < now - TOLERANCE_IN_SECONDS:
            return self._fail(msg_id, ErrorKind.TIMESTAMP_TOO_OLD, "Message timestamp too old")
        if timestamp > now + TOLERANCE_IN_SECONDS:
            return self._fail(msg_id, ErrorKind.TIMESTAMP_TOO_NEW, "Message timestamp too new")

        try:
            matches = self._matcher(msg_id, timestamp, payload)
        except UnicodeEncodeError:
            return self._fail(msg_id, ErrorKind.NO_MATCHING_SIGNATURE, "Message id or payload is not valid UTF-8")

        for versioned_signature in msg_signature.split(" "):
            version, comma, passed_signature = versioned_signature.partition(",")
            if not comma:
                return self._fail(msg_id, ErrorKind.MALFORMED_SIGNATURE, "Invalid signature header")

            if version != self.version:
                continue

            if matches(passed_signature):
                return VerificationResult.success()

        return self._fail(msg_id, ErrorKind.NO_MATCHING_SIGNATURE, "No matching signature found")

    def verify_or_raise(self, payload: Payload, headers: Mapping[str, str]) -> None:
        """
        Verify a webhook delivery, raising on failure.

        Raises:
            WebhookVerificationError: If verification fails
        """
        self.verify(payload, headers).raise_for_error()

    def make_headers(self, msg_id: str, timestamp: Timestamp, payload: Payload) -> Dict[str, str]:
        """Build the id, timestamp and signature headers for an outbound payload."""
        seconds = to_unix_seconds(timestamp)
        return {
            self.options.id_header: msg_id,
            self.options.timestamp_header: str(seconds),
            self.options.signature_header: self.sign(msg_id, seconds, payload),
        }

    def create_signed_request(
        self,
        body: Any,
        msg_id: str,
        timestamp: Optional[Timestamp] = None,
    ) -> Tuple[str, Dict[str, str]]:
        """
        Serialize and sign an outbound webhook.

        Args:
            body: The payload; anything but a string is serialized as compact JSON
            msg_id: Message identifier
            timestamp: Send time (default: now)

        Returns:
            Tuple of (payload, headers) ready to send
        """
        payload = body if isinstance(body, str) else json.dumps(body, separators=(",", ":"))
        if timestamp is None:
            timestamp = int(time.time())

        headers = {"Content-Type": "application/json; charset=utf-8"}
        headers.update(self.make_headers(msg_id, timestamp, payload))
        return payload, headers

    def _fail(self, msg_id: Optional[str], kind: ErrorKind, message: str) -> VerificationResult:
        logger.debug("Webhook verification failed for message %s: %s", msg_id, kind.value)
        return VerificationResult.failure(kind, message)


class StandardWebhook(_BaseWebhook):
    """
    Signs and verifies Standard Webhooks deliveries with HMAC-SHA256.

    Instances are immutable once built and can be shared between threads.

    Usage:
        wh = StandardWebhook("whsec_MfKQ9r8GKYqrTwjUPD8ILPZIo2LaLaSw")

        # Sender
        headers = wh.make_headers("msg_1", int(time.time()), payload)

        # Receiver
        result = wh.verify(payload, request_headers)
        if not result:
            print(result.kind, result.message)
    """

    version = SIGNATURE_VERSION

    def __init__(
        self,
        signing_key: KeyInput,
        options: Optional[WebhookConfigurationOptions] = None,
    ):
        """
        Args:
            signing_key: Base64 secret (optionally "whsec_" prefixed) or raw key bytes
            options: Header names to use (default: STANDARD_WEBHOOKS)

        Raises:
            InvalidKeyError: If the key cannot be decoded
        """
        super().__init__(options)
        self._key = decode_signing_key(signing_key)

    @classmethod
    def from_env(
        cls,
        secret_var: str = "WEBHOOK_SECRET",
        profile_var: str = "WEBHOOK_HEADER_PROFILE",
    ) -> "StandardWebhook":
        """
        Build a webhook from environment variables.

        Raises:
            ValueError: If the secret variable is unset or the profile is unknown
        """
        secret = os.environ.get(secret_var)
        if not secret:
            raise ValueError(f"Environment variable {secret_var} is not set")

        profile = os.environ.get(profile_var)
        options = get_profile(profile) if profile else None
        return cls(secret, options)

    def sign(self, msg_id: str, timestamp: Timestamp, payload: Payload) -> str:
        """
        Sign a webhook payload.

        Args:
            msg_id: Message identifier
            timestamp: Send time, as epoch seconds or datetime
            payload: The webhook body

        Returns:
            Signature in the form "v1,<base64>"
        """
        signature, _ = compute_signature(self._key, msg_id, timestamp, payload)
        return signature

    def _matcher(self, msg_id: str, timestamp: int, payload: Payload) -> Callable[[str], bool]:
        expected = self.sign(msg_id, timestamp, payload)
        expected_digest = expected.split(",", 1)[1]
        return lambda passed: secure_compare(passed, expected_digest)

    def __repr__(self) -> str:
        return f"StandardWebhook(options={self.options!r})"


def validate_webhook_event(
    event: Dict[str, Any],
    webhook: _BaseWebhook,
) -> Union[bool, Dict[str, Any]]:
    """
    Validate a webhook delivered as an AWS API Gateway proxy event.

    API Gateway may lower-case header names, so the configured names are
    matched case-insensitively here. Base64-encoded bodies are decoded
    before verification.

    Args:
        event: API Gateway event with headers and body
        webhook: The configured verifier

    Returns:
        True if the signature is valid
        Dict with statusCode and body otherwise (e.g., {"statusCode": 401, "body": "..."})
    """
    event_headers = event.get("headers", {}) or {}
    body = event.get("body", "") or ""

    if event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError):
            return {
                "statusCode": 400,
                "body": "Invalid webhook: body is not valid base64",
            }

    # Find configured headers (case-insensitive)
    wanted = {
        name.lower(): name
        for name in (
            webhook.options.id_header,
            webhook.options.signature_header,
            webhook.options.timestamp_header,
        )
    }
    headers = {}
    for key, value in event_headers.items():
        name = wanted.get(key.lower())
        if name is not None and value:
            headers[name] = value

    result = webhook.verify(body, headers)
    if result:
        return True

    return {
        "statusCode": 401,
        "body": f"Invalid webhook: {result.message}",
    }
