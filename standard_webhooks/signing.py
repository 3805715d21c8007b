import base64
import hashlib
import hmac
from datetime import datetime, timezone
from typing import Tuple, Union

SIGNATURE_VERSION = "v1"

MAX_TIMESTAMP = 2**63 - 1

Payload = Union[str, bytes]
Timestamp = Union[int, datetime]


def to_unix_seconds(timestamp: Timestamp) -> int:
    """
    Convert a timestamp to whole seconds since the Unix epoch.

    Naive datetimes are taken as UTC.

    Raises:
        TypeError: If the timestamp is not an int or datetime
        ValueError: If the timestamp is negative or does not fit in 64 bits
    """
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        seconds = int(timestamp.timestamp() // 1)
    elif isinstance(timestamp, int) and not isinstance(timestamp, bool):
        seconds = timestamp
    else:
        raise TypeError(f"Timestamp must be int or datetime, not {type(timestamp).__name__}")

    if seconds < 0 or seconds > MAX_TIMESTAMP:
        raise ValueError(f"Timestamp out of range: {seconds}")
    return seconds


def _to_bytes(value: Payload) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return value.encode("utf-8")


def build_signed_content(msg_id: str, timestamp: Timestamp, payload: Payload) -> bytes:
    """Build the canonical "<id>.<timestamp>.<payload>" bytes that get signed."""
    seconds = to_unix_seconds(timestamp)
    return b".".join([_to_bytes(msg_id), str(seconds).encode("ascii"), _to_bytes(payload)])


def compute_signature(
    key: bytes,
    msg_id: str,
    timestamp: Timestamp,
    payload: Payload,
) -> Tuple[str, bytes]:
    """
    Compute a v1 webhook signature.

    Args:
        key: Raw HMAC key bytes
        msg_id: Message identifier
        timestamp: Send time, as epoch seconds or datetime
        payload: The webhook body (text is UTF-8 encoded)

    Returns:
        Tuple of (signature, signed_content) where:
        - signature: "v1,<base64 HMAC-SHA256 digest>"
        - signed_content: The canonical bytes that were signed (for debugging)
    """
    signed_content = build_signed_content(msg_id, timestamp, payload)
    digest = hmac.new(key, signed_content, hashlib.sha256).digest()
    encoded = base64.b64encode(digest).decode("ascii")
    return f"{SIGNATURE_VERSION},{encoded}", signed_content


def secure_compare(a: str, b: str) -> bool:
    """
    Compare two strings in time independent of where they first differ.

    Length is not secret, so a length mismatch returns early.
    """
    if len(a) != len(b):
        return False

    result = 0
    for x, y in zip(a, b):
        result |= ord(x) ^ ord(y)
    return result == 0
