"""Header-name profiles for webhook deliveries."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WebhookConfigurationOptions:
    """Names of the three headers carrying message id, signature and timestamp."""

    id_header: str
    signature_header: str
    timestamp_header: str


STANDARD_WEBHOOKS = WebhookConfigurationOptions(
    id_header="webhook-id",
    signature_header="webhook-signature",
    timestamp_header="webhook-timestamp",
)

SVIX = WebhookConfigurationOptions(
    id_header="Svix-Id",
    signature_header="Svix-Signature",
    timestamp_header="Svix-Timestamp",
)

_PROFILES = {
    "standard": STANDARD_WEBHOOKS,
    "standard-webhooks": STANDARD_WEBHOOKS,
    "svix": SVIX,
}


def get_profile(name: str) -> WebhookConfigurationOptions:
    """
    Look up a built-in profile by name.

    Args:
        name: "standard", "standard-webhooks" or "svix" (case-insensitive)

    Raises:
        ValueError: If no profile has that name
    """
    try:
        return _PROFILES[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown header profile: {name}") from None
