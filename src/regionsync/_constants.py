"""Internal constants shared across the library."""

FR24_BASE_URL = "https://fr24api.flightradar24.com"
OPENCAGE_BASE_URL = "https://api.opencagedata.com"
CLOUDFLARE_BASE_URL = "https://api.cloudflare.com/client/v4"
USER_AGENT = "regionsync/0.1"

#: Flightradar24 API version header value.
FR24_ACCEPT_VERSION = "v1"

STATE_KEY_PREFIX = "region:"

# Gateway list ids that were never filled in by an operator.
PLACEHOLDER_LIST_PREFIX = "REPLACE_WITH_"

DEFAULT_TICK_INTERVAL: float = 60.0
DEFAULT_REQUEST_TIMEOUT: float = 15.0


def state_key(registration: str) -> str:
    """Return the state-store key for *registration* (``region:{registration}``)."""
    return f"{STATE_KEY_PREFIX}{registration}"


def registration_from_key(key: str) -> str | None:
    """Inverse of :func:`state_key`; ``None`` for keys outside the namespace."""
    if not key.startswith(STATE_KEY_PREFIX):
        return None
    registration = key[len(STATE_KEY_PREFIX) :]
    return registration or None
