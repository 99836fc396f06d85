"""Helpers for safe debug logging.

Provider keys and the Cloudflare token travel in headers and query strings.
Request details pass through here before they reach DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

_REDACTED = "<redacted>"

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "authorization",
        "key",
        "api_key",
        "apikey",
        "token",
        "api_token",
        "password",
        "cookie",
    }
)


def _is_sensitive(key: object) -> bool:
    return str(key).lower() in _SENSITIVE_KEYS


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Return a copy of a JSON-like *value* with secrets masked.

    Handles the shapes this package logs: query parameter dicts and
    Gateway PATCH bodies (dicts of strings and lists of dicts).
    """
    if isinstance(value, Mapping):
        return {
            str(k): _REDACTED if _is_sensitive(k) else redact_for_log(v, max_string=max_string)
            for k, v in value.items()
        }
    if isinstance(value, list | tuple):
        return [redact_for_log(v, max_string=max_string) for v in value]
    if isinstance(value, str) and len(value) > max_string:
        return f"{value[:max_string]}…<truncated>"
    return value


def redact_url(url: str) -> str:
    """Mask sensitive query parameters (e.g. the OpenCage ``key``) in *url*."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = redact_for_log(dict(parse_qsl(parts.query, keep_blank_values=True)))
    return urlunsplit(parts._replace(query=urlencode(query, safe="<>,")))
