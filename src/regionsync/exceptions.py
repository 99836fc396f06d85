"""Custom exception hierarchy for regionsync."""

from __future__ import annotations

from typing import Any


class RegionSyncError(Exception):
    """Base exception for all regionsync errors."""


class RegionSyncConfigError(RegionSyncError):
    """Invalid or missing configuration.

    Covers missing credentials, duplicate fleet entries and region list
    tables that reference a region outside the static enumeration.
    """


class RegionSyncTransportError(RegionSyncError):
    """HTTP-level failure (network, timeout, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class ProviderUnavailableError(RegionSyncTransportError):
    """Location or geocode provider unreachable or answered non-2xx.

    Provider clients catch this at their boundary and degrade to
    "no observation" / "unresolved geography".
    """


class RegionSyncApiError(RegionSyncError):
    """The Gateway list API was reachable but rejected the request."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
        errors: list[Any] | None = None,
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        self.errors = list(errors or [])
        super().__init__(message)
