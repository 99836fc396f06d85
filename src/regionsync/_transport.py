"""HTTP transport shared by the provider and Gateway list clients."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import aiohttp

from regionsync._constants import USER_AGENT
from regionsync._redact import redact_for_log, redact_url
from regionsync.exceptions import RegionSyncTransportError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class JsonResponse:
    """Decoded HTTP response. ``data`` is the parsed JSON body."""

    status: int
    data: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    """Structural transport interface used by the API modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        endpoint: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> JsonResponse:
        ...


class HttpTransport:
    """aiohttp-backed JSON transport.

    Non-2xx responses are returned, not raised, so callers can tell an
    application-level rejection (error envelope) from an unreachable
    service. Network errors, timeouts and non-JSON bodies raise
    :class:`RegionSyncTransportError`.
    """

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        endpoint: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> JsonResponse:
        request_headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if headers:
            request_headers.update(headers)

        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug(
                "%s %s params=%s body=%s",
                method,
                redact_url(url),
                redact_for_log(dict(params or {})),
                redact_for_log(json_body),
            )

        try:
            async with self._http.request(
                method,
                url,
                params=params,
                headers=request_headers,
                json=json_body,
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                charset = resp.charset or "utf-8"
                body = await resp.read()
        except aiohttp.ClientError as exc:
            raise RegionSyncTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
        except TimeoutError as exc:
            raise RegionSyncTransportError(
                f"Request to {endpoint} timed out",
                endpoint=endpoint,
            ) from exc

        try:
            text = body.decode(charset)
            data = json.loads(text) if text.strip() else None
        except (UnicodeDecodeError, LookupError, json.JSONDecodeError) as exc:
            raise RegionSyncTransportError(
                f"Invalid JSON from {endpoint} (HTTP {status}): {body[:200]!r}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        _logger.debug("%s %s -> HTTP %d", method, endpoint, status)
        return JsonResponse(status=status, data=data)
