"""Cloudflare Zero Trust Gateway list endpoints.

Endpoints:
  - PATCH /accounts/{account}/gateway/lists/{list_id}        (append / remove)
  - GET   /accounts/{account}/gateway/lists/{list_id}/items  (audit)

Only partial updates are issued. Lists are never replaced wholesale;
members written by other tenants of a list are left alone.
"""

from __future__ import annotations

import logging
from typing import Any

from regionsync._transport import JsonResponse, Transport
from regionsync.config import RegionSyncConfig
from regionsync.exceptions import RegionSyncApiError, RegionSyncConfigError, RegionSyncTransportError
from regionsync.models.fleet import RegionList

_logger = logging.getLogger(__name__)

_ITEMS_PER_PAGE = 1000


def _lists_endpoint(list_id: str) -> str:
    return f"/gateway/lists/{list_id}"


def _account_url(config: RegionSyncConfig, endpoint: str) -> str:
    if not config.has_gateway_credentials:
        raise RegionSyncConfigError("missing CF_ACCOUNT_ID or CF_API_TOKEN")
    return f"{config.cf_base_url}/accounts/{config.cf_account_id}{endpoint}"


def _auth_headers(config: RegionSyncConfig) -> dict[str, str]:
    return {"Authorization": f"Bearer {config.cf_api_token}"}


def _unwrap_envelope(endpoint: str, response: JsonResponse) -> Any:
    """Return ``result`` from a Cloudflare v4 envelope or raise.

    A JSON body with ``success: false`` (any status) is an application
    rejection. A 2xx or error status without a recognizable envelope is
    treated as a transport-level failure.
    """
    data = response.data
    if not isinstance(data, dict) or "success" not in data:
        raise RegionSyncTransportError(
            f"Malformed response from {endpoint} (HTTP {response.status})",
            status_code=response.status,
            endpoint=endpoint,
        )
    if data.get("success") is True and response.ok:
        return data.get("result")

    errors = data.get("errors") if isinstance(data.get("errors"), list) else []
    first = errors[0] if errors and isinstance(errors[0], dict) else {}
    raise RegionSyncApiError(
        f"{endpoint} rejected (HTTP {response.status}): {first.get('message', errors or 'no error detail')}",
        code=str(first.get("code", response.status)),
        endpoint=endpoint,
        errors=errors,
    )


async def patch_list(
    config: RegionSyncConfig,
    transport: Transport,
    list_id: str,
    body: dict[str, Any],
) -> Any:
    """Send one PATCH to a Gateway list.

    Raises
    ------
    RegionSyncConfigError
        If Cloudflare credentials are not configured.
    RegionSyncApiError
        If Cloudflare rejected the update.
    RegionSyncTransportError
        If Cloudflare could not be reached or answered garbage.
    """
    endpoint = _lists_endpoint(list_id)
    response = await transport.request_json(
        "PATCH",
        _account_url(config, endpoint),
        endpoint=endpoint,
        headers=_auth_headers(config),
        json_body=body,
    )
    return _unwrap_envelope(endpoint, response)


async def append_to_list(
    config: RegionSyncConfig,
    transport: Transport,
    region_list: RegionList,
    value: str,
) -> Any:
    """Append *value* to *region_list* without touching other members."""
    body = {"name": region_list.name, "append": [{"value": value}]}
    return await patch_list(config, transport, region_list.list_id, body)


async def remove_from_list(
    config: RegionSyncConfig,
    transport: Transport,
    region_list: RegionList,
    value: str,
) -> Any:
    """Remove *value* from *region_list* without touching other members."""
    body = {"name": region_list.name, "remove": [value]}
    return await patch_list(config, transport, region_list.list_id, body)


def _flatten_items(result: Any) -> list[str]:
    # The items endpoint wraps each page in an extra list.
    values: list[str] = []
    if not isinstance(result, list):
        return values
    for entry in result:
        if isinstance(entry, list):
            values.extend(_flatten_items(entry))
        elif isinstance(entry, dict) and isinstance(entry.get("value"), str):
            values.append(entry["value"])
    return values


async def fetch_list_items(
    config: RegionSyncConfig,
    transport: Transport,
    list_id: str,
) -> list[str]:
    """Read every value in a Gateway list (paginated)."""
    endpoint = f"{_lists_endpoint(list_id)}/items"
    url = _account_url(config, endpoint)
    values: list[str] = []
    page = 1
    while True:
        response = await transport.request_json(
            "GET",
            url,
            endpoint=endpoint,
            params={"page": str(page), "per_page": str(_ITEMS_PER_PAGE)},
            headers=_auth_headers(config),
        )
        result = _unwrap_envelope(endpoint, response)
        values.extend(_flatten_items(result))

        info = response.data.get("result_info") if isinstance(response.data, dict) else None
        total_pages = info.get("total_pages") if isinstance(info, dict) else None
        if not isinstance(total_pages, int) or page >= total_pages:
            break
        page += 1

    _logger.debug("%s: %d items", endpoint, len(values))
    return values
