"""OpenCage reverse geocoding.

Endpoint:
  - /geocode/v1/json?q=<lat>,<lon>

Failures degrade to :meth:`GeoResolution.unresolved`, which classifies as
the over-water sentinel.
"""

from __future__ import annotations

import logging
from typing import Any

from regionsync._transport import Transport
from regionsync.config import RegionSyncConfig
from regionsync.exceptions import ProviderUnavailableError, RegionSyncTransportError
from regionsync.models.observation import GeoResolution

_logger = logging.getLogger(__name__)

_ENDPOINT = "/geocode/v1/json"


def _parse_components(data: Any) -> GeoResolution:
    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, list) or not results or not isinstance(results[0], dict):
        return GeoResolution.unresolved()

    components = results[0].get("components")
    if not isinstance(components, dict):
        return GeoResolution.unresolved()

    return GeoResolution(
        country=components.get("country"),
        country_code=components.get("country_code"),
        body_of_water=components.get("body_of_water"),
    )


async def reverse_geocode(
    config: RegionSyncConfig,
    transport: Transport,
    lat: float,
    lon: float,
) -> GeoResolution:
    """Resolve a coordinate pair to country / body of water. Never raises."""
    try:
        response = await transport.request_json(
            "GET",
            f"{config.opencage_base_url}{_ENDPOINT}",
            endpoint=_ENDPOINT,
            params={
                "q": f"{lat},{lon}",
                "key": config.opencage_api_key or "",
                "no_annotations": "1",
                "language": "en",
            },
        )
        if not response.ok:
            raise ProviderUnavailableError(
                f"OpenCage status {response.status}",
                status_code=response.status,
                endpoint=_ENDPOINT,
            )
    except RegionSyncTransportError as exc:
        _logger.warning("Reverse geocoding failed for %s,%s: %s", lat, lon, exc)
        return GeoResolution.unresolved()

    return _parse_components(response.data)
