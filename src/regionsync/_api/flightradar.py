"""Flightradar24 live position lookup.

Endpoint:
  - /api/live/flight-positions/light?registrations=<registration>

Every failure degrades to ``Observation(found=False)``; nothing raises.
"""

from __future__ import annotations

import logging
from typing import Any

from regionsync._constants import FR24_ACCEPT_VERSION
from regionsync._transport import Transport
from regionsync.config import RegionSyncConfig
from regionsync.exceptions import ProviderUnavailableError, RegionSyncTransportError
from regionsync.models.observation import Observation

_logger = logging.getLogger(__name__)

_ENDPOINT = "/api/live/flight-positions/light"


def _parse_positions(registration: str, data: Any) -> Observation:
    """Parse the light-positions response; the first entry wins."""
    flights = data.get("data") if isinstance(data, dict) else None
    if not isinstance(flights, list) or not flights or not isinstance(flights[0], dict):
        return Observation.not_found(registration, f"{registration} not found or not flying")

    flight: dict[str, Any] = flights[0]
    return Observation.model_validate(
        {
            **flight,
            "registration": registration,
            "found": True,
            "error": None,
            "raw": flight,
        }
    )


async def _fetch_positions(config: RegionSyncConfig, transport: Transport, registration: str) -> Any:
    response = await transport.request_json(
        "GET",
        f"{config.fr24_base_url}{_ENDPOINT}",
        endpoint=_ENDPOINT,
        params={"registrations": registration},
        headers={
            "Accept-Version": FR24_ACCEPT_VERSION,
            "Authorization": f"Bearer {config.fr24_api_key or ''}",
        },
    )
    if not response.ok:
        raise ProviderUnavailableError(
            f"FR24 API status {response.status}",
            status_code=response.status,
            endpoint=_ENDPOINT,
        )
    return response.data


async def fetch_aircraft_location(
    config: RegionSyncConfig,
    transport: Transport,
    registration: str,
) -> Observation:
    """Fetch the current position of *registration*.

    Returns
    -------
    Observation
        ``found`` is false (with ``error`` set) when the aircraft is not
        flying or the provider is unavailable.
    """
    try:
        data = await _fetch_positions(config, transport, registration)
    except RegionSyncTransportError as exc:
        _logger.warning("%s: location provider unavailable: %s", registration, exc)
        return Observation.not_found(registration, str(exc))

    return _parse_positions(registration, data)
