"""Runtime configuration for regionsync."""

from __future__ import annotations

import dataclasses
import json
import os
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import TypeAdapter, ValidationError

from regionsync._constants import (
    CLOUDFLARE_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TICK_INTERVAL,
    FR24_BASE_URL,
    OPENCAGE_BASE_URL,
)
from regionsync.exceptions import RegionSyncConfigError
from regionsync.models.fleet import Aircraft, Fleet, RegionList
from regionsync.regions import Region


def _env_float(value: str | None, default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise RegionSyncConfigError(f"expected a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class RegionSyncConfig:
    """Tracker configuration.

    Parameters
    ----------
    fr24_api_key : str or None
        Flightradar24 API bearer token. Required for ticks.
    opencage_api_key : str or None
        OpenCage geocoder key. Required for ticks.
    cf_account_id : str or None
        Cloudflare account owning the Gateway lists.
    cf_api_token : str or None
        Cloudflare API token with Gateway list edit permission. When either
        Cloudflare field is missing, list updates are skipped with a warning
        while state tracking continues.
    state_path : str or None
        JSON file backing the durable state store. ``None`` keeps state in
        memory for the lifetime of the process.
    tick_interval : float
        Seconds between scheduled ticks.
    request_timeout : float
        Total timeout in seconds for every outbound HTTP call.
    fr24_base_url, opencage_base_url, cf_base_url : str
        API base URLs, overridable for testing against local fakes.
    """

    fr24_api_key: str | None = None
    opencage_api_key: str | None = None
    cf_account_id: str | None = None
    cf_api_token: str | None = None
    state_path: str | None = None
    tick_interval: float = DEFAULT_TICK_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    fr24_base_url: str = FR24_BASE_URL
    opencage_base_url: str = OPENCAGE_BASE_URL
    cf_base_url: str = CLOUDFLARE_BASE_URL

    @property
    def has_gateway_credentials(self) -> bool:
        return bool(self.cf_account_id and self.cf_api_token)

    def require_provider_keys(self) -> None:
        """Raise :class:`RegionSyncConfigError` when a provider key is missing."""
        if not self.fr24_api_key:
            raise RegionSyncConfigError("No FR24_API_KEY configured")
        if not self.opencage_api_key:
            raise RegionSyncConfigError("No OPENCAGE_API_KEY configured")

    @classmethod
    def from_env(cls, **overrides: Any) -> RegionSyncConfig:
        """Create configuration from environment variables.

        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        RegionSyncConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "FR24_API_KEY": "fr24_api_key",
            "OPENCAGE_API_KEY": "opencage_api_key",
            "CF_ACCOUNT_ID": "cf_account_id",
            "CF_API_TOKEN": "cf_api_token",
            "REGIONSYNC_STATE_PATH": "state_path",
            "REGIONSYNC_FR24_BASE_URL": "fr24_base_url",
            "REGIONSYNC_OPENCAGE_BASE_URL": "opencage_base_url",
            "REGIONSYNC_CF_BASE_URL": "cf_base_url",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val:
                config_kwargs[field_name] = val

        # numeric fields, handled separately
        if "tick_interval" not in overrides:
            config_kwargs["tick_interval"] = _env_float(env.get("REGIONSYNC_TICK_INTERVAL"), DEFAULT_TICK_INTERVAL)
        if "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_float(
                env.get("REGIONSYNC_REQUEST_TIMEOUT"),
                DEFAULT_REQUEST_TIMEOUT,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)


# ------------------------------------------------------------------
# Static fleet and region-list tables
# ------------------------------------------------------------------

DEFAULT_FLEET = Fleet(
    [
        Aircraft(registration="9V-SGC", resolver_ip="183.0.1.100"),
    ]
)


def _region_lists(entries: Mapping[Region, tuple[str, str]]) -> MappingProxyType[Region, RegionList]:
    return MappingProxyType({region: RegionList(list_id=lid, name=name) for region, (lid, name) in entries.items()})


DEFAULT_REGION_LISTS: MappingProxyType[Region, RegionList] = _region_lists(
    {
        Region.SEA: ("7e9f7689-ae29-4b61-b84f-419a63a5fbe4", "SIA-rDNS-SEA"),
        Region.NEA: ("6db19c72-4672-4603-9db9-761e05798b76", "SIA-rDNS-NEA"),
        Region.SA: ("4d18bbe7-a7f1-4a35-a591-5506f77d8678", "SIA-rDNS-SA"),
        Region.OCE: ("88be7923-a2fa-4427-8e65-f74e0c84d437", "SIA-rDNS-OCE"),
        Region.ME: ("REPLACE_WITH_ME_LIST_ID", "SIA-rDNS-ME"),
        Region.EU: ("ee22b873-98a4-477e-aa4e-1a91d3c17449", "SIA-rDNS-EU"),
        Region.AF: ("REPLACE_WITH_AF_LIST_ID", "SIA-rDNS-AF"),
        Region.NA: ("436b0564-5f93-4db1-9d7e-89d175aa4c00", "SIA-rDNS-NA"),
        Region.LATAM: ("REPLACE_WITH_LATAM_LIST_ID", "SIA-rDNS-LATAM"),
    }
)
"""Region -> Gateway list. Regions with placeholder ids are skipped at sync time."""


_AIRCRAFT_LIST = TypeAdapter(list[Aircraft])
_REGION_LIST_TABLE = TypeAdapter(dict[str, RegionList])


def _read_json(path: str | Path) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise RegionSyncConfigError(f"cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise RegionSyncConfigError(f"{path} is not valid JSON: {exc}") from exc


def load_fleet(path: str | Path) -> Fleet:
    """Load a fleet from a JSON array of ``{"registration", "resolver_ip"}`` objects."""
    try:
        aircraft = _AIRCRAFT_LIST.validate_python(_read_json(path))
    except ValidationError as exc:
        raise RegionSyncConfigError(f"invalid fleet file {path}: {exc}") from exc
    return Fleet(aircraft)


def build_region_lists(raw: Mapping[str, Any]) -> MappingProxyType[Region, RegionList]:
    """Validate a ``{region_code: {"list_id", "name"}}`` mapping.

    Region codes outside the static enumeration, and the sentinel, are
    configuration errors; lists are never created at runtime.
    """
    try:
        parsed = _REGION_LIST_TABLE.validate_python(dict(raw))
    except ValidationError as exc:
        raise RegionSyncConfigError(f"invalid region list table: {exc}") from exc

    table: dict[Region, RegionList] = {}
    for code, region_list in parsed.items():
        try:
            region = Region(code.strip().upper())
        except ValueError as exc:
            raise RegionSyncConfigError(f"unknown region in list table: {code}") from exc
        if region.is_sentinel:
            raise RegionSyncConfigError(f"the {region} sentinel cannot own a Gateway list")
        table[region] = region_list
    return MappingProxyType(table)


def load_region_lists(path: str | Path) -> MappingProxyType[Region, RegionList]:
    data = _read_json(path)
    if not isinstance(data, dict):
        raise RegionSyncConfigError(f"{path} must contain a JSON object")
    return build_region_lists(data)
