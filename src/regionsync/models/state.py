"""Persisted per-aircraft state and transition kinds."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from regionsync.regions import Region


class TransitionKind(StrEnum):
    """Which branch of the reconciliation decision table a tick took."""

    NO_OBSERVATION = "no_observation"
    OVER_WATER_RETAINED = "over_water_retained"
    UNCLASSIFIED = "unclassified"
    FIRST_SEEN = "first_seen"
    UNCHANGED = "unchanged"
    MOVED = "moved"


class AircraftState(BaseModel):
    """Last known region and position of one aircraft.

    ``region`` is a real region for every record the engine writes; the
    sentinel is only used transiently while deciding a transition.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    registration: str
    resolver_ip: str
    region: Region
    over_water: bool = False
    country: str | None = None
    country_code: str | None = None
    body_of_water: str | None = None
    lat: float | None = None
    lon: float | None = None
    callsign: str | None = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("updated_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def has_real_region(self) -> bool:
        return not self.region.is_sentinel
