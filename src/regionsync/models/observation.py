"""Location observation and reverse-geocoding models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from regionsync._normalize import safe_float, safe_int, safe_str


class Observation(BaseModel):
    """A single position sample for one aircraft.

    ``lat`` and ``lon`` are present together or absent together; a sample
    with only one coordinate is treated as not observable.

    Parameters
    ----------
    registration : str
        Aircraft registration the sample was requested for.
    found : bool
        Whether the provider returned a live position.
    lat, lon : float or None
        Position in degrees.
    callsign, alt, gspeed, track, timestamp
        Auxiliary descriptive fields, opaque to the reconciliation engine.
    error : str or None
        Provider failure or "not flying" message when ``found`` is false.
    raw : dict
        The provider's flight entry as received.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    registration: str
    found: bool = False
    lat: float | None = Field(default=None, validation_alias=AliasChoices("lat", "latitude"))
    lon: float | None = Field(default=None, validation_alias=AliasChoices("lon", "lng", "longitude"))
    callsign: str | None = None
    alt: int | None = None
    gspeed: int | None = None
    track: int | None = None
    timestamp: str | None = None
    error: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @field_validator("lat", "lon", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("alt", "gspeed", "track", mode="before")
    @classmethod
    def _coerce_ints(cls, value: Any) -> int | None:
        return safe_int(value)

    @field_validator("callsign", "timestamp", "error", mode="before")
    @classmethod
    def _coerce_strings(cls, value: Any) -> str | None:
        return safe_str(value)

    @model_validator(mode="after")
    def _pair_coordinates(self) -> Observation:
        if (self.lat is None) != (self.lon is None):
            object.__setattr__(self, "lat", None)
            object.__setattr__(self, "lon", None)
        return self

    @property
    def is_observable(self) -> bool:
        """True when the provider found the aircraft and both coordinates exist."""
        return self.found and self.error is None and self.lat is not None and self.lon is not None

    @classmethod
    def not_found(cls, registration: str, error: str) -> Observation:
        return cls(registration=registration, found=False, error=error)


class GeoResolution(BaseModel):
    """Political geography for a coordinate pair.

    At most one of ``country_code`` and ``body_of_water`` is meaningful;
    both are ``None`` when resolution failed.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    country_code: str | None = None
    country: str | None = None
    body_of_water: str | None = None

    @field_validator("country_code", mode="before")
    @classmethod
    def _upper_country_code(cls, value: Any) -> str | None:
        text = safe_str(value)
        return text.upper() if text else None

    @field_validator("country", "body_of_water", mode="before")
    @classmethod
    def _coerce_strings(cls, value: Any) -> str | None:
        return safe_str(value)

    @classmethod
    def unresolved(cls) -> GeoResolution:
        return cls()

    @property
    def is_resolved(self) -> bool:
        return self.country_code is not None or self.body_of_water is not None

    @property
    def label(self) -> str | None:
        """Display name: country, else body of water."""
        return self.country or self.body_of_water
