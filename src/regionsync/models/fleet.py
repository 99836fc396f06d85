"""Fleet and region-list configuration models."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ConfigDict, field_validator

from regionsync._constants import PLACEHOLDER_LIST_PREFIX
from regionsync.exceptions import RegionSyncConfigError


class Aircraft(BaseModel):
    """A tracked aircraft and the resolver IP dedicated to it."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    registration: str
    resolver_ip: str

    @field_validator("registration", "resolver_ip")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("must be non-empty")
        return value


class Fleet:
    """Immutable, ordered set of aircraft.

    Registrations and resolver IPs must each be unique; a shared resolver
    IP would let one aircraft's move evict another's membership.
    """

    __slots__ = ("_aircraft", "_by_registration")

    def __init__(self, aircraft: Iterable[Aircraft]) -> None:
        entries = tuple(aircraft)
        by_registration: dict[str, Aircraft] = {}
        seen_ips: set[str] = set()
        for entry in entries:
            if entry.registration in by_registration:
                raise RegionSyncConfigError(f"duplicate registration in fleet: {entry.registration}")
            if entry.resolver_ip in seen_ips:
                raise RegionSyncConfigError(f"duplicate resolver IP in fleet: {entry.resolver_ip}")
            by_registration[entry.registration] = entry
            seen_ips.add(entry.resolver_ip)
        self._aircraft = entries
        self._by_registration = by_registration

    def __iter__(self) -> Iterator[Aircraft]:
        return iter(self._aircraft)

    def __len__(self) -> int:
        return len(self._aircraft)

    def __contains__(self, registration: object) -> bool:
        return registration in self._by_registration

    def __repr__(self) -> str:
        return f"Fleet({[a.registration for a in self._aircraft]!r})"

    def get(self, registration: str) -> Aircraft | None:
        return self._by_registration.get(registration)

    @property
    def registrations(self) -> tuple[str, ...]:
        return tuple(a.registration for a in self._aircraft)

    def to_list(self) -> list[dict[str, str]]:
        return [a.model_dump() for a in self._aircraft]


class RegionList(BaseModel):
    """The Gateway list that holds one region's resolver IPs."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    list_id: str
    name: str

    @property
    def is_configured(self) -> bool:
        """False for empty ids and unfilled ``REPLACE_WITH_...`` placeholders."""
        return bool(self.list_id) and not self.list_id.startswith(PLACEHOLDER_LIST_PREFIX)
