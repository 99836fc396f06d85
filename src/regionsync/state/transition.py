"""Region transition engine.

Turns one tick's observation and the previously stored record into the
record to write back and the membership delta to apply remotely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from regionsync.models.fleet import Aircraft
from regionsync.models.membership import MembershipChange, MembershipDelta
from regionsync.models.observation import GeoResolution, Observation
from regionsync.models.state import AircraftState, TransitionKind
from regionsync.regions import Region
from regionsync.state.policy import decide_transition, persists_state


@dataclass(frozen=True, slots=True)
class Transition:
    """Engine output for one aircraft and one tick.

    ``new_state`` is ``None`` when nothing should be written.
    """

    kind: TransitionKind
    new_state: AircraftState | None
    delta: MembershipDelta = field(default_factory=MembershipDelta)
    previous_region: Region | None = None


def _previous_region(previous_state: AircraftState | None) -> Region | None:
    if previous_state is None or not previous_state.has_real_region:
        return None
    return previous_state.region


def reconcile(
    aircraft: Aircraft,
    observation: Observation,
    geo: GeoResolution | None,
    classified: Region,
    previous_state: AircraftState | None,
    *,
    now: datetime | None = None,
) -> Transition:
    """Decide the new record and membership delta for one tick.

    Pure: no I/O. The caller persists ``new_state`` (when set) before, and
    independently of, applying ``delta``.
    """
    previous = _previous_region(previous_state)
    kind = decide_transition(
        observable=observation.is_observable,
        classified=classified,
        previous=previous,
    )
    if not persists_state(kind):
        return Transition(kind=kind, new_state=None, previous_region=previous)

    if geo is None:
        geo = GeoResolution.unresolved()
    over_water = kind == TransitionKind.OVER_WATER_RETAINED
    region = previous if over_water else classified
    assert region is not None  # noqa: S101

    new_state = AircraftState(
        registration=aircraft.registration,
        resolver_ip=aircraft.resolver_ip,
        region=region,
        over_water=over_water,
        country=geo.country,
        country_code=geo.country_code,
        body_of_water=geo.body_of_water,
        lat=observation.lat,
        lon=observation.lon,
        callsign=observation.callsign,
        updated_at=now or datetime.now(UTC),
    )

    delta = MembershipDelta()
    if kind == TransitionKind.FIRST_SEEN:
        delta = MembershipDelta(add=MembershipChange(resolver_ip=aircraft.resolver_ip, region=classified))
    elif kind == TransitionKind.MOVED:
        assert previous is not None  # noqa: S101
        delta = MembershipDelta(
            remove=MembershipChange(resolver_ip=aircraft.resolver_ip, region=previous),
            add=MembershipChange(resolver_ip=aircraft.resolver_ip, region=classified),
        )

    return Transition(kind=kind, new_state=new_state, delta=delta, previous_region=previous)
