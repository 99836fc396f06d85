"""High-level async fleet tracker.

Per aircraft, per tick::

    location -> reverse geocode -> classify -> reconcile (reads store)
             -> store write -> membership sync (Gateway lists)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import aiohttp

from regionsync import audit as _audit
from regionsync._api import flightradar as _location_api
from regionsync._api import gateway_lists as _lists_api
from regionsync._api import geocode as _geocode_api
from regionsync._transport import HttpTransport, Transport
from regionsync.config import DEFAULT_FLEET, DEFAULT_REGION_LISTS, RegionSyncConfig
from regionsync.exceptions import (
    RegionSyncApiError,
    RegionSyncConfigError,
    RegionSyncError,
    RegionSyncTransportError,
)
from regionsync.membership import MembershipSynchronizer
from regionsync.models.fleet import Aircraft, Fleet, RegionList
from regionsync.models.membership import AircraftOutcome, AuditReport, MutationOutcome
from regionsync.models.observation import GeoResolution, Observation
from regionsync.models.state import AircraftState, TransitionKind
from regionsync.regions import Region, classify
from regionsync.state.store import JsonFileStateStore, MemoryStateStore, StateStore
from regionsync.state.transition import Transition, reconcile

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class FleetTracker:
    """Async tracker that keeps resolver IPs in their region's Gateway list.

    Usage::

        async with FleetTracker(RegionSyncConfig.from_env()) as tracker:
            outcomes = await tracker.run_tick(cron_label="*/1 * * * *")
    """

    def __init__(
        self,
        config: RegionSyncConfig,
        *,
        fleet: Fleet = DEFAULT_FLEET,
        region_lists: Mapping[Region, RegionList] = DEFAULT_REGION_LISTS,
        store: StateStore | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._fleet = fleet
        self._region_lists = region_lists
        self._store: StateStore = store if store is not None else self._default_store(config)
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None
        self._synchronizer: MembershipSynchronizer | None = None
        self._clock = clock

    @staticmethod
    def _default_store(config: RegionSyncConfig) -> StateStore:
        if config.state_path:
            return JsonFileStateStore(config.state_path)
        return MemoryStateStore()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FleetTracker:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._http_session, timeout=self._config.request_timeout)
        self._synchronizer = MembershipSynchronizer(self._config, self._transport, self._region_lists)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None
        self._synchronizer = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise RegionSyncError("Tracker not initialized. Use 'async with FleetTracker(...) as tracker:'")
        return self._transport

    def _require_synchronizer(self) -> MembershipSynchronizer:
        if self._synchronizer is None:
            raise RegionSyncError("Tracker not initialized. Use 'async with FleetTracker(...) as tracker:'")
        return self._synchronizer

    @property
    def config(self) -> RegionSyncConfig:
        return self._config

    @property
    def fleet(self) -> Fleet:
        return self._fleet

    @property
    def store(self) -> StateStore:
        return self._store

    @property
    def synchronizer(self) -> MembershipSynchronizer:
        return self._require_synchronizer()

    async def observe(self, registration: str) -> tuple[Observation, GeoResolution | None, Region]:
        """Fetch position and geography for one aircraft.

        Geocoding is skipped (``None``) when there is no usable position.
        """
        transport = self._require_transport()
        observation = await _location_api.fetch_aircraft_location(self._config, transport, registration)
        if not observation.is_observable:
            return observation, None, Region.OVER_WATER
        assert observation.lat is not None and observation.lon is not None  # noqa: S101
        geo = await _geocode_api.reverse_geocode(self._config, transport, observation.lat, observation.lon)
        return observation, geo, classify(geo)

    def _log_transition(
        self,
        prefix: str,
        aircraft: Aircraft,
        observation: Observation,
        geo: GeoResolution | None,
        transition: Transition,
    ) -> None:
        kind = transition.kind
        place = geo.label if geo is not None else None
        if kind == TransitionKind.NO_OBSERVATION:
            _logger.info("%sNot flying or error (%s)", prefix, observation.error or "no position")
        elif kind == TransitionKind.OVER_WATER_RETAINED:
            _logger.info(
                "%sOver water (%s), keeping region: %s",
                prefix,
                (geo.body_of_water if geo else None) or "unknown",
                transition.previous_region,
            )
        elif kind == TransitionKind.UNCLASSIFIED:
            _logger.info("%sNo region yet (%s); nothing recorded", prefix, place or "unknown")
        elif kind == TransitionKind.FIRST_SEEN:
            assert transition.new_state is not None  # noqa: S101
            _logger.info(
                "%sFIRST SEEN in %s (%s) | IP: %s",
                prefix,
                transition.new_state.region,
                place,
                aircraft.resolver_ip,
            )
        elif kind == TransitionKind.MOVED:
            assert transition.new_state is not None  # noqa: S101
            _logger.info(
                "%sREGION CHANGED %s → %s (%s) | IP: %s",
                prefix,
                transition.previous_region,
                transition.new_state.region,
                place,
                aircraft.resolver_ip,
            )
        else:
            assert transition.new_state is not None  # noqa: S101
            _logger.info(
                "%s%s | %s | %s, %s",
                prefix,
                transition.new_state.region,
                place,
                observation.lat,
                observation.lon,
            )

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    async def process_aircraft(self, aircraft: Aircraft, *, cron_label: str = "manual") -> AircraftOutcome:
        """Run one reconciliation for *aircraft*.

        The new record is written before the Gateway lists are touched, so a
        failed list update never rolls back local state.
        """
        prefix = f"[{cron_label}] {aircraft.registration}: "
        synchronizer = self._require_synchronizer()

        observation, geo, classified = await self.observe(aircraft.registration)
        previous_state = None
        if observation.is_observable:
            previous_state = await self._store.get(aircraft.registration)

        transition = reconcile(
            aircraft,
            observation,
            geo,
            classified,
            previous_state,
            now=self._clock(),
        )
        self._log_transition(prefix, aircraft, observation, geo, transition)

        if transition.new_state is not None:
            await self._store.put(transition.new_state)

        mutations: list[MutationOutcome] = []
        if not transition.delta.is_empty:
            mutations = await synchronizer.apply(transition.delta, log_prefix=prefix)

        return AircraftOutcome(
            registration=aircraft.registration,
            kind=transition.kind,
            previous_region=transition.previous_region,
            region=transition.new_state.region if transition.new_state is not None else None,
            delta=transition.delta,
            mutations=mutations,
        )

    async def run_tick(self, *, cron_label: str = "manual") -> list[AircraftOutcome]:
        """Process every aircraft in the fleet once.

        One aircraft's failure is logged and recorded in its outcome; it
        never stops the remaining aircraft.
        """
        try:
            self._config.require_provider_keys()
        except RegionSyncConfigError as exc:
            _logger.error("[%s] %s", cron_label, exc)
            return []

        _logger.info("[%s] Processing %d aircraft...", cron_label, len(self._fleet))

        outcomes: list[AircraftOutcome] = []
        for aircraft in self._fleet:
            try:
                outcomes.append(await self.process_aircraft(aircraft, cron_label=cron_label))
            except Exception as exc:  # noqa: BLE001
                _logger.error("[%s] %s: Failed: %s", cron_label, aircraft.registration, exc, exc_info=True)
                outcomes.append(AircraftOutcome(registration=aircraft.registration, error=str(exc)))
        return outcomes

    async def run_forever(
        self,
        *,
        interval: float | None = None,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        """Run :meth:`run_tick` every *interval* seconds until *stop_event* is set."""
        period = interval if interval is not None else self._config.tick_interval
        if stop_event is None:
            stop_event = asyncio.Event()

        tick = 0
        while not stop_event.is_set():
            tick += 1
            try:
                await self.run_tick(cron_label=f"tick-{tick}")
            except Exception:  # noqa: BLE001
                _logger.exception("Tick %d failed", tick)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=period)
            except TimeoutError:
                continue

    # ------------------------------------------------------------------
    # Inspection / administration
    # ------------------------------------------------------------------

    async def track(self, registration: str) -> dict[str, Any]:
        """One-shot lookup without writing state or touching lists."""
        observation, geo, region = await self.observe(registration)
        result: dict[str, Any] = observation.model_dump(mode="json", exclude={"raw"})
        if observation.is_observable:
            aircraft = self._fleet.get(registration)
            result["geo"] = geo.model_dump(mode="json") if geo is not None else None
            result["region"] = region.value
            result["resolver_ip"] = aircraft.resolver_ip if aircraft is not None else None
        return result

    async def get_state(self, registration: str) -> AircraftState | None:
        return await self._store.get(registration)

    async def get_all_states(self) -> list[AircraftState]:
        """Stored records for every fleet aircraft that has one, in fleet order."""
        states: list[AircraftState] = []
        for aircraft in self._fleet:
            state = await self._store.get(aircraft.registration)
            if state is not None:
                states.append(state)
        return states

    async def clear_state(self, registration: str) -> bool:
        return await self._store.delete(registration)

    async def clear_all_states(self) -> list[str]:
        """Delete every stored record, including aircraft no longer in the fleet."""
        registrations = await self._store.registrations()
        for registration in registrations:
            await self._store.delete(registration)
        return registrations

    async def audit_memberships(self, *, repair: bool = False) -> AuditReport:
        """Compare stored regions with Gateway list contents.

        Lists that cannot be read are reported and left out of the
        comparison. With *repair*, stray entries are removed and missing
        ones appended, one partial update each.
        """
        transport = self._require_transport()
        memberships: dict[Region, frozenset[str]] = {}
        unreadable: list[Region] = []
        for region, region_list in self._region_lists.items():
            if region.is_sentinel or not region_list.is_configured:
                continue
            try:
                items = await _lists_api.fetch_list_items(self._config, transport, region_list.list_id)
            except (RegionSyncApiError, RegionSyncTransportError, RegionSyncConfigError) as exc:
                _logger.warning("Cannot read %s list %s: %s", region, region_list.list_id, exc)
                unreadable.append(region)
                continue
            memberships[region] = frozenset(items)

        drift = _audit.find_drift(await self.get_all_states(), memberships)
        for item in drift:
            _logger.warning("%s: %s %s in %s list", item.registration, item.kind, item.resolver_ip, item.region)

        repairs: list[MutationOutcome] = []
        if repair and drift:
            synchronizer = self._require_synchronizer()
            removals, additions = _audit.repair_plan(drift)
            for change in removals:
                repairs.append(await synchronizer.remove_member(change, log_prefix="[audit] "))
            for change in additions:
                repairs.append(await synchronizer.add_member(change, log_prefix="[audit] "))

        return AuditReport(drift=drift, unreadable_regions=unreadable, repairs=repairs)
