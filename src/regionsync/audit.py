"""Drift detection between stored state and Gateway list contents.

A remote update that fails exactly at a region change leaves stored state
and list membership out of step until the next change. The audit makes
that gap visible and can repair it with the same partial updates a tick
would issue.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from regionsync.models.membership import DriftKind, MembershipChange, MembershipDrift
from regionsync.models.state import AircraftState
from regionsync.regions import Region


def find_drift(
    states: Iterable[AircraftState],
    memberships: Mapping[Region, frozenset[str]],
) -> list[MembershipDrift]:
    """Compare stored regions with list contents.

    *memberships* holds only the lists that could be read; regions absent
    from it are not judged.
    """
    drift: list[MembershipDrift] = []
    for state in states:
        if not state.has_real_region:
            continue
        ip = state.resolver_ip
        members = memberships.get(state.region)
        if members is not None and ip not in members:
            drift.append(
                MembershipDrift(
                    registration=state.registration,
                    resolver_ip=ip,
                    region=state.region,
                    kind=DriftKind.MISSING,
                )
            )
        for region, values in memberships.items():
            if region != state.region and ip in values:
                drift.append(
                    MembershipDrift(
                        registration=state.registration,
                        resolver_ip=ip,
                        region=region,
                        kind=DriftKind.STRAY,
                    )
                )
    return drift


def repair_plan(drift: Iterable[MembershipDrift]) -> tuple[list[MembershipChange], list[MembershipChange]]:
    """Split drift into ``(removals, additions)``; removals are issued first."""
    removals: list[MembershipChange] = []
    additions: list[MembershipChange] = []
    for item in drift:
        change = MembershipChange(resolver_ip=item.resolver_ip, region=item.region)
        if item.kind == DriftKind.STRAY:
            removals.append(change)
        else:
            additions.append(change)
    return removals, additions
