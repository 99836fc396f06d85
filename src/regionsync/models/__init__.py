"""Data models for fleet configuration, observations and state."""

from regionsync.models.fleet import Aircraft, Fleet, RegionList
from regionsync.models.membership import (
    AircraftOutcome,
    AuditReport,
    DriftKind,
    MembershipChange,
    MembershipDelta,
    MembershipDrift,
    MembershipOperation,
    MutationOutcome,
    MutationStatus,
)
from regionsync.models.observation import GeoResolution, Observation
from regionsync.models.state import AircraftState, TransitionKind

__all__ = [
    "Aircraft",
    "AircraftOutcome",
    "AircraftState",
    "AuditReport",
    "DriftKind",
    "Fleet",
    "GeoResolution",
    "MembershipChange",
    "MembershipDelta",
    "MembershipDrift",
    "MembershipOperation",
    "MutationOutcome",
    "MutationStatus",
    "Observation",
    "RegionList",
    "TransitionKind",
]
