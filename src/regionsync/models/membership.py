"""Membership deltas, mutation outcomes and per-tick results."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from regionsync.models.state import TransitionKind
from regionsync.regions import Region


class MembershipOperation(StrEnum):
    APPEND = "append"
    REMOVE = "remove"


class MutationStatus(StrEnum):
    SUCCESS = "success"
    REJECTED = "rejected"
    UNREACHABLE = "unreachable"
    SKIPPED = "skipped"


class MembershipChange(BaseModel):
    """One resolver IP in one region list."""

    model_config = ConfigDict(frozen=True)

    resolver_ip: str
    region: Region


class MembershipDelta(BaseModel):
    """Remote list changes decided for one aircraft in one tick.

    ``add`` only is a first assignment; ``remove`` plus ``add`` is a move;
    neither is a no-op.
    """

    model_config = ConfigDict(frozen=True)

    remove: MembershipChange | None = None
    add: MembershipChange | None = None

    @property
    def is_empty(self) -> bool:
        return self.remove is None and self.add is None


class MutationOutcome(BaseModel):
    """Result of one partial update against one Gateway list."""

    model_config = ConfigDict(frozen=True)

    operation: MembershipOperation
    resolver_ip: str
    region: Region
    list_id: str | None = None
    status: MutationStatus
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == MutationStatus.SUCCESS


class AircraftOutcome(BaseModel):
    """Per-aircraft entry of a tick log.

    ``kind`` is ``None`` when processing failed before a decision was made;
    ``error`` then carries the failure.
    """

    model_config = ConfigDict(frozen=True)

    registration: str
    kind: TransitionKind | None = None
    previous_region: Region | None = None
    region: Region | None = None
    delta: MembershipDelta = Field(default_factory=MembershipDelta)
    mutations: list[MutationOutcome] = Field(default_factory=list)
    error: str | None = None

    @property
    def failed_mutations(self) -> list[MutationOutcome]:
        return [m for m in self.mutations if not m.ok]


class DriftKind(StrEnum):
    MISSING = "missing"
    STRAY = "stray"


class MembershipDrift(BaseModel):
    """A disagreement between stored state and remote list contents.

    ``missing``: the stored region's list lacks the resolver IP.
    ``stray``: the IP is listed under a region other than the stored one.
    """

    model_config = ConfigDict(frozen=True)

    registration: str
    resolver_ip: str
    region: Region
    kind: DriftKind


class AuditReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    drift: list[MembershipDrift] = Field(default_factory=list)
    unreadable_regions: list[Region] = Field(default_factory=list)
    repairs: list[MutationOutcome] = Field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        return not self.drift and not self.unreadable_regions
