"""regionsync - keep aircraft resolver IPs in their region's Gateway list."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("regionsync")
except PackageNotFoundError:
    __version__ = "0+local"
from regionsync.config import (
    DEFAULT_FLEET,
    DEFAULT_REGION_LISTS,
    RegionSyncConfig,
    build_region_lists,
    load_fleet,
    load_region_lists,
)
from regionsync.exceptions import (
    ProviderUnavailableError,
    RegionSyncApiError,
    RegionSyncConfigError,
    RegionSyncError,
    RegionSyncTransportError,
)
from regionsync.membership import MembershipSynchronizer
from regionsync.models import (
    Aircraft,
    AircraftOutcome,
    AircraftState,
    AuditReport,
    Fleet,
    GeoResolution,
    MembershipChange,
    MembershipDelta,
    MutationOutcome,
    MutationStatus,
    Observation,
    RegionList,
    TransitionKind,
)
from regionsync.regions import COUNTRY_TO_REGION, Region, classify, determine_region
from regionsync.state import JsonFileStateStore, MemoryStateStore, StateStore, reconcile
from regionsync.tracker import FleetTracker

__all__ = [
    "__version__",
    "Aircraft",
    "AircraftOutcome",
    "AircraftState",
    "AuditReport",
    "COUNTRY_TO_REGION",
    "DEFAULT_FLEET",
    "DEFAULT_REGION_LISTS",
    "Fleet",
    "FleetTracker",
    "GeoResolution",
    "JsonFileStateStore",
    "MembershipChange",
    "MembershipDelta",
    "MembershipSynchronizer",
    "MemoryStateStore",
    "MutationOutcome",
    "MutationStatus",
    "Observation",
    "ProviderUnavailableError",
    "Region",
    "RegionList",
    "RegionSyncApiError",
    "RegionSyncConfig",
    "RegionSyncConfigError",
    "RegionSyncError",
    "RegionSyncTransportError",
    "StateStore",
    "TransitionKind",
    "build_region_lists",
    "classify",
    "determine_region",
    "load_fleet",
    "load_region_lists",
    "reconcile",
]
