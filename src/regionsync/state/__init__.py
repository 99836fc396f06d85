"""State layer.

Persistence of per-aircraft records plus the transition engine that is
the only component allowed to decide how a record changes.
"""

from regionsync.state.policy import decide_transition
from regionsync.state.store import JsonFileStateStore, MemoryStateStore, StateStore
from regionsync.state.transition import Transition, reconcile

__all__ = [
    "JsonFileStateStore",
    "MemoryStateStore",
    "StateStore",
    "Transition",
    "decide_transition",
    "reconcile",
]
