"""Region transition decision table.

This module contains *no* record construction or I/O; it only decides
which branch a tick takes. Rules, highest priority first:

1. no usable observation          -> NO_OBSERVATION
2. sentinel, previous real region -> OVER_WATER_RETAINED (hysteresis)
3. sentinel, no previous region   -> UNCLASSIFIED
4. real region, no previous       -> FIRST_SEEN
5. real region == previous        -> UNCHANGED
6. real region != previous        -> MOVED
"""

from __future__ import annotations

from regionsync.models.state import TransitionKind
from regionsync.regions import Region


def decide_transition(
    *,
    observable: bool,
    classified: Region,
    previous: Region | None,
) -> TransitionKind:
    """Pick the transition for one tick.

    *previous* is the last stored real region, or ``None``. A stored
    sentinel counts as no previous region.
    """
    if not observable:
        return TransitionKind.NO_OBSERVATION

    has_previous = previous is not None and not previous.is_sentinel

    # Hysteresis is its own branch: an ambiguous reading never evicts.
    if classified.is_sentinel:
        return TransitionKind.OVER_WATER_RETAINED if has_previous else TransitionKind.UNCLASSIFIED

    if not has_previous:
        return TransitionKind.FIRST_SEEN
    if classified == previous:
        return TransitionKind.UNCHANGED
    return TransitionKind.MOVED


def persists_state(kind: TransitionKind) -> bool:
    """Whether *kind* produces a record to write back."""
    return kind not in (TransitionKind.NO_OBSERVATION, TransitionKind.UNCLASSIFIED)
