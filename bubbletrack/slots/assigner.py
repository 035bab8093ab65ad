"""Slot assignment policies mapping live tracks onto fixed display slots."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Set

import numpy as np

from bubbletrack.types import Box, Track

LOGGER = logging.getLogger("bubbletrack.slots")

ARRIVAL_ORDER = "arrival-order"
STICKY_RANDOM = "sticky-random"
SLOT_POLICIES = (ARRIVAL_ORDER, STICKY_RANDOM)


def _check_num_slots(num_slots: int) -> None:
    if num_slots <= 0:
        raise ValueError(f"num_slots must be >= 1 (got {num_slots})")


def _empty_slots(num_slots: int) -> List[Optional[Box]]:
    return [None] * num_slots


class SlotAssigner:
    """Base class; subclasses decide which track fills which slot."""

    policy = ""

    def assign(self, tracks: Sequence[Track], num_slots: int) -> List[Optional[Box]]:
        raise NotImplementedError

    def occupants(self, tracks: Sequence[Track], num_slots: int) -> List[Optional[int]]:
        """Track id occupying each slot, ``None`` where the slot is empty."""
        raise NotImplementedError


class ArrivalOrderAssigner(SlotAssigner):
    """Earliest-created tracks fill slots 0..N-1, recomputed every cycle."""

    policy = ARRIVAL_ORDER

    def assign(self, tracks: Sequence[Track], num_slots: int) -> List[Optional[Box]]:
        _check_num_slots(num_slots)
        slots = _empty_slots(num_slots)
        for idx, track in enumerate(sorted(tracks, key=lambda t: t.track_id)[:num_slots]):
            slots[idx] = track.box
        return slots

    def occupants(self, tracks: Sequence[Track], num_slots: int) -> List[Optional[int]]:
        _check_num_slots(num_slots)
        ids: List[Optional[int]] = [None] * num_slots
        for idx, track in enumerate(sorted(tracks, key=lambda t: t.track_id)[:num_slots]):
            ids[idx] = track.track_id
        return ids


class StickyRandomAssigner(SlotAssigner):
    """Each new track draws a free slot at random and keeps it until evicted.

    A track that finds every slot taken when it first appears stays slot-less
    for its whole lifetime; freed slots only go to tracks created later.
    """

    policy = STICKY_RANDOM

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None) -> None:
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._seen: Set[int] = set()

    def _place_new_tracks(self, tracks: Sequence[Track], num_slots: int) -> None:
        live_ids = {track.track_id for track in tracks}
        # Ids are never reused, so forgetting dead ones is safe.
        self._seen &= live_ids

        occupied = {
            track.slot
            for track in tracks
            if track.slot is not None and 0 <= track.slot < num_slots
        }
        fresh = sorted(
            (track for track in tracks if track.track_id not in self._seen),
            key=lambda t: t.track_id,
        )
        for track in fresh:
            self._seen.add(track.track_id)
            if track.slot is not None:
                continue
            free = [idx for idx in range(num_slots) if idx not in occupied]
            if not free:
                LOGGER.debug("No free slot for track %d; it will stay hidden", track.track_id)
                continue
            track.slot = free[int(self._rng.integers(len(free)))]
            occupied.add(track.slot)
            LOGGER.debug("Track %d claimed slot %d", track.track_id, track.slot)

    def assign(self, tracks: Sequence[Track], num_slots: int) -> List[Optional[Box]]:
        _check_num_slots(num_slots)
        self._place_new_tracks(tracks, num_slots)
        slots = _empty_slots(num_slots)
        for track in tracks:
            if track.slot is not None and 0 <= track.slot < num_slots:
                slots[track.slot] = track.box
        return slots

    def occupants(self, tracks: Sequence[Track], num_slots: int) -> List[Optional[int]]:
        """Places any new tracks first, so it agrees with ``assign`` in either call order."""
        _check_num_slots(num_slots)
        self._place_new_tracks(tracks, num_slots)
        ids: List[Optional[int]] = [None] * num_slots
        for track in tracks:
            if track.slot is not None and 0 <= track.slot < num_slots:
                ids[track.slot] = track.track_id
        return ids


def assign_slots(tracks: Sequence[Track], num_slots: int = 3) -> List[Optional[Box]]:
    """Arrival-order slot boxes without keeping an assigner around."""
    return ArrivalOrderAssigner().assign(tracks, num_slots)


def build_assigner(
    policy: str,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> SlotAssigner:
    if policy == ARRIVAL_ORDER:
        return ArrivalOrderAssigner()
    if policy == STICKY_RANDOM:
        return StickyRandomAssigner(rng=rng, seed=seed)
    raise ValueError(f"Unknown slot policy {policy!r}; expected one of {SLOT_POLICIES}")
