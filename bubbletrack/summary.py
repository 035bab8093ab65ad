"""Aggregation of recorded slot frames into per-slot and per-track totals."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from bubbletrack.config import SlotStyle
from bubbletrack.session import SlotFrame

LOGGER = logging.getLogger("bubbletrack.summary")

OCCUPANCY_COLUMNS = ["slot", "name", "cycles_shown", "coverage", "distinct_tracks", "handovers", "shown_ms"]
TRACK_COLUMNS = ["track_id", "first_ms", "last_ms", "cycles_shown", "shown_ms", "slots"]


def _hold_durations(frames: Sequence[SlotFrame]) -> np.ndarray:
    """Time each frame stays on screen until the next one; the last frame holds for 0 ms."""
    if not frames:
        return np.zeros((0,), dtype=np.float64)
    stamps = np.array([frame.timestamp_ms for frame in frames], dtype=np.float64)
    return np.append(np.diff(stamps), 0.0)


def slot_occupancy(frames: Sequence[SlotFrame], styles: Optional[Sequence[SlotStyle]] = None) -> pd.DataFrame:
    """Summarise how each slot was used over a run."""
    if not frames:
        return pd.DataFrame(columns=OCCUPANCY_COLUMNS)

    num_slots = frames[0].num_slots
    holds = _hold_durations(frames)
    rows: List[Dict] = []
    for slot in range(num_slots):
        cycles_shown = 0
        shown_ms = 0.0
        handovers = 0
        tracks = set()
        previous: Optional[int] = None
        for frame, hold in zip(frames, holds):
            track_id = frame.track_ids[slot]
            if frame.boxes[slot] is None:
                previous = None
                continue
            cycles_shown += 1
            shown_ms += float(hold)
            tracks.add(track_id)
            if previous is not None and track_id != previous:
                handovers += 1
            previous = track_id
        name = styles[slot].name if styles is not None and slot < len(styles) else f"slot{slot}"
        rows.append(
            {
                "slot": slot,
                "name": name,
                "cycles_shown": cycles_shown,
                "coverage": cycles_shown / len(frames),
                "distinct_tracks": len(tracks),
                "handovers": handovers,
                "shown_ms": shown_ms,
            }
        )
    return pd.DataFrame(rows, columns=OCCUPANCY_COLUMNS)


def track_screen_time(frames: Sequence[SlotFrame]) -> pd.DataFrame:
    """Per-track totals of how long each track was displayed, and where."""
    holds = _hold_durations(frames)
    totals: Dict[int, Dict] = {}
    for frame, hold in zip(frames, holds):
        for slot, (box, track_id) in enumerate(zip(frame.boxes, frame.track_ids)):
            if box is None or track_id is None:
                continue
            entry = totals.setdefault(
                track_id,
                {
                    "track_id": track_id,
                    "first_ms": frame.timestamp_ms,
                    "last_ms": frame.timestamp_ms,
                    "cycles_shown": 0,
                    "shown_ms": 0.0,
                    "slots": set(),
                },
            )
            entry["last_ms"] = frame.timestamp_ms
            entry["cycles_shown"] += 1
            entry["shown_ms"] += float(hold)
            entry["slots"].add(slot)

    rows = []
    for track_id in sorted(totals):
        entry = dict(totals[track_id])
        entry["slots"] = ",".join(str(slot) for slot in sorted(entry["slots"]))
        rows.append(entry)
    LOGGER.debug("Computed screen time for %d tracks", len(rows))
    return pd.DataFrame(rows, columns=TRACK_COLUMNS)
