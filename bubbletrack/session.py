"""Per-session driver tying the tracker and a slot policy together."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

from bubbletrack.config import BubbleConfig
from bubbletrack.slots.assigner import build_assigner
from bubbletrack.tracking.centroid import CentroidTracker
from bubbletrack.types import Box, Track

LOGGER = logging.getLogger("bubbletrack.session")


@dataclass(frozen=True)
class SlotFrame:
    """What the renderer paints for one detection cycle."""

    timestamp_ms: float
    boxes: Tuple[Optional[Box], ...]
    track_ids: Tuple[Optional[int], ...]

    @property
    def num_slots(self) -> int:
        return len(self.boxes)

    @property
    def active(self) -> int:
        return sum(1 for box in self.boxes if box is not None)

    @classmethod
    def empty(cls, num_slots: int, timestamp_ms: float = 0.0) -> "SlotFrame":
        return cls(timestamp_ms=timestamp_ms, boxes=(None,) * num_slots, track_ids=(None,) * num_slots)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp_ms": self.timestamp_ms,
            "slots": [
                None if box is None else {"track_id": track_id, **box.to_dict()}
                for box, track_id in zip(self.boxes, self.track_ids)
            ],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SlotFrame":
        boxes = []
        track_ids = []
        for entry in data["slots"]:
            if entry is None:
                boxes.append(None)
                track_ids.append(None)
                continue
            boxes.append(Box.from_dict(entry))
            track_ids.append(entry.get("track_id"))
        return cls(timestamp_ms=float(data["timestamp_ms"]), boxes=tuple(boxes), track_ids=tuple(track_ids))


class BubbleSession:
    """Runs detection cycles through the tracker and the configured slot policy."""

    def __init__(self, config: Optional[BubbleConfig] = None, rng: Optional[np.random.Generator] = None) -> None:
        self.config = (config or BubbleConfig()).validate()
        self.tracker = CentroidTracker(
            match_distance_threshold=self.config.match_distance_threshold,
            stale_timeout_ms=self.config.stale_timeout_ms,
        )
        self.assigner = build_assigner(self.config.slot_policy, rng=rng, seed=self.config.seed)
        self._last_detection_ms: Optional[float] = None
        self._last_frame = SlotFrame.empty(self.config.num_slots)
        self.cycles = 0
        LOGGER.info(
            "Initialised BubbleSession policy=%s num_slots=%d detection_interval_ms=%.1f",
            self.config.slot_policy,
            self.config.num_slots,
            self.config.detection_interval_ms,
        )

    @property
    def tracks(self) -> Tuple[Track, ...]:
        return self.tracker.tracks

    @property
    def last_frame(self) -> SlotFrame:
        return self._last_frame

    def should_detect(self, now_ms: float) -> bool:
        """True when enough time has passed since the last cycle to run the detector again."""
        if self._last_detection_ms is None:
            return True
        return now_ms - self._last_detection_ms >= self.config.detection_interval_ms

    def step(self, detections: Sequence[Box], now_ms: float) -> SlotFrame:
        num_slots = self.config.num_slots
        tracks = self.tracker.update(detections, now_ms)
        boxes = self.assigner.assign(tracks, num_slots)
        track_ids = self.assigner.occupants(tracks, num_slots)
        self._last_detection_ms = now_ms
        self.cycles += 1

        frame = SlotFrame(timestamp_ms=now_ms, boxes=tuple(boxes), track_ids=tuple(track_ids))
        if frame.track_ids != self._last_frame.track_ids:
            LOGGER.debug("t=%.1f slots -> %s (live tracks=%d)", now_ms, list(frame.track_ids), len(tracks))
        self._last_frame = frame
        return frame
