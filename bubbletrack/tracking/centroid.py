"""Greedy nearest-centroid tracker with time-based staleness eviction."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

import numpy as np

from bubbletrack.types import Detection, Track, center_distance

LOGGER = logging.getLogger("bubbletrack.tracking.centroid")


def update_tracks(
    detections: Sequence[Detection],
    tracks: Sequence[Track],
    next_id: int,
    now_ms: float,
    match_distance_threshold: float,
    stale_timeout_ms: float,
) -> Tuple[List[Track], int]:
    """Associate one cycle of detections with existing tracks.

    Tracks are visited in creation order and each claims the closest detection
    not yet claimed this cycle, provided its centre lies strictly within
    ``match_distance_threshold`` pixels. Earlier tracks therefore win contested
    detections; the result is a greedy approximation rather than an optimal
    bipartite assignment. Unclaimed detections open new tracks in detection
    order, and every track unmatched for ``stale_timeout_ms`` or longer is
    dropped once matching is done.

    The input tracks are left untouched; fresh ``Track`` objects are returned
    together with the advanced id counter.
    """
    claimed = np.zeros(len(detections), dtype=bool)
    updated: List[Track] = []

    for track in tracks:
        current = replace(track)
        if len(detections) and not claimed.all():
            distances = np.array([center_distance(track.box, det) for det in detections], dtype=np.float64)
            distances[claimed] = np.inf
            best_idx = int(np.argmin(distances))
            if distances[best_idx] < match_distance_threshold:
                current.box = detections[best_idx]
                current.last_seen_ms = now_ms
                claimed[best_idx] = True
        updated.append(current)

    for det_idx, detection in enumerate(detections):
        if claimed[det_idx]:
            continue
        updated.append(Track(track_id=next_id, box=detection, last_seen_ms=now_ms))
        LOGGER.debug("Created track %d at t=%.1f box=%s", next_id, now_ms, detection)
        next_id += 1

    survivors: List[Track] = []
    for track in updated:
        if track.is_stale(now_ms, stale_timeout_ms):
            LOGGER.debug(
                "Evicted track %d (last seen %.1f, now %.1f)",
                track.track_id,
                track.last_seen_ms,
                now_ms,
            )
            continue
        survivors.append(track)
    return survivors, next_id


class CentroidTracker:
    """Owns the live track store and id counter across detection cycles."""

    def __init__(self, match_distance_threshold: float = 200.0, stale_timeout_ms: float = 500.0) -> None:
        if match_distance_threshold <= 0:
            raise ValueError("match_distance_threshold must be positive")
        if stale_timeout_ms <= 0:
            raise ValueError("stale_timeout_ms must be positive")
        self.match_distance_threshold = float(match_distance_threshold)
        self.stale_timeout_ms = float(stale_timeout_ms)
        self._tracks: List[Track] = []
        self._next_id = 0
        self._last_now_ms: Optional[float] = None
        LOGGER.info(
            "Initialised CentroidTracker match_distance_threshold=%.1f stale_timeout_ms=%.1f",
            self.match_distance_threshold,
            self.stale_timeout_ms,
        )

    @property
    def tracks(self) -> Tuple[Track, ...]:
        return tuple(self._tracks)

    @property
    def next_id(self) -> int:
        return self._next_id

    def update(self, detections: Sequence[Detection], now_ms: float) -> List[Track]:
        """Run one cycle and return the live tracks in creation order."""
        if self._last_now_ms is not None and now_ms < self._last_now_ms:
            raise ValueError(
                f"Timestamp went backwards: now_ms={now_ms} < previous {self._last_now_ms}"
            )
        self._last_now_ms = now_ms
        self._tracks, self._next_id = update_tracks(
            detections,
            self._tracks,
            self._next_id,
            now_ms,
            self.match_distance_threshold,
            self.stale_timeout_ms,
        )
        return list(self._tracks)

    def reset(self) -> None:
        """Drop every live track. Ids keep counting from where they were."""
        self._tracks = []
        self._last_now_ms = None
