"""Common dataclasses and geometry helpers used across the bubbletrack package."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

import numpy as np

Point = Tuple[float, float]


@dataclass(frozen=True)
class Box:
    """Axis-aligned box in image-pixel coordinates (top-left origin)."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return self.x + self.width / 2.0, self.y + self.height / 2.0

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.x, self.y, self.x + self.width, self.y + self.height

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "Box":
        return cls(float(x1), float(y1), float(x2 - x1), float(y2 - y1))

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Box":
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )


# Detections are plain boxes; the alias keeps call sites readable.
Detection = Box


@dataclass
class Track:
    """A detection persisted across cycles under a stable id."""

    track_id: int
    box: Box
    last_seen_ms: float
    # Written only by slot assigners.
    slot: Optional[int] = None

    def age_ms(self, now_ms: float) -> float:
        return now_ms - self.last_seen_ms

    def is_stale(self, now_ms: float, stale_timeout_ms: float) -> bool:
        return self.age_ms(now_ms) >= stale_timeout_ms


def center_distance(box_a: Box, box_b: Box) -> float:
    """Euclidean distance between two box centres (no size normalisation)."""
    ax, ay = box_a.center
    bx, by = box_b.center
    return float(np.hypot(ax - bx, ay - by))
