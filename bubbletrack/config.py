"""Runtime configuration for the bubble overlay pipeline."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from bubbletrack.io_utils import load_yaml
from bubbletrack.slots.assigner import ARRIVAL_ORDER, SLOT_POLICIES

LOGGER = logging.getLogger("bubbletrack.config")


@dataclass
class SlotStyle:
    """Where and how a slot is painted. Positions are percentages of the canvas."""

    name: str
    left_pct: float
    top_pct: float
    size: int = 125
    color: str = "#ffffff"
    z_index: int = 20


def default_slot_styles() -> List[SlotStyle]:
    # Podium layout: winner top-centre, runner-up right, third bottom-left.
    return [
        SlotStyle(name="winner", left_pct=53.0, top_pct=15.0, size=140, color="#fbbf24", z_index=30),
        SlotStyle(name="second", left_pct=88.0, top_pct=63.0, size=125, color="#38bdf8", z_index=20),
        SlotStyle(name="third", left_pct=13.0, top_pct=70.0, size=125, color="#a855f7", z_index=20),
    ]


def row_slot_styles(num_slots: int, size: int = 125) -> List[SlotStyle]:
    """Evenly spaced styles along a horizontal row."""
    step = 100.0 / (num_slots + 1)
    return [
        SlotStyle(name=f"slot{idx}", left_pct=step * (idx + 1), top_pct=50.0, size=size)
        for idx in range(num_slots)
    ]


@dataclass
class BubbleConfig:
    match_distance_threshold: float = 200.0
    stale_timeout_ms: float = 500.0
    num_slots: int = 3
    slot_policy: str = ARRIVAL_ORDER
    # Minimum gap between detector runs; 0 runs the detector every frame.
    detection_interval_ms: float = 50.0
    seed: Optional[int] = None
    # Left empty, styles are generated to match num_slots.
    slots: List[SlotStyle] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.slots and self.num_slots >= 1:
            self.slots = default_slot_styles() if self.num_slots == 3 else row_slot_styles(self.num_slots)

    def validate(self) -> "BubbleConfig":
        if self.match_distance_threshold <= 0:
            raise ValueError("match_distance_threshold must be positive")
        if self.stale_timeout_ms <= 0:
            raise ValueError("stale_timeout_ms must be positive")
        if self.num_slots < 1:
            raise ValueError(f"num_slots must be >= 1 (got {self.num_slots})")
        if self.detection_interval_ms < 0:
            raise ValueError("detection_interval_ms must be >= 0")
        if self.slot_policy not in SLOT_POLICIES:
            raise ValueError(f"Unknown slot policy {self.slot_policy!r}; expected one of {SLOT_POLICIES}")
        if len(self.slots) != self.num_slots:
            raise ValueError(
                f"Configured {len(self.slots)} slot styles for num_slots={self.num_slots}"
            )
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BubbleConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}")

        kwargs: Dict[str, Any] = dict(data)
        if "num_slots" in kwargs:
            kwargs["num_slots"] = int(kwargs["num_slots"])
        raw_slots = kwargs.pop("slots", None) or []
        config = cls(slots=[SlotStyle(**entry) for entry in raw_slots], **kwargs)
        config.match_distance_threshold = float(config.match_distance_threshold)
        config.stale_timeout_ms = float(config.stale_timeout_ms)
        config.detection_interval_ms = float(config.detection_interval_ms)
        return config.validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def with_overrides(self, **overrides: Any) -> "BubbleConfig":
        """Return a copy with non-None overrides applied (CLI flags win over YAML)."""
        data = self.to_dict()
        for key, value in overrides.items():
            if value is not None:
                data[key] = value
        if overrides.get("num_slots") is not None and overrides["num_slots"] != self.num_slots:
            data.pop("slots", None)
        return BubbleConfig.from_dict(data)


def load_config(path: Optional[Path]) -> BubbleConfig:
    """Load a YAML config, or the defaults when ``path`` is None or missing."""
    if path is None:
        return BubbleConfig().validate()
    if not path.exists():
        LOGGER.warning("Config %s not found; using defaults", path)
        return BubbleConfig().validate()
    config = BubbleConfig.from_dict(load_yaml(path))
    LOGGER.info(
        "Loaded config %s policy=%s num_slots=%d match_distance_threshold=%.1f stale_timeout_ms=%.1f",
        path,
        config.slot_policy,
        config.num_slots,
        config.match_distance_threshold,
        config.stale_timeout_ms,
    )
    return config
