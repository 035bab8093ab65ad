"""I/O helpers shared across CLI entrypoints and pipeline modules."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Sequence, Tuple

import yaml

from bubbletrack.types import Box

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from bubbletrack.session import SlotFrame

LOGGER = logging.getLogger("bubbletrack.io")

DetectionCycle = Tuple[float, List[Box]]


def ensure_dir(path: Path) -> Path:
    """Create directory (and parents) if it does not exist."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return a dictionary."""
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    LOGGER.debug("Loaded YAML config %s -> keys=%s", path, list(data.keys()))
    return data


def dump_yaml(path: Path, data: Dict[str, Any]) -> None:
    """Write YAML to disk."""
    with path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(data, fh, sort_keys=False)
    LOGGER.debug("Wrote YAML config %s", path)


def setup_logging(level: int = logging.INFO) -> None:
    """Configure application logging if not already configured."""
    if logging.getLogger().handlers:
        logging.getLogger().setLevel(level)
        return
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _iter_json_lines(path: Path) -> Iterable[Tuple[int, Dict[str, Any]]]:
    with path.open("r", encoding="utf-8") as fh:
        for line_no, line in enumerate(fh, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                raise ValueError(f"{path}:{line_no}: invalid JSON ({exc.msg})") from exc
            yield line_no, record


def load_detection_log(path: Path) -> List[DetectionCycle]:
    """Read a JSON-lines detection log into ``(timestamp_ms, boxes)`` cycles.

    Each line holds ``{"timestamp_ms": float, "detections": [{"x", "y", "width", "height"}, ...]}``.
    """
    cycles: List[DetectionCycle] = []
    for line_no, record in _iter_json_lines(path):
        try:
            timestamp_ms = float(record["timestamp_ms"])
            boxes = [Box.from_dict(det) for det in record.get("detections") or []]
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"{path}:{line_no}: malformed detection record ({exc})") from exc
        cycles.append((timestamp_ms, boxes))
    LOGGER.info("Loaded %d detection cycles from %s", len(cycles), path)
    return cycles


def dump_detection_log(path: Path, cycles: Iterable[DetectionCycle]) -> None:
    with path.open("w", encoding="utf-8") as fh:
        for timestamp_ms, boxes in cycles:
            record = {"timestamp_ms": timestamp_ms, "detections": [box.to_dict() for box in boxes]}
            fh.write(json.dumps(record) + "\n")
    LOGGER.debug("Wrote detection log %s", path)


def dump_slot_frames(path: Path, frames: Sequence["SlotFrame"]) -> None:
    """Write slot frames as JSON lines."""
    with path.open("w", encoding="utf-8") as fh:
        for frame in frames:
            fh.write(json.dumps(frame.to_dict()) + "\n")
    LOGGER.info("Wrote %d slot frames to %s", len(frames), path)


def load_slot_frames(path: Path) -> List["SlotFrame"]:
    from bubbletrack.session import SlotFrame

    return [SlotFrame.from_dict(record) for _, record in _iter_json_lines(path)]


def infer_video_stem(video_path: Path) -> str:
    """Return file stem for output naming."""
    return video_path.stem
