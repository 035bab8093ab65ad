#!/usr/bin/env python3
"""Replay a recorded detection log through the tracker and slot policy."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from bubbletrack.config import BubbleConfig, load_config
from bubbletrack.io_utils import (
    DetectionCycle,
    dump_slot_frames,
    dump_yaml,
    ensure_dir,
    load_detection_log,
    setup_logging,
)
from bubbletrack.session import BubbleSession, SlotFrame
from bubbletrack.slots.assigner import SLOT_POLICIES
from bubbletrack.summary import slot_occupancy, track_screen_time


LOGGER = logging.getLogger("scripts.replay_detections")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay a detection log (JSON lines) into slot assignments")
    parser.add_argument("detections", type=Path, help="Detection log, one JSON object per cycle")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("data/outputs"),
        help="Output directory root",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("configs/bubbles.yaml"),
        help="Bubble configuration YAML",
    )
    parser.add_argument("--policy", choices=SLOT_POLICIES, default=None, help="Override slot policy")
    parser.add_argument("--num-slots", type=int, default=None, help="Override number of display slots")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the sticky-random policy")
    parser.add_argument("--verbose", action="store_true", help="Log per-cycle tracking detail")
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> BubbleConfig:
    return load_config(args.config).with_overrides(
        slot_policy=args.policy,
        num_slots=args.num_slots,
        seed=args.seed,
    )


def replay(cycles: Sequence[DetectionCycle], config: BubbleConfig) -> List[SlotFrame]:
    """Every recorded cycle is stepped; the detector already ran when it was logged."""
    session = BubbleSession(config)
    return [session.step(boxes, timestamp_ms) for timestamp_ms, boxes in cycles]


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    config = resolve_config(args)
    cycles = load_detection_log(args.detections)
    frames = replay(cycles, config)

    output_dir = ensure_dir(args.output_dir)
    stem = args.detections.stem
    slots_path = output_dir / f"{stem}-slots.jsonl"
    occupancy_path = output_dir / f"{stem}-occupancy.csv"
    tracks_path = output_dir / f"{stem}-tracks.csv"
    config_path = output_dir / f"{stem}-config.yaml"

    dump_slot_frames(slots_path, frames)
    occupancy = slot_occupancy(frames, config.slots)
    occupancy.to_csv(occupancy_path, index=False)
    track_screen_time(frames).to_csv(tracks_path, index=False)
    dump_yaml(config_path, config.to_dict())

    LOGGER.info("Replayed %d cycles with policy=%s", len(frames), config.slot_policy)
    for row in occupancy.itertuples(index=False):
        LOGGER.info(
            "  slot %d (%s): coverage=%.1f%% tracks=%d handovers=%d shown_ms=%.0f",
            row.slot,
            row.name,
            row.coverage * 100.0,
            row.distinct_tracks,
            row.handovers,
            row.shown_ms,
        )
    LOGGER.info("Wrote %s, %s, %s, %s", slots_path, occupancy_path, tracks_path, config_path)


if __name__ == "__main__":
    main()
