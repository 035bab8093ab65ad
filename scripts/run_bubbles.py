#!/usr/bin/env python3
"""CLI for running RetinaFace + centroid tracking + slot assignment over a video."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import cv2
from tqdm import tqdm

from bubbletrack.config import load_config
from bubbletrack.detectors.face_retina import RetinaFaceDetector
from bubbletrack.io_utils import (
    DetectionCycle,
    dump_detection_log,
    dump_slot_frames,
    dump_yaml,
    ensure_dir,
    infer_video_stem,
    setup_logging,
)
from bubbletrack.session import BubbleSession, SlotFrame
from bubbletrack.slots.assigner import SLOT_POLICIES
from bubbletrack.summary import slot_occupancy, track_screen_time
from bubbletrack.viz.overlay import render_overlay


LOGGER = logging.getLogger("scripts.run_bubbles")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track faces in a video and assign them to display slots")
    parser.add_argument("video", type=Path, help="Input video file")
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
    parser.add_argument(
        "--detection-interval-ms",
        type=float,
        default=None,
        help="Minimum time between detector runs (0 = every frame)",
    )
    parser.add_argument("--det-thresh", type=float, default=0.5, help="RetinaFace score threshold")
    parser.add_argument(
        "--det-size",
        type=int,
        nargs=2,
        default=(640, 640),
        metavar=("WIDTH", "HEIGHT"),
        help="RetinaFace detection size",
    )
    parser.add_argument(
        "--providers",
        type=str,
        nargs="*",
        default=None,
        help="ONNX execution providers (overrides platform defaults)",
    )
    parser.add_argument("--overlay", action="store_true", help="Also write a QA video with bubbles composed in")
    parser.add_argument(
        "--save-detections",
        action="store_true",
        help="Write the per-cycle detection log so the run can be replayed",
    )
    parser.add_argument("--verbose", action="store_true", help="Log per-cycle tracking detail")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    config = load_config(args.config).with_overrides(
        slot_policy=args.policy,
        num_slots=args.num_slots,
        seed=args.seed,
        detection_interval_ms=args.detection_interval_ms,
    )
    detector = RetinaFaceDetector(
        providers=tuple(args.providers) if args.providers else None,
        det_size=tuple(args.det_size),
        det_thresh=args.det_thresh,
    )
    session = BubbleSession(config)

    cap = cv2.VideoCapture(str(args.video))
    if not cap.isOpened():
        raise RuntimeError(f"Unable to open video {args.video}")
    fps = cap.get(cv2.CAP_PROP_FPS) or 30.0
    frame_count = int(cap.get(cv2.CAP_PROP_FRAME_COUNT)) or None

    output_dir = ensure_dir(args.output_dir)
    stem = infer_video_stem(args.video)
    LOGGER.info(
        "Running bubbles video=%s fps=%.2f frames=%s policy=%s",
        args.video,
        fps,
        frame_count or "unknown",
        config.slot_policy,
    )

    frames: List[SlotFrame] = []
    cycles: List[DetectionCycle] = []
    frames_by_index: Dict[int, SlotFrame] = {}
    detections_per_cycle: Dict[int, int] = {}
    frame_idx = -1
    progress = tqdm(total=frame_count, unit="frame", desc=stem)
    try:
        while True:
            ret, image = cap.read()
            if not ret:
                break
            frame_idx += 1
            progress.update(1)
            timestamp_ms = frame_idx / fps * 1000.0
            if session.should_detect(timestamp_ms):
                boxes = detector.detect(image)
                frame = session.step(boxes, timestamp_ms)
                frames.append(frame)
                frames_by_index[frame_idx] = frame
                detections_per_cycle[frame_idx] = len(boxes)
                if args.save_detections:
                    cycles.append((timestamp_ms, boxes))
    finally:
        progress.close()
        cap.release()

    slots_path = output_dir / f"{stem}-slots.jsonl"
    dump_slot_frames(slots_path, frames)
    slot_occupancy(frames, config.slots).to_csv(output_dir / f"{stem}-occupancy.csv", index=False)
    track_screen_time(frames).to_csv(output_dir / f"{stem}-tracks.csv", index=False)
    dump_yaml(output_dir / f"{stem}-config.yaml", config.to_dict())
    if args.save_detections:
        dump_detection_log(output_dir / f"{stem}-detections.jsonl", cycles)
    if args.overlay:
        render_overlay(str(args.video), frames_by_index, str(output_dir / f"{stem}-bubbles.mp4"), config.slots, fps=fps)

    LOGGER.info(
        "Processed %d frames, %d detection cycles, %d faces, %d track ids issued",
        frame_idx + 1,
        session.cycles,
        sum(detections_per_cycle.values()),
        session.tracker.next_id,
    )


if __name__ == "__main__":
    main()
