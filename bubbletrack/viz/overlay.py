"""OpenCV compositing of slot bubbles for previews and QA videos."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence, Tuple

import cv2
import numpy as np

from bubbletrack.config import SlotStyle
from bubbletrack.session import SlotFrame
from bubbletrack.types import Box
from bubbletrack.viz.crop import SlotSmoothers, crop_region

LOGGER = logging.getLogger("bubbletrack.viz.overlay")

RING_THICKNESS = 4


def hex_to_bgr(color: str) -> Tuple[int, int, int]:
    value = color.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        raise ValueError(f"Expected #rrggbb colour, got {color!r}")
    r, g, b = (int(value[i : i + 2], 16) for i in (0, 2, 4))
    return b, g, r


def _circle_mask(size: int) -> np.ndarray:
    mask = np.zeros((size, size), dtype=np.uint8)
    cv2.circle(mask, (size // 2, size // 2), size // 2, 255, -1)
    return mask


def _paste(canvas: np.ndarray, bubble: np.ndarray, mask: np.ndarray, center: Tuple[int, int]) -> None:
    """Copy masked ``bubble`` pixels onto ``canvas`` centred at ``center``, clipping at the edges."""
    size = bubble.shape[0]
    height, width = canvas.shape[:2]
    left = center[0] - size // 2
    top = center[1] - size // 2
    dx1, dy1 = max(0, left), max(0, top)
    dx2, dy2 = min(width, left + size), min(height, top + size)
    if dx2 <= dx1 or dy2 <= dy1:
        return
    sx1, sy1 = dx1 - left, dy1 - top
    sx2, sy2 = sx1 + (dx2 - dx1), sy1 + (dy2 - dy1)
    roi = canvas[dy1:dy2, dx1:dx2]
    visible = mask[sy1:sy2, sx1:sx2] > 0
    roi[visible] = bubble[sy1:sy2, sx1:sx2][visible]


def compose_bubbles(
    frame: np.ndarray,
    boxes: Sequence[Optional[Box]],
    styles: Sequence[SlotStyle],
    background: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Paint one mirrored circular crop per filled slot.

    Crops are cut from ``frame``; they are painted onto a copy of
    ``background`` when given, otherwise onto a copy of ``frame``.
    """
    if len(boxes) != len(styles):
        raise ValueError(f"Got {len(boxes)} slot boxes for {len(styles)} slot styles")
    canvas = (background if background is not None else frame).copy()
    frame_h, frame_w = frame.shape[:2]
    canvas_h, canvas_w = canvas.shape[:2]

    order = sorted(range(len(styles)), key=lambda idx: styles[idx].z_index)
    for idx in order:
        box = boxes[idx]
        if box is None:
            continue
        style = styles[idx]
        region = crop_region(box, frame_w, frame_h)
        x1, y1 = int(round(region.x)), int(round(region.y))
        x2, y2 = int(round(region.x + region.width)), int(round(region.y + region.height))
        crop = frame[max(0, y1) : max(0, y2), max(0, x1) : max(0, x2)]
        if crop.size == 0:
            LOGGER.debug("Empty crop for slot %d box=%s", idx, box)
            continue
        size = max(2, int(style.size))
        bubble = cv2.flip(cv2.resize(crop, (size, size), interpolation=cv2.INTER_LINEAR), 1)
        center = (
            int(round(style.left_pct / 100.0 * canvas_w)),
            int(round(style.top_pct / 100.0 * canvas_h)),
        )
        _paste(canvas, bubble, _circle_mask(size), center)
        cv2.circle(canvas, center, size // 2, hex_to_bgr(style.color), RING_THICKNESS, lineType=cv2.LINE_AA)
    return canvas


def render_overlay(
    video_path: str,
    slot_frames: Dict[int, SlotFrame],
    output_path: str,
    styles: Sequence[SlotStyle],
    fps: Optional[float] = None,
    smoothing: float = 0.3,
) -> None:
    """Write a QA video with bubbles composed onto every frame.

    ``slot_frames`` maps video frame index to the slot frame produced there;
    frames without an entry keep painting the most recent one.
    """
    cap = cv2.VideoCapture(video_path)
    if not cap.isOpened():
        raise RuntimeError(f"Unable to open video {video_path}")

    input_fps = cap.get(cv2.CAP_PROP_FPS) or 30.0
    fps = fps or input_fps
    width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
    height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

    fourcc = cv2.VideoWriter_fourcc(*"mp4v")
    writer = cv2.VideoWriter(output_path, fourcc, fps, (width, height))

    smoothers = SlotSmoothers(len(styles), factor=smoothing)
    current = SlotFrame.empty(len(styles))
    frame_idx = 0
    try:
        while True:
            ret, frame = cap.read()
            if not ret:
                break
            current = slot_frames.get(frame_idx, current)
            writer.write(compose_bubbles(frame, smoothers.apply(current), styles))
            frame_idx += 1
    finally:
        cap.release()
        writer.release()
    LOGGER.info("Overlay written to %s (%d frames)", output_path, frame_idx)
