"""Crop geometry and smoothing for painting slot bubbles."""

from __future__ import annotations

from typing import List, Optional

from bubbletrack.session import SlotFrame
from bubbletrack.types import Box

# Padding around the face, as fractions of the face width.
PADDING = 0.6
PADDING_TOP = 1.0
PADDING_BOTTOM = 1.5
MIN_CROP_PX = 10.0


def crop_region(box: Box, frame_width: float, frame_height: float, aspect: float = 1.0) -> Box:
    """Source region of the frame to paint for ``box``.

    The face is padded (more below than above so shoulders show), grown to the
    target ``aspect`` (width / height) around its centre, then clamped to the
    frame.
    """
    pad = box.width * PADDING
    sx = box.x - pad / 2.0
    sy = box.y - pad * PADDING_TOP
    sw = box.width + pad
    sh = box.height + pad * PADDING_BOTTOM

    center_x = sx + sw / 2.0
    center_y = sy + sh / 2.0
    if sh > 0 and sw / sh > aspect:
        sh = sw / aspect
        sy = center_y - sh / 2.0
    else:
        sw = sh * aspect
        sx = center_x - sw / 2.0

    if sx < 0:
        sw += sx
        sx = 0.0
    if sy < 0:
        sh += sy
        sy = 0.0
    if sx + sw > frame_width:
        sw = frame_width - sx
    if sy + sh > frame_height:
        sh = frame_height - sy

    return Box(sx, sy, max(sw, MIN_CROP_PX), max(sh, MIN_CROP_PX))


class BoxSmoother:
    """Exponential smoothing of a displayed box. 0 follows instantly, 1 never moves."""

    def __init__(self, factor: float = 0.3) -> None:
        if not 0.0 <= factor < 1.0:
            raise ValueError("factor must be in [0, 1)")
        self.factor = factor
        self.current: Optional[Box] = None

    def update(self, box: Box) -> Box:
        if self.current is None:
            self.current = box
            return box
        gain = 1.0 - self.factor
        prev = self.current
        self.current = Box(
            prev.x + (box.x - prev.x) * gain,
            prev.y + (box.y - prev.y) * gain,
            prev.width + (box.width - prev.width) * gain,
            prev.height + (box.height - prev.height) * gain,
        )
        return self.current

    def reset(self) -> None:
        self.current = None


class SlotSmoothers:
    """One smoother per slot; empty slots reset theirs."""

    def __init__(self, num_slots: int, factor: float = 0.3) -> None:
        self.smoothers = [BoxSmoother(factor) for _ in range(num_slots)]

    def apply(self, frame: SlotFrame) -> List[Optional[Box]]:
        smoothed: List[Optional[Box]] = []
        for smoother, box in zip(self.smoothers, frame.boxes):
            if box is None:
                smoother.reset()
                smoothed.append(None)
            else:
                smoothed.append(smoother.update(box))
        return smoothed
