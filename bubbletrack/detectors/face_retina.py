"""RetinaFace detection producing boxes for the tracker."""

from __future__ import annotations

import logging
import os
import platform
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from bubbletrack.types import Box

LOGGER = logging.getLogger("bubbletrack.detectors.face")


def _default_providers() -> Tuple[str, ...]:
    """Choose default ONNX providers for RetinaFace."""
    system = platform.system()
    machine = platform.machine().lower()
    if system == "Darwin" and machine in {"arm64", "aarch64"}:
        return ("CoreMLExecutionProvider", "CPUExecutionProvider")
    return ("CPUExecutionProvider",)


def boxes_from_xyxy(
    rows: Iterable[Sequence[float]],
    scores: Iterable[float],
    det_thresh: float = 0.0,
) -> List[Box]:
    """Convert ``x1, y1, x2, y2`` rows into boxes, dropping those scored below ``det_thresh``."""
    boxes: List[Box] = []
    for row, score in zip(rows, scores):
        if float(score) < det_thresh:
            continue
        x1, y1, x2, y2 = (float(v) for v in row[:4])
        boxes.append(Box.from_xyxy(x1, y1, x2, y2))
    return boxes


class RetinaFaceDetector:
    """Wrapper around the InsightFace RetinaFace detector."""

    def __init__(
        self,
        providers: Optional[Tuple[str, ...]] = None,
        det_size: Tuple[int, int] = (640, 640),
        det_thresh: float = 0.5,
    ) -> None:
        os.environ.setdefault("OMP_NUM_THREADS", "2")
        os.environ.setdefault("ORT_INTRA_OP_NUM_THREADS", "2")
        try:
            from insightface.app import FaceAnalysis
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "insightface is required for RetinaFaceDetector. "
                "Install it via `pip install insightface`."
            ) from exc

        self.det_size = det_size
        self.det_thresh = det_thresh
        self.providers = tuple(providers) if providers else _default_providers()
        self.app = FaceAnalysis(name="buffalo_l", allowed_modules=["detection"], providers=list(self.providers))
        self.app.prepare(ctx_id=0, det_size=self.det_size)
        LOGGER.info(
            "Loaded RetinaFace detector det_size=%s det_thresh=%.2f providers=%s",
            det_size,
            det_thresh,
            self.providers,
        )

    def detect(self, image: np.ndarray) -> List[Box]:
        """Run RetinaFace on a BGR image and return face boxes in image coordinates."""
        faces = self.app.get(image)
        return boxes_from_xyxy(
            (face.bbox for face in faces),
            (face.det_score for face in faces),
            det_thresh=self.det_thresh,
        )
