import numpy as np

from bubbletrack.detectors.face_retina import boxes_from_xyxy
from bubbletrack.types import Box


def test_boxes_from_xyxy_converts_and_filters_by_score():
    rows = np.array([[10.0, 20.0, 60.0, 90.0], [0.0, 0.0, 5.0, 5.0]], dtype=np.float32)
    boxes = boxes_from_xyxy(rows, [0.9, 0.2], det_thresh=0.5)
    assert boxes == [Box(10.0, 20.0, 50.0, 70.0)]


def test_boxes_from_xyxy_keeps_everything_without_threshold():
    boxes = boxes_from_xyxy([[0, 0, 4, 4], [1, 1, 2, 3]], [0.1, 0.05])
    assert [box.as_xyxy() for box in boxes] == [(0.0, 0.0, 4.0, 4.0), (1.0, 1.0, 2.0, 3.0)]
