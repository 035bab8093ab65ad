import pytest

from bubbletrack.session import SlotFrame
from bubbletrack.types import Box
from bubbletrack.viz.crop import BoxSmoother, SlotSmoothers, crop_region


def test_crop_region_pads_and_squares_the_face():
    region = crop_region(Box(100.0, 100.0, 100.0, 100.0), 1000, 1000)
    assert region.x == pytest.approx(55.0)
    assert region.y == pytest.approx(40.0)
    assert region.width == pytest.approx(190.0)
    assert region.height == pytest.approx(190.0)


def test_crop_region_clamps_to_frame():
    region = crop_region(Box(0.0, 0.0, 50.0, 50.0), 640, 480)
    assert region.x == 0.0
    assert region.y == 0.0
    assert region.width == pytest.approx(72.5)
    assert region.height == pytest.approx(65.0)


def test_crop_region_enforces_minimum_size():
    region = crop_region(Box(5.0, 5.0, 0.0, 0.0), 640, 480)
    assert region.width == 10.0
    assert region.height == 10.0


def test_box_smoother_moves_part_way():
    smoother = BoxSmoother(factor=0.3)
    assert smoother.update(Box(0.0, 0.0, 10.0, 10.0)) == Box(0.0, 0.0, 10.0, 10.0)
    moved = smoother.update(Box(10.0, 20.0, 20.0, 10.0))
    assert moved.x == pytest.approx(7.0)
    assert moved.y == pytest.approx(14.0)
    assert moved.width == pytest.approx(17.0)
    smoother.reset()
    assert smoother.update(Box(50.0, 50.0, 5.0, 5.0)) == Box(50.0, 50.0, 5.0, 5.0)


def test_box_smoother_rejects_bad_factor():
    with pytest.raises(ValueError):
        BoxSmoother(factor=1.0)


def test_slot_smoothers_reset_empty_slots():
    smoothers = SlotSmoothers(2, factor=0.5)
    box = Box(0.0, 0.0, 10.0, 10.0)
    smoothers.apply(SlotFrame(0.0, (box, box), (0, 1)))
    shifted = Box(10.0, 0.0, 10.0, 10.0)
    smoothed = smoothers.apply(SlotFrame(50.0, (shifted, None), (0, None)))
    assert smoothed[0].x == pytest.approx(5.0)
    assert smoothed[1] is None
    # Slot 1 restarts from the raw box after being empty.
    assert smoothers.apply(SlotFrame(100.0, (shifted, shifted), (0, 2)))[1] == shifted
