import numpy as np
import pytest

from bubbletrack.slots.assigner import (
    ARRIVAL_ORDER,
    STICKY_RANDOM,
    ArrivalOrderAssigner,
    StickyRandomAssigner,
    assign_slots,
    build_assigner,
)
from bubbletrack.types import Box, Track


def _make_track(track_id: int, slot=None) -> Track:
    return Track(track_id=track_id, box=Box(float(track_id), 0.0, 10.0, 10.0), last_seen_ms=0.0, slot=slot)


def test_arrival_order_sorts_by_id_regardless_of_input_order():
    tracks = [_make_track(9), _make_track(3), _make_track(7)]
    boxes = assign_slots(tracks, 3)
    assert boxes == [tracks[1].box, tracks[2].box, tracks[0].box]


def test_arrival_order_pads_and_truncates():
    assigner = ArrivalOrderAssigner()
    single = [_make_track(4)]
    assert assigner.assign(single, 3) == [single[0].box, None, None]
    assert assigner.occupants(single, 3) == [4, None, None]

    many = [_make_track(i) for i in (5, 1, 8, 2)]
    assert assigner.occupants(many, 3) == [1, 2, 5]


def test_arrival_order_is_not_sticky():
    assigner = ArrivalOrderAssigner()
    tracks = [_make_track(0), _make_track(1), _make_track(2)]
    assert assigner.occupants(tracks, 3) == [0, 1, 2]
    assert assigner.occupants(tracks[1:], 3) == [1, 2, None]
    assert all(track.slot is None for track in tracks)


def test_num_slots_must_be_positive():
    tracks = [_make_track(0)]
    with pytest.raises(ValueError):
        ArrivalOrderAssigner().assign(tracks, 0)
    with pytest.raises(ValueError):
        StickyRandomAssigner(seed=1).assign(tracks, -1)


def test_sticky_random_gives_distinct_slots():
    assigner = StickyRandomAssigner(rng=np.random.default_rng(7))
    tracks = [_make_track(i) for i in range(3)]
    boxes = assigner.assign(tracks, 3)
    assert sorted(track.slot for track in tracks) == [0, 1, 2]
    for track in tracks:
        assert boxes[track.slot] == track.box


def test_sticky_random_slot_persists_while_others_come_and_go():
    assigner = StickyRandomAssigner(rng=np.random.default_rng(3))
    keeper = _make_track(0)
    assigner.assign([keeper], 3)
    slot = keeper.slot
    assert slot is not None

    other = _make_track(1)
    assigner.assign([keeper, other], 3)
    assigner.assign([keeper], 3)
    late = [_make_track(2), _make_track(3)]
    boxes = assigner.assign([keeper] + late, 3)

    assert keeper.slot == slot
    assert boxes[slot] == keeper.box
    assert {t.slot for t in late} == set(range(3)) - {slot}


def test_sticky_random_excess_track_stays_hidden_after_slot_frees():
    assigner = StickyRandomAssigner(rng=np.random.default_rng(0))
    t0, t1, t2 = _make_track(0), _make_track(1), _make_track(2)
    assigner.assign([t0, t1, t2], 2)
    assert t2.slot is None
    freed = t0.slot

    boxes = assigner.assign([t1, t2], 2)
    assert t2.slot is None
    assert boxes[freed] is None

    t3 = _make_track(3)
    boxes = assigner.assign([t1, t2, t3], 2)
    assert t3.slot == freed
    assert t2.slot is None
    assert boxes[freed] == t3.box


def test_sticky_random_is_reproducible_with_same_seed():
    first = [_make_track(i) for i in range(4)]
    second = [_make_track(i) for i in range(4)]
    StickyRandomAssigner(seed=42).assign(first, 5)
    StickyRandomAssigner(seed=42).assign(second, 5)
    assert [t.slot for t in first] == [t.slot for t in second]


def test_sticky_random_draws_from_every_free_slot():
    chosen = set()
    for seed in range(60):
        track = _make_track(0)
        StickyRandomAssigner(seed=seed).assign([track], 3)
        chosen.add(track.slot)
    assert chosen == {0, 1, 2}


def test_sticky_random_occupants_places_new_tracks_on_its_own():
    assigner = StickyRandomAssigner(rng=np.random.default_rng(3))
    tracks = [_make_track(i) for i in range(2)]
    ids = assigner.occupants(tracks, 3)
    assert sorted(i for i in ids if i is not None) == [0, 1]

    boxes = assigner.assign(tracks, 3)
    for slot, track_id in enumerate(ids):
        expected = None if track_id is None else tracks[track_id].box
        assert boxes[slot] == expected


def test_build_assigner_by_name():
    assert isinstance(build_assigner(ARRIVAL_ORDER), ArrivalOrderAssigner)
    assert isinstance(build_assigner(STICKY_RANDOM, seed=1), StickyRandomAssigner)
    with pytest.raises(ValueError):
        build_assigner("round-robin")
