from bubbletrack.config import default_slot_styles
from bubbletrack.session import SlotFrame
from bubbletrack.summary import OCCUPANCY_COLUMNS, slot_occupancy, track_screen_time
from bubbletrack.types import Box

BOX = Box(0.0, 0.0, 10.0, 10.0)


def _make_frames():
    return [
        SlotFrame(0.0, (BOX, None, None), (0, None, None)),
        SlotFrame(100.0, (BOX, BOX, None), (0, 1, None)),
        SlotFrame(200.0, (BOX, BOX, None), (2, 1, None)),
        SlotFrame(300.0, (None, None, None), (None, None, None)),
    ]


def test_slot_occupancy_counts_handovers_and_time():
    df = slot_occupancy(_make_frames(), default_slot_styles()).set_index("slot")

    assert df.loc[0, "name"] == "winner"
    assert df.loc[0, "cycles_shown"] == 3
    assert df.loc[0, "coverage"] == 0.75
    assert df.loc[0, "distinct_tracks"] == 2
    assert df.loc[0, "handovers"] == 1
    assert df.loc[0, "shown_ms"] == 300.0

    assert df.loc[1, "cycles_shown"] == 2
    assert df.loc[1, "handovers"] == 0
    assert df.loc[1, "shown_ms"] == 200.0

    assert df.loc[2, "cycles_shown"] == 0
    assert df.loc[2, "shown_ms"] == 0.0


def test_track_screen_time_per_track():
    df = track_screen_time(_make_frames()).set_index("track_id")

    assert list(df.index) == [0, 1, 2]
    assert df.loc[0, "first_ms"] == 0.0
    assert df.loc[0, "last_ms"] == 100.0
    assert df.loc[0, "shown_ms"] == 200.0
    assert df.loc[1, "cycles_shown"] == 2
    assert df.loc[2, "shown_ms"] == 100.0
    assert df.loc[2, "slots"] == "0"


def test_empty_run_yields_empty_tables():
    df = slot_occupancy([])
    assert list(df.columns) == OCCUPANCY_COLUMNS
    assert df.empty
    assert track_screen_time([]).empty
