import json
from pathlib import Path

import pandas as pd
import pytest

from bubbletrack.config import BubbleConfig, load_config
from bubbletrack.io_utils import dump_detection_log, load_detection_log, load_slot_frames
from bubbletrack.types import Box
from scripts import replay_detections


def _write_log(path: Path, records) -> Path:
    with path.open("w", encoding="utf-8") as fh:
        for record in records:
            fh.write(json.dumps(record) + "\n")
    return path


def test_parse_args_overrides():
    args = replay_detections.parse_args(["log.jsonl", "--policy", "sticky-random", "--num-slots", "2", "--seed", "4"])
    assert args.policy == "sticky-random"
    assert args.num_slots == 2
    assert args.seed == 4
    assert args.detections == Path("log.jsonl")


def test_replay_writes_slots_and_summaries(tmp_path: Path):
    log = _write_log(
        tmp_path / "session.jsonl",
        [
            {"timestamp_ms": 0, "detections": [{"x": 10, "y": 10, "width": 50, "height": 50}]},
            {"timestamp_ms": 20, "detections": [{"x": 12, "y": 11, "width": 50, "height": 50}]},
            {"timestamp_ms": 600, "detections": []},
        ],
    )
    out_dir = tmp_path / "out"

    replay_detections.main([str(log), "--output-dir", str(out_dir), "--config", str(tmp_path / "none.yaml")])

    frames = load_slot_frames(out_dir / "session-slots.jsonl")
    assert [frame.track_ids for frame in frames] == [(0, None, None), (0, None, None), (None, None, None)]
    assert frames[1].boxes[0] == Box(12, 11, 50, 50)

    occupancy = pd.read_csv(out_dir / "session-occupancy.csv")
    assert list(occupancy["name"]) == ["winner", "second", "third"]
    assert occupancy.loc[0, "shown_ms"] == 600.0

    tracks = pd.read_csv(out_dir / "session-tracks.csv")
    assert list(tracks["track_id"]) == [0]

    assert load_config(out_dir / "session-config.yaml") == BubbleConfig()


def test_detection_log_skips_blank_lines_and_reports_bad_ones(tmp_path: Path):
    good = tmp_path / "good.jsonl"
    good.write_text('{"timestamp_ms": 5, "detections": []}\n\n{"timestamp_ms": 9}\n', encoding="utf-8")
    assert load_detection_log(good) == [(5.0, []), (9.0, [])]

    bad = tmp_path / "bad.jsonl"
    bad.write_text('{"timestamp_ms": 5, "detections": []}\n{"detections": []}\n', encoding="utf-8")
    with pytest.raises(ValueError, match=":2:"):
        load_detection_log(bad)


def test_saved_detection_log_replays_identically(tmp_path: Path):
    cycles = [(0.0, [Box(1.0, 2.0, 30.0, 40.0)]), (50.0, [])]
    path = tmp_path / "saved.jsonl"
    dump_detection_log(path, cycles)
    assert load_detection_log(path) == cycles


def test_replay_records_resolved_config_with_overrides(tmp_path: Path):
    log = _write_log(tmp_path / "crowd.jsonl", [{"timestamp_ms": 0, "detections": []}])
    out_dir = tmp_path / "out"

    replay_detections.main(
        [str(log), "--output-dir", str(out_dir), "--config", str(tmp_path / "none.yaml"), "--num-slots", "5", "--seed", "2"]
    )

    saved = load_config(out_dir / "crowd-config.yaml")
    assert saved.num_slots == 5
    assert saved.seed == 2
    assert len(saved.slots) == 5
