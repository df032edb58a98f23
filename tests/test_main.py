"""
Tests for the command-line replay mode
======================================
"""

import json
import logging

import numpy as np
import pytest

from touchless_gestures.main import build_parser, main, read_frames

from conftest import write_json, write_mlp


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def model_files(tmp_path):
    """A model that always answers ("like", 0.9)."""
    model = write_mlp(tmp_path / "model.npz",
                      [(np.zeros((63, 2)), [0.1, 0.9])], output_activation="none")
    labels = write_json(tmp_path / "labels.json", ["dislike", "like"])
    return model, labels


def write_frames(path, records):
    path.write_text("\n".join(json.dumps(r) for r in records) + "\n", encoding="utf-8")
    return str(path)


HAND = [[0.5, 0.5, 0.0]] * 21


class TestReadFrames:

    def test_record_shapes(self, tmp_path):
        path = write_frames(tmp_path / "f.jsonl", [
            HAND,
            {"t_ms": 500, "landmarks": HAND},
            None,
        ])

        frames = list(read_frames(path, fps=10))

        assert frames[0] == (0.0, HAND)
        assert frames[1] == (500.0, HAND)
        assert frames[2] == (200.0, None)

    def test_bad_lines_skipped(self, tmp_path):
        path = tmp_path / "f.jsonl"
        path.write_text("not json\n\n[]\n", encoding="utf-8")

        frames = list(read_frames(str(path)))

        assert len(frames) == 1
        assert frames[0][1] == []

    def test_bad_timestamps(self, tmp_path):
        path = write_frames(tmp_path / "f.jsonl", [
            {"t_ms": None, "landmarks": HAND},
            {"t_ms": "soon", "landmarks": HAND},
            {"t_ms": [1], "landmarks": HAND},
            {"t_ms": "250", "landmarks": HAND},
        ])

        frames = list(read_frames(path, fps=10))

        # null falls back to the frame index, unreadable values are skipped
        assert frames == [(0.0, HAND), (250.0, HAND)]

    def test_replay_survives_bad_records(self, tmp_path, model_files, capsys):
        model, labels = model_files
        records = [{"t_ms": None, "landmarks": HAND}, {"t_ms": "x", "landmarks": HAND},
                   [{"x": 0.5}] * 21]
        records += [{"t_ms": 100 * i, "landmarks": HAND} for i in range(5)]
        frames = write_frames(tmp_path / "frames.jsonl", records)

        code = main(["--model", model, "--labels", labels, "--log-level", "CRITICAL",
                     "replay", frames])

        assert code == 0
        assert len(capsys.readouterr().out.strip().splitlines()) == 1


class TestReplay:

    def test_parser_requires_mode(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_replay_fires_once_per_cooldown(self, tmp_path, model_files, capsys):
        model, labels = model_files
        frames = write_frames(tmp_path / "frames.jsonl",
                              [{"t_ms": i * 100, "landmarks": HAND} for i in range(20)])

        code = main(["--model", model, "--labels", labels, "--log-level", "WARNING",
                     "replay", frames])

        out = capsys.readouterr().out.strip().splitlines()
        assert code == 0
        assert len(out) == 1
        assert "like" in out[0]
        assert "INCREASE_VOLUME" in out[0]

    def test_replay_with_config_override(self, tmp_path, model_files, capsys):
        model, labels = model_files
        override = tmp_path / "override.yaml"
        override.write_text("dispatch:\n  cooldown_ms: 500\n", encoding="utf-8")
        frames = write_frames(tmp_path / "frames.jsonl",
                              [{"t_ms": i * 100, "landmarks": HAND} for i in range(20)])

        code = main(["--config", str(override), "--model", model, "--labels", labels,
                     "--log-level", "WARNING", "replay", frames])

        out = capsys.readouterr().out.strip().splitlines()
        assert code == 0
        # first at 400 ms, then 900, 1400, 1900
        assert len(out) == 4

    def test_threshold_suppresses_events(self, tmp_path, model_files, capsys):
        model, labels = model_files
        frames = write_frames(tmp_path / "frames.jsonl", [HAND] * 10)

        code = main(["--model", model, "--labels", labels, "--threshold", "0.95",
                     "--log-level", "WARNING", "replay", frames])

        assert code == 0
        assert capsys.readouterr().out.strip() == ""

    def test_missing_model_fails(self, tmp_path, capsys):
        labels = write_json(tmp_path / "labels.json", ["like"])
        frames = write_frames(tmp_path / "frames.jsonl", [HAND])

        code = main(["--model", str(tmp_path / "missing.npz"), "--labels", labels,
                     "--log-level", "CRITICAL", "replay", frames, "--load-timeout", "5"])

        assert code == 1
        assert capsys.readouterr().out == ""


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
