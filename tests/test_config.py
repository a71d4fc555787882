import json

import pytest

from posecheck.config import AppConfig, get_config, load_config, set_config_path
from posecheck.skeleton.evaluator import LegRaiseEvaluator


def write_config(tmp_path, data):
	p = tmp_path / "config.json"
	p.write_text(json.dumps(data) if not isinstance(data, str) else data, encoding="utf-8")
	return p


def test_missing_file_gives_defaults(tmp_path):
	cfg = load_config(tmp_path / "nope.json")
	assert cfg == AppConfig()
	assert cfg.exercise.target_angle_deg == 40.0
	assert cfg.exercise.tolerance_deg is None
	assert cfg.exercise.leg == "left"
	assert cfg.exercise.max_depth_offset_m == 0.05
	assert cfg.render.width == 640.0
	assert cfg.source.backend == "none"


@pytest.mark.parametrize("text", ["{not json", "[1, 2, 3]"])
def test_malformed_file_gives_defaults(tmp_path, text):
	assert load_config(write_config(tmp_path, text)) == AppConfig()


def test_values_are_read(tmp_path):
	p = write_config(
		tmp_path,
		{
			"exercise": {
				"target_angle_deg": 30,
				"tolerance_deg": 1.5,
				"leg": "Right",
				"max_depth_offset_m": None,
				"min_joint_state": "tracked",
			},
			"render": {"width": 800, "colors": {"invalid_bone": "#AA0000"}},
			"source": {"backend": "Replay", "replay_path": "rec.jsonl", "fps": 15, "loop": "yes"},
		},
	)
	cfg = load_config(p)
	assert cfg.exercise.target_angle_deg == 30.0
	assert cfg.exercise.tolerance_deg == 1.5
	assert cfg.exercise.leg == "right"
	assert cfg.exercise.max_depth_offset_m is None
	assert cfg.exercise.min_joint_state == "tracked"
	assert cfg.render.width == 800.0
	assert cfg.render.height == 480.0
	assert cfg.render.colors.invalid_bone == "#AA0000"
	assert cfg.render.colors.tracked_bone == "#008000"
	assert cfg.source.backend == "replay"
	assert cfg.source.fps == 15.0
	assert cfg.source.loop is True


def test_invalid_values_fall_back_per_field(tmp_path):
	p = write_config(
		tmp_path,
		{
			"exercise": {
				"target_angle_deg": 120,
				"tolerance_deg": -2,
				"leg": "middle",
				"hip_joint": "tail",
				"max_depth_offset_m": "far",
				"min_joint_state": "not_tracked",
			},
			"render": {"width": -5, "clip_bounds_thickness": "thick"},
			"source": {"fps": 0},
		},
	)
	cfg = load_config(p)
	assert cfg.exercise == AppConfig().exercise
	assert cfg.render.width == 640.0
	assert cfg.render.clip_bounds_thickness == 10.0
	assert cfg.source.fps == 30.0


def test_loaded_config_always_builds_an_evaluator(tmp_path):
	p = write_config(tmp_path, {"exercise": {"target_angle_deg": 90, "leg": "r", "hip_joint": "spine"}})
	ev = LegRaiseEvaluator.from_config(load_config(p).exercise)
	assert ev.target_angle_deg == 90.0
	assert ev.tolerance == pytest.approx(4.5)
	assert ev.hip.value == "spine"


def test_set_config_path_resets_cache(tmp_path):
	first = get_config()
	assert first == AppConfig()
	set_config_path(write_config(tmp_path, {"exercise": {"target_angle_deg": 25}}))
	assert get_config().exercise.target_angle_deg == 25.0
	assert get_config() is get_config()


def test_env_var_points_at_config(tmp_path, monkeypatch):
	p = write_config(tmp_path, {"source": {"backend": "replay", "replay_path": "x.jsonl"}})
	monkeypatch.setenv("POSECHECK_CONFIG", str(p))
	assert load_config().source.replay_path == "x.jsonl"
