import json
import time

import pytest
from fastapi.testclient import TestClient

from posecheck.config import set_config_path
from posecheck.skeleton.source import write_recording
from posecheck.skeleton.types import SkeletonFrame
from server import app

from poses import LEFT_RAISED_40, build_skeleton


@pytest.fixture
def client():
	with TestClient(app) as c:
		yield c


def raised_payload():
	return build_skeleton(LEFT_RAISED_40).to_dict()


def test_status_without_source(client):
	r = client.get("/status")
	assert r.status_code == 200
	body = r.json()
	assert body["source"] == {"name": None, "running": False, "error": None}
	assert body["session"]["frames"] == 0
	assert body["exercise"]["target_angle_deg"] == 40.0
	assert body["exercise"]["tolerance_deg"] == pytest.approx(2.0)


def test_evaluate_uses_live_exercise(client):
	r = client.post("/api/evaluate", json={"skeleton": raised_payload()})
	assert r.status_code == 200
	body = r.json()
	assert body["satisfied"] is True
	assert body["status"] == "satisfied"
	assert body["angle_deg"] == pytest.approx(40.0, abs=0.05)
	assert body["tolerance_deg"] == pytest.approx(2.0)


def test_evaluate_overrides(client):
	r = client.post("/api/evaluate", json={"skeleton": raised_payload(), "target_angle_deg": 60})
	body = r.json()
	assert body["satisfied"] is False
	assert body["status"] == "out_of_tolerance"
	assert body["tolerance_deg"] == pytest.approx(3.0)

	r = client.post("/api/evaluate", json={"skeleton": raised_payload(), "leg": "right"})
	assert r.json()["status"] == "out_of_tolerance"

	# Overrides never change the live exercise.
	assert client.get("/api/exercise").json()["target_angle_deg"] == 40.0


def test_evaluate_rejects_bad_input(client):
	r = client.post("/api/evaluate", json={"skeleton": raised_payload(), "target_angle_deg": 95})
	assert r.status_code == 400
	r = client.post("/api/evaluate", json={"skeleton": {"joints": {"tail": {"position": [0, 0, 0]}}}})
	assert r.status_code == 400
	r = client.post("/api/evaluate", json={"skeleton": {"joints": {"hip_center": {"position": [0, 0]}}}})
	assert r.status_code == 422


def test_plan_endpoint(client):
	frame = {"frame_number": 3, "skeletons": [raised_payload(), {"tracking_state": "position_only", "position": [1, 0, 3]}]}
	r = client.post("/api/plan", json=frame)
	assert r.status_code == 200
	body = r.json()
	plan = body["plan"]
	assert plan["frame_number"] == 3
	assert plan["skeletons"][0]["check"]["satisfied"] is True
	assert plan["skeletons"][1]["center"] == [1.0, 0.0, 3.0]
	assert body["palette"]["bones"]["invalid"]["color"] == "#FF0000"
	assert client.get("/status").json()["session"]["frames"] == 0


def test_put_exercise_changes_only_given_fields(client):
	assert client.put("/api/exercise", json={"tolerance_deg": 4}).json()["tolerance_deg"] == 4.0
	r = client.put("/api/exercise", json={"target_angle_deg": 30})
	assert r.status_code == 200
	body = r.json()
	assert body["target_angle_deg"] == 30.0
	assert body["tolerance_deg"] == pytest.approx(1.5)
	assert body["leg"] == "left"
	assert body["max_depth_offset_m"] == 0.05

	r = client.put("/api/exercise", json={"leg": "right", "max_depth_offset_m": None, "min_joint_state": "tracked"})
	body = r.json()
	assert body["target_angle_deg"] == 30.0
	assert body["ankle_joint"] == "ankle_right"
	assert body["max_depth_offset_m"] is None
	assert body["min_joint_state"] == "tracked"
	assert client.get("/api/exercise").json() == body


@pytest.mark.parametrize(
	"payload",
	[{"target_angle_deg": None}, {"leg": None}, {"min_joint_state": None}, {"target_angle_deg": -1}, {"tolerance_deg": -0.5}],
)
def test_put_exercise_rejects_bad_settings(client, payload):
	assert client.put("/api/exercise", json=payload).status_code == 400
	assert client.get("/api/exercise").json()["target_angle_deg"] == 40.0


def test_ws_hello(client):
	with client.websocket_connect("/ws") as ws:
		msg = ws.receive_json()
	assert msg["type"] == "hello"
	assert msg["exercise"]["leg"] == "left"
	assert msg["palette"]["width"] == 640.0
	assert msg["stats"]["frames"] == 0


def test_replay_source_from_config(tmp_path):
	rec = tmp_path / "rec.jsonl"
	write_recording([SkeletonFrame(skeletons=[build_skeleton(LEFT_RAISED_40)], frame_number=1)], rec)
	cfg = tmp_path / "config.json"
	cfg.write_text(json.dumps({"source": {"backend": "replay", "replay_path": str(rec), "fps": 1000}}), encoding="utf-8")
	set_config_path(cfg)
	with TestClient(app) as c:
		body = c.get("/status").json()
	assert body["source"]["name"] == "replay"
	assert body["source"]["error"] is None


def test_unknown_backend_is_reported(tmp_path):
	cfg = tmp_path / "config.json"
	cfg.write_text(json.dumps({"source": {"backend": "kinect"}}), encoding="utf-8")
	set_config_path(cfg)
	with TestClient(app) as c:
		body = c.get("/status").json()
	assert body["source"]["name"] is None
	assert "kinect" in body["source"]["error"]


def replay_config(tmp_path, n_frames, loop, fps):
	rec = tmp_path / "rec.jsonl"
	write_recording(
		[SkeletonFrame(skeletons=[build_skeleton(LEFT_RAISED_40)], frame_number=i + 1) for i in range(n_frames)],
		rec,
	)
	cfg = tmp_path / "config.json"
	cfg.write_text(
		json.dumps({"source": {"backend": "replay", "replay_path": str(rec), "fps": fps, "loop": loop}}),
		encoding="utf-8",
	)
	set_config_path(cfg)


def test_frame_plans_are_broadcast_over_ws(tmp_path):
	replay_config(tmp_path, 2, loop=True, fps=100)
	with TestClient(app) as c:
		with c.websocket_connect("/ws") as ws:
			assert ws.receive_json()["type"] == "hello"
			msg = ws.receive_json()
			while msg["type"] != "frame_plan":
				msg = ws.receive_json()
	plan = msg["plan"]
	assert plan["frame_number"] in (1, 2)
	assert plan["skeletons"][0]["check"]["status"] == "satisfied"


def test_pump_stops_at_end_of_recording_and_shutdown_stops_source(tmp_path):
	replay_config(tmp_path, 3, loop=False, fps=1000)
	with TestClient(app) as c:
		for _ in range(500):
			body = c.get("/status").json()
			if body["debug"].get("last_frame_number") == 3 and body["session"]["frames"] == 3:
				break
			time.sleep(0.01)
		assert body["session"]["frames"] == 3
		assert body["session"]["satisfied"] == 3
		assert body["source"]["running"] is True
		state = app.state.state
	assert state.pump_task is None
	assert state.session.is_running is False
	assert state.session.frames == 3
