from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from posecheck.skeleton.types import JointType


@dataclass(frozen=True)
class ExerciseConfig:
	# Angle between vertical and the hip-centre -> ankle line, in degrees (0..90).
	target_angle_deg: float = 40.0
	# None means 5% of the target angle.
	tolerance_deg: Optional[float] = None
	# Raised leg: "left" / "right". The other ankle is the depth reference.
	leg: str = "left"
	hip_joint: str = "hip_center"
	# Raised ankle must stay within this many metres (z) of the standing ankle; None disables.
	max_depth_offset_m: Optional[float] = 0.05
	# Weakest joint tracking state the check will trust: "inferred" / "tracked".
	min_joint_state: str = "inferred"


@dataclass(frozen=True)
class ColorsConfig:
	background: str = "#000000"
	tracked_bone: str = "#008000"
	invalid_bone: str = "#FF0000"
	inferred_bone: str = "#808080"
	tracked_joint: str = "#44C044"
	inferred_joint: str = "#FF0000"
	body_center: str = "#0000FF"
	clip_edge: str = "#FF0000"


@dataclass(frozen=True)
class RenderConfig:
	# Canvas size the client draws on; used for clip-edge markers.
	width: float = 640.0
	height: float = 480.0
	joint_thickness: float = 3.0
	body_center_thickness: float = 10.0
	clip_bounds_thickness: float = 10.0
	tracked_bone_width: float = 6.0
	invalid_bone_width: float = 6.0
	inferred_bone_width: float = 1.0
	colors: ColorsConfig = field(default_factory=ColorsConfig)


@dataclass(frozen=True)
class SourceConfig:
	backend: str = "none"  # none / replay
	replay_path: str = ""
	fps: float = 30.0
	loop: bool = False


@dataclass(frozen=True)
class AppConfig:
	exercise: ExerciseConfig = field(default_factory=ExerciseConfig)
	render: RenderConfig = field(default_factory=RenderConfig)
	source: SourceConfig = field(default_factory=SourceConfig)


_CONFIG_PATH: Optional[Path] = None
_CONFIG_CACHE: Optional[AppConfig] = None


def _repo_root() -> Path:
	# posecheck/config.py -> repo root is one level up.
	return Path(__file__).resolve().parents[1]


def get_default_config_path() -> Path:
	env = os.getenv("POSECHECK_CONFIG")
	if env:
		return Path(env).expanduser().resolve()
	return _repo_root() / "config.json"


def set_config_path(path: str | Path) -> None:
	"""
	Override the config path and drop the cached config.
	Intended for the CLI and tests; the server normally uses the default path.
	"""
	global _CONFIG_PATH
	global _CONFIG_CACHE
	_CONFIG_PATH = Path(path).expanduser().resolve()
	_CONFIG_CACHE = None


def reset_config() -> None:
	global _CONFIG_PATH
	global _CONFIG_CACHE
	_CONFIG_PATH = None
	_CONFIG_CACHE = None


def _deep_get(d: Dict[str, Any], keys: list[str], default: Any = None) -> Any:
	cur: Any = d
	for k in keys:
		if not isinstance(cur, dict):
			return default
		cur = cur.get(k)
	return cur if cur is not None else default


def _as_bool(v: Any, default: bool) -> bool:
	if isinstance(v, bool):
		return v
	if isinstance(v, (int, float)):
		return bool(v)
	if isinstance(v, str):
		return v.strip().lower() in ("1", "true", "yes", "on")
	return bool(default)


def _as_str(v: Any, default: str = "") -> str:
	return str(v) if v is not None else str(default)


def _as_float(v: Any, default: float) -> float:
	try:
		return float(v)
	except (TypeError, ValueError):
		return float(default)


def _as_positive(v: Any, default: float) -> float:
	x = _as_float(v, default)
	return x if x > 0.0 else float(default)


def _as_optional_nonneg(raw: Dict[str, Any], keys: list[str], default: Optional[float]) -> Optional[float]:
	# Explicit null disables the setting; a missing key keeps the default.
	cur: Any = raw
	for k in keys[:-1]:
		cur = cur.get(k) if isinstance(cur, dict) else None
	if not isinstance(cur, dict) or keys[-1] not in cur:
		return default
	v = cur[keys[-1]]
	if v is None:
		return None
	x = _as_float(v, -1.0)
	return x if x >= 0.0 else default


def _parse_exercise(raw: Dict[str, Any]) -> ExerciseConfig:
	d = ExerciseConfig()
	target = _as_float(_deep_get(raw, ["exercise", "target_angle_deg"], d.target_angle_deg), d.target_angle_deg)
	if not 0.0 <= target <= 90.0:
		target = d.target_angle_deg
	leg = _as_str(_deep_get(raw, ["exercise", "leg"], d.leg), d.leg).strip().lower()
	if leg not in ("left", "right"):
		leg = d.leg
	hip = _as_str(_deep_get(raw, ["exercise", "hip_joint"], d.hip_joint), d.hip_joint).strip().lower() or d.hip_joint
	if hip not in {jt.value for jt in JointType}:
		hip = d.hip_joint
	min_state = _as_str(_deep_get(raw, ["exercise", "min_joint_state"], d.min_joint_state), d.min_joint_state).strip().lower()
	if min_state not in ("inferred", "tracked"):
		min_state = d.min_joint_state
	return ExerciseConfig(
		target_angle_deg=target,
		tolerance_deg=_as_optional_nonneg(raw, ["exercise", "tolerance_deg"], d.tolerance_deg),
		leg=leg,
		hip_joint=hip,
		max_depth_offset_m=_as_optional_nonneg(raw, ["exercise", "max_depth_offset_m"], d.max_depth_offset_m),
		min_joint_state=min_state,
	)


def _parse_render(raw: Dict[str, Any]) -> RenderConfig:
	d = RenderConfig()
	c = ColorsConfig()
	colors = _deep_get(raw, ["render", "colors"], {})
	if not isinstance(colors, dict):
		colors = {}
	return RenderConfig(
		width=_as_positive(_deep_get(raw, ["render", "width"]), d.width),
		height=_as_positive(_deep_get(raw, ["render", "height"]), d.height),
		joint_thickness=_as_positive(_deep_get(raw, ["render", "joint_thickness"]), d.joint_thickness),
		body_center_thickness=_as_positive(_deep_get(raw, ["render", "body_center_thickness"]), d.body_center_thickness),
		clip_bounds_thickness=_as_positive(_deep_get(raw, ["render", "clip_bounds_thickness"]), d.clip_bounds_thickness),
		tracked_bone_width=_as_positive(_deep_get(raw, ["render", "tracked_bone_width"]), d.tracked_bone_width),
		invalid_bone_width=_as_positive(_deep_get(raw, ["render", "invalid_bone_width"]), d.invalid_bone_width),
		inferred_bone_width=_as_positive(_deep_get(raw, ["render", "inferred_bone_width"]), d.inferred_bone_width),
		colors=ColorsConfig(**{k: _as_str(colors.get(k), getattr(c, k)) for k in c.__dataclass_fields__}),
	)


def _parse_source(raw: Dict[str, Any]) -> SourceConfig:
	d = SourceConfig()
	return SourceConfig(
		backend=_as_str(_deep_get(raw, ["source", "backend"], d.backend), d.backend).strip().lower() or d.backend,
		replay_path=_as_str(_deep_get(raw, ["source", "replay_path"], d.replay_path), ""),
		fps=_as_positive(_deep_get(raw, ["source", "fps"]), d.fps),
		loop=_as_bool(_deep_get(raw, ["source", "loop"], d.loop), d.loop),
	)


def load_config(path: Optional[str | Path] = None) -> AppConfig:
	p = Path(path).expanduser().resolve() if path else (_CONFIG_PATH or get_default_config_path())
	if not p.exists():
		# Defaults-only config; app can still run.
		return AppConfig()
	try:
		raw = json.loads(p.read_text(encoding="utf-8"))
	except (OSError, ValueError) as e:
		logging.warning("[Config] %s is unreadable (%s); using defaults", p, e)
		return AppConfig()

	if not isinstance(raw, dict):
		return AppConfig()

	return AppConfig(
		exercise=_parse_exercise(raw),
		render=_parse_render(raw),
		source=_parse_source(raw),
	)


def get_config() -> AppConfig:
	global _CONFIG_CACHE
	if _CONFIG_CACHE is None:
		_CONFIG_CACHE = load_config()
	return _CONFIG_CACHE
