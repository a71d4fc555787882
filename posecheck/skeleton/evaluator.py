"""
Leg-raise angle check.

The exercise: stand on one leg and raise the other sideways. The angle we
look for is the one between vertical and the line from the hip centre to the
raised ankle, measured in the sensor's x/y plane:

    angle = atan(|hip.x - ankle.x| / |hip.y - ankle.y|)

Frame-level problems (joints the sensor lost, coincident joints) are reported
as an AngleStatus rather than raised; only bad call arguments raise.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from posecheck import PoseCheckError
from posecheck.skeleton.topology import ANKLES, Bone, LEG_SEGMENTS, normalize_leg, other_leg
from posecheck.skeleton.types import Joint, JointTrackingState, JointType, Skeleton, SkeletonPoint


MAX_TARGET_ANGLE_DEG = 90.0
DEFAULT_TOLERANCE_RATIO = 0.05


class DegenerateGeometryError(PoseCheckError):
	"""Hip and ankle coincide in the x/y plane, so no angle exists."""


class AngleStatus(str, Enum):
	SATISFIED = "satisfied"
	OUT_OF_TOLERANCE = "out_of_tolerance"
	OUT_OF_PLANE = "out_of_plane"
	# "Cannot evaluate"
	NOT_TRACKED = "not_tracked"
	DEGENERATE = "degenerate"


@dataclass(frozen=True)
class AngleCheck:
	status: AngleStatus
	angle_deg: Optional[float] = None
	deviation_deg: Optional[float] = None

	@property
	def satisfied(self) -> bool:
		return self.status is AngleStatus.SATISFIED

	@property
	def evaluable(self) -> bool:
		return self.status not in (AngleStatus.NOT_TRACKED, AngleStatus.DEGENERATE)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"satisfied": self.satisfied,
			"status": self.status.value,
			"angle_deg": self.angle_deg,
			"deviation_deg": self.deviation_deg,
		}


def default_tolerance(target_angle_deg: float) -> float:
	"""5% of the target angle (2 degrees for the usual 40 degree raise)."""
	return abs(float(target_angle_deg)) * DEFAULT_TOLERANCE_RATIO


def validate_target(target_angle_deg: float, tolerance_deg: float) -> None:
	t = float(target_angle_deg)
	tol = float(tolerance_deg)
	if not math.isfinite(t) or t < 0.0 or t > MAX_TARGET_ANGLE_DEG:
		raise ValueError(f"target angle must be within [0, {MAX_TARGET_ANGLE_DEG:g}] degrees, got {target_angle_deg!r}")
	if not math.isfinite(tol) or tol < 0.0:
		raise ValueError(f"tolerance must be a non-negative number of degrees, got {tolerance_deg!r}")


def leg_angle_deg(hip: SkeletonPoint, ankle: SkeletonPoint) -> float:
	"""
	Angle of the hip->ankle segment from vertical, in degrees within [0, 90].

	A horizontal segment (no vertical displacement) is exactly 90 degrees.
	Raises DegenerateGeometryError when the two points coincide in x/y.
	"""
	dx = abs(hip.x - ankle.x)
	dy = abs(hip.y - ankle.y)
	if dy == 0.0:
		if dx == 0.0:
			raise DegenerateGeometryError("hip and ankle coincide")
		return 90.0
	return math.degrees(math.atan(dx / dy)) % 360.0


def _usable(joint: Joint, min_state: JointTrackingState) -> bool:
	return (
		joint.tracking_state is not JointTrackingState.NOT_TRACKED
		and joint.tracking_state.at_least(min_state)
		and joint.position.is_finite()
	)


def check_leg_angle(
	skeleton: Skeleton,
	target_angle_deg: float,
	tolerance_deg: float,
	hip: JointType = JointType.HIP_CENTER,
	ankle: JointType = JointType.ANKLE_LEFT,
	min_state: JointTrackingState = JointTrackingState.INFERRED,
) -> AngleCheck:
	validate_target(target_angle_deg, tolerance_deg)
	if min_state is JointTrackingState.NOT_TRACKED:
		raise ValueError("min_state must be 'inferred' or 'tracked'")

	h = skeleton[hip]
	a = skeleton[ankle]
	if not _usable(h, min_state) or not _usable(a, min_state):
		return AngleCheck(AngleStatus.NOT_TRACKED)

	try:
		angle = leg_angle_deg(h.position, a.position)
	except DegenerateGeometryError:
		return AngleCheck(AngleStatus.DEGENERATE)

	deviation = abs(float(target_angle_deg) - angle)
	# Strict bound: a tolerance of 0 never matches, even on an exact angle.
	status = AngleStatus.SATISFIED if deviation < float(tolerance_deg) else AngleStatus.OUT_OF_TOLERANCE
	return AngleCheck(status, angle_deg=angle, deviation_deg=deviation)


def evaluate(
	skeleton: Skeleton,
	target_angle_deg: float,
	tolerance_deg: float,
	hip: JointType = JointType.HIP_CENTER,
	ankle: JointType = JointType.ANKLE_LEFT,
	min_state: JointTrackingState = JointTrackingState.INFERRED,
) -> bool:
	"""
	True iff the hip->ankle angle is within `tolerance_deg` of `target_angle_deg`.

	Skeletons that cannot be evaluated (lost joints, coincident joints) give
	False; use check_leg_angle() to tell those apart from a wrong pose.
	"""
	return check_leg_angle(skeleton, target_angle_deg, tolerance_deg, hip, ankle, min_state).satisfied


@dataclass(frozen=True)
class LegRaiseEvaluator:
	"""
	The configured exercise: which leg, which angle, how strict.

	On top of the angle check, the raised ankle has to stay level in depth
	with the standing ankle (within `max_depth_offset_m`), otherwise the leg
	is swinging forwards or backwards rather than sideways. Set
	`max_depth_offset_m` to None to skip that check.
	"""

	target_angle_deg: float = 40.0
	tolerance_deg: Optional[float] = None
	leg: str = "left"
	hip: JointType = JointType.HIP_CENTER
	max_depth_offset_m: Optional[float] = 0.05
	min_state: JointTrackingState = JointTrackingState.INFERRED

	def __post_init__(self) -> None:
		object.__setattr__(self, "leg", normalize_leg(self.leg))
		object.__setattr__(self, "hip", JointType(self.hip))
		object.__setattr__(self, "min_state", JointTrackingState(self.min_state))
		validate_target(self.target_angle_deg, self.tolerance)
		if self.min_state is JointTrackingState.NOT_TRACKED:
			raise ValueError("min_state must be 'inferred' or 'tracked'")
		if self.max_depth_offset_m is not None:
			off = float(self.max_depth_offset_m)
			if not math.isfinite(off) or off < 0.0:
				raise ValueError(f"max_depth_offset_m must be >= 0, got {self.max_depth_offset_m!r}")

	@classmethod
	def from_config(cls, cfg) -> "LegRaiseEvaluator":
		return cls(
			target_angle_deg=cfg.target_angle_deg,
			tolerance_deg=cfg.tolerance_deg,
			leg=cfg.leg,
			hip=JointType(cfg.hip_joint),
			max_depth_offset_m=cfg.max_depth_offset_m,
			min_state=JointTrackingState(cfg.min_joint_state),
		)

	@property
	def tolerance(self) -> float:
		if self.tolerance_deg is None:
			return default_tolerance(self.target_angle_deg)
		return float(self.tolerance_deg)

	@property
	def ankle(self) -> JointType:
		return ANKLES[self.leg]

	@property
	def reference_ankle(self) -> JointType:
		return ANKLES[other_leg(self.leg)]

	@property
	def segments(self) -> List[Bone]:
		return list(LEG_SEGMENTS[self.leg])

	def with_settings(self, **changes: Any) -> "LegRaiseEvaluator":
		return replace(self, **changes)

	def evaluate(self, skeleton: Skeleton) -> AngleCheck:
		res = check_leg_angle(
			skeleton,
			self.target_angle_deg,
			self.tolerance,
			hip=self.hip,
			ankle=self.ankle,
			min_state=self.min_state,
		)
		if not res.satisfied or self.max_depth_offset_m is None:
			return res

		ref = skeleton[self.reference_ankle]
		if not _usable(ref, self.min_state):
			return AngleCheck(AngleStatus.NOT_TRACKED, res.angle_deg, res.deviation_deg)
		depth = abs(skeleton[self.ankle].position.z - ref.position.z)
		if depth < float(self.max_depth_offset_m):
			return res
		return AngleCheck(AngleStatus.OUT_OF_PLANE, res.angle_deg, res.deviation_deg)

	def settings(self) -> Dict[str, Any]:
		return {
			"target_angle_deg": float(self.target_angle_deg),
			"tolerance_deg": self.tolerance,
			"leg": self.leg,
			"hip_joint": self.hip.value,
			"ankle_joint": self.ankle.value,
			"max_depth_offset_m": self.max_depth_offset_m,
			"min_joint_state": self.min_state.value,
		}
