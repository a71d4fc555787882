from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import Any, Dict, Iterator, List, Optional


class JointType(str, Enum):
	"""The 20 joints reported by the body-tracking sensor, in sensor order."""

	HIP_CENTER = "hip_center"
	SPINE = "spine"
	SHOULDER_CENTER = "shoulder_center"
	HEAD = "head"
	SHOULDER_LEFT = "shoulder_left"
	ELBOW_LEFT = "elbow_left"
	WRIST_LEFT = "wrist_left"
	HAND_LEFT = "hand_left"
	SHOULDER_RIGHT = "shoulder_right"
	ELBOW_RIGHT = "elbow_right"
	WRIST_RIGHT = "wrist_right"
	HAND_RIGHT = "hand_right"
	HIP_LEFT = "hip_left"
	KNEE_LEFT = "knee_left"
	ANKLE_LEFT = "ankle_left"
	FOOT_LEFT = "foot_left"
	HIP_RIGHT = "hip_right"
	KNEE_RIGHT = "knee_right"
	ANKLE_RIGHT = "ankle_right"
	FOOT_RIGHT = "foot_right"


class JointTrackingState(str, Enum):
	NOT_TRACKED = "not_tracked"
	INFERRED = "inferred"
	TRACKED = "tracked"

	@property
	def rank(self) -> int:
		return _JOINT_STATE_RANK[self]

	def at_least(self, other: "JointTrackingState") -> bool:
		return self.rank >= other.rank


_JOINT_STATE_RANK = {
	JointTrackingState.NOT_TRACKED: 0,
	JointTrackingState.INFERRED: 1,
	JointTrackingState.TRACKED: 2,
}


class SkeletonTrackingState(str, Enum):
	NOT_TRACKED = "not_tracked"
	POSITION_ONLY = "position_only"
	TRACKED = "tracked"


class FrameEdges(IntFlag):
	"""Edges of the sensor's field of view a skeleton is clipped by."""

	NONE = 0
	RIGHT = 1
	LEFT = 2
	TOP = 4
	BOTTOM = 8

	@classmethod
	def from_names(cls, names: Optional[List[str]]) -> "FrameEdges":
		out = cls.NONE
		for n in names or []:
			try:
				out |= cls[str(n).strip().upper()]
			except KeyError:
				raise ValueError(f"unknown frame edge: {n!r}") from None
		return out

	def names(self) -> List[str]:
		return [e.name.lower() for e in (FrameEdges.BOTTOM, FrameEdges.TOP, FrameEdges.LEFT, FrameEdges.RIGHT) if self & e]


@dataclass(frozen=True)
class SkeletonPoint:
	"""
	A position in sensor space (metres).

	x grows to the sensor's left, y grows upwards, z grows away from the sensor.
	"""

	x: float = 0.0
	y: float = 0.0
	z: float = 0.0

	def is_finite(self) -> bool:
		return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)

	def scaled(self, k: float) -> "SkeletonPoint":
		return SkeletonPoint(self.x * k, self.y * k, self.z * k)

	def to_list(self) -> List[float]:
		return [self.x, self.y, self.z]

	@classmethod
	def from_any(cls, v: Any) -> "SkeletonPoint":
		if isinstance(v, SkeletonPoint):
			return v
		if isinstance(v, dict):
			return cls(float(v.get("x", 0.0)), float(v.get("y", 0.0)), float(v.get("z", 0.0)))
		if isinstance(v, (list, tuple)) and len(v) == 3:
			return cls(float(v[0]), float(v[1]), float(v[2]))
		raise ValueError(f"expected [x, y, z] position, got {v!r}")


@dataclass(frozen=True)
class Joint:
	joint_type: JointType
	position: SkeletonPoint
	tracking_state: JointTrackingState = JointTrackingState.TRACKED

	@classmethod
	def not_tracked(cls, joint_type: JointType) -> "Joint":
		return cls(joint_type, SkeletonPoint(), JointTrackingState.NOT_TRACKED)


@dataclass(frozen=True)
class Skeleton:
	"""
	One detected person in one frame.

	Indexing with a JointType never raises: joints the sensor did not report
	come back as a NOT_TRACKED joint at the origin, so callers must check the
	tracking state before trusting a position.
	"""

	joints: Dict[JointType, Joint] = field(default_factory=dict)
	tracking_state: SkeletonTrackingState = SkeletonTrackingState.TRACKED
	clipped_edges: FrameEdges = FrameEdges.NONE
	position: SkeletonPoint = field(default_factory=SkeletonPoint)
	tracking_id: Optional[int] = None

	def __getitem__(self, joint_type: JointType) -> Joint:
		j = self.joints.get(joint_type)
		return j if j is not None else Joint.not_tracked(joint_type)

	def __iter__(self) -> Iterator[Joint]:
		# Sensor order, regardless of the order joints were supplied in.
		for jt in JointType:
			if jt in self.joints:
				yield self.joints[jt]

	def get(self, joint_type: JointType) -> Optional[Joint]:
		return self.joints.get(joint_type)

	@classmethod
	def from_dict(cls, d: Dict[str, Any]) -> "Skeleton":
		if not isinstance(d, dict):
			raise ValueError("skeleton must be an object")
		joints: Dict[JointType, Joint] = {}
		raw_joints = d.get("joints") or {}
		if not isinstance(raw_joints, dict):
			raise ValueError("'joints' must map joint names to joints")
		for name, raw in raw_joints.items():
			try:
				jt = JointType(name)
			except ValueError:
				raise ValueError(f"unknown joint: {name!r}") from None
			if isinstance(raw, dict) and "position" in raw:
				pos = SkeletonPoint.from_any(raw["position"])
				state = JointTrackingState(raw.get("tracking_state") or JointTrackingState.TRACKED.value)
			else:
				pos = SkeletonPoint.from_any(raw)
				state = JointTrackingState.TRACKED
			joints[jt] = Joint(jt, pos, state)
		tid = d.get("tracking_id")
		return cls(
			joints=joints,
			tracking_state=SkeletonTrackingState(d.get("tracking_state") or SkeletonTrackingState.TRACKED.value),
			clipped_edges=FrameEdges.from_names(d.get("clipped_edges")),
			position=SkeletonPoint.from_any(d["position"]) if d.get("position") is not None else SkeletonPoint(),
			tracking_id=int(tid) if tid is not None else None,
		)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"tracking_id": self.tracking_id,
			"tracking_state": self.tracking_state.value,
			"clipped_edges": self.clipped_edges.names(),
			"position": self.position.to_list(),
			"joints": {
				j.joint_type.value: {"position": j.position.to_list(), "tracking_state": j.tracking_state.value}
				for j in self
			},
		}


@dataclass(frozen=True)
class SkeletonFrame:
	"""All skeletons the sensor reported for one frame."""

	skeletons: List[Skeleton] = field(default_factory=list)
	frame_number: int = 0
	timestamp: Optional[float] = None

	@classmethod
	def from_dict(cls, d: Dict[str, Any]) -> "SkeletonFrame":
		if not isinstance(d, dict):
			raise ValueError("frame must be an object")
		raw = d.get("skeletons") or []
		if not isinstance(raw, list):
			raise ValueError("'skeletons' must be a list")
		ts = d.get("timestamp")
		return cls(
			skeletons=[Skeleton.from_dict(s) for s in raw],
			frame_number=int(d.get("frame_number") or 0),
			timestamp=float(ts) if ts is not None else None,
		)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"frame_number": self.frame_number,
			"timestamp": self.timestamp,
			"skeletons": [s.to_dict() for s in self.skeletons],
		}
