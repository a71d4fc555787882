"""
Bone and joint colorization.

Turns a skeleton plus the exercise verdict into a flat list of things to
draw. Nothing here knows how to draw: positions stay in sensor space and the
client maps them to the screen and picks pens from the palette.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from posecheck.config import RenderConfig
from posecheck.skeleton.evaluator import AngleCheck, LegRaiseEvaluator
from posecheck.skeleton.topology import BONES, Bone
from posecheck.skeleton.types import (
	FrameEdges,
	JointTrackingState,
	JointType,
	Skeleton,
	SkeletonFrame,
	SkeletonPoint,
	SkeletonTrackingState,
)


class BoneStyle(str, Enum):
	TRACKED = "tracked"
	INVALID = "invalid"
	INFERRED = "inferred"


class JointStyle(str, Enum):
	TRACKED = "tracked"
	INFERRED = "inferred"


@dataclass(frozen=True)
class Pen:
	color: str
	width: float

	def to_dict(self) -> Dict[str, Any]:
		return {"color": self.color, "width": self.width}


@dataclass(frozen=True)
class RenderPalette:
	bones: Dict[BoneStyle, Pen]
	joints: Dict[JointStyle, Pen]
	body_center: Pen
	clip_edge: str
	background: str
	width: float = 640.0
	height: float = 480.0
	clip_bounds_thickness: float = 10.0

	@classmethod
	def from_config(cls, cfg: Optional[RenderConfig] = None) -> "RenderPalette":
		cfg = cfg or RenderConfig()
		c = cfg.colors
		return cls(
			bones={
				BoneStyle.TRACKED: Pen(c.tracked_bone, cfg.tracked_bone_width),
				BoneStyle.INVALID: Pen(c.invalid_bone, cfg.invalid_bone_width),
				BoneStyle.INFERRED: Pen(c.inferred_bone, cfg.inferred_bone_width),
			},
			joints={
				JointStyle.TRACKED: Pen(c.tracked_joint, cfg.joint_thickness),
				JointStyle.INFERRED: Pen(c.inferred_joint, cfg.joint_thickness),
			},
			body_center=Pen(c.body_center, cfg.body_center_thickness),
			clip_edge=c.clip_edge,
			background=c.background,
			width=cfg.width,
			height=cfg.height,
			clip_bounds_thickness=cfg.clip_bounds_thickness,
		)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"background": self.background,
			"width": self.width,
			"height": self.height,
			"bones": {k.value: v.to_dict() for k, v in self.bones.items()},
			"joints": {k.value: v.to_dict() for k, v in self.joints.items()},
			"body_center": self.body_center.to_dict(),
			"clip_edge": self.clip_edge,
		}


@dataclass(frozen=True)
class BoneStroke:
	start: JointType
	end: JointType
	style: BoneStyle
	start_position: SkeletonPoint
	end_position: SkeletonPoint

	def to_dict(self) -> Dict[str, Any]:
		return {
			"start": self.start.value,
			"end": self.end.value,
			"style": self.style.value,
			"start_position": self.start_position.to_list(),
			"end_position": self.end_position.to_list(),
		}


@dataclass(frozen=True)
class JointMark:
	joint: JointType
	style: JointStyle
	position: SkeletonPoint

	def to_dict(self) -> Dict[str, Any]:
		return {"joint": self.joint.value, "style": self.style.value, "position": self.position.to_list()}


@dataclass(frozen=True)
class EdgeMarker:
	"""Canvas rectangle flagging a field-of-view edge the skeleton is cut by."""

	edge: str
	x: float
	y: float
	width: float
	height: float

	def to_dict(self) -> Dict[str, Any]:
		return {"edge": self.edge, "x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class SkeletonPlan:
	tracking_id: Optional[int]
	tracking_state: SkeletonTrackingState
	check: Optional[AngleCheck] = None
	bones: List[BoneStroke] = field(default_factory=list)
	joints: List[JointMark] = field(default_factory=list)
	edges: List[EdgeMarker] = field(default_factory=list)
	center: Optional[SkeletonPoint] = None

	def to_dict(self) -> Dict[str, Any]:
		return {
			"tracking_id": self.tracking_id,
			"tracking_state": self.tracking_state.value,
			"check": self.check.to_dict() if self.check is not None else None,
			"bones": [b.to_dict() for b in self.bones],
			"joints": [j.to_dict() for j in self.joints],
			"edges": [e.to_dict() for e in self.edges],
			"center": self.center.to_list() if self.center is not None else None,
		}


@dataclass(frozen=True)
class FramePlan:
	frame_number: int
	timestamp: Optional[float]
	skeletons: List[SkeletonPlan] = field(default_factory=list)

	@property
	def checks(self) -> List[AngleCheck]:
		return [s.check for s in self.skeletons if s.check is not None]

	def to_dict(self) -> Dict[str, Any]:
		return {
			"frame_number": self.frame_number,
			"timestamp": self.timestamp,
			"skeletons": [s.to_dict() for s in self.skeletons],
		}


def bone_style(skeleton: Skeleton, bone: Bone, valid: bool = True) -> Optional[BoneStyle]:
	"""
	Style for one bone, or None when it should not be drawn.

	Bones are only drawn solid when both ends are tracked; `valid` picks
	between the tracked and invalid pen for those.
	"""
	s0 = skeleton[bone[0]].tracking_state
	s1 = skeleton[bone[1]].tracking_state
	if s0 is JointTrackingState.NOT_TRACKED or s1 is JointTrackingState.NOT_TRACKED:
		return None
	if s0 is JointTrackingState.INFERRED and s1 is JointTrackingState.INFERRED:
		return None
	if s0 is JointTrackingState.TRACKED and s1 is JointTrackingState.TRACKED:
		return BoneStyle.TRACKED if valid else BoneStyle.INVALID
	return BoneStyle.INFERRED


def joint_style(state: JointTrackingState) -> Optional[JointStyle]:
	if state is JointTrackingState.TRACKED:
		return JointStyle.TRACKED
	if state is JointTrackingState.INFERRED:
		return JointStyle.INFERRED
	return None


def clip_edge_markers(edges: FrameEdges, palette: RenderPalette) -> List[EdgeMarker]:
	w, h, t = palette.width, palette.height, palette.clip_bounds_thickness
	rects: Dict[FrameEdges, Tuple[float, float, float, float]] = {
		FrameEdges.BOTTOM: (0.0, h - t, w, t),
		FrameEdges.TOP: (0.0, 0.0, w, t),
		FrameEdges.LEFT: (0.0, 0.0, t, h),
		FrameEdges.RIGHT: (w - t, 0.0, t, h),
	}
	out = []
	for edge, (x, y, rw, rh) in rects.items():
		if edges & edge:
			out.append(EdgeMarker(edge.name.lower(), x, y, rw, rh))
	return out


def plan_skeleton(skeleton: Skeleton, evaluator: LegRaiseEvaluator, palette: RenderPalette) -> SkeletonPlan:
	edges = clip_edge_markers(skeleton.clipped_edges, palette)

	if skeleton.tracking_state is SkeletonTrackingState.POSITION_ONLY:
		return SkeletonPlan(skeleton.tracking_id, skeleton.tracking_state, edges=edges, center=skeleton.position)
	if skeleton.tracking_state is not SkeletonTrackingState.TRACKED:
		return SkeletonPlan(skeleton.tracking_id, skeleton.tracking_state, edges=edges)

	check = evaluator.evaluate(skeleton)
	governed = set(evaluator.segments)

	bones: List[BoneStroke] = []
	for bone in BONES:
		style = bone_style(skeleton, bone, valid=check.satisfied if bone in governed else True)
		if style is None:
			continue
		bones.append(BoneStroke(bone[0], bone[1], style, skeleton[bone[0]].position, skeleton[bone[1]].position))

	joints: List[JointMark] = []
	for j in skeleton:
		style = joint_style(j.tracking_state)
		if style is not None:
			joints.append(JointMark(j.joint_type, style, j.position))

	return SkeletonPlan(skeleton.tracking_id, skeleton.tracking_state, check=check, bones=bones, joints=joints, edges=edges)


def plan_frame(frame: SkeletonFrame, evaluator: LegRaiseEvaluator, palette: RenderPalette) -> FramePlan:
	return FramePlan(
		frame_number=frame.frame_number,
		timestamp=frame.timestamp,
		skeletons=[plan_skeleton(s, evaluator, palette) for s in frame.skeletons],
	)
