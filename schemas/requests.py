"""Pydantic request body models for the pose endpoints."""
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class JointPayload(BaseModel):
	"""One joint: sensor-space position in metres plus tracking state."""

	position: List[float] = Field(..., min_length=3, max_length=3, description="[x, y, z] in metres")
	tracking_state: Literal["tracked", "inferred", "not_tracked"] = "tracked"


class SkeletonPayload(BaseModel):
	"""One skeleton. Joint names are snake_case, e.g. 'hip_center', 'ankle_left'."""

	joints: Dict[str, JointPayload] = Field(default_factory=dict)
	tracking_state: Literal["tracked", "position_only", "not_tracked"] = "tracked"
	clipped_edges: List[str] = Field(default_factory=list, description="Any of bottom/top/left/right")
	position: Optional[List[float]] = Field(None, min_length=3, max_length=3, description="Body centre [x, y, z]")
	tracking_id: Optional[int] = None


class FramePayload(BaseModel):
	"""Request body for POST /api/plan. One sensor frame."""

	frame_number: int = 0
	timestamp: Optional[float] = None
	skeletons: List[SkeletonPayload] = Field(default_factory=list)


class EvaluatePayload(BaseModel):
	"""Request body for POST /api/evaluate. Omitted settings fall back to the live exercise."""

	skeleton: SkeletonPayload
	target_angle_deg: Optional[float] = Field(None, description="Target angle from vertical, 0-90 degrees")
	tolerance_deg: Optional[float] = Field(None, description="Allowed error in degrees, >= 0")
	leg: Optional[Literal["left", "right"]] = None


class ExerciseSettingsPayload(BaseModel):
	"""
	Request body for PUT /api/exercise. Only fields present in the body change;
	an explicit null tolerance restores the 5% default and an explicit null
	max_depth_offset_m disables the depth check.
	"""

	target_angle_deg: Optional[float] = None
	tolerance_deg: Optional[float] = None
	leg: Optional[Literal["left", "right"]] = None
	max_depth_offset_m: Optional[float] = None
	min_joint_state: Optional[Literal["inferred", "tracked"]] = None
