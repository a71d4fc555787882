"""Pydantic response models for API docs (optional; routes may return dicts)."""
from typing import Optional

from pydantic import BaseModel


class AngleCheckResponse(BaseModel):
	"""Response from POST /api/evaluate."""

	satisfied: bool
	status: str
	angle_deg: Optional[float] = None
	deviation_deg: Optional[float] = None
	target_angle_deg: float
	tolerance_deg: float


class ExerciseSettingsResponse(BaseModel):
	"""Response from GET/PUT /api/exercise."""

	target_angle_deg: float
	tolerance_deg: float
	leg: str
	hip_joint: str
	ankle_joint: str
	max_depth_offset_m: Optional[float] = None
	min_joint_state: str
