"""Pydantic request/response models for API validation and docs."""
from schemas.requests import (
	EvaluatePayload,
	ExerciseSettingsPayload,
	FramePayload,
	JointPayload,
	SkeletonPayload,
)
from schemas.responses import AngleCheckResponse, ExerciseSettingsResponse

__all__ = [
	"EvaluatePayload",
	"ExerciseSettingsPayload",
	"FramePayload",
	"JointPayload",
	"SkeletonPayload",
	"AngleCheckResponse",
	"ExerciseSettingsResponse",
]
