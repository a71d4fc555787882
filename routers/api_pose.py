"""Pose API. Routes: /api/evaluate, /api/plan, /api/exercise."""
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from deps import get_session
from posecheck.session import PoseSession
from posecheck.skeleton.render_plan import plan_frame
from posecheck.skeleton.types import JointTrackingState, Skeleton, SkeletonFrame
from schemas.requests import EvaluatePayload, ExerciseSettingsPayload, FramePayload
from schemas.responses import AngleCheckResponse, ExerciseSettingsResponse

router = APIRouter(tags=["api_pose"])


@router.post("/api/evaluate", response_model=AngleCheckResponse)
async def evaluate_endpoint(payload: EvaluatePayload, session: PoseSession = Depends(get_session)):
	"""Check one skeleton against the live exercise, optionally overriding angle/tolerance/leg."""
	changes: Dict[str, Any] = {}
	if payload.target_angle_deg is not None:
		changes["target_angle_deg"] = payload.target_angle_deg
		changes["tolerance_deg"] = None
	if payload.tolerance_deg is not None:
		changes["tolerance_deg"] = payload.tolerance_deg
	if payload.leg is not None:
		changes["leg"] = payload.leg
	try:
		evaluator = session.evaluator.with_settings(**changes) if changes else session.evaluator
		skeleton = Skeleton.from_dict(payload.skeleton.model_dump())
	except ValueError as e:
		raise HTTPException(status_code=400, detail=str(e))

	check = evaluator.evaluate(skeleton)
	return {
		**check.to_dict(),
		"target_angle_deg": float(evaluator.target_angle_deg),
		"tolerance_deg": evaluator.tolerance,
	}


@router.post("/api/plan")
async def plan_endpoint(payload: FramePayload, session: PoseSession = Depends(get_session)):
	"""Render plan for one frame. Does not touch the live session counters."""
	try:
		frame = SkeletonFrame.from_dict(payload.model_dump())
	except ValueError as e:
		raise HTTPException(status_code=400, detail=str(e))
	plan = plan_frame(frame, session.evaluator, session.palette)
	return {"plan": plan.to_dict(), "palette": session.palette.to_dict()}


@router.get("/api/exercise", response_model=ExerciseSettingsResponse)
async def get_exercise_endpoint(session: PoseSession = Depends(get_session)):
	return session.evaluator.settings()


@router.put("/api/exercise", response_model=ExerciseSettingsResponse)
async def put_exercise_endpoint(payload: ExerciseSettingsPayload, session: PoseSession = Depends(get_session)):
	"""Update the live exercise. Takes effect from the next frame."""
	changes: Dict[str, Any] = {k: getattr(payload, k) for k in payload.model_fields_set}
	if changes.get("target_angle_deg", 0.0) is None:
		raise HTTPException(status_code=400, detail="target_angle_deg cannot be null")
	if "target_angle_deg" in changes and "tolerance_deg" not in changes:
		changes["tolerance_deg"] = None
	if "leg" in changes and changes["leg"] is None:
		raise HTTPException(status_code=400, detail="leg cannot be null")
	if "min_joint_state" in changes:
		if changes["min_joint_state"] is None:
			raise HTTPException(status_code=400, detail="min_joint_state cannot be null")
		changes["min_state"] = JointTrackingState(changes.pop("min_joint_state"))
	try:
		evaluator = session.evaluator.with_settings(**changes)
	except ValueError as e:
		raise HTTPException(status_code=400, detail=str(e))
	session.set_evaluator(evaluator)
	return evaluator.settings()
