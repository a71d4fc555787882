"""
FastAPI dependencies. Use Depends(get_state) in route handlers to receive AppState.
"""
from fastapi import HTTPException, Request

from app_state import AppState
from posecheck.session import PoseSession


def get_state(request: Request) -> AppState:
	"""Return the app state instance attached in lifespan."""
	return request.app.state.state


def get_session(request: Request) -> PoseSession:
	"""Return the live session; 503 until lifespan has created it."""
	session = get_state(request).session
	if session is None:
		raise HTTPException(status_code=503, detail="Server not ready")
	return session
