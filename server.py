"""
posecheck service: streams render plans for the configured skeleton source over /ws
and exposes the evaluator over HTTP.

Run with: uvicorn server:app --host 0.0.0.0 --port 8000
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app_state import AppState
from deps import get_state
from posecheck import __version__
from posecheck.config import get_config
from posecheck.session import PoseSession
from posecheck.skeleton.evaluator import LegRaiseEvaluator
from posecheck.skeleton.render_plan import RenderPalette
from posecheck.skeleton.source import get_skeleton_source
from routers import api_pose, ws
from routers.ws import manager


# Server event loop, for log lines emitted from executor threads.
_main_loop: Optional[asyncio.AbstractEventLoop] = None


def _log_to_clients(message: str) -> None:
	"""
	Send a log line to all connected WebSocket clients (and the server log).
	Fire-and-forget; safe to call from non-async code and from worker threads.
	"""
	logging.info(message)
	msg = {"type": "log", "msg": message}
	try:
		asyncio.get_running_loop().create_task(manager.broadcast_json(msg))
	except RuntimeError:
		loop = _main_loop
		if loop is not None and loop.is_running():
			loop.call_soon_threadsafe(lambda: loop.create_task(manager.broadcast_json(msg)))


async def _pump_frames(state: AppState) -> None:
	"""
	Background task: read frames from the session's source at the configured
	rate and broadcast each render plan. Ends when the source is exhausted.
	"""
	session = state.session
	if session is None or not session.is_running:
		return
	interval = 1.0 / float(state.cfg.source.fps if state.cfg else 30.0)
	loop = asyncio.get_running_loop()
	try:
		while True:
			# Blocking read.
			plan = await loop.run_in_executor(None, session.step)
			if plan is None:
				_log_to_clients(f"[Session] source exhausted after {session.frames} frame(s)")
				break
			state.dbg["last_frame_number"] = plan.frame_number
			await manager.broadcast_json({"type": "frame_plan", "plan": plan.to_dict()})
			await asyncio.sleep(interval)
	except asyncio.CancelledError:
		raise
	except Exception as e:
		state.source_error = repr(e)
		logging.exception("[Session] frame pump failed")
		_log_to_clients(f"[Session] frame pump failed: {e!r}")


def _build_session(state: AppState) -> PoseSession:
	cfg = state.cfg or get_config()
	evaluator = LegRaiseEvaluator.from_config(cfg.exercise)
	palette = RenderPalette.from_config(cfg.render)
	source = None
	try:
		source = get_skeleton_source(cfg)
	except ValueError as e:
		state.source_error = str(e)
		logging.warning("[Source] %s; running without a source", e)
	return PoseSession(source, evaluator, palette, logger=_log_to_clients)


@asynccontextmanager
async def lifespan(app: FastAPI):
	global _main_loop
	_main_loop = asyncio.get_running_loop()
	state = AppState()
	manager.reset()
	state.manager = manager
	state.cfg = get_config()
	state.log_to_clients = _log_to_clients
	state.session = _build_session(state)
	app.state.state = state

	if state.session.source is not None:
		try:
			state.session.start()
			state.pump_task = asyncio.create_task(_pump_frames(state))
		except (OSError, ValueError) as e:
			state.source_error = str(e)
			logging.warning("[Source] failed to start: %s", e)

	try:
		yield
	finally:
		if state.pump_task:
			state.pump_task.cancel()
			try:
				await state.pump_task
			except asyncio.CancelledError:
				pass
		state.pump_task = None
		state.session.stop()


app = FastAPI(title="posecheck", version=__version__, lifespan=lifespan)
app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)
app.include_router(api_pose.router)
app.include_router(ws.router)


@app.get("/status")
async def status(state: AppState = Depends(get_state)):
	"""Version, source and session counters, and the live exercise settings."""
	session: Optional[PoseSession] = state.session
	return {
		"version": __version__,
		"source": {
			"name": session.source.name() if session and session.source else None,
			"running": bool(session and session.is_running),
			"error": state.source_error,
		},
		"session": session.stats() if session else None,
		"exercise": session.evaluator.settings() if session else None,
		"ws_clients": manager.client_count,
		"debug": dict(state.dbg),
	}
