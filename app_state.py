"""
Explicit app state: single source of truth for the runtime lifecycle.
Created in lifespan, attached to app.state.state; injected into routes via Depends(get_state).
"""
from typing import Any, Callable, Dict, Optional

from posecheck.config import AppConfig
from posecheck.session import PoseSession


class AppState:
	"""
	Holds all runtime state for the app. Populated in server lifespan; the
	frame pump receives this instance as argument.
	"""
	# WebSocket manager (set at app load)
	manager: Any = None

	# Config and the live session (owns the skeleton source and the evaluator)
	cfg: Optional[AppConfig] = None
	session: Optional[PoseSession] = None

	# Background task pumping frames from the source (set in lifespan)
	pump_task: Any = None

	# Last error raised while starting or pumping the source
	source_error: Optional[str] = None

	# Debug counters
	dbg: Dict[str, Any]

	# Helpers (callables set in server after creation)
	log_to_clients: Optional[Callable[[str], None]] = None

	def __init__(self) -> None:
		self.dbg = {}
