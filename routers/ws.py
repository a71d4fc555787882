"""WebSocket endpoint and ConnectionManager. Route: /ws (frame plans + log lines)."""
import asyncio
import json
from typing import Any, Dict, Optional, Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

router = APIRouter(tags=["ws"])


class ConnectionManager:
	def __init__(self) -> None:
		self._clients: Set[WebSocket] = set()
		self._lock = asyncio.Lock()

	def reset(self) -> None:
		"""Forget all clients; called on app startup so the lock belongs to the serving loop."""
		self._clients = set()
		self._lock = asyncio.Lock()

	@property
	def client_count(self) -> int:
		return len(self._clients)

	async def connect(self, websocket: WebSocket, greeting: Optional[Dict[str, Any]] = None) -> None:
		await websocket.accept()
		# Greeting goes out before any broadcast can reach this client.
		if greeting is not None:
			await websocket.send_text(json.dumps(greeting, separators=(",", ":")))
		async with self._lock:
			self._clients.add(websocket)

	async def disconnect(self, websocket: WebSocket) -> None:
		async with self._lock:
			self._clients.discard(websocket)

	async def broadcast_json(self, message: Dict[str, Any]) -> None:
		payload = json.dumps(message, separators=(",", ":"))
		async with self._lock:
			clients = list(self._clients)
		if not clients:
			return
		results = await asyncio.gather(*(ws.send_text(payload) for ws in clients), return_exceptions=True)
		dead = [ws for ws, r in zip(clients, results) if isinstance(r, Exception)]
		if dead:
			async with self._lock:
				for ws in dead:
					self._clients.discard(ws)


manager = ConnectionManager()


def _hello(websocket: WebSocket) -> Dict[str, Any]:
	state = getattr(websocket.app.state, "state", None)
	session = getattr(state, "session", None)
	if session is None:
		return {"type": "hello"}
	return {
		"type": "hello",
		"exercise": session.evaluator.settings(),
		"palette": session.palette.to_dict(),
		"stats": session.stats(),
	}


@router.websocket("/ws")
async def ws_endpoint(websocket: WebSocket):
	"""
	Push-only channel. Messages:
	  {"type": "hello", "exercise": {...}, "palette": {...}, "stats": {...}}  once, on connect
	  {"type": "frame_plan", "plan": {...}}  per processed frame
	  {"type": "log", "msg": "..."}
	Anything the client sends is ignored.
	"""
	await manager.connect(websocket, greeting=_hello(websocket))
	try:
		while True:
			await websocket.receive_text()
	except WebSocketDisconnect:
		pass
	finally:
		await manager.disconnect(websocket)
