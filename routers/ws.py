"""WebSocket endpoint and ConnectionManager. Route: /ws."""
import asyncio
import json
import logging
from typing import Any, Dict, Optional, Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ws"])


class ConnectionManager:
	def __init__(self) -> None:
		self._clients: Set[WebSocket] = set()
		self._lock = asyncio.Lock()
		self._pending: Set[asyncio.Task] = set()
		self._loop: Optional[asyncio.AbstractEventLoop] = None

	async def connect(self, websocket: WebSocket) -> None:
		await websocket.accept()
		self._loop = asyncio.get_running_loop()
		async with self._lock:
			self._clients.add(websocket)

	async def disconnect(self, websocket: WebSocket) -> None:
		async with self._lock:
			self._clients.discard(websocket)

	@property
	def client_count(self) -> int:
		return len(self._clients)

	async def broadcast_json(self, message: Dict[str, Any]) -> None:
		payload = json.dumps(message, separators=(",", ":"))
		async with self._lock:
			if not self._clients:
				return
			send_tasks = []
			for ws in list(self._clients):
				send_tasks.append(self._send(ws, payload))
			await asyncio.gather(*send_tasks, return_exceptions=True)

	def broadcast_nowait(self, message: Dict[str, Any]) -> None:
		"""
		Fire-and-forget broadcast from synchronous code. On the event loop
		thread it schedules a task; from a worker thread it hands the send to
		the loop the clients connected on. With no clients yet it is dropped.
		"""
		try:
			loop = asyncio.get_running_loop()
		except RuntimeError:
			loop = None
		if loop is None:
			if self._loop is not None and self._loop.is_running() and not self._loop.is_closed():
				asyncio.run_coroutine_threadsafe(self.broadcast_json(message), self._loop)
			return
		task = loop.create_task(self.broadcast_json(message))
		self._pending.add(task)
		task.add_done_callback(self._pending.discard)

	@staticmethod
	async def _send(ws: WebSocket, payload: str) -> None:
		try:
			await ws.send_text(payload)
		except Exception as e:
			logger.debug("[WS] send failed (%r); closing client", e)
			try:
				await ws.close()
			except Exception:
				pass


manager = ConnectionManager()


@router.websocket("/ws")
async def ws_endpoint(websocket: WebSocket):
	await manager.connect(websocket)
	try:
		await websocket.send_text(json.dumps({"type": "connected"}))
		while True:
			await websocket.receive_text()
	except WebSocketDisconnect:
		pass
	finally:
		await manager.disconnect(websocket)
