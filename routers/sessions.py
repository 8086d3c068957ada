"""Training session routes. Routes: /session/start, /session/stop, /session/status, /session/logs."""
import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException

from app_state import AppState
from deps import get_state
from drillcoach import db
from schemas.requests import SessionStartPayload
from schemas.responses import SessionStartResponse, SessionStopResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sessions"])


def _session(state: AppState):
	if state.session is None:
		raise HTTPException(status_code=503, detail="Training session controller not initialised")
	return state.session


@router.post("/session/start", response_model=SessionStartResponse)
async def session_start(payload: SessionStartPayload, state: AppState = Depends(get_state)):
	"""Start a training session for one module. A running session is left untouched."""
	session = _session(state)
	async with state.session_lock:
		if not session.start(payload.module):
			current = session.active_module.value if session.active_module else None
			return {"detail": "Session already running", "module": current}
	return {"detail": "Session started", "module": payload.module.value}


@router.post("/session/stop", response_model=SessionStopResponse, response_model_exclude_none=True)
async def session_stop(state: AppState = Depends(get_state)):
	"""Stop the active session and append its transcript to the session log."""
	session = _session(state)
	# The log write is blocking file I/O; the lock keeps frames out meanwhile.
	async with state.session_lock:
		try:
			entry = await asyncio.to_thread(session.stop)
		except OSError as e:
			raise HTTPException(status_code=500, detail=f"Failed to write session log: {e!r}")
	if entry is None:
		return {"detail": "No active session"}
	try:
		await db.insert_session_log(entry)
	except Exception as e:
		# Mirror only; the file store already holds the entry.
		logger.warning("[DB] insert_session_log failed: %r", e)
	return {"detail": "Session stopped", "entry": entry.to_dict()}


@router.get("/session/status")
async def session_status(state: AppState = Depends(get_state)):
	return _session(state).status()


@router.get("/session/logs")
async def session_logs(limit: int = 100, state: AppState = Depends(get_state)):
	"""Most recent session log entries first."""
	if state.log_store is None:
		raise HTTPException(status_code=503, detail="Session log store not initialised")
	entries = state.log_store.entries()
	entries.reverse()
	if limit > 0:
		entries = entries[:limit]
	return {"count": len(entries), "entries": [e.to_dict() for e in entries]}


@router.get("/db/session_logs")
async def db_session_logs(limit: int = 100):
	"""Session log rows from PostgreSQL, if configured."""
	status = db.get_status()
	if not status.get("pool_ready"):
		return {"count": 0, "entries": [], "db": status}
	try:
		rows = await db.list_session_logs(limit=limit)
	except Exception as e:
		raise HTTPException(status_code=500, detail=f"DB query failed: {e!r}")
	return {"count": len(rows), "entries": rows, "db": status}
