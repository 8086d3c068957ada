"""Session log rows: insert_session_log, list_session_logs."""
import logging
from typing import Any, Dict, List, Optional

from drillcoach.db.pool import _to_dt, get_pool
from drillcoach.session_log import SessionLogEntry

logger = logging.getLogger(__name__)


async def insert_session_log(entry: SessionLogEntry) -> Optional[int]:
	"""Insert one entry; returns the row id, or None when persistence is disabled."""
	pool = get_pool()
	if pool is None:
		logger.debug("[DB] insert_session_log: pool is None, skipping")
		return None
	async with pool.acquire() as conn:
		row_id = await conn.fetchval(
			"""
			INSERT INTO session_logs (t_logged, module, transcript)
			VALUES ($1, $2, $3)
			RETURNING id;
			""",
			_to_dt(entry.timestamp),
			entry.module,
			entry.transcript,
		)
	return int(row_id) if row_id is not None else None


def _row_to_dict(row: Any) -> Dict[str, Any]:
	ts = row["t_logged"]
	return {
		"id": int(row["id"]),
		"timestamp": ts.isoformat() if hasattr(ts, "isoformat") else str(ts),
		"module": row["module"],
		"transcript": row["transcript"],
	}


async def list_session_logs(limit: int = 100) -> List[Dict[str, Any]]:
	"""Most recent entries first."""
	pool = get_pool()
	if pool is None:
		return []
	lim = max(1, min(int(limit), 10000))
	async with pool.acquire() as conn:
		rows = await conn.fetch(
			"""
			SELECT id, t_logged, module, transcript
			FROM session_logs
			ORDER BY t_logged DESC, id DESC
			LIMIT $1;
			""",
			lim,
		)
	return [_row_to_dict(r) for r in rows]
