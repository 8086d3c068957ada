"""
Optional PostgreSQL mirror of the session log.

We use `asyncpg` directly (no ORM). The database is configured via
`database.url` in config.json; when it is empty every call is a no-op and the
JSON session log file remains the only store.
"""

from drillcoach.db.pool import close_db, get_pool, get_status, init_db
from drillcoach.db.session_logs import insert_session_log, list_session_logs

__all__ = [
	"close_db",
	"get_pool",
	"get_status",
	"init_db",
	"insert_session_log",
	"list_session_logs",
]
