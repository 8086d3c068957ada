"""Append-only session log stores: one SessionLogEntry per completed session."""
from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionLogEntry:
	timestamp: str  # ISO-8601, UTC
	module: str
	transcript: str

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)

	@classmethod
	def from_dict(cls, d: Dict[str, Any]) -> "SessionLogEntry":
		# "log" is the key older browser exports used for the transcript.
		transcript = d.get("transcript")
		if transcript is None:
			transcript = d.get("log")
		return cls(
			timestamp=str(d.get("timestamp") or ""),
			module=str(d.get("module") or ""),
			transcript=str(transcript or ""),
		)


def iso_timestamp(sec: float) -> str:
	"""Wall-clock seconds to an ISO-8601 UTC string with millisecond precision."""
	dt = datetime.fromtimestamp(float(sec), tz=timezone.utc)
	return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SessionLogStore(Protocol):
	def append(self, entry: SessionLogEntry) -> None: ...

	def entries(self) -> List[SessionLogEntry]: ...


class MemorySessionLogStore:
	"""In-process store; used by tests and as a fallback when no path is configured."""

	def __init__(self) -> None:
		self._entries: List[SessionLogEntry] = []

	def append(self, entry: SessionLogEntry) -> None:
		self._entries.append(entry)

	def entries(self) -> List[SessionLogEntry]:
		return list(self._entries)


class JsonFileSessionLogStore:
	"""
	A JSON array of entries in a single file.

	Each append rewrites the whole file through a temp file + os.replace so a
	crash mid-write leaves the previous history intact. A missing file is an
	empty history. A file that is not a JSON array is never overwritten: the
	next append renames it to `<name>.corrupt-<timestamp>` first and starts a
	new history. Read errors (permissions, I/O) propagate.
	"""

	def __init__(self, path: str | Path) -> None:
		self.path = Path(path).expanduser()

	def _read_raw(self) -> Tuple[List[Dict[str, Any]], bool]:
		"""Returns (records, parsed); parsed is False for an unusable file."""
		if not self.path.exists():
			return [], True
		text = self.path.read_text(encoding="utf-8")
		try:
			raw = json.loads(text or "[]")
		except ValueError as e:
			logger.warning("[SessionLog] %s is not valid JSON (%s)", self.path, e)
			return [], False
		if not isinstance(raw, list):
			logger.warning("[SessionLog] %s does not hold a JSON array", self.path)
			return [], False
		return [r for r in raw if isinstance(r, dict)], True

	def _set_aside(self) -> Path:
		stamp = datetime.now(tz=timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
		aside = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
		os.replace(self.path, aside)
		logger.warning("[SessionLog] moved unreadable history to %s; starting a new one", aside)
		return aside

	def entries(self) -> List[SessionLogEntry]:
		records, _ = self._read_raw()
		return [SessionLogEntry.from_dict(r) for r in records]

	def append(self, entry: SessionLogEntry) -> None:
		history, parsed = self._read_raw()
		if not parsed:
			self._set_aside()
		history.append(entry.to_dict())
		self.path.parent.mkdir(parents=True, exist_ok=True)
		fd, tmp = tempfile.mkstemp(prefix=".session_logs.", suffix=".tmp", dir=str(self.path.parent))
		try:
			with os.fdopen(fd, "w", encoding="utf-8") as fh:
				json.dump(history, fh, indent=2)
			os.replace(tmp, self.path)
		except BaseException:
			try:
				os.unlink(tmp)
			except OSError:
				pass
			raise
		logger.info("[SessionLog] appended %s session (%d total) to %s", entry.module, len(history), self.path)


def open_store(path: Optional[str | Path]) -> SessionLogStore:
	"""File store for a configured path, memory store otherwise."""
	if path:
		return JsonFileSessionLogStore(path)
	return MemorySessionLogStore()
