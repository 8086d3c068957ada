"""Pydantic response models for API docs (routes may return dicts)."""
from typing import Any, Dict, Optional

from pydantic import BaseModel


class SessionStartResponse(BaseModel):
	"""Response from POST /session/start."""

	detail: str
	module: Optional[str] = None


class SessionStopResponse(BaseModel):
	"""Response from POST /session/stop."""

	detail: str
	entry: Optional[Dict[str, Any]] = None


class FrameResponse(BaseModel):
	"""Response from POST /frame."""

	metrics: Optional[Dict[str, Any]] = None
	active: bool
	feedback: list[str] = []
