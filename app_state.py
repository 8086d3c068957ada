"""
Explicit app state: single source of truth for runtime lifecycle.
Created in lifespan, attached to app.state.state; injected into routes via Depends(get_state).
"""
import asyncio
from typing import Any, Optional

from drillcoach.config import AppConfig
from drillcoach.pose.base import PoseProvider
from drillcoach.pose.stream import PoseStream
from drillcoach.session_log import SessionLogStore
from drillcoach.training import TrainingSession


class AppState:
	"""
	Holds all runtime state for the app. Populated in server lifespan.

	Every call into `session` and `pose_stream` (start, stop, frame publish)
	is made while holding `session_lock`, which serializes them for the
	controller even when stop() runs its file write on a worker thread.
	"""
	cfg: Optional[AppConfig] = None

	# WebSocket broadcast (routers.ws.ConnectionManager)
	manager: Any = None

	# Pose pipeline
	pose_stream: Optional[PoseStream] = None
	pose_provider: Optional[PoseProvider] = None

	# Training
	session: Optional[TrainingSession] = None
	log_store: Optional[SessionLogStore] = None

	def __init__(self) -> None:
		self.frames_received = 0
		self.frames_without_pose = 0
		self.session_lock = asyncio.Lock()
		# The pose model is not safe to call from two threads at once.
		self.infer_lock = asyncio.Lock()
