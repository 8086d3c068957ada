"""
Training session controller.

Owns the per-session state (active module, transcript, feedback throttle,
pending draw duration) and the DrawTimer, and turns the pose stream into
coaching lines and one SessionLogEntry per session.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from drillcoach.draw_timer import DrawTimer
from drillcoach.feedback import DEFAULT_THRESHOLDS, FeedbackThresholds, TrainingModule, generate_feedback
from drillcoach.metrics import MetricsRecord, compute_metrics
from drillcoach.pose.types import Pose
from drillcoach.session_log import SessionLogEntry, SessionLogStore, iso_timestamp

logger = logging.getLogger(__name__)

_DRAW_MODULES = (TrainingModule.DRAW, TrainingModule.FULL)


class TrainingSession:
	"""
	Session state machine over {idle, active}.

	The host serializes calls: feed(), start() and stop() must never run
	concurrently with each other. `clock` returns wall-clock seconds and must
	be non-decreasing between feed() calls.
	"""

	def __init__(
		self,
		log_store: SessionLogStore,
		clock: Callable[[], float] = time.time,
		on_message: Optional[Callable[[str], None]] = None,
		pose_source: Any = None,
		draw_timer: Optional[DrawTimer] = None,
		feedback_interval_s: float = 1.0,
		thresholds: FeedbackThresholds = DEFAULT_THRESHOLDS,
		extractor: Optional[Callable[[Pose, float, float], MetricsRecord]] = None,
	) -> None:
		self.log_store = log_store
		self.clock = clock
		self.on_message: Callable[[str], None] = on_message or (lambda _msg: None)
		self.pose_source = pose_source
		self.draw_timer = draw_timer or DrawTimer()
		self.feedback_interval_s = float(feedback_interval_s)
		self.thresholds = thresholds
		self._extractor = extractor or compute_metrics

		self._active: bool = False
		self._module: Optional[TrainingModule] = None
		self._last_feedback_t: float = float("-inf")
		self._pending_draw_ms: Optional[float] = None
		self._transcript: List[str] = []

	@property
	def is_active(self) -> bool:
		return self._active

	@property
	def active_module(self) -> Optional[TrainingModule]:
		return self._module

	@property
	def pending_draw_duration_ms(self) -> Optional[float]:
		return self._pending_draw_ms

	@property
	def transcript(self) -> List[str]:
		return list(self._transcript)

	def _log(self, line: str) -> None:
		self._transcript.append(line)
		self.on_message(line)

	def start(self, module: "TrainingModule | str") -> bool:
		"""
		Begin a session. Returns False without touching the running session
		if one is already active. Unknown module names raise ValueError.
		"""
		mod = TrainingModule.parse(module)
		if self._active:
			logger.warning(
				"[Session] start(%s) ignored: %s session already running", mod.value, self._module.value if self._module else "?"
			)
			return False

		self._transcript = []
		self.draw_timer.reset()
		self._pending_draw_ms = None
		self._last_feedback_t = float("-inf")
		self._module = mod
		self._active = True
		self._log(f"Started {mod.value} session.")
		if self.pose_source is not None:
			self.pose_source.subscribe(self.feed)
		logger.info("[Session] started %s session", mod.value)
		return True

	def feed(self, pose: Optional[Pose], metrics: Optional[MetricsRecord] = None, now: Optional[float] = None) -> List[str]:
		"""
		Per-frame entry point. Returns the feedback lines emitted for this
		frame (usually empty because of throttling).
		"""
		if not self._active or self._module is None:
			return []
		if metrics is None:
			if pose is None:
				# No detection this frame.
				return []
			metrics = self._extractor(pose, pose.width, pose.height)
		t = float(now) if now is not None else float(self.clock())

		if self._module in _DRAW_MODULES:
			duration_ms = self.draw_timer.update(metrics, now=t)
			if duration_ms is not None:
				if self._pending_draw_ms is not None:
					logger.debug("[Session] pending draw %.0f ms replaced by %.0f ms", self._pending_draw_ms, duration_ms)
				self._pending_draw_ms = duration_ms

		if t - self._last_feedback_t < self.feedback_interval_s:
			return []

		draw_ms = self._pending_draw_ms
		self._pending_draw_ms = None
		messages = generate_feedback(metrics, self._module, draw_ms, thresholds=self.thresholds)
		self._last_feedback_t = t
		if messages:
			self._log(" ".join(messages))
		return messages

	def stop(self) -> Optional[SessionLogEntry]:
		"""
		End the session and persist its transcript. No-op (returns None)
		when idle.

		The entry is written before any state is cleared: if the store
		raises, the session stays active with its transcript intact and
		stop() can be retried.
		"""
		if not self._active or self._module is None:
			return None
		ended = "Session ended."
		entry = SessionLogEntry(
			timestamp=iso_timestamp(self.clock()),
			module=self._module.value,
			transcript="\n".join(self._transcript + [ended]),
		)
		self.log_store.append(entry)

		self._active = False
		if self.pose_source is not None:
			self.pose_source.unsubscribe(self.feed)
		self.on_message(ended)
		self._transcript = []
		self.draw_timer.reset()
		self._pending_draw_ms = None
		self._module = None
		logger.info("[Session] stopped %s session", entry.module)
		return entry

	def status(self) -> Dict[str, Any]:
		return {
			"active": self._active,
			"module": self._module.value if self._module else None,
			"lines": len(self._transcript),
			"pending_draw_ms": self._pending_draw_ms,
			"draw_timer": self.draw_timer.snapshot(),
		}
