import logging
import time
from typing import Any, Dict, Optional

from drillcoach.metrics import MetricsRecord

logger = logging.getLogger(__name__)


class DrawTimer:
	"""
	Two-state draw-from-holster timer driven by per-frame wrist/hip heights.

	States:
	  - A (armed-wait): waiting for the dominant wrist to sit below the hip,
	    i.e. wrist_y > hip_y + arm_margin (screen space, y grows downward).
	    Entering B records start_timestamp and baseline_y.
	  - B (timing): waiting for the wrist to come up to presentation,
	    wrist_y < hip_y - raise_margin. That transition returns the elapsed
	    time in milliseconds and goes back to A.

	Frames with wrist_y or hip_y missing never change state; in B that means a
	landmark dropout cannot cancel a draw in progress. The two margins form a
	hysteresis band so jitter around a single line cannot re-arm or complete
	the timer.

	Expected call pattern:
	    duration_ms = timer.update(metrics, now=time.time())
	with non-decreasing `now` (seconds).
	"""

	# Keys accepted by the `config` override dict.
	TUNABLE = ("arm_margin", "raise_margin")

	def __init__(
		self,
		arm_margin: float = 0.05,
		raise_margin: float = 0.15,
		config: Optional[Dict[str, float]] = None,
	) -> None:
		self.arm_margin: float = float(arm_margin)
		self.raise_margin: float = float(raise_margin)

		# Optional overrides from config dict.
		if config:
			for key, value in config.items():
				if key in self.TUNABLE:
					try:
						setattr(self, key, float(value))
					except (TypeError, ValueError):
						continue

		if self.raise_margin < 0.0 or self.arm_margin <= -self.raise_margin:
			raise ValueError(
				f"arm_margin={self.arm_margin} and raise_margin={self.raise_margin} "
				"leave no gap between arming and completion"
			)

		self.baseline_y: Optional[float] = None
		self.start_timestamp: Optional[float] = None

	@classmethod
	def from_config(cls, cfg: Any) -> "DrawTimer":
		return cls(arm_margin=cfg.arm_margin, raise_margin=cfg.raise_margin)

	@property
	def timing(self) -> bool:
		"""True while in state B."""
		return self.start_timestamp is not None

	def reset(self) -> None:
		self.baseline_y = None
		self.start_timestamp = None

	def update(self, metrics: MetricsRecord, now: Optional[float] = None) -> Optional[float]:
		"""
		Feed one MetricsRecord. Returns the draw duration in ms when this frame
		completes a draw, otherwise None.
		"""
		wrist_y = metrics.wrist_y
		hip_y = metrics.hip_y
		if wrist_y is None or hip_y is None:
			return None
		t = float(now) if now is not None else time.time()

		if self.start_timestamp is None:
			if wrist_y > hip_y + self.arm_margin:
				self.baseline_y = float(wrist_y)
				self.start_timestamp = t
				logger.debug("[DrawTimer] armed: wrist_y=%.3f hip_y=%.3f t=%.3f", wrist_y, hip_y, t)
			return None

		if wrist_y < hip_y - self.raise_margin:
			duration_ms = (t - self.start_timestamp) * 1000.0
			logger.debug(
				"[DrawTimer] draw complete: %.0f ms (baseline_y=%.3f, wrist_y=%.3f, hip_y=%.3f)",
				duration_ms,
				self.baseline_y if self.baseline_y is not None else float("nan"),
				wrist_y,
				hip_y,
			)
			self.reset()
			return duration_ms
		return None

	def snapshot(self) -> Dict[str, Any]:
		return {"baseline_y": self.baseline_y, "start_timestamp": self.start_timestamp}
