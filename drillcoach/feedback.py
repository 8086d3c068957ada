from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from drillcoach.metrics import MetricsRecord


class TrainingModule(str, Enum):
	STANCE = "stance"
	GRIP = "grip"
	DRAW = "draw"
	FULL = "full"

	@classmethod
	def parse(cls, value: "TrainingModule | str") -> "TrainingModule":
		if isinstance(value, cls):
			return value
		try:
			return cls(str(value).strip().lower())
		except ValueError:
			allowed = ", ".join(m.value for m in cls)
			raise ValueError(f"Unknown training module {value!r} (expected one of: {allowed})") from None


@dataclass(frozen=True)
class FeedbackThresholds:
	stance_min: float = 1.0
	stance_max: float = 2.0
	draw_slow_seconds: float = 2.5

	@classmethod
	def from_config(cls, cfg: Any) -> "FeedbackThresholds":
		return cls(
			stance_min=cfg.stance_min,
			stance_max=cfg.stance_max,
			draw_slow_seconds=cfg.draw_slow_seconds,
		)


DEFAULT_THRESHOLDS = FeedbackThresholds()


def generate_feedback(
	metrics: MetricsRecord,
	module: "TrainingModule | str",
	draw_duration_ms: Optional[float] = None,
	thresholds: FeedbackThresholds = DEFAULT_THRESHOLDS,
) -> List[str]:
	"""
	Coaching lines for one frame, in fixed stance -> grip -> draw order.
	Rules that do not apply to `module` or lack data contribute nothing.
	"""
	messages: List[str] = []
	try:
		mod = TrainingModule.parse(module)
	except ValueError:
		return messages

	if mod in (TrainingModule.STANCE, TrainingModule.FULL) and metrics.stance_ratio is not None:
		ratio = metrics.stance_ratio
		if ratio < thresholds.stance_min:
			messages.append("Stand with your feet wider for better stability.")
		elif ratio > thresholds.stance_max:
			messages.append("Feet are too far apart; narrow your stance slightly.")
		else:
			messages.append("Good stance width.")

	if mod in (TrainingModule.GRIP, TrainingModule.FULL) and metrics.grip_two_hand is not None:
		if metrics.grip_two_hand:
			messages.append("Good two-handed grip.")
		else:
			messages.append("Use both hands for better control and stability.")

	if mod in (TrainingModule.DRAW, TrainingModule.FULL) and draw_duration_ms is not None:
		# Compare the value the user actually sees.
		seconds = round(float(draw_duration_ms) / 1000.0, 2)
		if seconds > thresholds.draw_slow_seconds:
			messages.append(f"Draw time {seconds:.2f}s - practice to shave it down.")
		else:
			messages.append(f"Draw time {seconds:.2f}s - nice work!")

	return messages
