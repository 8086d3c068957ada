from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple


@dataclass(frozen=True)
class Point2D:
	"""
	A landmark normalized to [0, 1] against the frame width/height.
	"""

	x: float
	y: float


@dataclass(frozen=True)
class Keypoint:
	"""
	A single 2D keypoint in pixel coordinates.
	"""

	name: str
	x: float
	y: float
	score: float  # confidence/visibility [0..1] best-effort

	@classmethod
	def from_dict(cls, d: Dict[str, Any]) -> "Keypoint":
		return cls(
			name=str(d.get("name") or ""),
			x=float(d.get("x") or 0.0),
			y=float(d.get("y") or 0.0),
			score=float(d.get("score") or 0.0),
		)


@dataclass(frozen=True)
class Pose:
	"""
	Model-agnostic pose output for a single subject in a single video frame.

	- Coordinates are in pixel space; metrics normalize by width/height.
	- Keypoints keep their delivery order. A detector should not emit the same
	  name twice, but if it does the later keypoint wins on lookup.
	- Times are optional; callers can provide t_video (clip-relative seconds)
	  and/or t_host (epoch seconds).
	"""

	width: int
	height: int
	keypoints: Tuple[Keypoint, ...] = field(default_factory=tuple)
	backend: str = "external"
	t_video: Optional[float] = None
	t_host: Optional[float] = None

	@classmethod
	def from_keypoints(
		cls,
		keypoints: Iterable[Keypoint],
		width: int,
		height: int,
		**kwargs: Any,
	) -> "Pose":
		return cls(width=int(width), height=int(height), keypoints=tuple(keypoints), **kwargs)

	def get(self, name: str) -> Optional[Keypoint]:
		found: Optional[Keypoint] = None
		for kp in self.keypoints:
			if kp.name == name:
				found = kp
		return found

	def to_dict(self) -> Dict[str, Any]:
		return {
			"backend": self.backend,
			"width": self.width,
			"height": self.height,
			"t_video": self.t_video,
			"t_host": self.t_host,
			"keypoints": [
				{"name": kp.name, "x": kp.x, "y": kp.y, "score": kp.score} for kp in self.keypoints
			],
		}
