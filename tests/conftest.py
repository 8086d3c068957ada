from typing import Dict, Optional, Tuple

import pytest

from drillcoach.metrics import MetricsRecord
from drillcoach.pose.types import Keypoint, Pose

WIDTH = 640
HEIGHT = 480


def make_pose(points: Dict[str, Tuple[float, float]], score: float = 0.9, width: int = WIDTH, height: int = HEIGHT) -> Pose:
	"""Pose from normalized (x, y) pairs, scaled to pixel space."""
	return Pose.from_keypoints(
		[Keypoint(name=n, x=x * width, y=y * height, score=score) for n, (x, y) in points.items()],
		width=width,
		height=height,
	)


def draw_metrics(wrist_y: Optional[float], hip_y: Optional[float] = 0.5) -> MetricsRecord:
	return MetricsRecord(wrist_y=wrist_y, hip_y=hip_y)


STANCE_POINTS = {
	"left_ankle": (0.2, 0.9),
	"right_ankle": (0.8, 0.9),
	"left_shoulder": (0.3, 0.3),
	"right_shoulder": (0.7, 0.3),
}


class FakeClock:
	def __init__(self, t: float = 1000.0) -> None:
		self.t = t

	def __call__(self) -> float:
		return self.t

	def advance(self, seconds: float) -> float:
		self.t += seconds
		return self.t


@pytest.fixture
def clock() -> FakeClock:
	return FakeClock()
