"""
Per-frame biomechanical metrics for the holster-draw drill.

compute_metrics() is a pure function: one Pose in, one MetricsRecord out.
Every field is independently nullable; missing or low-confidence landmarks
yield None for the fields that need them and never raise.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from drillcoach.geometry import distance
from drillcoach.pose.types import Point2D, Pose

MIN_KEYPOINT_SCORE = 0.3
GRIP_RATIO = 0.35
DOMINANT_SIDE = "right"


@dataclass(frozen=True)
class MetricsRecord:
	stance_ratio: Optional[float] = None
	grip_two_hand: Optional[bool] = None
	wrist_y: Optional[float] = None
	hip_y: Optional[float] = None

	def to_dict(self) -> Dict[str, Any]:
		return {
			"stanceRatio": self.stance_ratio,
			"gripTwoHand": self.grip_two_hand,
			"wristY": self.wrist_y,
			"hipY": self.hip_y,
		}


def normalize_keypoints(
	pose: Pose,
	frame_width: float,
	frame_height: float,
	min_score: float = MIN_KEYPOINT_SCORE,
) -> Dict[str, Point2D]:
	"""
	Drop keypoints with score <= min_score and normalize the rest to [0, 1].

	Survivors are indexed by name; if a name repeats, the later keypoint wins.
	"""
	w = float(frame_width)
	h = float(frame_height)
	out: Dict[str, Point2D] = {}
	if w <= 0.0 or h <= 0.0:
		return out
	for kp in pose.keypoints:
		if float(kp.score) > min_score:
			out[kp.name] = Point2D(x=float(kp.x) / w, y=float(kp.y) / h)
	return out


def compute_metrics(
	pose: Pose,
	frame_width: float,
	frame_height: float,
	min_score: float = MIN_KEYPOINT_SCORE,
	grip_ratio: float = GRIP_RATIO,
	dominant_side: str = DOMINANT_SIDE,
) -> MetricsRecord:
	pts = normalize_keypoints(pose, frame_width, frame_height, min_score=min_score)

	left_shoulder = pts.get("left_shoulder")
	right_shoulder = pts.get("right_shoulder")
	shoulder_dist: Optional[float] = None
	if left_shoulder and right_shoulder:
		shoulder_dist = distance(left_shoulder, right_shoulder)
		if shoulder_dist <= 0.0:
			shoulder_dist = None

	# Ankle spread / shoulder width keeps the ratio independent of camera distance.
	stance_ratio: Optional[float] = None
	left_ankle = pts.get("left_ankle")
	right_ankle = pts.get("right_ankle")
	if shoulder_dist is not None and left_ankle and right_ankle:
		stance_ratio = distance(left_ankle, right_ankle) / shoulder_dist

	grip_two_hand: Optional[bool] = None
	left_wrist = pts.get("left_wrist")
	right_wrist = pts.get("right_wrist")
	if shoulder_dist is not None and left_wrist and right_wrist:
		grip_two_hand = distance(left_wrist, right_wrist) < grip_ratio * shoulder_dist

	side = "left" if dominant_side == "left" else "right"
	wrist = pts.get(f"{side}_wrist")
	hip = pts.get(f"{side}_hip")

	return MetricsRecord(
		stance_ratio=stance_ratio,
		grip_two_hand=grip_two_hand,
		wrist_y=(wrist.y if wrist else None),
		hip_y=(hip.y if hip else None),
	)


class MetricExtractor:
	"""
	compute_metrics() bound to a MetricsConfig, for callers that hold config.
	"""

	def __init__(
		self,
		min_score: float = MIN_KEYPOINT_SCORE,
		grip_ratio: float = GRIP_RATIO,
		dominant_side: str = DOMINANT_SIDE,
	) -> None:
		self.min_score = float(min_score)
		self.grip_ratio = float(grip_ratio)
		self.dominant_side = dominant_side

	@classmethod
	def from_config(cls, cfg: Any) -> "MetricExtractor":
		return cls(min_score=cfg.min_score, grip_ratio=cfg.grip_ratio, dominant_side=cfg.dominant_side)

	def __call__(self, pose: Pose, frame_width: float, frame_height: float) -> MetricsRecord:
		return compute_metrics(
			pose,
			frame_width,
			frame_height,
			min_score=self.min_score,
			grip_ratio=self.grip_ratio,
			dominant_side=self.dominant_side,
		)
