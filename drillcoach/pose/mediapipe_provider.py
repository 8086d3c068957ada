from __future__ import annotations

from typing import List, Optional

from drillcoach.pose.base import PoseProvider
from drillcoach.pose.types import Keypoint, Pose


COCO17_NAMES = [
	"nose",
	"left_eye",
	"right_eye",
	"left_ear",
	"right_ear",
	"left_shoulder",
	"right_shoulder",
	"left_elbow",
	"right_elbow",
	"left_wrist",
	"right_wrist",
	"left_hip",
	"right_hip",
	"left_knee",
	"right_knee",
	"left_ankle",
	"right_ankle",
]


class MediaPipePoseProvider(PoseProvider):
	"""
	MediaPipe Pose provider that outputs the COCO-17 keypoint names used by
	the metric extractor.

	Notes:
	- MediaPipe uses normalized coordinates; we convert to pixel space so the
	  extractor's normalization step stays the single source of truth.
	- `visibility` is used as score (best-effort).
	"""

	def __init__(
		self,
		model_complexity: int = 1,
		min_detection_confidence: float = 0.5,
		min_tracking_confidence: float = 0.5,
	) -> None:
		try:
			import mediapipe as mp  # type: ignore
		except ImportError as e:
			raise RuntimeError(
				"MediaPipe is not installed. Install pose deps with: pip install -e .[pose]"
			) from e

		self._mp = mp
		self._pose = mp.solutions.pose.Pose(
			static_image_mode=False,
			model_complexity=int(model_complexity),
			enable_segmentation=False,
			smooth_landmarks=True,
			min_detection_confidence=float(min_detection_confidence),
			min_tracking_confidence=float(min_tracking_confidence),
		)

	@classmethod
	def from_config(cls, cfg) -> "MediaPipePoseProvider":
		return cls(
			model_complexity=cfg.model_complexity,
			min_detection_confidence=cfg.min_detection_confidence,
			min_tracking_confidence=cfg.min_tracking_confidence,
		)

	def name(self) -> str:
		return "mediapipe_pose"

	def infer_rgb(self, rgb, t_video: Optional[float] = None) -> Optional[Pose]:
		# rgb: HxWx3
		h, w = int(rgb.shape[0]), int(rgb.shape[1])
		res = self._pose.process(rgb)
		if not res or not getattr(res, "pose_landmarks", None):
			return None

		lm = res.pose_landmarks.landmark
		PL = self._mp.solutions.pose.PoseLandmark
		keypoints: List[Keypoint] = []
		for name in COCO17_NAMES:
			idx = PL[name.upper()]
			p = lm[int(idx)]
			keypoints.append(
				Keypoint(
					name=name,
					x=float(p.x) * float(w),
					y=float(p.y) * float(h),
					score=float(getattr(p, "visibility", 0.0) or 0.0),
				)
			)
		return Pose.from_keypoints(keypoints, width=w, height=h, backend=self.name(), t_video=t_video)

	def close(self) -> None:
		if self._pose:
			self._pose.close()
			self._pose = None


def get_provider(cfg) -> PoseProvider:
	"""Build the configured pose provider (cfg is a PoseConfig)."""
	backend = (cfg.backend or "mediapipe").strip().lower()
	if backend in ("mediapipe", "mediapipe_pose"):
		return MediaPipePoseProvider.from_config(cfg)
	raise ValueError(f"Unknown pose backend: {cfg.backend!r}")
