from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from drillcoach.pose.types import Pose


class PoseProvider(ABC):
	"""
	Model adapter interface.

	Implementations should take an RGB image (H,W,3 uint8) and return a Pose,
	or None when no subject was detected in the frame.
	"""

	@abstractmethod
	def name(self) -> str: ...

	@abstractmethod
	def infer_rgb(self, rgb, t_video: Optional[float] = None) -> Optional[Pose]: ...

	@abstractmethod
	def close(self) -> None: ...
