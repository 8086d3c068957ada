"""Pydantic request body models."""
from typing import List, Optional

from pydantic import BaseModel, Field

from drillcoach.feedback import TrainingModule


class SessionStartPayload(BaseModel):
	"""Request body for POST /session/start."""

	module: TrainingModule = Field(..., description="stance, grip, draw or full")


class KeypointPayload(BaseModel):
	"""One detected landmark, pixel coordinates."""

	name: str
	x: float
	y: float
	score: float = Field(..., ge=0.0, le=1.0, description="Detector confidence [0..1]")


class FramePayload(BaseModel):
	"""Request body for POST /frame. One pose for one frame; omit keypoints when nothing was detected."""

	width: int = Field(..., gt=0, description="Frame width in pixels")
	height: int = Field(..., gt=0, description="Frame height in pixels")
	keypoints: Optional[List[KeypointPayload]] = Field(None, description="Pose keypoints; null means no detection")
	t_host: Optional[float] = Field(None, description="Host timestamp (epoch seconds)")
	backend: Optional[str] = Field(None, description="Pose model that produced the keypoints")
