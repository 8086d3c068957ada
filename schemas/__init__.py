"""Pydantic request/response models for API validation and docs."""
from schemas.requests import (
	FramePayload,
	KeypointPayload,
	SessionStartPayload,
)
from schemas.responses import (
	FrameResponse,
	SessionStartResponse,
	SessionStopResponse,
)

__all__ = [
	"FramePayload",
	"KeypointPayload",
	"SessionStartPayload",
	"FrameResponse",
	"SessionStartResponse",
	"SessionStopResponse",
]
