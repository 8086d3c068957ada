"""Pose ingestion routes. Routes: /frame (keypoints JSON), /frame/image (JPEG/PNG body)."""
import asyncio
import io
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from app_state import AppState
from deps import get_state
from drillcoach.pose.mediapipe_provider import get_provider
from drillcoach.pose.types import Keypoint, Pose
from schemas.requests import FramePayload
from schemas.responses import FrameResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["frames"])


def _publish(state: AppState, pose: Optional[Pose]) -> Dict[str, Any]:
	"""Push one pose through the stream; returns the /frame response body."""
	if state.pose_stream is None or state.session is None:
		raise HTTPException(status_code=503, detail="Pose stream not initialised")
	state.frames_received += 1
	if pose is None:
		state.frames_without_pose += 1
		return {"metrics": None, "active": state.session.is_active, "feedback": []}
	before = len(state.session.transcript)
	metrics = state.pose_stream.publish(pose)
	lines = state.session.transcript[before:] if state.session.is_active else []
	return {
		"metrics": metrics.to_dict() if metrics is not None else None,
		"active": state.session.is_active,
		"feedback": lines,
	}


@router.post("/frame", response_model=FrameResponse)
async def post_frame(payload: FramePayload, state: AppState = Depends(get_state)):
	"""Ingest one detection produced by an external pose model."""
	pose = None
	if payload.keypoints is not None:
		pose = Pose.from_keypoints(
			(Keypoint(name=k.name, x=k.x, y=k.y, score=k.score) for k in payload.keypoints),
			width=payload.width,
			height=payload.height,
			backend=(payload.backend or "external"),
			t_host=payload.t_host,
		)
	async with state.session_lock:
		return _publish(state, pose)


def _decode_rgb(data: bytes):
	try:
		import numpy as np  # type: ignore
		from PIL import Image  # type: ignore
	except ImportError as e:
		raise HTTPException(
			status_code=501,
			detail=f"Image ingestion needs Pillow and numpy ({e!r}). Install with: pip install -e .[pose]",
		)
	try:
		img = Image.open(io.BytesIO(data)).convert("RGB")
	except (OSError, ValueError) as e:
		raise HTTPException(status_code=400, detail=f"Could not decode image: {e!r}")
	return np.asarray(img)


@router.post("/frame/image", response_model=FrameResponse)
async def post_frame_image(request: Request, state: AppState = Depends(get_state)):
	"""Run the configured pose model on an encoded image body, then ingest the result."""
	data = await request.body()
	if not data:
		raise HTTPException(status_code=400, detail="Empty request body")
	rgb = _decode_rgb(data)
	if state.pose_provider is None:
		try:
			state.pose_provider = get_provider(state.cfg.pose)
		except (RuntimeError, ValueError) as e:
			raise HTTPException(status_code=501, detail=str(e))
		logger.info("[Pose] provider ready: %s", state.pose_provider.name())
	# Inference is blocking; keep it off the loop, publish back on it.
	async with state.infer_lock:
		pose = await asyncio.to_thread(state.pose_provider.infer_rgb, rgb)
	async with state.session_lock:
		return _publish(state, pose)
