import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app_state import AppState
from drillcoach import __version__, db
from drillcoach.config import AppConfig, get_config, resolve_data_path
from drillcoach.draw_timer import DrawTimer
from drillcoach.feedback import FeedbackThresholds
from drillcoach.metrics import MetricExtractor
from drillcoach.pose.stream import PoseStream
from drillcoach.session_log import open_store
from drillcoach.training import TrainingSession
from routers import frames, sessions, ws

logger = logging.getLogger(__name__)


def build_state(cfg: AppConfig) -> AppState:
	"""Wire config -> pose stream -> training session -> log store / WS broadcast."""
	state = AppState()
	state.cfg = cfg
	state.manager = ws.manager
	state.pose_stream = PoseStream(extractor=MetricExtractor.from_config(cfg.metrics))
	state.log_store = open_store(resolve_data_path(cfg.session_log.path))

	def _feedback_to_clients(message: str) -> None:
		state.manager.broadcast_nowait({"type": "feedback", "msg": message})

	state.session = TrainingSession(
		log_store=state.log_store,
		on_message=_feedback_to_clients,
		pose_source=state.pose_stream,
		draw_timer=DrawTimer.from_config(cfg.draw_timer),
		feedback_interval_s=cfg.feedback.interval_seconds,
		thresholds=FeedbackThresholds.from_config(cfg.feedback),
	)
	return state


@asynccontextmanager
async def lifespan(app: FastAPI):
	cfg = get_config()
	state = build_state(cfg)
	app.state.state = state
	try:
		# Initialise database (if configured).
		try:
			await db.init_db()
		except Exception as e:
			# DB is optional; continue with the JSON session log only.
			logger.warning("[DB] init_db failed: %r", e)

		yield
	finally:
		# A session still running at shutdown is logged like a normal stop.
		if state.session is not None and state.session.is_active:
			try:
				async with state.session_lock:
					entry = await asyncio.to_thread(state.session.stop)
				if entry is not None:
					await db.insert_session_log(entry)
			except Exception as e:
				logger.warning("[Session] could not persist session on shutdown: %r", e)

		if state.pose_provider is not None:
			try:
				state.pose_provider.close()
			except Exception as e:
				logger.debug("[Pose] provider close failed: %r", e)
			state.pose_provider = None

		await db.close_db()


app = FastAPI(title="DrillCoach", version=__version__, lifespan=lifespan)
app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

app.include_router(sessions.router)
app.include_router(frames.router)
app.include_router(ws.router)


@app.get("/health")
async def health():
	state: AppState = app.state.state
	return {
		"status": "ok",
		"version": __version__,
		"session_active": bool(state.session and state.session.is_active),
		"frames_received": state.frames_received,
		"frames_without_pose": state.frames_without_pose,
		"ws_clients": state.manager.client_count if state.manager else 0,
		"db": db.get_status(),
	}


if __name__ == "__main__":
	import uvicorn

	logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
	uvicorn.run(app, host="0.0.0.0", port=8000)
