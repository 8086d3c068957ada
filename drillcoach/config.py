from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricsConfig:
	# Keypoints at or below this score are discarded before any metric is computed.
	min_score: float = 0.3
	# Wrists closer than grip_ratio * shoulder width count as a two-hand grip.
	grip_ratio: float = 0.35
	# "right" or "left"; selects the wrist/hip pair used for draw timing.
	dominant_side: str = "right"


@dataclass(frozen=True)
class DrawTimerConfig:
	# Arm when wrist_y > hip_y + arm_margin (hand at the holster).
	arm_margin: float = 0.05
	# Complete when wrist_y < hip_y - raise_margin (presentation).
	raise_margin: float = 0.15


@dataclass(frozen=True)
class FeedbackConfig:
	interval_seconds: float = 1.0
	stance_min: float = 1.0
	stance_max: float = 2.0
	draw_slow_seconds: float = 2.5


@dataclass(frozen=True)
class SessionLogConfig:
	# JSON array of SessionLogEntry dicts, append-only.
	path: str = str(Path("data") / "session_logs.json")


@dataclass(frozen=True)
class DatabaseConfig:
	# If empty, DB persistence is disabled (best-effort mode).
	url: str = ""
	pool_min_size: int = 1
	pool_max_size: int = 4


@dataclass(frozen=True)
class PoseConfig:
	backend: str = "mediapipe"
	model_complexity: int = 1
	min_detection_confidence: float = 0.5
	min_tracking_confidence: float = 0.5


@dataclass(frozen=True)
class AppConfig:
	metrics: MetricsConfig = field(default_factory=MetricsConfig)
	draw_timer: DrawTimerConfig = field(default_factory=DrawTimerConfig)
	feedback: FeedbackConfig = field(default_factory=FeedbackConfig)
	session_log: SessionLogConfig = field(default_factory=SessionLogConfig)
	database: DatabaseConfig = field(default_factory=DatabaseConfig)
	pose: PoseConfig = field(default_factory=PoseConfig)


_CONFIG_PATH: Optional[Path] = None
_CONFIG_CACHE: Optional[AppConfig] = None


def _repo_root() -> Path:
	# drillcoach/config.py -> repo root is one level up.
	return Path(__file__).resolve().parents[1]


def resolve_data_path(path: str | Path) -> Path:
	"""Relative data paths are anchored at the repo root, like config.json."""
	p = Path(path).expanduser()
	return p if p.is_absolute() else _repo_root() / p


def get_default_config_path() -> Path:
	env = os.getenv("DRILLCOACH_CONFIG")
	if env:
		return Path(env).expanduser().resolve()
	return _repo_root() / "config.json"


def set_config_path(path: str | Path) -> None:
	"""
	Override the config path (must be called before first get_config()).
	Intended for tooling and tests; the server normally uses the default path.
	"""
	global _CONFIG_PATH
	global _CONFIG_CACHE
	_CONFIG_PATH = Path(path).expanduser().resolve()
	_CONFIG_CACHE = None


def _deep_get(d: Dict[str, Any], keys: list[str], default: Any = None) -> Any:
	cur: Any = d
	for k in keys:
		if not isinstance(cur, dict):
			return default
		cur = cur.get(k)
	return cur if cur is not None else default


def _as_int(v: Any, default: int) -> int:
	try:
		return int(v)
	except (TypeError, ValueError):
		return int(default)


def _as_str(v: Any, default: str = "") -> str:
	return str(v) if v is not None else str(default)


def _as_float(v: Any, default: float) -> float:
	try:
		return float(v)
	except (TypeError, ValueError):
		return float(default)


def load_config(path: Optional[str | Path] = None) -> AppConfig:
	p = Path(path).expanduser().resolve() if path else (_CONFIG_PATH or get_default_config_path())
	if not p.exists():
		# Defaults-only config; app can still run.
		return AppConfig()
	try:
		raw = json.loads(p.read_text(encoding="utf-8"))
	except (OSError, ValueError) as e:
		# If config is malformed, fail safe to defaults (but keep app running).
		logger.warning("[Config] could not read %s (%r); using defaults", p, e)
		return AppConfig()

	if not isinstance(raw, dict):
		return AppConfig()

	min_score = _as_float(_deep_get(raw, ["metrics", "min_score"], 0.3), 0.3)
	grip_ratio = _as_float(_deep_get(raw, ["metrics", "grip_ratio"], 0.35), 0.35)
	side = _as_str(_deep_get(raw, ["metrics", "dominant_side"], "right"), "right").strip().lower()
	if side not in ("left", "right"):
		side = "right"

	arm_margin = _as_float(_deep_get(raw, ["draw_timer", "arm_margin"], 0.05), 0.05)
	raise_margin = _as_float(_deep_get(raw, ["draw_timer", "raise_margin"], 0.15), 0.15)

	fb_interval = _as_float(_deep_get(raw, ["feedback", "interval_seconds"], 1.0), 1.0)
	stance_min = _as_float(_deep_get(raw, ["feedback", "stance_min"], 1.0), 1.0)
	stance_max = _as_float(_deep_get(raw, ["feedback", "stance_max"], 2.0), 2.0)
	draw_slow = _as_float(_deep_get(raw, ["feedback", "draw_slow_seconds"], 2.5), 2.5)

	log_path = _as_str(_deep_get(raw, ["session_log", "path"], SessionLogConfig.path), SessionLogConfig.path).strip()

	db_url = _as_str(_deep_get(raw, ["database", "url"], ""), "")
	pool_min = _as_int(_deep_get(raw, ["database", "pool_min_size"], 1), 1)
	pool_max = _as_int(_deep_get(raw, ["database", "pool_max_size"], 4), 4)

	pose_backend = _as_str(_deep_get(raw, ["pose", "backend"], "mediapipe"), "mediapipe").strip().lower()
	model_complexity = _as_int(_deep_get(raw, ["pose", "model_complexity"], 1), 1)
	min_det = _as_float(_deep_get(raw, ["pose", "min_detection_confidence"], 0.5), 0.5)
	min_trk = _as_float(_deep_get(raw, ["pose", "min_tracking_confidence"], 0.5), 0.5)

	return AppConfig(
		metrics=MetricsConfig(
			min_score=min(max(float(min_score), 0.0), 1.0),
			grip_ratio=float(grip_ratio) if float(grip_ratio) > 0.0 else 0.35,
			dominant_side=side,
		),
		draw_timer=DrawTimerConfig(arm_margin=float(arm_margin), raise_margin=float(raise_margin)),
		feedback=FeedbackConfig(
			interval_seconds=float(fb_interval) if float(fb_interval) >= 0.0 else 1.0,
			stance_min=float(stance_min),
			stance_max=float(stance_max) if float(stance_max) >= float(stance_min) else max(float(stance_min), 2.0),
			draw_slow_seconds=float(draw_slow) if float(draw_slow) > 0.0 else 2.5,
		),
		session_log=SessionLogConfig(path=log_path or SessionLogConfig.path),
		database=DatabaseConfig(
			url=db_url,
			pool_min_size=max(1, int(pool_min)),
			pool_max_size=max(max(1, int(pool_min)), int(pool_max)),
		),
		pose=PoseConfig(
			backend=pose_backend or "mediapipe",
			model_complexity=int(model_complexity),
			min_detection_confidence=float(min_det),
			min_tracking_confidence=float(min_trk),
		),
	)


def get_config() -> AppConfig:
	global _CONFIG_CACHE
	if _CONFIG_CACHE is None:
		_CONFIG_CACHE = load_config()
	return _CONFIG_CACHE
