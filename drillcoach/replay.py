"""
Replay recorded poses through a training session.

Input is JSON Lines, one detection per line:
    {"t": 12.345, "width": 640, "height": 480,
     "keypoints": [{"name": "right_wrist", "x": 320.0, "y": 300.0, "score": 0.9}, ...]}

`t` is seconds on any monotonic timebase; it drives the feedback throttle
and the draw timer instead of the wall clock. A line with `"pose": null` (or
no keypoints key) is a frame without a detection.
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Tuple

from drillcoach.config import AppConfig, load_config, resolve_data_path
from drillcoach.draw_timer import DrawTimer
from drillcoach.feedback import FeedbackThresholds
from drillcoach.metrics import MetricExtractor
from drillcoach.pose.stream import PoseStream
from drillcoach.pose.types import Keypoint, Pose
from drillcoach.session_log import SessionLogEntry, SessionLogStore, open_store
from drillcoach.training import TrainingSession

logger = logging.getLogger(__name__)


def parse_pose_line(obj: Dict[str, Any]) -> Optional[Pose]:
	if obj.get("pose", True) is None or "keypoints" not in obj:
		return None
	kps = obj.get("keypoints") or []
	return Pose.from_keypoints(
		(Keypoint.from_dict(k) for k in kps if isinstance(k, dict)),
		width=int(obj.get("width") or 0),
		height=int(obj.get("height") or 0),
		backend="replay",
		t_host=(float(obj["t"]) if obj.get("t") is not None else None),
	)


def iter_frames(lines: Iterable[str]) -> Iterator[Tuple[float, Optional[Pose]]]:
	"""Yield (t, pose) for each usable line; blank and malformed lines are skipped."""
	for lineno, line in enumerate(lines, start=1):
		line = line.strip()
		if not line:
			continue
		try:
			obj = json.loads(line)
		except ValueError as e:
			logger.warning("[Replay] line %d: invalid JSON (%s); skipped", lineno, e)
			continue
		if not isinstance(obj, dict) or obj.get("t") is None:
			logger.warning("[Replay] line %d: missing 't'; skipped", lineno)
			continue
		yield float(obj["t"]), parse_pose_line(obj)


def run_replay(
	lines: Iterable[str],
	module: str,
	store: SessionLogStore,
	cfg: Optional[AppConfig] = None,
	on_message: Optional[Callable[[str], None]] = None,
) -> Optional[SessionLogEntry]:
	"""Drive one full session over the recorded frames and return its log entry."""
	cfg = cfg or AppConfig()
	clock_t = [0.0]
	stream = PoseStream(extractor=MetricExtractor.from_config(cfg.metrics))
	session = TrainingSession(
		log_store=store,
		clock=lambda: clock_t[0],
		on_message=on_message,
		pose_source=stream,
		draw_timer=DrawTimer.from_config(cfg.draw_timer),
		feedback_interval_s=cfg.feedback.interval_seconds,
		thresholds=FeedbackThresholds.from_config(cfg.feedback),
	)

	frames = iter_frames(lines)
	first = next(frames, None)
	if first is not None:
		clock_t[0] = first[0]
	session.start(module)
	if first is not None:
		stream.publish(first[1])
		for t, pose in frames:
			clock_t[0] = max(clock_t[0], t)
			stream.publish(pose)
	return session.stop()


def main(argv: Optional[list] = None) -> int:
	import argparse

	parser = argparse.ArgumentParser(description="Replay a JSON Lines pose recording through a training session.")
	parser.add_argument("file", help="JSON Lines pose recording ('-' for stdin).")
	parser.add_argument("--module", choices=["stance", "grip", "draw", "full"], default="full", help="Training module.")
	parser.add_argument("--config", help="Path to config.json (defaults to the repo config).")
	parser.add_argument("--log", help="Session log file to append to (defaults to session_log.path from config).")
	parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
	args = parser.parse_args(argv)

	if args.debug:
		logging.basicConfig(level=logging.DEBUG, format="%(levelname)s:%(name)s:%(message)s")
	else:
		logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")

	cfg = load_config(args.config)
	store = open_store(args.log or resolve_data_path(cfg.session_log.path))
	try:
		if args.file == "-":
			entry = run_replay(sys.stdin, args.module, store, cfg=cfg, on_message=print)
		else:
			with open(Path(args.file).expanduser(), "r", encoding="utf-8") as fh:
				entry = run_replay(fh, args.module, store, cfg=cfg, on_message=print)
	except OSError as e:
		logging.error("Could not replay %s: %s", args.file, e)
		return 1
	if entry is not None:
		print(f"Logged {entry.module} session at {entry.timestamp}")
	return 0


if __name__ == "__main__":
	sys.exit(main())
