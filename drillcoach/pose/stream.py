from __future__ import annotations

from typing import Callable, List, Optional

from drillcoach.metrics import MetricsRecord, compute_metrics
from drillcoach.pose.types import Pose

PoseCallback = Callable[[Pose, MetricsRecord], None]
Extractor = Callable[[Pose, float, float], MetricsRecord]


class PoseStream:
	"""
	Push-style pose source.

	Whatever runs detection (HTTP frame endpoint, replay CLI, camera loop)
	calls publish() once per detection; subscribers receive (pose, metrics)
	synchronously and in publish order. Callers must not publish concurrently.
	"""

	def __init__(self, extractor: Optional[Extractor] = None) -> None:
		self._extractor: Extractor = extractor or compute_metrics
		self._subscribers: List[PoseCallback] = []

	def subscribe(self, callback: PoseCallback) -> None:
		if callback not in self._subscribers:
			self._subscribers.append(callback)

	def unsubscribe(self, callback: PoseCallback) -> None:
		try:
			self._subscribers.remove(callback)
		except ValueError:
			pass

	@property
	def subscriber_count(self) -> int:
		return len(self._subscribers)

	def publish(self, pose: Optional[Pose]) -> Optional[MetricsRecord]:
		"""
		Compute metrics for `pose` and hand both to every subscriber.

		A None pose means "no detection this frame" and is not forwarded.
		"""
		if pose is None:
			return None
		metrics = self._extractor(pose, pose.width, pose.height)
		# Copy: a subscriber may unsubscribe itself from inside its callback.
		for cb in list(self._subscribers):
			cb(pose, metrics)
		return metrics
