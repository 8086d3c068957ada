"""
Pose data model and pose sources.

This package defines a model-agnostic Pose interface, provider adapters
(e.g., MediaPipe Pose) and a push-style PoseStream (drillcoach.pose.stream)
so the training controller never depends on how a pose was produced.
"""

from drillcoach.pose.base import PoseProvider
from drillcoach.pose.types import Keypoint, Point2D, Pose

__all__ = ["Keypoint", "Point2D", "Pose", "PoseProvider"]
