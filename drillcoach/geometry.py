"""Small 2-D geometry helpers. Points are anything with `.x` and `.y`."""
from __future__ import annotations

import math
from typing import Any


def distance(a: Any, b: Any) -> float:
	"""Euclidean distance between two points."""
	dx = float(a.x) - float(b.x)
	dy = float(a.y) - float(b.y)
	return math.sqrt(dx * dx + dy * dy)


def angle(a: Any, b: Any, c: Any) -> float:
	"""
	Interior angle in degrees at vertex `b`, formed by segments ab and cb.
	"""
	abx, aby = float(a.x) - float(b.x), float(a.y) - float(b.y)
	cbx, cby = float(c.x) - float(b.x), float(c.y) - float(b.y)
	dot = abx * cbx + aby * cby
	mag_ab = math.sqrt(abx * abx + aby * aby)
	mag_cb = math.sqrt(cbx * cbx + cby * cby)
	cos_theta = dot / (mag_ab * mag_cb + 1e-6)
	return math.degrees(math.acos(min(max(cos_theta, -1.0), 1.0)))
