import pytest

from drillcoach.metrics import MetricExtractor, MetricsRecord, compute_metrics, normalize_keypoints
from drillcoach.pose.types import Keypoint, Pose

from tests.conftest import HEIGHT, STANCE_POINTS, WIDTH, make_pose


def test_stance_ratio_from_ankles_and_shoulders():
	m = compute_metrics(make_pose(STANCE_POINTS), WIDTH, HEIGHT)
	# 0.6 ankle spread / 0.4 shoulder width
	assert m.stance_ratio == pytest.approx(1.5)


@pytest.mark.parametrize("missing", ["left_ankle", "right_ankle", "left_shoulder", "right_shoulder"])
def test_stance_ratio_none_when_landmark_missing(missing):
	pts = {k: v for k, v in STANCE_POINTS.items() if k != missing}
	assert compute_metrics(make_pose(pts), WIDTH, HEIGHT).stance_ratio is None


def test_low_confidence_counts_as_missing():
	kps = [Keypoint(n, x * WIDTH, y * HEIGHT, 0.9) for n, (x, y) in STANCE_POINTS.items()]
	kps[0] = Keypoint("left_ankle", kps[0].x, kps[0].y, 0.3)
	m = compute_metrics(Pose.from_keypoints(kps, WIDTH, HEIGHT), WIDTH, HEIGHT)
	assert m.stance_ratio is None


def test_zero_shoulder_width_gives_none():
	pts = dict(STANCE_POINTS, right_shoulder=(0.3, 0.3))
	pts.update({"left_wrist": (0.45, 0.5), "right_wrist": (0.55, 0.5)})
	m = compute_metrics(make_pose(pts), WIDTH, HEIGHT)
	assert m.stance_ratio is None
	assert m.grip_two_hand is None


def test_two_hand_grip_when_wrists_close():
	pts = {
		"left_wrist": (0.45, 0.5),
		"right_wrist": (0.55, 0.5),
		"left_shoulder": (0.3, 0.3),
		"right_shoulder": (0.7, 0.3),
	}
	assert compute_metrics(make_pose(pts), WIDTH, HEIGHT).grip_two_hand is True


def test_one_hand_grip_when_wrists_apart():
	pts = {
		"left_wrist": (0.2, 0.5),
		"right_wrist": (0.8, 0.5),
		"left_shoulder": (0.3, 0.3),
		"right_shoulder": (0.7, 0.3),
	}
	assert compute_metrics(make_pose(pts), WIDTH, HEIGHT).grip_two_hand is False


def test_grip_none_without_both_wrists():
	pts = {"right_wrist": (0.55, 0.5), "left_shoulder": (0.3, 0.3), "right_shoulder": (0.7, 0.3)}
	assert compute_metrics(make_pose(pts), WIDTH, HEIGHT).grip_two_hand is None


def test_dominant_wrist_and_hip_heights():
	pts = {"right_wrist": (0.6, 0.7), "right_hip": (0.55, 0.6), "left_wrist": (0.4, 0.1), "left_hip": (0.45, 0.2)}
	m = compute_metrics(make_pose(pts), WIDTH, HEIGHT)
	assert m.wrist_y == pytest.approx(0.7)
	assert m.hip_y == pytest.approx(0.6)
	left = compute_metrics(make_pose(pts), WIDTH, HEIGHT, dominant_side="left")
	assert left.wrist_y == pytest.approx(0.1)
	assert left.hip_y == pytest.approx(0.2)


def test_empty_pose_gives_all_none():
	m = compute_metrics(Pose.from_keypoints([], WIDTH, HEIGHT), WIDTH, HEIGHT)
	assert m == MetricsRecord()


def test_bad_frame_size_gives_all_none():
	assert compute_metrics(make_pose(STANCE_POINTS), 0, HEIGHT) == MetricsRecord()


def test_duplicate_names_last_confident_wins():
	pose = Pose.from_keypoints(
		[
			Keypoint("right_wrist", 100.0, 0.2 * HEIGHT, 0.9),
			Keypoint("right_wrist", 100.0, 0.8 * HEIGHT, 0.9),
			Keypoint("right_wrist", 100.0, 0.5 * HEIGHT, 0.1),
		],
		WIDTH,
		HEIGHT,
	)
	pts = normalize_keypoints(pose, WIDTH, HEIGHT)
	assert pts["right_wrist"].y == pytest.approx(0.8)
	assert compute_metrics(pose, WIDTH, HEIGHT).wrist_y == pytest.approx(0.8)


def test_compute_metrics_is_deterministic():
	pts = dict(STANCE_POINTS, left_wrist=(0.45, 0.5), right_wrist=(0.55, 0.5), right_hip=(0.6, 0.6))
	pose = make_pose(pts)
	a = compute_metrics(pose, WIDTH, HEIGHT)
	b = compute_metrics(pose, WIDTH, HEIGHT)
	assert a == b
	assert a.to_dict() == b.to_dict()


def test_to_dict_uses_wire_names():
	d = MetricsRecord(stance_ratio=1.5, grip_two_hand=True, wrist_y=0.7, hip_y=0.6).to_dict()
	assert d == {"stanceRatio": 1.5, "gripTwoHand": True, "wristY": 0.7, "hipY": 0.6}


def test_extractor_applies_configured_threshold():
	pose = make_pose(STANCE_POINTS, score=0.5)
	assert MetricExtractor()(pose, WIDTH, HEIGHT).stance_ratio == pytest.approx(1.5)
	assert MetricExtractor(min_score=0.6)(pose, WIDTH, HEIGHT).stance_ratio is None
