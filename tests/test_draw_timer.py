import pytest

from drillcoach.draw_timer import DrawTimer

from tests.conftest import draw_metrics

HIP = 0.5


def test_full_cycle_emits_one_duration():
	timer = DrawTimer()
	assert timer.update(draw_metrics(HIP + 0.1, HIP), now=10.0) is None
	assert timer.timing
	assert timer.baseline_y == pytest.approx(HIP + 0.1)
	assert timer.update(draw_metrics(HIP, HIP), now=10.5) is None
	duration = timer.update(draw_metrics(HIP - 0.2, HIP), now=11.25)
	assert duration == pytest.approx(1250.0)
	assert not timer.timing
	assert timer.snapshot() == {"baseline_y": None, "start_timestamp": None}


def test_missing_wrist_mid_draw_keeps_start_time():
	timer = DrawTimer()
	timer.update(draw_metrics(HIP + 0.1, HIP), now=0.0)
	assert timer.update(draw_metrics(None, HIP), now=0.4) is None
	assert timer.update(draw_metrics(HIP + 0.02, None), now=0.6) is None
	assert timer.start_timestamp == 0.0
	assert timer.update(draw_metrics(HIP - 0.2, HIP), now=0.9) == pytest.approx(900.0)


def test_does_not_arm_inside_margin():
	timer = DrawTimer()
	assert timer.update(draw_metrics(HIP + 0.04, HIP), now=0.0) is None
	assert not timer.timing
	# A raise without arming first is not a draw.
	assert timer.update(draw_metrics(HIP - 0.3, HIP), now=0.5) is None


def test_no_data_in_armed_wait_does_nothing():
	timer = DrawTimer()
	assert timer.update(draw_metrics(None, None), now=0.0) is None
	assert not timer.timing


def test_hysteresis_band_does_not_complete():
	timer = DrawTimer()
	timer.update(draw_metrics(HIP + 0.1, HIP), now=0.0)
	# Jitter between the arm and raise lines keeps timing.
	for i, y in enumerate([HIP + 0.03, HIP - 0.05, HIP - 0.15, HIP + 0.06, HIP - 0.1]):
		assert timer.update(draw_metrics(y, HIP), now=0.1 * (i + 1)) is None
	assert timer.start_timestamp == 0.0


def test_repeatable_cycles():
	timer = DrawTimer()
	durations = []
	t = 0.0
	for hold in (1.0, 2.0, 0.5):
		timer.update(draw_metrics(HIP + 0.1, HIP), now=t)
		t += hold
		durations.append(timer.update(draw_metrics(HIP - 0.2, HIP), now=t))
		t += 3.0
	assert durations == [pytest.approx(1000.0), pytest.approx(2000.0), pytest.approx(500.0)]


def test_reset_clears_in_progress_draw():
	timer = DrawTimer()
	timer.update(draw_metrics(HIP + 0.1, HIP), now=0.0)
	timer.reset()
	assert timer.update(draw_metrics(HIP - 0.2, HIP), now=1.0) is None


def test_config_overrides_margins():
	timer = DrawTimer(config={"arm_margin": 0.2, "raise_margin": "0.05", "unknown": 1})
	assert timer.arm_margin == 0.2
	assert timer.raise_margin == 0.05
	assert timer.update(draw_metrics(HIP + 0.1, HIP), now=0.0) is None
	assert not timer.timing


def test_config_cannot_replace_methods_or_state():
	timer = DrawTimer(config={"reset": 1, "update": "0.5", "start_timestamp": 3.0, "arm_margin": 0.1})
	assert timer.arm_margin == 0.1
	assert callable(timer.reset)
	assert callable(timer.update)
	assert timer.start_timestamp is None
	timer.reset()
	assert timer.update(draw_metrics(HIP + 0.2, HIP), now=0.0) is None
	assert timer.timing


def test_margins_without_gap_are_rejected():
	with pytest.raises(ValueError):
		DrawTimer(arm_margin=-0.2, raise_margin=0.1)
	with pytest.raises(ValueError):
		DrawTimer(raise_margin=-0.01)
