import json
from pathlib import Path

from drillcoach.config import AppConfig, load_config, resolve_data_path


def test_missing_file_gives_defaults(tmp_path):
	assert load_config(tmp_path / "nope.json") == AppConfig()


def test_malformed_file_gives_defaults(tmp_path):
	p = tmp_path / "config.json"
	p.write_text("[1, 2", encoding="utf-8")
	assert load_config(p) == AppConfig()


def test_values_are_parsed_and_clamped(tmp_path):
	p = tmp_path / "config.json"
	p.write_text(
		json.dumps(
			{
				"metrics": {"min_score": "0.5", "grip_ratio": -1, "dominant_side": "LEFT"},
				"draw_timer": {"arm_margin": 0.08},
				"feedback": {"interval_seconds": 2, "stance_min": 1.2, "stance_max": 0.5},
				"session_log": {"path": "/tmp/x.json"},
				"database": {"url": "postgresql://u@h/db", "pool_min_size": 3, "pool_max_size": 2},
			}
		),
		encoding="utf-8",
	)
	cfg = load_config(p)
	assert cfg.metrics.min_score == 0.5
	assert cfg.metrics.grip_ratio == 0.35
	assert cfg.metrics.dominant_side == "left"
	assert cfg.draw_timer.arm_margin == 0.08
	assert cfg.draw_timer.raise_margin == 0.15
	assert cfg.feedback.interval_seconds == 2.0
	assert cfg.feedback.stance_max == 2.0
	assert cfg.session_log.path == "/tmp/x.json"
	assert cfg.database.pool_min_size == 3
	assert cfg.database.pool_max_size == 3


def test_unknown_dominant_side_falls_back(tmp_path):
	p = tmp_path / "config.json"
	p.write_text(json.dumps({"metrics": {"dominant_side": "both"}}), encoding="utf-8")
	assert load_config(p).metrics.dominant_side == "right"


def test_relative_data_path_is_anchored_at_repo_root(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	repo_root = Path(__file__).resolve().parents[1]
	resolved = resolve_data_path(AppConfig().session_log.path)
	assert resolved == repo_root / "data" / "session_logs.json"
	assert resolved.is_absolute()


def test_absolute_data_path_is_unchanged(tmp_path):
	p = tmp_path / "logs.json"
	assert resolve_data_path(str(p)) == p
