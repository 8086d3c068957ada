import json

from drillcoach.session_log import (
	JsonFileSessionLogStore,
	MemorySessionLogStore,
	SessionLogEntry,
	iso_timestamp,
	open_store,
)


def _entry(module="draw", transcript="Started draw session.\nSession ended."):
	return SessionLogEntry(timestamp="2026-10-17T12:00:00.000Z", module=module, transcript=transcript)


def test_file_store_appends_in_order(tmp_path):
	path = tmp_path / "nested" / "logs.json"
	store = JsonFileSessionLogStore(path)
	assert store.entries() == []
	store.append(_entry("stance"))
	store.append(_entry("grip"))
	assert [e.module for e in store.entries()] == ["stance", "grip"]
	raw = json.loads(path.read_text(encoding="utf-8"))
	assert raw[0] == {"timestamp": "2026-10-17T12:00:00.000Z", "module": "stance", "transcript": _entry().transcript}
	assert not list(path.parent.glob(".session_logs.*"))


def test_file_store_recovers_from_corrupt_file(tmp_path):
	path = tmp_path / "logs.json"
	path.write_text("{not json", encoding="utf-8")
	store = JsonFileSessionLogStore(path)
	assert store.entries() == []
	store.append(_entry())
	assert len(store.entries()) == 1
	kept = list(tmp_path.glob("logs.json.corrupt-*"))
	assert len(kept) == 1
	assert kept[0].read_text(encoding="utf-8") == "{not json"


def test_file_store_sets_aside_non_array_history(tmp_path):
	path = tmp_path / "logs.json"
	original = json.dumps({"history": [{"timestamp": "t", "module": "grip", "transcript": "x"}]})
	path.write_text(original, encoding="utf-8")
	store = JsonFileSessionLogStore(path)
	assert store.entries() == []
	store.append(_entry())
	(kept,) = tmp_path.glob("logs.json.corrupt-*")
	assert kept.read_text(encoding="utf-8") == original
	assert [e.module for e in store.entries()] == ["draw"]


def test_file_store_keeps_valid_file_in_place(tmp_path):
	path = tmp_path / "logs.json"
	store = JsonFileSessionLogStore(path)
	store.append(_entry())
	store.append(_entry(module="grip"))
	assert not list(tmp_path.glob("*.corrupt-*"))
	assert len(store.entries()) == 2


def test_file_store_reads_browser_export_key(tmp_path):
	path = tmp_path / "logs.json"
	path.write_text(json.dumps([{"timestamp": "t", "module": "full", "log": "old text"}]), encoding="utf-8")
	assert JsonFileSessionLogStore(path).entries()[0].transcript == "old text"


def test_memory_store_returns_copy():
	store = MemorySessionLogStore()
	store.append(_entry())
	store.entries().clear()
	assert len(store.entries()) == 1


def test_open_store_picks_backend(tmp_path):
	assert isinstance(open_store(str(tmp_path / "x.json")), JsonFileSessionLogStore)
	assert isinstance(open_store(""), MemorySessionLogStore)


def test_iso_timestamp_is_utc():
	assert iso_timestamp(0.0) == "1970-01-01T00:00:00.000Z"
