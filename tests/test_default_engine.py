"""Tests for the process-wide default engine."""

import json

import hookrelay
from hookrelay import HookEngine


class TestDefaultEngine:
    def test_same_instance(self):
        assert hookrelay.get_default_engine() is hookrelay.get_default_engine()

    def test_reset_disposes(self):
        engine = hookrelay.get_default_engine()
        engine.register("init", lambda ctx: None)
        hookrelay.reset_default_engine()
        assert engine.is_disposed is True
        fresh = hookrelay.get_default_engine()
        assert fresh is not engine
        assert fresh.count_handlers() == 0

    def test_set_default_engine(self):
        custom = HookEngine()
        hookrelay.set_default_engine(custom)
        assert hookrelay.get_default_engine() is custom

    def test_replaces_disposed_engine(self):
        engine = hookrelay.get_default_engine()
        engine.dispose()
        assert hookrelay.get_default_engine() is not engine

    def test_built_from_config_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"engine": {"default_timeout_ms": 750}}))
        monkeypatch.setenv("HOOKRELAY_CONFIG", str(path))
        assert hookrelay.get_default_engine().config.default_timeout_ms == 750

    def test_bad_config_file_falls_back(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"default_timeout_ms": "soon"}))
        monkeypatch.setenv("HOOKRELAY_CONFIG", str(path))
        assert hookrelay.get_default_engine().config.default_timeout_ms is None

    def test_undecodable_config_file_falls_back(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_bytes(b'{"log_errors": \xff\xfe}')
        monkeypatch.setenv("HOOKRELAY_CONFIG", str(path))
        assert hookrelay.get_default_engine().config == hookrelay.EngineConfig()
