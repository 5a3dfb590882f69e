"""Tests for engine configuration loading."""

import json

from hookrelay.config import (
    EngineConfig,
    load_engine_config,
    load_engine_config_from_dict,
    read_engine_config,
)


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.default_timeout_ms is None
        assert config.log_errors is True
        assert config.default_domain == "default"

    def test_to_dict(self):
        assert EngineConfig(default_timeout_ms=10).to_dict() == {
            "default_timeout_ms": 10,
            "log_errors": True,
            "default_domain": "default",
        }

    def test_from_dict_partial(self):
        config = load_engine_config_from_dict({"log_errors": False})
        assert config.log_errors is False
        assert config.default_timeout_ms is None


class TestLoadEngineConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_engine_config(tmp_path / "nope.json") == EngineConfig()

    def test_direct_format(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"default_timeout_ms": 3000}))
        assert load_engine_config(path).default_timeout_ms == 3000

    def test_wrapped_format(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"engine": {"default_domain": "core"}}))
        assert load_engine_config(str(path)).default_domain == "core"

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "env.json"
        path.write_text(json.dumps({"log_errors": False}))
        monkeypatch.setenv("HOOKRELAY_CONFIG", str(path))
        assert load_engine_config().log_errors is False

    def test_invalid_json_warns(self, tmp_path, caplog):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert read_engine_config(path) == {}
        assert "Failed to parse engine config" in caplog.text

    def test_non_object_ignored(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        assert read_engine_config(path) == {}

    def test_undecodable_bytes_warn(self, tmp_path, caplog):
        path = tmp_path / "config.json"
        path.write_bytes(b'{"log_errors": \xff\xfe}')
        assert read_engine_config(path) == {}
        assert "Failed to parse engine config" in caplog.text

    def test_invalid_values_fall_back_to_defaults(self, tmp_path, caplog):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"default_timeout_ms": "500"}))
        assert load_engine_config(path) == EngineConfig()
        assert "Engine config has errors" in caplog.text
        assert "default_timeout_ms" in caplog.text
