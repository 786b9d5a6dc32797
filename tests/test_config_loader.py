import logging

import pytest
from spot_core.engine.config_loader import (
    REQUIRED_ENGINE_KEYS,
    config_path,
    engine_config,
    engine_value,
    load_yaml_file,
    missing_engine_keys,
    reload_config,
    require,
)
from spot_core.engine.types import ConfigError


def test_bundled_engine_config_is_complete():
    assert missing_engine_keys() == []
    assert engine_value("generator.max_retries") == 20
    assert engine_value("bet_size_sets.high.overbet") == [100, 125]


def test_require_walks_dotted_paths():
    cfg = {"a": {"b": {"c": 3}}, "x": 1}
    assert require(cfg, "a.b.c") == 3
    with pytest.raises(ConfigError, match="a.b.d"):
        require(cfg, "a.b.d")
    with pytest.raises(ConfigError, match="x.y"):
        require(cfg, "x.y")


def test_missing_file_is_empty_and_logged(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="spot_core.engine.config_loader"):
        assert load_yaml_file(str(tmp_path / "nope.yaml")) == {}
    assert any(r.getMessage() == "config_file_missing" for r in caplog.records)


def test_malformed_yaml_raises(tmp_path):
    p = tmp_path / "bad.yaml"
    p.write_text("a: [1, 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_yaml_file(str(p))


def test_non_mapping_root_raises(tmp_path):
    p = tmp_path / "list.yaml"
    p.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_yaml_file(str(p))


def test_missing_keys_are_reported(caplog):
    with caplog.at_level(logging.WARNING, logger="spot_core.engine.config_loader"):
        missing = missing_engine_keys({"stack_pressure": {"high_spr": 1.2}})
    assert "stack_pressure.high_spr" not in missing
    assert "stack_pressure.medium_spr" in missing
    assert len(missing) == len(REQUIRED_ENGINE_KEYS) - 1
    rec = next(r for r in caplog.records if r.getMessage() == "engine_config_missing_keys")
    assert rec.missing == missing


def test_engine_file_override(tmp_path, monkeypatch):
    p = tmp_path / "engine.yaml"
    p.write_text("generator:\n  max_retries: 3\n", encoding="utf-8")
    monkeypatch.setenv("SPOTGEN_ENGINE_FILE", str(p))
    reload_config()
    assert engine_config()["generator"]["max_retries"] == 3
    with pytest.raises(ConfigError):
        engine_value("line.positions")


def test_missing_override_falls_back(tmp_path, monkeypatch, caplog):
    monkeypatch.setenv("SPOTGEN_ENGINE_FILE", str(tmp_path / "gone.yaml"))
    with caplog.at_level(logging.WARNING, logger="spot_core.engine.config_loader"):
        p = config_path("SPOTGEN_ENGINE_FILE", "engine.yaml")
    assert p.name == "engine.yaml"
    assert p.parent.name == "config"
    assert any(r.getMessage() == "config_override_missing" for r in caplog.records)
