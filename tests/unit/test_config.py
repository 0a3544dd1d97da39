import json

import pytest

from strata import config as config_module


def _prepare_config(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    config_file = config_dir / "config.json"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_file)
    monkeypatch.delenv(config_module.ENV_DEBUG, raising=False)
    return config_file


def test_load_config_defaults(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)

    cfg = config_module.load_config()

    assert cfg.debug is False
    assert cfg.max_depth == config_module.DEFAULT_MAX_DEPTH
    assert cfg.patterns == ()
    assert cfg.flat is True
    assert cfg.log_level == config_module.DEFAULT_LOG_LEVEL


def test_setters_persist_values(tmp_path, monkeypatch):
    config_file = _prepare_config(tmp_path, monkeypatch)

    config_module.set_debug(True)
    config_module.set_max_depth(3)
    config_module.set_patterns(["*.yml", " *.xml ", "*.yml", ""])
    config_module.set_flat(False)
    config_module.set_log_level("debug")

    stored = json.loads(config_file.read_text())
    assert stored == {
        "debug": True,
        "max_depth": 3,
        "patterns": ["*.yml", "*.xml"],
        "flat": False,
        "log_level": "DEBUG",
    }
    cfg = config_module.load_config()
    assert cfg.patterns == ("*.yml", "*.xml")
    assert cfg.flat is False


def test_clearing_patterns_removes_key(tmp_path, monkeypatch):
    config_file = _prepare_config(tmp_path, monkeypatch)
    config_module.set_patterns(["*.yml"])

    config_module.set_patterns(None)

    assert "patterns" not in json.loads(config_file.read_text())


@pytest.mark.parametrize("value", [0, -2, "deep", True])
def test_normalize_max_depth_rejects_invalid_values(value):
    with pytest.raises(ValueError):
        config_module.normalize_max_depth(value)


def test_normalize_max_depth_accepts_unlimited_and_positive():
    assert config_module.normalize_max_depth(-1) == -1
    assert config_module.normalize_max_depth("4") == 4


def test_load_config_ignores_invalid_stored_values(tmp_path, monkeypatch):
    config_file = _prepare_config(tmp_path, monkeypatch)
    config_file.parent.mkdir(parents=True)
    config_file.write_text(json.dumps({"max_depth": 0, "log_level": "LOUD"}))

    cfg = config_module.load_config()

    assert cfg.max_depth == config_module.DEFAULT_MAX_DEPTH
    assert cfg.log_level == config_module.DEFAULT_LOG_LEVEL


def test_config_from_json_applies_payload_on_base():
    base = config_module.Config(debug=True, max_depth=2)

    cfg = config_module.config_from_json('{"flat": "no", "patterns": ["*.xml"]}', base=base)

    assert cfg.debug is True
    assert cfg.max_depth == 2
    assert cfg.flat is False
    assert cfg.patterns == ("*.xml",)
    assert base.flat is True


@pytest.mark.parametrize(
    "payload",
    ["[1, 2]", "{not json", '{"debug": "maybe"}', '{"max_depth": 0}', '{"patterns": 5}', '{"log_level": "LOUD"}'],
)
def test_config_from_json_rejects_invalid_payload(payload):
    with pytest.raises(ValueError):
        config_module.config_from_json(payload)


def test_update_config_from_json_merges_and_replaces(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)
    config_module.set_max_depth(5)

    merged = config_module.update_config_from_json({"debug": True})
    assert merged.max_depth == 5
    assert merged.debug is True

    replaced = config_module.update_config_from_json({"flat": False}, replace=True)
    assert replaced.max_depth == config_module.DEFAULT_MAX_DEPTH
    assert replaced.debug is False
    assert config_module.load_config().flat is False


def test_resolve_debug_prefers_explicit_then_env_then_config(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)
    config_module.set_debug(True)

    assert config_module.resolve_debug(False) is False
    assert config_module.resolve_debug(None) is True

    monkeypatch.setenv(config_module.ENV_DEBUG, "off")
    assert config_module.resolve_debug(None) is False

    monkeypatch.setenv(config_module.ENV_DEBUG, "garbage")
    assert config_module.resolve_debug(None) is True


def test_config_dir_context_overrides_location(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)
    other = tmp_path / "other"

    with config_module.config_dir_context(other):
        config_module.set_flat(False)
        assert config_module.load_config().flat is False

    assert (other / "config.json").exists()
    assert config_module.load_config().flat is True


def test_set_config_dir_switches_globals(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)

    config_module.set_config_dir(tmp_path / "alt")
    assert config_module.CONFIG_FILE == (tmp_path / "alt" / "config.json").resolve()

    config_module.set_config_dir(None)
    assert config_module.CONFIG_DIR == config_module.DEFAULT_CONFIG_DIR


def test_set_config_dir_rejects_file(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)
    target = tmp_path / "file.txt"
    target.write_text("x")

    with pytest.raises(NotADirectoryError):
        config_module.set_config_dir(target)
