import pytest

from strata import config as config_module
from strata.services.config_service import apply_config_updates, get_config_snapshot


@pytest.fixture(autouse=True)
def temp_config_home(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_dir / "config.json")


def test_apply_config_updates_reports_changes():
    result = apply_config_updates(debug=True, max_depth=2, patterns=["*.yml"], log_level="info")

    assert result.changed is True
    assert (result.debug_set, result.max_depth_set, result.patterns_set) == (True, True, True)
    assert result.flat_set is False
    cfg = get_config_snapshot()
    assert cfg.debug is True
    assert cfg.max_depth == 2
    assert cfg.patterns == ("*.yml",)
    assert cfg.log_level == "INFO"


def test_apply_config_updates_clear_then_set_patterns():
    apply_config_updates(patterns=["*.xml"])

    result = apply_config_updates(clear_patterns=True, patterns=["*.yml"])

    assert result.patterns_cleared is True
    assert get_config_snapshot().patterns == ("*.yml",)


def test_apply_config_updates_without_options():
    assert apply_config_updates().changed is False


def test_apply_config_updates_rejects_invalid_depth():
    with pytest.raises(ValueError):
        apply_config_updates(max_depth=0)
