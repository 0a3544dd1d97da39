from pathlib import Path

import pytest

from strata.matchers import ByFileNameMatcher, GlobFileMatcher
from strata.utils import build_matcher, format_path, layer_of, resolve_directory


def test_resolve_directory_validates_path(tmp_path):
    assert resolve_directory(tmp_path) == tmp_path.resolve()

    with pytest.raises(FileNotFoundError):
        resolve_directory(tmp_path / "missing")

    target = tmp_path / "file.txt"
    target.write_text("x")
    with pytest.raises(NotADirectoryError):
        resolve_directory(target)


def test_build_matcher_selects_strategy():
    assert build_matcher(["*.yml"]) == GlobFileMatcher(["*.yml"])
    assert build_matcher([r"\.yml$"], regex=True) == ByFileNameMatcher([r"\.yml$"])
    assert build_matcher(None).is_matched("anything")


def test_build_matcher_reports_bad_regex():
    with pytest.raises(ValueError, match="Invalid pattern"):
        build_matcher(["("], regex=True)


def test_layer_of_detects_override_files(tmp_path):
    override = tmp_path / "app"

    assert layer_of(override / "config" / "a.yml", override) == "override"
    assert layer_of(tmp_path / "bundle" / "a.yml", override) == "base"
    assert layer_of(tmp_path / "bundle" / "a.yml", None) == "base"


def test_format_path_relative_to_base():
    base = Path("/srv/config")

    assert format_path(Path("/srv/config/sub/a.yml"), base) == "./sub/a.yml"
    assert format_path(Path("/etc/a.yml"), base) == "/etc/a.yml"
    assert format_path(Path("/etc/a.yml")) == "/etc/a.yml"
