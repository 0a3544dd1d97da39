import json
import logging
import os
import time

import pytest

from strata.cache import META_VERSION, ConfigCache, atomic_write_text
from strata.resources import FileResource


class FakeDependency:
    def __init__(self, fresh: bool) -> None:
        self.fresh = fresh
        self.calls = 0

    def is_cache_fresh(self, timestamp: float) -> bool:
        self.calls += 1
        return self.fresh


def _old_file(path, mtime: float = 100):
    path.write_text("data")
    os.utime(path, (mtime, mtime))
    return FileResource(str(path))


def _future_file(path):
    path.write_text("data")
    future = time.time() + 1000
    os.utime(path, (future, future))
    return FileResource(str(path))


@pytest.mark.parametrize("debug", [False, True])
def test_cache_is_not_fresh_when_nothing_was_cached(tmp_path, debug):
    cache = ConfigCache(tmp_path / "cache.json", debug)

    assert cache.get_timestamp() is None
    assert cache.is_fresh() is False


def test_production_cache_is_always_fresh_and_has_no_metadata(tmp_path):
    cache = ConfigCache(tmp_path / "cache.json", debug=False)

    cache.write("[]", [_future_file(tmp_path / "res.yml")])

    assert cache.is_fresh() is True
    assert not cache.meta_path.exists()


def test_debug_cache_with_empty_resources_has_no_metadata(tmp_path):
    cache = ConfigCache(tmp_path / "cache.json", debug=True)

    cache.write("[]", [])

    assert cache.is_fresh() is True
    assert not cache.meta_path.exists()


def test_debug_cache_without_metadata_is_fresh(tmp_path):
    (tmp_path / "cache.json").write_text("[]")

    assert ConfigCache(tmp_path / "cache.json", debug=True).is_fresh() is True


def test_fresh_resource_in_debug(tmp_path):
    cache = ConfigCache(tmp_path / "cache.json", debug=True)

    cache.write("[]", [_old_file(tmp_path / "res.yml")])

    assert cache.meta_path.exists()
    payload = json.loads(cache.meta_path.read_text())
    assert payload["version"] == META_VERSION
    assert payload["resources"] == [{"type": "file", "path": str(tmp_path / "res.yml")}]
    assert cache.is_fresh() is True


def test_stale_resource_in_debug(tmp_path):
    cache = ConfigCache(tmp_path / "cache.json", debug=True)

    cache.write("[]", [_future_file(tmp_path / "res.yml")])

    assert cache.is_fresh() is False


def test_fresh_resource_with_fresh_dependencies(tmp_path):
    cache = ConfigCache(tmp_path / "cache.json", debug=True)
    first = FakeDependency(True)
    second = FakeDependency(True)
    cache.add_dependency(first)
    cache.add_dependency(second)

    cache.write("[]", [_old_file(tmp_path / "res.yml")])

    assert cache.is_fresh() is True
    assert (first.calls, second.calls) == (1, 1)


def test_fresh_resource_with_stale_first_dependency(tmp_path):
    cache = ConfigCache(tmp_path / "cache.json", debug=True)
    first = FakeDependency(False)
    second = FakeDependency(True)
    cache.add_dependency(first)
    cache.add_dependency(second)

    cache.write("[]", [_old_file(tmp_path / "res.yml")])

    assert cache.is_fresh() is False
    assert first.calls == 1
    assert second.calls == 0


def test_stale_resource_skips_dependencies(tmp_path):
    cache = ConfigCache(tmp_path / "cache.json", debug=True)
    dependency = FakeDependency(True)
    cache.add_dependency(dependency)

    cache.write("[]", [_future_file(tmp_path / "res.yml")])

    assert cache.is_fresh() is False
    assert dependency.calls == 0


def test_rewrite_without_resources_drops_old_metadata(tmp_path):
    cache = ConfigCache(tmp_path / "cache.json", debug=True)
    cache.write("[]", [_old_file(tmp_path / "res.yml")])
    assert cache.meta_path.exists()

    cache.write("[]")

    assert not cache.meta_path.exists()


def test_unreadable_metadata_marks_cache_stale(tmp_path, caplog):
    cache = ConfigCache(tmp_path / "cache.json", debug=True)
    cache.write("[]")
    cache.meta_path.write_text("{not json")

    with caplog.at_level(logging.WARNING, logger="strata.cache"):
        assert cache.is_fresh() is False

    assert "Failed to read cache metadata" in caplog.text


def test_unsupported_metadata_version_marks_cache_stale(tmp_path):
    cache = ConfigCache(tmp_path / "cache.json", debug=True)
    cache.write("[]")
    cache.meta_path.write_text(json.dumps({"version": 99, "resources": []}))

    assert cache.is_fresh() is False


def test_remove_deletes_artifact_and_metadata(tmp_path):
    cache = ConfigCache(tmp_path / "cache.json", debug=True)
    cache.write("[]", [_old_file(tmp_path / "res.yml")])

    assert cache.remove() is True
    assert not cache.path.exists()
    assert not cache.meta_path.exists()
    assert cache.remove() is False


def test_atomic_write_text_creates_parents_and_leaves_no_temp_file(tmp_path):
    target = tmp_path / "nested" / "dir" / "cache.json"

    atomic_write_text(target, '{"a": 1}')

    assert json.loads(target.read_text()) == {"a": 1}
    assert sorted(p.name for p in target.parent.iterdir()) == ["cache.json"]


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"version": META_VERSION, "resources": [1]},
        {"version": META_VERSION, "resources": {"type": "file"}},
        {"version": META_VERSION, "resources": [{"type": "cumulative", "name": "x", "found": ["/a"]}]},
        {"version": META_VERSION, "resources": [{"type": "cumulative", "name": "x", "found": {"owner": []}}]},
        {"version": META_VERSION, "resources": [{"type": "cumulative", "name": "x", "roots": ["/a"]}]},
        {
            "version": META_VERSION,
            "resources": [
                {
                    "type": "cumulative",
                    "name": "x",
                    "loaders": [{"type": "folder", "relative_path": "c", "matcher": {"type": "regex", "patterns": ["("]}}],
                }
            ],
        },
    ],
)
def test_malformed_metadata_marks_cache_stale(tmp_path, caplog, payload):
    cache = ConfigCache(tmp_path / "cache.json", debug=True)
    cache.write("[]")
    cache.meta_path.write_text(json.dumps(payload))

    with caplog.at_level(logging.WARNING, logger="strata.cache"):
        assert cache.is_fresh() is False

    assert "Failed to read cache metadata" in caplog.text
