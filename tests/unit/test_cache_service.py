import os
import time

from strata.cache import ConfigCache
from strata.resources import FileResource
from strata.services.cache_service import clear_cache_file, inspect_cache


def test_inspect_missing_cache(tmp_path):
    report = inspect_cache(tmp_path / "none.json", debug=True)

    assert report.exists is False
    assert report.fresh is False
    assert report.generated_at is None


def test_inspect_debug_cache_counts_resources(tmp_path):
    tracked = tmp_path / "res.yml"
    tracked.write_text("x")
    os.utime(tracked, (100, 100))
    ConfigCache(tmp_path / "c.json", True).write("[]", [FileResource(str(tracked))])

    report = inspect_cache(tmp_path / "c.json", debug=True)

    assert report.exists is True
    assert report.fresh is True
    assert report.resources == 1
    assert report.generated_at is not None

    future = time.time() + 1000
    os.utime(tracked, (future, future))
    assert inspect_cache(tmp_path / "c.json", debug=True).fresh is False
    assert inspect_cache(tmp_path / "c.json", debug=False).fresh is True


def test_clear_cache_file(tmp_path):
    ConfigCache(tmp_path / "c.json").write("[]")

    assert clear_cache_file(tmp_path / "c.json") is True
    assert clear_cache_file(tmp_path / "c.json") is False


def test_inspect_cache_with_malformed_metadata_reports_stale(tmp_path):
    cache = ConfigCache(tmp_path / "c.json", True)
    cache.write("[]")
    cache.meta_path.write_text("[]")

    report = inspect_cache(tmp_path / "c.json", debug=True)

    assert report.exists is True
    assert report.fresh is False
    assert report.resources == 0
