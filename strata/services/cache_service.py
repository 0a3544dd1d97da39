"""Shared helpers for inspecting and removing cache artifacts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from ..cache import METADATA_ERRORS, ConfigCache


@dataclass(slots=True)
class CacheReport:
    path: Path
    exists: bool
    fresh: bool
    debug: bool
    generated_at: str | None = None
    resources: int = 0


def inspect_cache(path: Path | str, *, debug: bool) -> CacheReport:
    """Return the freshness report of the cache artifact at *path*."""

    cache = ConfigCache(path, debug)
    timestamp = cache.get_timestamp()
    if timestamp is None:
        return CacheReport(path=cache.path, exists=False, fresh=False, debug=debug)

    resources = 0
    if debug:
        try:
            resources = len(cache.read_resources())
        except METADATA_ERRORS:
            resources = 0
    generated = datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()
    return CacheReport(
        path=cache.path,
        exists=True,
        fresh=cache.is_fresh(),
        debug=debug,
        generated_at=generated,
        resources=resources,
    )


def clear_cache_file(path: Path | str) -> bool:
    """Remove the artifact and its sidecar; return False when nothing existed."""

    return ConfigCache(path).remove()
