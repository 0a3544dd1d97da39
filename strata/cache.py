"""On-disk config cache: a serialized artifact plus an optional ``.meta`` sidecar."""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Iterable

from .resources import CacheFreshness, decode_resources, encode_resources
from .state import CacheState

logger = logging.getLogger(__name__)

META_SUFFIX = ".meta"
META_VERSION = 1
METADATA_ERRORS = (OSError, ValueError, KeyError, TypeError, re.error)


def atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    tmp_path.write_text(text, encoding="utf-8")
    tmp_path.replace(path)


class ConfigCache:
    """Artifact file whose freshness is tracked through recorded resources.

    In debug mode the resources passed to :meth:`write` are stored next to the
    artifact in ``<path>.meta`` and checked against the artifact's mtime.
    In production mode only the artifact's existence matters.
    """

    def __init__(self, path: Path | str, debug: bool = False) -> None:
        self.path = Path(path)
        self.debug = debug
        self._dependencies: list[CacheFreshness] = []

    @property
    def meta_path(self) -> Path:
        return self.path.with_name(self.path.name + META_SUFFIX)

    @property
    def dependencies(self) -> list[CacheFreshness]:
        return list(self._dependencies)

    def add_dependency(self, dependency: CacheFreshness) -> None:
        self._dependencies.append(dependency)

    def get_timestamp(self) -> float | None:
        try:
            return self.path.stat().st_mtime
        except OSError:
            return None

    def is_fresh(self) -> bool:
        timestamp = self.get_timestamp()
        if timestamp is None:
            return False
        if not self.debug:
            return True
        try:
            resources = self.read_resources()
        except METADATA_ERRORS as exc:
            logger.warning(
                "Failed to read cache metadata, treating cache as stale. path=%s error=%s",
                self.meta_path,
                exc,
            )
            return False
        state = CacheState(resources=resources, dependencies=self._dependencies, debug=True)
        return state.is_cache_fresh(timestamp)

    def read_resources(self) -> list[CacheFreshness]:
        """Return resources recorded in the sidecar; an absent sidecar means none."""

        if not self.meta_path.exists():
            return []
        payload = json.loads(self.meta_path.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError("Cache metadata must be a JSON object")
        version = payload.get("version")
        if version != META_VERSION:
            raise ValueError(f"Unsupported cache metadata version: {version!r}")
        resources = payload.get("resources") or []
        if not isinstance(resources, list):
            raise ValueError("Cache metadata resources must be a list")
        return decode_resources(resources)

    def write(self, content: str, resources: Iterable[CacheFreshness] | None = None) -> None:
        atomic_write_text(self.path, content)
        recorded = list(resources or [])
        if self.debug and recorded:
            payload = {"version": META_VERSION, "resources": encode_resources(recorded)}
            atomic_write_text(self.meta_path, json.dumps(payload, indent=2, sort_keys=True))
        elif self.meta_path.exists():
            self.meta_path.unlink()

    def remove(self) -> bool:
        """Delete the artifact and its sidecar, returning True when anything was removed."""

        removed = False
        for target in (self.path, self.meta_path):
            if target.exists():
                target.unlink()
                removed = True
        return removed

    def __repr__(self) -> str:
        return f"ConfigCache(path={os.fspath(self.path)!r}, debug={self.debug})"
