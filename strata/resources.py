"""Freshness-checkable resources recorded while a config cache is built."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Mapping, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .loader import CumulativeResourceLoader

logger = logging.getLogger(__name__)

RESOURCE_FILE = "file"
RESOURCE_CUMULATIVE = "cumulative"


@runtime_checkable
class CacheFreshness(Protocol):
    """Anything able to tell whether it is still valid as of *timestamp*."""

    def is_cache_fresh(self, timestamp: float) -> bool: ...


@dataclass(frozen=True, slots=True)
class FileResource:
    path: str

    def is_cache_fresh(self, timestamp: float) -> bool:
        try:
            stat = os.stat(self.path)
        except OSError:
            return False
        if not os.access(self.path, os.R_OK):
            return False
        return stat.st_mtime <= timestamp

    def to_dict(self) -> dict[str, object]:
        return {"type": RESOURCE_FILE, "path": self.path}

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True, slots=True)
class ResourceRoot:
    """Directory roots owned by one bundle: the base one and an optional override."""

    owner: str
    base_root: str
    override_root: str | None = None

    @classmethod
    def create(
        cls,
        owner: str,
        base_root: Path | str,
        override_root: Path | str | None = None,
    ) -> "ResourceRoot":
        return cls(
            owner=owner,
            base_root=os.fspath(base_root),
            override_root=os.fspath(override_root) if override_root else None,
        )


class ResourcesContainer:
    """Mutable collector handed to config producers."""

    def __init__(self) -> None:
        self._resources: list[CacheFreshness] = []

    def add_resource(self, resource: CacheFreshness) -> None:
        self._resources.append(resource)

    def get_resources(self) -> list[CacheFreshness]:
        return list(self._resources)

    def __len__(self) -> int:
        return len(self._resources)


class CumulativeResource:
    """Tracked files of one cumulative load, grouped by owner and loader.

    Freshness is delegated to each loader for each root recorded during the
    load, so a later check only needs this object and the filesystem.
    """

    def __init__(self, name: str, loaders: Sequence["CumulativeResourceLoader"]) -> None:
        self.name = name
        self.loaders = tuple(loaders)
        self._roots: dict[str, ResourceRoot] = {}
        self._found: dict[str, dict[str, set[str]]] = {}

    @property
    def roots(self) -> list[ResourceRoot]:
        return list(self._roots.values())

    def add_root(self, root: ResourceRoot) -> None:
        self._roots[root.owner] = root

    def add_found(self, owner: str, resource_name: str, paths: Iterable[str] | str) -> None:
        bucket = self._found.setdefault(owner, {}).setdefault(resource_name, set())
        if isinstance(paths, str):
            bucket.add(paths)
        else:
            bucket.update(paths)

    def get_found(self, owner: str, resource_name: str | None = None) -> set[str]:
        by_name = self._found.get(owner, {})
        if resource_name is not None:
            return set(by_name.get(resource_name, ()))
        found: set[str] = set()
        for paths in by_name.values():
            found.update(paths)
        return found

    def is_found(self, owner: str, path: str) -> bool:
        return any(path in paths for paths in self._found.get(owner, {}).values())

    def is_cache_fresh(self, timestamp: float) -> bool:
        for root in self._roots.values():
            for loader in self.loaders:
                if not loader.is_resource_fresh(
                    root.owner,
                    root.base_root,
                    root.override_root,
                    self,
                    timestamp,
                ):
                    logger.debug(
                        "Cumulative resource is stale. name=%s owner=%s loader=%s",
                        self.name,
                        root.owner,
                        loader.resource,
                    )
                    return False
        return True

    def to_dict(self) -> dict[str, object]:
        return {
            "type": RESOURCE_CUMULATIVE,
            "name": self.name,
            "loaders": [loader.to_dict() for loader in self.loaders],
            "roots": [
                {
                    "owner": root.owner,
                    "base_root": root.base_root,
                    "override_root": root.override_root,
                }
                for root in self._roots.values()
            ],
            "found": {
                owner: {name: sorted(paths) for name, paths in by_name.items()}
                for owner, by_name in self._found.items()
            },
        }

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"CumulativeResource(name={self.name!r}, loaders={len(self.loaders)})"


def encode_resource(resource: CacheFreshness) -> dict[str, object]:
    to_dict = getattr(resource, "to_dict", None)
    if to_dict is None:
        raise ValueError(f"Resource cannot be persisted: {resource!r}")
    return to_dict()


def encode_resources(resources: Iterable[CacheFreshness]) -> list[dict[str, object]]:
    return [encode_resource(resource) for resource in resources]


def decode_resource(payload: Mapping[str, object]) -> CacheFreshness:
    if not isinstance(payload, Mapping):
        raise ValueError(f"Resource entry must be a mapping: {payload!r}")
    kind = payload.get("type")
    if kind == RESOURCE_FILE:
        return FileResource(path=str(payload["path"]))
    if kind == RESOURCE_CUMULATIVE:
        return _decode_cumulative(payload)
    raise ValueError(f"Unknown resource type: {kind!r}")


def decode_resources(payload: Iterable[Mapping[str, object]]) -> list[CacheFreshness]:
    return [decode_resource(item) for item in payload]


def _decode_cumulative(payload: Mapping[str, object]) -> CumulativeResource:
    from .loader import loader_from_dict  # local import avoids a module cycle

    loaders = [loader_from_dict(item) for item in _list_of_mappings(payload.get("loaders"), "loaders")]
    resource = CumulativeResource(str(payload["name"]), loaders)
    for item in _list_of_mappings(payload.get("roots"), "roots"):
        resource.add_root(
            ResourceRoot(
                owner=str(item["owner"]),
                base_root=str(item["base_root"]),
                override_root=item.get("override_root") or None,
            )
        )
    found = payload.get("found") or {}
    if not isinstance(found, Mapping):
        raise ValueError("Cumulative resource \"found\" must be a mapping")
    for owner, by_name in found.items():
        if not isinstance(by_name, Mapping):
            raise ValueError(f"Tracked paths of {owner!r} must be a mapping")
        for name, paths in by_name.items():
            if not isinstance(paths, list):
                raise ValueError(f"Tracked paths of {owner!r} must be lists")
            resource.add_found(owner, name, [str(path) for path in paths])
    return resource


def _list_of_mappings(value: object, field: str) -> list[Mapping[str, object]]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, Mapping) for item in value):
        raise ValueError(f"Cumulative resource {field!r} must be a list of mappings")
    return value
