"""Layered resource loaders: scan base and override roots and track what was found."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Mapping, Protocol, Sequence

from .matchers import ByFileNameMatcher, FileMatcher, matcher_from_dict
from .resources import (
    CumulativeResource,
    FileResource,
    ResourceRoot,
    ResourcesContainer,
)

logger = logging.getLogger(__name__)

FOLDER_CONTENT_PREFIX = "Folder content: "
FILE_PREFIX = "File: "
UNLIMITED_DEPTH = -1


@dataclass(frozen=True, slots=True)
class FlatContent:
    files: tuple[str, ...] = ()

    def iter_files(self) -> Iterator[str]:
        yield from self.files


@dataclass(slots=True)
class TreeContent:
    """Files of one directory level plus nested levels keyed by directory name."""

    files: list[str] = field(default_factory=list)
    dirs: dict[str, "TreeContent"] = field(default_factory=dict)

    def iter_files(self) -> Iterator[str]:
        yield from self.files
        for child in self.dirs.values():
            yield from child.iter_files()

    def to_dict(self) -> dict[str, object]:
        return {
            "files": list(self.files),
            "dirs": {name: child.to_dict() for name, child in self.dirs.items()},
        }


@dataclass(slots=True)
class CumulativeResourceInfo:
    owner: str
    name: str
    path: str
    content: FlatContent | TreeContent

    @property
    def files(self) -> list[str]:
        return sorted(self.content.iter_files())


class CumulativeResourceLoader(Protocol):
    @property
    def resource(self) -> str: ...

    def load(
        self,
        owner: str,
        base_root: Path | str,
        override_root: Path | str | None = None,
    ) -> CumulativeResourceInfo | None: ...

    def register_found_resource(
        self,
        owner: str,
        base_root: Path | str,
        override_root: Path | str | None,
        resource: CumulativeResource,
    ) -> None: ...

    def is_resource_fresh(
        self,
        owner: str,
        base_root: Path | str,
        override_root: Path | str | None,
        resource: CumulativeResource,
        timestamp: float,
    ) -> bool: ...

    def to_dict(self) -> dict[str, object]: ...


def _within_depth(level: int, max_level: int) -> bool:
    return max_level == UNLIMITED_DEPTH or level <= max_level


def _resolve_subdir(root: Path | str | None, relative_path: str) -> Path | None:
    if not root:
        return None
    candidate = Path(root) / relative_path
    if not candidate.is_dir():
        return None
    return candidate.resolve()


class FolderContentLoader:
    """Collect matching files below ``<root>/<relative_path>`` for base and override roots.

    Files found under the override root hide base root files that share the
    same path relative to the scanned folder. Levels are counted from 1 for
    files placed directly in the scanned folder.
    """

    kind = "folder"

    def __init__(
        self,
        relative_path: str,
        max_nesting_level: int = UNLIMITED_DEPTH,
        flat: bool = True,
        matcher: FileMatcher | None = None,
    ) -> None:
        if max_nesting_level < UNLIMITED_DEPTH or max_nesting_level == 0:
            raise ValueError("max_nesting_level must be -1 or greater than 0")
        self.relative_path = relative_path
        self.max_nesting_level = max_nesting_level
        self.flat = flat
        self.matcher: FileMatcher = matcher if matcher is not None else ByFileNameMatcher()

    @property
    def resource(self) -> str:
        return f"{FOLDER_CONTENT_PREFIX}{self.relative_path}"

    def load(
        self,
        owner: str,
        base_root: Path | str,
        override_root: Path | str | None = None,
    ) -> CumulativeResourceInfo | None:
        base_dir = _resolve_subdir(base_root, self.relative_path)
        override_dir = _resolve_subdir(override_root, self.relative_path)
        if base_dir is None and override_dir is None:
            return None

        override_found = self._collect(override_dir) if override_dir is not None else {}
        base_found: dict[str, str] = {}
        if base_dir is not None:
            for rel, path in self._collect(base_dir).items():
                if rel in override_found:
                    continue
                base_found[rel] = path

        if self.flat:
            content: FlatContent | TreeContent = FlatContent(
                tuple(sorted([*override_found.values(), *base_found.values()]))
            )
        else:
            content = self._build_tree([override_found, base_found])
        scanned = base_dir if base_dir is not None else override_dir
        return CumulativeResourceInfo(
            owner=owner,
            name=self.resource,
            path=str(scanned),
            content=content,
        )

    def register_found_resource(
        self,
        owner: str,
        base_root: Path | str,
        override_root: Path | str | None,
        resource: CumulativeResource,
    ) -> None:
        resource.add_root(ResourceRoot.create(owner, base_root, override_root))
        info = self.load(owner, base_root, override_root)
        resource.add_found(owner, self.resource, info.files if info is not None else [])

    def is_resource_fresh(
        self,
        owner: str,
        base_root: Path | str,
        override_root: Path | str | None,
        resource: CumulativeResource,
        timestamp: float,
    ) -> bool:
        found = resource.get_found(owner, self.resource)
        if not found:
            # nothing was there at load time; fresh only while that still holds
            info = self.load(owner, base_root, override_root)
            return info is None or not info.files

        base_dir = _resolve_subdir(base_root, self.relative_path)
        override_dir = _resolve_subdir(override_root, self.relative_path)
        try:
            return self._is_tracked_scope_fresh(found, base_dir, override_dir, timestamp)
        except OSError as exc:
            logger.debug(
                "Treating folder content as stale after filesystem error. resource=%s error=%s",
                self.resource,
                exc,
            )
            return False

    def to_dict(self) -> dict[str, object]:
        return {
            "type": self.kind,
            "relative_path": self.relative_path,
            "max_nesting_level": self.max_nesting_level,
            "flat": self.flat,
            "matcher": self.matcher.to_dict(),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FolderContentLoader):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"FolderContentLoader({self.relative_path!r}, "
            f"max_nesting_level={self.max_nesting_level}, flat={self.flat}, "
            f"matcher={self.matcher!r})"
        )

    def _collect(self, directory: Path) -> dict[str, str]:
        """Return matched files below *directory* keyed by their relative posix path."""

        found: dict[str, str] = {}
        for dirpath, dirnames, filenames in os.walk(directory, topdown=True):
            rel_dir = Path(dirpath).relative_to(directory)
            level = len(rel_dir.parts) + 1
            if _within_depth(level + 1, self.max_nesting_level):
                dirnames.sort()
            else:
                dirnames[:] = []
            for filename in sorted(filenames):
                if not self.matcher.is_matched(filename):
                    continue
                found[(rel_dir / filename).as_posix()] = os.path.join(dirpath, filename)
        return found

    @staticmethod
    def _build_tree(layers: Sequence[Mapping[str, str]]) -> TreeContent:
        tree = TreeContent()
        for layer in layers:
            for rel, path in layer.items():
                node = tree
                for part in rel.split("/")[:-1]:
                    node = node.dirs.setdefault(part, TreeContent())
                node.files.append(path)
        _sort_tree_files(tree)
        return tree

    def _is_tracked_scope_fresh(
        self,
        found: set[str],
        base_dir: Path | None,
        override_dir: Path | None,
        timestamp: float,
    ) -> bool:
        scan_dirs = [str(path) for path in (override_dir, base_dir) if path is not None]
        tracked_dirs = _tracked_directories(found, scan_dirs)
        for directory in tracked_dirs:
            if not os.path.isdir(directory):
                logger.debug("Tracked directory was removed. path=%s", directory)
                return False
        for path in found:
            if os.stat(path).st_mtime > timestamp:
                logger.debug("Tracked file changed. path=%s", path)
                return False

        if override_dir is not None:
            if not self._is_directory_fresh(str(override_dir), str(override_dir), 1, found, tracked_dirs, None):
                return False
        if base_dir is not None:
            shadow_dir = str(override_dir) if override_dir is not None else None
            if not self._is_directory_fresh(str(base_dir), str(base_dir), 1, found, tracked_dirs, shadow_dir):
                return False
        return True

    def _is_directory_fresh(
        self,
        root: str,
        directory: str,
        level: int,
        found: set[str],
        tracked_dirs: set[str],
        shadow_dir: str | None,
    ) -> bool:
        with os.scandir(directory) as entries:
            listing = sorted(entries, key=lambda entry: entry.name)
        for entry in listing:
            if entry.is_dir():
                if entry.is_symlink():
                    # the scan never descends into linked directories
                    continue
                if entry.path in tracked_dirs:
                    if not self._is_directory_fresh(root, entry.path, level + 1, found, tracked_dirs, shadow_dir):
                        return False
                elif _within_depth(level + 1, self.max_nesting_level):
                    if self._contains_new_file(root, entry.path, level + 1, shadow_dir):
                        return False
                continue
            if entry.path in found or not _within_depth(level, self.max_nesting_level):
                continue
            if self._is_new_file(root, entry.path, shadow_dir):
                return False
        return True

    def _contains_new_file(self, root: str, directory: str, level: int, shadow_dir: str | None) -> bool:
        for dirpath, dirnames, filenames in os.walk(directory, topdown=True):
            rel_level = level + len(Path(dirpath).relative_to(directory).parts)
            if not _within_depth(rel_level + 1, self.max_nesting_level):
                dirnames[:] = []
            for filename in filenames:
                if self._is_new_file(root, os.path.join(dirpath, filename), shadow_dir):
                    return True
        return False

    def _is_new_file(self, root: str, path: str, shadow_dir: str | None) -> bool:
        if not self.matcher.is_matched(path):
            return False
        if shadow_dir is not None:
            counterpart = os.path.join(shadow_dir, os.path.relpath(path, root))
            if os.path.isfile(counterpart):
                return False
        logger.debug("New file found in tracked folder. path=%s", path)
        return True


def _sort_tree_files(tree: TreeContent) -> None:
    tree.files.sort()
    for child in tree.dirs.values():
        _sort_tree_files(child)


def _tracked_directories(found: set[str], scan_dirs: Sequence[str]) -> set[str]:
    """Return every directory between a tracked file and the scanned root holding it."""

    tracked: set[str] = set()
    for path in found:
        for scan_dir in scan_dirs:
            if not path.startswith(scan_dir + os.sep):
                continue
            current = os.path.dirname(path)
            while current != scan_dir and current not in tracked:
                tracked.add(current)
                current = os.path.dirname(current)
            break
    return tracked


class CumulativeFileLoader:
    """Resolve one file, preferring the copy placed under the override root."""

    kind = "file"

    def __init__(self, relative_path: str) -> None:
        self.relative_path = relative_path

    @property
    def resource(self) -> str:
        return f"{FILE_PREFIX}{self.relative_path}"

    def _resolve(self, base_root: Path | str, override_root: Path | str | None) -> str | None:
        for root in (override_root, base_root):
            if not root:
                continue
            candidate = Path(root) / self.relative_path
            if candidate.is_file():
                return str(candidate.resolve())
        return None

    def load(
        self,
        owner: str,
        base_root: Path | str,
        override_root: Path | str | None = None,
    ) -> CumulativeResourceInfo | None:
        path = self._resolve(base_root, override_root)
        if path is None:
            return None
        return CumulativeResourceInfo(
            owner=owner,
            name=self.resource,
            path=path,
            content=FlatContent((path,)),
        )

    def register_found_resource(
        self,
        owner: str,
        base_root: Path | str,
        override_root: Path | str | None,
        resource: CumulativeResource,
    ) -> None:
        resource.add_root(ResourceRoot.create(owner, base_root, override_root))
        path = self._resolve(base_root, override_root)
        resource.add_found(owner, self.resource, [path] if path is not None else [])

    def is_resource_fresh(
        self,
        owner: str,
        base_root: Path | str,
        override_root: Path | str | None,
        resource: CumulativeResource,
        timestamp: float,
    ) -> bool:
        current = self._resolve(base_root, override_root)
        found = resource.get_found(owner, self.resource)
        if not found:
            return current is None
        if current is None or current not in found:
            return False
        return FileResource(current).is_cache_fresh(timestamp)

    def to_dict(self) -> dict[str, object]:
        return {"type": self.kind, "relative_path": self.relative_path}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CumulativeFileLoader):
            return NotImplemented
        return self.relative_path == other.relative_path

    def __repr__(self) -> str:
        return f"CumulativeFileLoader({self.relative_path!r})"


def loader_from_dict(payload: Mapping[str, object]) -> CumulativeResourceLoader:
    kind = payload.get("type")
    if kind == FolderContentLoader.kind:
        matcher_payload = payload.get("matcher")
        matcher = matcher_from_dict(matcher_payload) if isinstance(matcher_payload, Mapping) else None
        return FolderContentLoader(
            str(payload["relative_path"]),
            max_nesting_level=int(payload.get("max_nesting_level", UNLIMITED_DEPTH)),
            flat=bool(payload.get("flat", True)),
            matcher=matcher,
        )
    if kind == CumulativeFileLoader.kind:
        return CumulativeFileLoader(str(payload["relative_path"]))
    raise ValueError(f"Unknown resource loader type: {kind!r}")


class CumulativeConfigLoader:
    """Run a set of loaders over every resource root and track the result."""

    def __init__(self, name: str, loaders: Sequence[CumulativeResourceLoader]) -> None:
        self.name = name
        self.loaders = tuple(loaders)

    def load(
        self,
        roots: Sequence[ResourceRoot],
        container: ResourcesContainer | None = None,
    ) -> list[CumulativeResourceInfo]:
        resource = CumulativeResource(self.name, self.loaders)
        results: list[CumulativeResourceInfo] = []
        for root in roots:
            resource.add_root(root)
            for loader in self.loaders:
                info = loader.load(root.owner, root.base_root, root.override_root)
                resource.add_found(root.owner, loader.resource, info.files if info is not None else [])
                if info is not None:
                    results.append(info)
        if container is not None:
            container.add_resource(resource)
        return results

    def register_resources(
        self,
        roots: Sequence[ResourceRoot],
        container: ResourcesContainer,
    ) -> CumulativeResource:
        resource = CumulativeResource(self.name, self.loaders)
        for root in roots:
            for loader in self.loaders:
                loader.register_found_resource(root.owner, root.base_root, root.override_root, resource)
        container.add_resource(resource)
        return resource
