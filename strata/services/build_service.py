"""Logic helpers for the `strata build` command."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Sequence

from ..loader import (
    CumulativeConfigLoader,
    CumulativeResourceInfo,
    FlatContent,
    FolderContentLoader,
    UNLIMITED_DEPTH,
)
from ..provider import ConfigProducer, ConfigProvider
from ..resources import ResourceRoot, ResourcesContainer
from ..utils import build_matcher

MANIFEST_NAME = "folder_manifest"


class BuildStatus(str, Enum):
    EMPTY = "empty"
    UP_TO_DATE = "up_to_date"
    STORED = "stored"


@dataclass(slots=True)
class BuildRequest:
    relative_path: str
    root: Path
    cache_path: Path
    override: Path | None = None
    debug: bool = False
    patterns: Sequence[str] = field(default_factory=tuple)
    regex: bool = False
    max_depth: int = UNLIMITED_DEPTH
    flat: bool = True
    force: bool = False


@dataclass(slots=True)
class BuildResult:
    status: BuildStatus
    cache_path: Path
    files: int = 0


def make_loader(
    relative_path: str,
    *,
    patterns: Sequence[str] | None = None,
    regex: bool = False,
    max_depth: int = UNLIMITED_DEPTH,
    flat: bool = True,
) -> FolderContentLoader:
    return FolderContentLoader(
        relative_path,
        max_nesting_level=max_depth,
        flat=flat,
        matcher=build_matcher(patterns, regex=regex),
    )


def encode_info(info: CumulativeResourceInfo) -> dict[str, object]:
    """Return the JSON-ready manifest entry for one scan result."""

    entry: dict[str, object] = {
        "owner": info.owner,
        "name": info.name,
        "path": info.path,
    }
    if isinstance(info.content, FlatContent):
        entry["files"] = list(info.content.files)
    else:
        entry["tree"] = info.content.to_dict()
    return entry


def manifest_producer(
    loader: FolderContentLoader,
    roots: Sequence[ResourceRoot],
) -> ConfigProducer:
    config_loader = CumulativeConfigLoader(MANIFEST_NAME, [loader])

    def produce(container: ResourcesContainer) -> list[dict[str, object]]:
        return [encode_info(info) for info in config_loader.load(roots, container)]

    return produce


def count_manifest_files(manifest: Sequence[dict]) -> int:
    total = 0
    for entry in manifest:
        if "files" in entry:
            total += len(entry["files"])
        else:
            total += _count_tree(entry.get("tree") or {})
    return total


def _count_tree(tree: dict) -> int:
    return len(tree.get("files") or []) + sum(
        _count_tree(child) for child in (tree.get("dirs") or {}).values()
    )


def build_manifest(request: BuildRequest) -> BuildResult:
    """Make sure the manifest cache for *request* is fresh, rebuilding it when needed."""

    loader = make_loader(
        request.relative_path,
        patterns=request.patterns,
        regex=request.regex,
        max_depth=request.max_depth,
        flat=request.flat,
    )
    root = ResourceRoot.create(request.root.name or str(request.root), request.root, request.override)
    provider = ConfigProvider(
        request.cache_path,
        request.debug,
        manifest_producer(loader, [root]),
    )
    if request.force:
        provider.warm_up()
        rebuilt = True
    else:
        rebuilt = provider.ensure_warmed_up()

    manifest = provider.get_content()
    files = count_manifest_files(manifest) if isinstance(manifest, list) else 0
    if not rebuilt:
        status = BuildStatus.UP_TO_DATE
    elif files == 0:
        status = BuildStatus.EMPTY
    else:
        status = BuildStatus.STORED
    return BuildResult(status=status, cache_path=provider.cache_file, files=files)
