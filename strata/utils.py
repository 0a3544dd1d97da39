"""Utility helpers for filesystem access and path handling."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Sequence

from .matchers import ByFileNameMatcher, FileMatcher, GlobFileMatcher
from .text import Messages


def resolve_directory(path: Path | str) -> Path:
    """Resolve and validate a user supplied directory path."""
    dir_path = Path(path).expanduser().resolve()
    if not dir_path.exists():
        raise FileNotFoundError(f"Directory does not exist: {dir_path}")
    if not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    return dir_path


def build_matcher(patterns: Sequence[str] | None, *, regex: bool = False) -> FileMatcher:
    """Return a file matcher for *patterns*, validating regular expressions eagerly."""

    if regex:
        try:
            return ByFileNameMatcher(patterns)
        except re.error as exc:
            raise ValueError(Messages.ERROR_PATTERN_INVALID.format(reason=exc)) from exc
    return GlobFileMatcher(patterns)


def layer_of(path: Path | str, override_dir: Path | str | None) -> str:
    """Return ``override`` when *path* lives below *override_dir*, else ``base``."""

    if override_dir is None:
        return "base"
    try:
        Path(path).relative_to(override_dir)
    except ValueError:
        return "base"
    return "override"


def format_path(path: Path, base: Path | None = None) -> str:
    """Return a user friendly representation of *path* relative to *base* when possible."""
    if base:
        try:
            relative = path.relative_to(base)
            return f"./{relative.as_posix()}"
        except ValueError:
            return str(path)
    return str(path)
