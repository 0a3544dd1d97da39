"""Strata package initialization."""

from __future__ import annotations

from .cache import ConfigCache
from .errors import InvalidConfigError, StrataError
from .loader import (
    CumulativeConfigLoader,
    CumulativeFileLoader,
    CumulativeResourceInfo,
    FlatContent,
    FolderContentLoader,
    TreeContent,
)
from .matchers import ByFileNameMatcher, GlobFileMatcher
from .provider import ConfigProvider
from .resources import (
    CumulativeResource,
    FileResource,
    ResourceRoot,
    ResourcesContainer,
)
from .state import CacheState

__all__ = [
    "__version__",
    "ByFileNameMatcher",
    "CacheState",
    "ConfigCache",
    "ConfigProvider",
    "CumulativeConfigLoader",
    "CumulativeFileLoader",
    "CumulativeResource",
    "CumulativeResourceInfo",
    "FileResource",
    "FlatContent",
    "FolderContentLoader",
    "GlobFileMatcher",
    "InvalidConfigError",
    "ResourceRoot",
    "ResourcesContainer",
    "StrataError",
    "TreeContent",
    "get_version",
]

__version__ = "0.1.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
