"""File matching strategies used when scanning resource folders."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable, Mapping, Protocol, runtime_checkable


@runtime_checkable
class FileMatcher(Protocol):
    def is_matched(self, path: Path | str) -> bool: ...

    def to_dict(self) -> dict[str, object]: ...


def _clean_patterns(patterns: Iterable[str] | None) -> tuple[str, ...]:
    if not patterns:
        return ()
    cleaned: list[str] = []
    for raw in patterns:
        if raw is None:
            continue
        token = str(raw).strip()
        if token:
            cleaned.append(token)
    return tuple(cleaned)


class ByFileNameMatcher:
    """Match files whose base name satisfies any of the regular expressions."""

    kind = "regex"

    def __init__(self, patterns: Iterable[str] | None = None) -> None:
        self.patterns = _clean_patterns(patterns)
        self._compiled = tuple(re.compile(pattern) for pattern in self.patterns)

    def is_matched(self, path: Path | str) -> bool:
        if not self._compiled:
            return True
        name = os.path.basename(os.fspath(path))
        return any(regex.search(name) for regex in self._compiled)

    def to_dict(self) -> dict[str, object]:
        return {"type": self.kind, "patterns": list(self.patterns)}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ByFileNameMatcher):
            return NotImplemented
        return self.patterns == other.patterns

    def __hash__(self) -> int:
        return hash((self.kind, self.patterns))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self.patterns)!r})"


class GlobFileMatcher:
    """Match files whose base name satisfies gitignore-style glob patterns."""

    kind = "glob"

    def __init__(self, patterns: Iterable[str] | None = None) -> None:
        from pathspec.gitignore import GitIgnoreSpec

        self.patterns = _clean_patterns(patterns)
        self._spec = GitIgnoreSpec.from_lines(self.patterns) if self.patterns else None

    def is_matched(self, path: Path | str) -> bool:
        if self._spec is None:
            return True
        name = os.path.basename(os.fspath(path))
        return self._spec.match_file(name)

    def to_dict(self) -> dict[str, object]:
        return {"type": self.kind, "patterns": list(self.patterns)}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GlobFileMatcher):
            return NotImplemented
        return self.patterns == other.patterns

    def __hash__(self) -> int:
        return hash((self.kind, self.patterns))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self.patterns)!r})"


_MATCHER_TYPES: dict[str, type] = {
    ByFileNameMatcher.kind: ByFileNameMatcher,
    GlobFileMatcher.kind: GlobFileMatcher,
}


def matcher_from_dict(payload: Mapping[str, object]) -> FileMatcher:
    """Rebuild a matcher from the structure produced by ``to_dict``."""

    kind = payload.get("type")
    matcher_cls = _MATCHER_TYPES.get(str(kind))
    if matcher_cls is None:
        raise ValueError(f"Unknown file matcher type: {kind!r}")
    patterns = payload.get("patterns") or []
    if not isinstance(patterns, (list, tuple)):
        raise ValueError("File matcher patterns must be a list")
    return matcher_cls(patterns)
