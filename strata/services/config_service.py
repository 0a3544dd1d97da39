"""Logic helpers for the `strata config` command."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..config import (
    Config,
    load_config,
    set_debug,
    set_flat,
    set_log_level,
    set_max_depth,
    set_patterns,
)


@dataclass(slots=True)
class ConfigUpdateResult:
    debug_set: bool = False
    max_depth_set: bool = False
    patterns_set: bool = False
    patterns_cleared: bool = False
    flat_set: bool = False
    log_level_set: bool = False

    @property
    def changed(self) -> bool:
        return any(
            (
                self.debug_set,
                self.max_depth_set,
                self.patterns_set,
                self.patterns_cleared,
                self.flat_set,
                self.log_level_set,
            )
        )


def apply_config_updates(
    *,
    debug: bool | None = None,
    max_depth: int | None = None,
    patterns: Sequence[str] | None = None,
    clear_patterns: bool = False,
    flat: bool | None = None,
    log_level: str | None = None,
) -> ConfigUpdateResult:
    """Apply config mutations and report which fields were updated."""

    result = ConfigUpdateResult()
    if debug is not None:
        set_debug(debug)
        result.debug_set = True
    if max_depth is not None:
        set_max_depth(max_depth)
        result.max_depth_set = True
    if clear_patterns:
        set_patterns(None)
        result.patterns_cleared = True
    if patterns:
        set_patterns(patterns)
        result.patterns_set = True
    if flat is not None:
        set_flat(flat)
        result.flat_set = True
    if log_level is not None:
        set_log_level(log_level)
        result.log_level_set = True
    return result


def get_config_snapshot() -> Config:
    """Return the current configuration dataclass."""

    return load_config()
