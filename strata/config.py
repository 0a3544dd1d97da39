"""Global configuration management for Strata."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from contextlib import contextmanager
from contextvars import ContextVar
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Iterable

from .text import Messages

DEFAULT_CONFIG_DIR = Path(os.path.expanduser("~")) / ".strata"
CONFIG_DIR = DEFAULT_CONFIG_DIR
CONFIG_FILE = CONFIG_DIR / "config.json"
_CONFIG_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "strata_config_dir_override",
    default=None,
)
DEFAULT_MAX_DEPTH = -1
DEFAULT_LOG_LEVEL = "WARNING"
ENV_DEBUG = "STRATA_DEBUG"
_TRUE_TOKENS = {"true", "1", "yes", "on"}
_FALSE_TOKENS = {"false", "0", "no", "off"}


@dataclass
class Config:
    debug: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    patterns: tuple[str, ...] = ()
    flat: bool = True
    log_level: str = DEFAULT_LOG_LEVEL


def _resolve_config_dir() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    return override if override is not None else CONFIG_DIR


def _resolve_config_file() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    if override is not None:
        return override / "config.json"
    return CONFIG_FILE


@contextmanager
def config_dir_context(path: Path | str | None):
    """Temporarily override the config directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CONFIG_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CONFIG_DIR_OVERRIDE.reset(token)


def load_config() -> Config:
    config_file = _resolve_config_file()
    if not config_file.exists():
        return Config()
    raw = json.loads(config_file.read_text(encoding="utf-8"))
    try:
        max_depth = normalize_max_depth(raw.get("max_depth", DEFAULT_MAX_DEPTH))
    except ValueError:
        max_depth = DEFAULT_MAX_DEPTH
    return Config(
        debug=bool(raw.get("debug", False)),
        max_depth=max_depth,
        patterns=normalize_patterns(raw.get("patterns") or ()),
        flat=bool(raw.get("flat", True)),
        log_level=_coerce_log_level(raw.get("log_level")),
    )


def save_config(config: Config) -> None:
    config_dir = _resolve_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    data: Dict[str, Any] = {}
    data["debug"] = bool(config.debug)
    data["max_depth"] = config.max_depth
    if config.patterns:
        data["patterns"] = list(config.patterns)
    data["flat"] = bool(config.flat)
    if config.log_level:
        data["log_level"] = config.log_level
    config_file = _resolve_config_file()
    config_file.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def set_config_dir(path: Path | str | None) -> None:
    global CONFIG_DIR, CONFIG_FILE
    if path is None:
        CONFIG_DIR = DEFAULT_CONFIG_DIR
    else:
        dir_path = Path(path).expanduser().resolve()
        if dir_path.exists() and not dir_path.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {dir_path}")
        CONFIG_DIR = dir_path
    CONFIG_FILE = CONFIG_DIR / "config.json"


def config_from_json(
    payload: str | Mapping[str, object], *, base: Config | None = None
) -> Config:
    """Return a Config from a JSON string or mapping without saving it."""
    data = _coerce_config_payload(payload)
    config = Config() if base is None else _clone_config(base)
    _apply_config_payload(config, data)
    return config


def update_config_from_json(
    payload: str | Mapping[str, object], *, replace: bool = False
) -> Config:
    """Update config from a JSON string or mapping and persist it."""
    base = None if replace else load_config()
    config = config_from_json(payload, base=base)
    save_config(config)
    return config


def set_debug(value: bool) -> None:
    config = load_config()
    config.debug = bool(value)
    save_config(config)


def set_max_depth(value: int) -> None:
    config = load_config()
    config.max_depth = normalize_max_depth(value)
    save_config(config)


def set_patterns(values: Iterable[str] | None) -> None:
    config = load_config()
    config.patterns = normalize_patterns(values)
    save_config(config)


def set_flat(value: bool) -> None:
    config = load_config()
    config.flat = bool(value)
    save_config(config)


def set_log_level(value: str) -> None:
    config = load_config()
    config.log_level = normalize_log_level(value)
    save_config(config)


def resolve_debug(configured: bool | None) -> bool:
    """Return the effective debug flag: explicit value, then environment, then config."""

    if configured is not None:
        return bool(configured)
    env_value = os.getenv(ENV_DEBUG)
    if env_value is not None and env_value.strip():
        token = env_value.strip().lower()
        if token in _TRUE_TOKENS:
            return True
        if token in _FALSE_TOKENS:
            return False
    return load_config().debug


def normalize_max_depth(value: object) -> int:
    if isinstance(value, bool):
        raise ValueError(Messages.ERROR_MAX_DEPTH_INVALID)
    try:
        depth = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(Messages.ERROR_MAX_DEPTH_INVALID) from exc
    if depth == 0 or depth < -1:
        raise ValueError(Messages.ERROR_MAX_DEPTH_INVALID)
    return depth


def normalize_patterns(values: Iterable[str] | None) -> tuple[str, ...]:
    """Return patterns with blanks and duplicates removed, keeping their order."""

    if not values:
        return ()
    if isinstance(values, str):
        values = [values]
    normalized: list[str] = []
    seen: set[str] = set()
    for raw in values:
        if raw is None:
            continue
        token = str(raw).strip()
        if not token or token in seen:
            continue
        seen.add(token)
        normalized.append(token)
    return tuple(normalized)


def _coerce_config_payload(payload: str | Mapping[str, object]) -> Mapping[str, object]:
    if isinstance(payload, str):
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID) from exc
    elif isinstance(payload, Mapping):
        data = dict(payload)
    else:
        raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID)
    if not isinstance(data, Mapping):
        raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID)
    return data


def _clone_config(config: Config) -> Config:
    return Config(
        debug=config.debug,
        max_depth=config.max_depth,
        patterns=tuple(config.patterns),
        flat=config.flat,
        log_level=config.log_level,
    )


def _apply_config_payload(config: Config, payload: Mapping[str, object]) -> None:
    if "debug" in payload:
        config.debug = _coerce_bool(payload["debug"], "debug")
    if "max_depth" in payload:
        value = payload["max_depth"]
        if value is None:
            config.max_depth = DEFAULT_MAX_DEPTH
        else:
            try:
                config.max_depth = normalize_max_depth(value)
            except ValueError as exc:
                raise ValueError(
                    Messages.ERROR_CONFIG_VALUE_INVALID.format(field="max_depth")
                ) from exc
    if "patterns" in payload:
        value = payload["patterns"]
        if value is not None and not isinstance(value, (list, tuple, str)):
            raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field="patterns"))
        config.patterns = normalize_patterns(value)  # type: ignore[arg-type]
    if "flat" in payload:
        config.flat = _coerce_bool(payload["flat"], "flat")
    if "log_level" in payload:
        try:
            config.log_level = normalize_log_level(payload["log_level"])
        except ValueError as exc:
            raise ValueError(
                Messages.ERROR_CONFIG_VALUE_INVALID.format(field="log_level")
            ) from exc


def _coerce_bool(value: object, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        cleaned = value.strip().lower()
        if cleaned in _TRUE_TOKENS:
            return True
        if cleaned in _FALSE_TOKENS:
            return False
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def normalize_log_level(value: object) -> str:
    if value is None:
        return DEFAULT_LOG_LEVEL
    if isinstance(value, str):
        normalized = value.strip().upper() or DEFAULT_LOG_LEVEL
        if normalized in logging.getLevelNamesMapping():
            return normalized
    raise ValueError(Messages.ERROR_LOG_LEVEL_INVALID.format(value=value))


def _coerce_log_level(value: object) -> str:
    try:
        return normalize_log_level(value)
    except ValueError:
        return DEFAULT_LOG_LEVEL
