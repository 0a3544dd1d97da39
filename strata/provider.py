"""Lazily built config values persisted through :class:`ConfigCache`."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable

from .cache import ConfigCache
from .errors import InvalidConfigError
from .resources import CacheFreshness, ResourcesContainer
from .text import Messages

logger = logging.getLogger(__name__)

ConfigProducer = Callable[[ResourcesContainer], object]


class ConfigProvider:
    """Serve a config value from memory, then from a fresh cache file, then from the producer.

    The producer receives a :class:`ResourcesContainer` and must return a list
    or a mapping. Whatever resources it adds are written next to the cache file
    in debug mode. The provider itself answers ``is_cache_fresh`` so it can be
    registered as a dependency of another cache.
    """

    def __init__(self, cache_file: Path | str, debug: bool, producer: ConfigProducer) -> None:
        self._cache = ConfigCache(cache_file, debug)
        self._producer = producer
        self._content: list | dict | None = None

    @property
    def cache_file(self) -> Path:
        return self._cache.path

    @property
    def cache(self) -> ConfigCache:
        return self._cache

    def is_cache_changeable(self) -> bool:
        return self._cache.debug

    def add_dependency(self, dependency: CacheFreshness) -> None:
        self._cache.add_dependency(dependency)

    def get_timestamp(self) -> float | None:
        return self._cache.get_timestamp()

    def is_fresh(self) -> bool:
        return self._cache.is_fresh()

    def is_cache_fresh(self, timestamp: float) -> bool:
        cache_timestamp = self.get_timestamp()
        if cache_timestamp is None or cache_timestamp > timestamp:
            return False
        return self._cache.is_fresh()

    def get_content(self) -> list | dict:
        if self._content is not None:
            return self._content
        content = self._read_cached() if self._cache.is_fresh() else None
        if content is None:
            content = self._build_and_save()
        self._content = content
        return content

    def clear_cache(self) -> None:
        self._content = None
        self._cache.remove()

    def warm_up(self) -> None:
        self._content = None
        self._content = self._build_and_save()

    def ensure_warmed_up(self) -> bool:
        """Rebuild the cache file when it is stale; return True if a rebuild happened."""

        if self._cache.is_fresh():
            return False
        self.warm_up()
        return True

    def validate_config(self, config: object) -> None:
        if not isinstance(config, (list, dict)):
            raise InvalidConfigError(Messages.ERROR_CONFIG_NOT_VALID.format(path=self._cache.path))

    def _read_cached(self) -> list | dict | None:
        try:
            content = json.loads(self._cache.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Failed to read cached config, rebuilding. path=%s error=%s", self._cache.path, exc)
            return None
        if not isinstance(content, (list, dict)):
            logger.warning("Cached config has an unexpected shape, rebuilding. path=%s", self._cache.path)
            return None
        return content

    def _build_and_save(self) -> list | dict:
        container = ResourcesContainer()
        content = self._producer(container)
        self.validate_config(content)
        try:
            text = json.dumps(content, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as exc:
            raise InvalidConfigError(
                Messages.ERROR_CONFIG_NOT_SERIALIZABLE.format(path=self._cache.path, reason=exc)
            ) from exc
        self._cache.write(text, container.get_resources())
        logger.debug(
            "Config cache written. path=%s resources=%d",
            self._cache.path,
            len(container),
        )
        return content
