"""Cache state composed of recorded resources and dependent cache states."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from .resources import CacheFreshness

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CacheState:
    """Conjunction of everything a cached artifact depends on.

    Outside debug mode nothing is tracked and the state is always fresh.
    Resources are consulted before dependencies and the first stale entry
    ends the evaluation.
    """

    resources: Sequence[CacheFreshness] = ()
    dependencies: Sequence[CacheFreshness] = field(default_factory=list)
    debug: bool = False

    def is_cache_fresh(self, timestamp: float) -> bool:
        if not self.debug:
            return True
        for resource in self.resources:
            if not resource.is_cache_fresh(timestamp):
                logger.debug("Cache resource is stale. resource=%s", resource)
                return False
        for dependency in self.dependencies:
            if not dependency.is_cache_fresh(timestamp):
                logger.debug("Cache dependency is stale. dependency=%r", dependency)
                return False
        return True
