"""Process-wide single-entry installation cache.

Every lookup runs a fresh detection and compares it with the cached entry:
kind and root, then the interpreters, default interpreter and gemsets found
under that root. A full match returns the cached instance so callers can
keep objects bound to it; any difference replaces the entry. Replacement
happens under a lock, so readers never observe a half-built entry.
"""

import logging
import threading
import time
from typing import Callable, Mapping, Optional

from rubyrunner.detector.orchestrator import detect
from rubyrunner.detector.types import Installation

logger = logging.getLogger(__name__)


class InstallationCache:
    def __init__(
        self,
        detector: Callable[[Mapping[str, str]], Optional[Installation]] = detect,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._detector = detector
        self._clock = clock
        self._lock = threading.Lock()
        self._entry: Optional[Installation] = None
        self._validated_at: Optional[float] = None

    @property
    def current(self) -> Optional[Installation]:
        """Cached installation without revalidation."""
        return self._entry

    @property
    def validated_at(self) -> Optional[float]:
        """Clock reading of the last successful validation."""
        return self._validated_at

    def get(self, environment: Mapping[str, str]) -> Optional[Installation]:
        """Return the installation for ``environment``, reusing the cache when valid."""
        fresh = self._detector(environment)

        with self._lock:
            if fresh is None:
                if self._entry is not None:
                    logger.info("Cached %r no longer detected, dropping it", self._entry)
                self._entry = None
                self._validated_at = None
                return None

            if not _same_installation(self._entry, fresh):
                logger.debug("Caching %r", fresh)
                self._entry = fresh
            self._validated_at = self._clock()
            return self._entry

    def clear(self) -> None:
        with self._lock:
            self._entry = None
            self._validated_at = None


def _same_installation(cached: Optional[Installation], fresh: Installation) -> bool:
    return (
        cached == fresh
        and cached.interpreters == fresh.interpreters
        and cached.default_interpreter == fresh.default_interpreter
        and cached.gemsets == fresh.gemsets
    )
