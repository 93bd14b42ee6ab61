"""Progress tracker for one pipeline run."""

import logging
import time
from dataclasses import dataclass

from config.defaults import DEFAULTS

logger = logging.getLogger(__name__)


@dataclass
class StatusUpdate:
    step: str
    message: str
    timestamp: float
    progress: int | None = None     # 0-100


class StatusTracker:
    """Keeps the most recent progress updates and forwards each to a callback."""

    def __init__(self, max_updates=None, on_update=None):
        self.max_updates = max_updates or DEFAULTS["max_status_updates"]
        self.on_update = on_update
        self._updates = []

    def add(self, step, message, progress=None):
        update = StatusUpdate(step=step, message=message, timestamp=time.time(), progress=progress)
        self._updates.append(update)
        if len(self._updates) > self.max_updates:
            del self._updates[:len(self._updates) - self.max_updates]
        logger.info("[%s] %s", step, message)
        if self.on_update:
            self.on_update(update)
        return update

    def latest(self):
        return self._updates[-1] if self._updates else None

    def all(self):
        return list(self._updates)

    def clear(self):
        self._updates.clear()
