from __future__ import annotations
import logging
from collections import deque
from threading import Lock

logger = logging.getLogger(__name__)


class SimulatedBacklight:
    device_id = "backlight_sim"

    def __init__(self, max_brightness: int = 100, level: int = 0) -> None:
        self._lock = Lock()
        self._max = int(max_brightness)
        self._level = max(0, min(self._max, int(level)))
        self.writes: deque[int] = deque(maxlen=1000)

    def read_brightness(self) -> int:
        with self._lock:
            return self._level

    def read_max_brightness(self) -> int:
        return self._max

    def write_brightness(self, level: int) -> None:
        with self._lock:
            self._level = max(0, min(self._max, int(level)))
            self.writes.append(self._level)
        logger.debug("BACKLIGHT set level=%d", level)
