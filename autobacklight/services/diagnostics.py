from __future__ import annotations
import logging
from collections import deque
from typing import Optional

from ..domain.models import Observation


class LoggingDiagnostics:
    """Per-cycle trace written to a logger at DEBUG level."""

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._log = log or logging.getLogger(__name__)

    def observe(self, observation: Observation) -> None:
        o = observation
        self._log.debug(
            "light = %.1f (%d%%), back-light = %d, set %d (diff %d) apply=%s: %s",
            o.average, o.percent, o.current, o.target, o.delta, o.apply, o.reason,
        )


class RecordingDiagnostics:
    """Keeps the most recent observations in memory."""

    def __init__(self, maxlen: Optional[int] = 1000) -> None:
        self.observations: deque[Observation] = deque(maxlen=maxlen)

    def observe(self, observation: Observation) -> None:
        self.observations.append(observation)

    @property
    def last(self) -> Optional[Observation]:
        return self.observations[-1] if self.observations else None
