from __future__ import annotations

import math
import random
import time
from dataclasses import asdict, dataclass
from threading import Lock
from typing import Callable, Optional

from ..domain.errors import SensorReadError
from .base import IlluminanceSensor

Clock = Callable[[], float]


@dataclass
class PatternConfig:
    """Synthetic ambient light curve, in raw sensor units."""
    type: str = "sine"     # sine|step|ramp|random
    baseline: float = 1000
    amplitude: float = 800
    period_s: float = 600
    noise: float = 20

    step_low: float = 200
    step_high: float = 1800
    step_period_s: float = 120

    ramp_min: float = 0
    ramp_max: float = 2000
    ramp_period_s: float = 600


def _sine(p: PatternConfig, t: float, rng: random.Random) -> float:
    # Daylight-like swing around the baseline
    return p.baseline + p.amplitude * math.sin(2.0 * math.pi * (t % p.period_s) / p.period_s)


def _step(p: PatternConfig, t: float, rng: random.Random) -> float:
    # Lights on for the first half of each period, off for the second
    return p.step_high if (t % p.step_period_s) < p.step_period_s / 2.0 else p.step_low


def _ramp(p: PatternConfig, t: float, rng: random.Random) -> float:
    return p.ramp_min + (p.ramp_max - p.ramp_min) * (t % p.ramp_period_s) / p.ramp_period_s


def _random(p: PatternConfig, t: float, rng: random.Random) -> float:
    return p.baseline + rng.uniform(-p.amplitude, p.amplitude)


PATTERNS = {
    "sine": _sine,
    "step": _step,
    "ramp": _ramp,
    "random": _random,
}


def pattern_value(p: PatternConfig, t: float, rng: random.Random) -> int:
    """
    Sensor reading `t` seconds into the pattern.

    Noise is added on top of the curve and the result is clamped at zero,
    since an illuminance sensor never reports a negative value.
    """
    curve = PATTERNS.get(p.type)
    v = curve(p, t, rng) if curve is not None else p.baseline
    if p.noise > 0:
        v += rng.uniform(-p.noise, p.noise)
    return max(0, int(round(v)))


class SimulatedLuxSensor(IlluminanceSensor):
    """
    In-memory illuminance source for service mode and tests.

    Patterns run on their own timeline: t=0 is the moment the pattern was
    set, so a freshly selected curve always starts at its first phase.
    """

    def __init__(
        self,
        sensor_id: str = "lux_sim",
        manual_value: int = 1000,
        clock: Clock = time.monotonic,
        rng: Optional[random.Random] = None,
    ):
        self._sensor_id = sensor_id
        self._clock = clock
        self._rng = rng or random.Random()
        self._lock = Lock()
        self._enabled = True
        self._mode = "manual"   # manual|pattern
        self._manual_value = int(manual_value)
        self._pattern = PatternConfig()
        self._pattern_start = clock()
        self._reads = 0

    @property
    def sensor_id(self) -> str:
        return self._sensor_id

    def enable(self) -> None:
        with self._lock:
            self._enabled = True

    def disable(self) -> None:
        with self._lock:
            self._enabled = False

    def set_manual(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"Illuminance cannot be negative, got {value}")
        with self._lock:
            self._mode = "manual"
            self._manual_value = int(value)

    def set_pattern(self, cfg: PatternConfig) -> None:
        if cfg.type not in PATTERNS:
            raise ValueError(f"Unknown pattern {cfg.type!r}")
        with self._lock:
            self._mode = "pattern"
            self._pattern = cfg
            self._pattern_start = self._clock()

    def status(self) -> dict:
        with self._lock:
            return {
                "enabled": self._enabled,
                "mode": self._mode,
                "manual_value": self._manual_value,
                "pattern": asdict(self._pattern),
                "pattern_elapsed_s": self._clock() - self._pattern_start,
                "reads": self._reads,
            }

    def read_illuminance(self) -> int:
        with self._lock:
            if not self._enabled:
                # A disabled simulator stands in for a sensor that went away
                raise SensorReadError("Simulated sensor disabled")

            self._reads += 1
            if self._mode == "manual":
                return self._manual_value

            return pattern_value(self._pattern, self._clock() - self._pattern_start, self._rng)
