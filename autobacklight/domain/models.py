from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import ConfigError


class SensitivityUnit(str, Enum):
    ABSOLUTE = "absolute"  # brightness units
    PERCENT = "percent"    # percent of max_brightness


class LoopState(Enum):
    SAMPLING = "sampling"
    EVALUATING = "evaluating"
    APPLYING = "applying"
    IDLE = "idle"


@dataclass(frozen=True)
class ControllerConfig:
    min_brightness: int
    max_brightness: int
    ratio_lux: int
    sensitivity: int
    probes: int
    ramp_step: int
    ramp_interval: float  # seconds between ramp writes
    poll_interval: float  # seconds between checks when idle
    sensitivity_unit: SensitivityUnit = SensitivityUnit.ABSOLUTE
    ramp: bool = True
    warmup: bool = True
    dry_run: bool = False
    debug: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.min_brightness <= self.max_brightness:
            raise ConfigError(
                f"Need 0 <= min <= max, got min={self.min_brightness} max={self.max_brightness}"
            )
        if self.ratio_lux <= 0:
            raise ConfigError(f"ratio must be positive, got {self.ratio_lux}")
        if self.probes < 1:
            raise ConfigError(f"probes must be at least 1, got {self.probes}")
        if self.ramp_step <= 0:
            raise ConfigError(f"ramp step must be positive, got {self.ramp_step}")
        if self.sensitivity < 0:
            raise ConfigError(f"sensitivity must not be negative, got {self.sensitivity}")
        if self.ramp_interval < 0 or self.poll_interval < 0:
            raise ConfigError("intervals must not be negative")


@dataclass(frozen=True)
class Observation:
    current: int
    target: int
    average: float
    percent: int
    delta: int
    apply: bool
    reason: str
    sample: Optional[int] = None
