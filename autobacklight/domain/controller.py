from __future__ import annotations
from typing import Optional
from . import hysteresis, mapper
from .models import ControllerConfig, Observation


class BrightnessController:
    """Turns a smoothed illuminance reading into a brightness decision."""

    def __init__(self, config: ControllerConfig) -> None:
        self.config = config

    def decide(self, current: int, average: float, sample: Optional[int] = None) -> Observation:
        percent = mapper.ambient_percent(average, self.config)
        target = mapper.target(average, self.config)
        apply, reason = hysteresis.explain(current, target, self.config)

        return Observation(
            current=current,
            target=target,
            average=average,
            percent=percent,
            delta=abs(target - current),
            apply=apply,
            reason=reason,
            sample=sample,
        )
