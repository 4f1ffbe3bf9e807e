"""Illuminance to brightness mapping."""
from __future__ import annotations

from .models import ControllerConfig

GRANULARITY = 100  # ambient scale is expressed in whole percent


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def ambient_percent(avg_illuminance: float, config: ControllerConfig) -> int:
    """Average illuminance as a percentage of the full ambient scale."""
    full_scale = config.ratio_lux * GRANULARITY
    percent = int(avg_illuminance * GRANULARITY / full_scale)
    return _clamp(percent, 0, GRANULARITY)


def target(avg_illuminance: float, config: ControllerConfig) -> int:
    """
    Target brightness for an average illuminance.

    Linear in the ambient percentage between min and max brightness, so the
    result is non-decreasing in illuminance and never leaves [min, max].
    """
    percent = ambient_percent(avg_illuminance, config)
    span = config.max_brightness - config.min_brightness
    level = percent * span // GRANULARITY + config.min_brightness
    return _clamp(level, config.min_brightness, config.max_brightness)
