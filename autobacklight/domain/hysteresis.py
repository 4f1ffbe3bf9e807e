from __future__ import annotations

from .models import ControllerConfig, SensitivityUnit


def change_amount(current: int, target: int, config: ControllerConfig) -> int:
    """Size of the pending change, in the unit sensitivity is measured in."""
    delta = abs(target - current)
    if config.sensitivity_unit is SensitivityUnit.PERCENT and config.max_brightness > 0:
        return delta * 100 // config.max_brightness
    return delta


def explain(current: int, target: int, config: ControllerConfig) -> tuple[bool, str]:
    if current < config.min_brightness:
        return True, f"current {current} below floor {config.min_brightness}"

    if target == current:
        return False, "already at target"

    amount = change_amount(current, target, config)
    unit = "%" if config.sensitivity_unit is SensitivityUnit.PERCENT else ""
    if amount >= config.sensitivity:
        return True, f"change {amount}{unit} >= sensitivity {config.sensitivity}{unit}"
    return False, f"change {amount}{unit} < sensitivity {config.sensitivity}{unit}"


def should_apply(current: int, target: int, config: ControllerConfig) -> bool:
    """
    Replace current brightness with target only on a large enough change, or to enforce the floor.

    A target equal to the current level is never applied, even with sensitivity 0.
    """
    return explain(current, target, config)[0]
