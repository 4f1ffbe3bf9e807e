from __future__ import annotations


class AutobacklightError(Exception):
    """Base class for controller errors."""


class ConfigError(AutobacklightError, ValueError):
    """Configuration violates a controller invariant."""


class DeviceError(AutobacklightError):
    """I/O against the sensor or backlight failed. Treated as fatal."""


class SensorReadError(DeviceError):
    pass


class BacklightReadError(DeviceError):
    pass


class BacklightWriteError(DeviceError):
    pass
