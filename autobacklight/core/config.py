from __future__ import annotations

import logging
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.errors import ConfigError
from ..domain.models import ControllerConfig, SensitivityUnit

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="AUTOBACKLIGHT_", extra="ignore"
    )

    app_name: str = "Ambient Backlight Control"

    # Smoothing
    probes: int = Field(default=8, ge=1)

    # Mapping
    min_brightness: int = Field(default=40, ge=0)
    max_brightness: int = Field(default=0, ge=0)  # 0 = autodetect from device
    ratio: int = Field(default=20, gt=0)          # sensor units per 1% of ambient scale

    # Hysteresis
    sensitivity: int = Field(default=18, ge=0)
    sensitivity_unit: Literal["absolute", "percent"] = "absolute"

    # Actuation
    ramp: bool = True
    ramp_step: int = Field(default=5, gt=0)
    ramp_interval_s: float = Field(default=0.2, ge=0)
    poll_interval_s: float = Field(default=4.0, ge=0)

    warmup: bool = True
    dry_run: bool = False
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Sensor mode: "sysfs", "rs485" or "sim"
    sensor_mode: Literal["sysfs", "rs485", "sim"] = "sysfs"
    illuminance_path: str = "/sys/bus/iio/devices/iio:device0/in_illuminance_raw"

    # Backlight mode: "sysfs" or "sim"
    backlight_mode: Literal["sysfs", "sim"] = "sysfs"
    backlight_dir: str = "/sys/class/backlight/intel_backlight"  # "" = first device found
    sim_max_brightness: int = Field(default=100, gt=0)

    # RS485 / Modbus RTU
    rs485_port: str = "/dev/ttyUSB0"
    rs485_baudrate: int = 9600
    rs485_slave_id: int = 1

    # Lux register definition
    lux_functioncode: int = 3             # 3=holding, 4=input
    lux_register_address: int = 0
    lux_register_count: int = 1
    lux_scale: float = 1.0

    @property
    def effective_log_level(self) -> str:
        """DEBUG whenever the per-cycle trace is on, otherwise log_level."""
        if self.debug:
            return "DEBUG"
        return self.log_level

    def controller_config(self, device_max: int) -> ControllerConfig:
        """
        Resolve the immutable controller configuration against the device.

        A max of 0 means "use the device maximum"; a configured max above
        what the device reports is capped to the device maximum.
        """
        if device_max <= 0:
            raise ConfigError(f"Device reports unusable max brightness {device_max}")

        max_brightness = self.max_brightness or device_max
        if max_brightness > device_max:
            logger.warning(
                "Configured max brightness %d exceeds device max %d, capping",
                max_brightness, device_max,
            )
            max_brightness = device_max

        if self.min_brightness > max_brightness:
            raise ConfigError(
                f"min brightness {self.min_brightness} is above max brightness {max_brightness}"
            )

        return ControllerConfig(
            min_brightness=self.min_brightness,
            max_brightness=max_brightness,
            ratio_lux=self.ratio,
            sensitivity=self.sensitivity,
            sensitivity_unit=SensitivityUnit(self.sensitivity_unit),
            probes=self.probes,
            ramp=self.ramp,
            ramp_step=self.ramp_step,
            ramp_interval=self.ramp_interval_s,
            poll_interval=self.poll_interval_s,
            warmup=self.warmup,
            dry_run=self.dry_run,
            debug=self.debug,
        )

