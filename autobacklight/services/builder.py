from __future__ import annotations
import logging
from typing import Optional

from ..core.config import Settings
from ..domain.interfaces import BacklightDevice, DiagnosticsSink, SensorSource
from ..drivers.backlight_sim import SimulatedBacklight
from ..drivers.backlight_sysfs import SysfsBacklight
from ..sensors.base import IlluminanceSensor
from ..sensors.iio_sensor import IioIlluminanceSensor
from ..sensors.simulated_lux_sensor import SimulatedLuxSensor
from .control_loop import ControlLoop

logger = logging.getLogger(__name__)


def build_sensor(settings: Settings) -> IlluminanceSensor:
    mode = settings.sensor_mode.lower()

    if mode == "rs485":
        # pymodbus is only needed for this sensor
        from ..drivers.rs485_modbus import ModbusRtuConfig, RS485ModbusRTU
        from ..sensors.rs485_lux_sensor import LuxRegisterSpec, RS485LuxSensor

        driver = RS485ModbusRTU(
            ModbusRtuConfig(
                port=settings.rs485_port,
                baudrate=settings.rs485_baudrate,
                slave_id=settings.rs485_slave_id,
            )
        )
        spec = LuxRegisterSpec(
            functioncode=settings.lux_functioncode,
            address=settings.lux_register_address,
            count=settings.lux_register_count,
            scale=settings.lux_scale,
        )
        return RS485LuxSensor(driver=driver, spec=spec)

    if mode == "sim":
        return SimulatedLuxSensor()

    return IioIlluminanceSensor(settings.illuminance_path)


def build_backlight(settings: Settings) -> BacklightDevice:
    if settings.backlight_mode.lower() == "sim":
        return SimulatedBacklight(max_brightness=settings.sim_max_brightness)
    return SysfsBacklight(settings.backlight_dir)


def build_loop(
    settings: Settings,
    sensor: Optional[SensorSource] = None,
    backlight: Optional[BacklightDevice] = None,
    diagnostics: Optional[DiagnosticsSink] = None,
) -> ControlLoop:
    """Wire collaborators and resolve the controller config against the device once."""
    if sensor is None:
        sensor = build_sensor(settings)
    if backlight is None:
        backlight = build_backlight(settings)

    device_max = backlight.read_max_brightness()
    config = settings.controller_config(device_max)
    logger.info(
        "Using sensor=%s backlight=%s (device max %d, range %d..%d)",
        sensor.sensor_id, backlight.device_id, device_max,
        config.min_brightness, config.max_brightness,
    )
    return ControlLoop(sensor, backlight, config, diagnostics)
