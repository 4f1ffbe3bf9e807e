from __future__ import annotations

from dataclasses import dataclass
import logging

from pymodbus.exceptions import ModbusException

from ..domain.errors import SensorReadError
from ..drivers.rs485_modbus import RS485ModbusRTU
from .base import IlluminanceSensor

logger = logging.getLogger(__name__)


@dataclass
class LuxRegisterSpec:
    functioncode: int = 3  # 3=holding, 4=input
    address: int = 0
    count: int = 1
    scale: float = 1.0


class RS485LuxSensor(IlluminanceSensor):
    def __init__(
        self,
        driver: RS485ModbusRTU,
        spec: LuxRegisterSpec = LuxRegisterSpec(),
        sensor_id: str = "lux_rs485",
    ):
        self._driver = driver
        self._spec = spec
        self._sensor_id = sensor_id

    @property
    def sensor_id(self) -> str:
        return self._sensor_id

    @property
    def unit(self) -> str:
        return "lux"

    def read_illuminance(self) -> int:
        try:
            regs = self._driver.read_registers(self._spec.functioncode, self._spec.address, self._spec.count)
        except (ConnectionError, ModbusException, ValueError, OSError) as e:
            raise SensorReadError(f"RS485 lux read failed: {e}") from e

        if not regs:
            raise SensorReadError("No registers returned")

        # Combine registers into a single value (big-endian, hi word first)
        raw = 0
        for r in regs:
            raw = (raw << 16) | r

        lux = max(0, round(raw * self._spec.scale))
        logger.debug("RS485 lux: regs=%s raw=%d scale=%s lux=%d", regs, raw, self._spec.scale, lux)
        return lux

    def close(self) -> None:
        self._driver.close()
