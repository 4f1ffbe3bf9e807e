from __future__ import annotations

from abc import ABC, abstractmethod


class IlluminanceSensor(ABC):
    """Domain-facing ambient light sensor."""

    @property
    @abstractmethod
    def sensor_id(self) -> str:
        ...

    @property
    def unit(self) -> str:
        return "raw"

    @abstractmethod
    def read_illuminance(self) -> int:
        """Return one non-negative integer reading. Raise SensorReadError on failure."""
        ...
