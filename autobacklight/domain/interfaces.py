from __future__ import annotations
from typing import Protocol, runtime_checkable
from .models import Observation


@runtime_checkable
class SensorSource(Protocol):
    sensor_id: str

    def read_illuminance(self) -> int:
        """Raise SensorReadError on I/O or parse failure."""
        ...


@runtime_checkable
class BacklightDevice(Protocol):
    device_id: str

    def read_brightness(self) -> int:
        ...

    def read_max_brightness(self) -> int:
        ...

    def write_brightness(self, level: int) -> None:
        ...


@runtime_checkable
class DiagnosticsSink(Protocol):
    def observe(self, observation: Observation) -> None:
        ...
