from __future__ import annotations

import glob
import logging
from pathlib import Path

from ..domain.errors import SensorReadError
from ..drivers import sysfs
from .base import IlluminanceSensor

logger = logging.getLogger(__name__)

IIO_PATTERNS = (
    "/sys/bus/iio/devices/iio:device*/in_illuminance_raw",
    "/sys/bus/iio/devices/iio:device*/in_illuminance_input",
    "/sys/bus/acpi/devices/ACPI0008:00/iio:device*/in_illuminance_raw",
)


def detect_illuminance_path(patterns=IIO_PATTERNS) -> Path | None:
    for pattern in patterns:
        for path in sorted(glob.glob(pattern)):
            return Path(path)
    return None


class IioIlluminanceSensor(IlluminanceSensor):
    """Ambient light sensor exposed by the Linux IIO subsystem."""

    def __init__(self, path: str = "") -> None:
        if path:
            self._path = Path(path)
        else:
            found = detect_illuminance_path()
            if found is None:
                raise SensorReadError("No IIO illuminance device found")
            logger.info("Detected illuminance sensor %s", found)
            self._path = found

    @property
    def sensor_id(self) -> str:
        return str(self._path)

    def read_illuminance(self) -> int:
        try:
            value = sysfs.read_int(self._path)
        except (OSError, ValueError) as e:
            raise SensorReadError(f"cannot get ambient light value from {self._path}: {e}") from e
        if value < 0:
            raise SensorReadError(f"negative ambient light value {value} from {self._path}")
        return value
