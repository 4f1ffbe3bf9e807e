from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..domain.errors import BacklightReadError, BacklightWriteError
from . import sysfs

logger = logging.getLogger(__name__)

BACKLIGHT_CLASS_DIR = Path("/sys/class/backlight")


def detect_backlight_dir(class_dir: Path = BACKLIGHT_CLASS_DIR) -> Optional[Path]:
    """First backlight device exposing both brightness and max_brightness."""
    if not class_dir.exists():
        return None
    for device in sorted(class_dir.iterdir()):
        if (device / "brightness").exists() and (device / "max_brightness").exists():
            return device
    return None


class SysfsBacklight:
    """Backlight exposed as /sys/class/backlight/<device>/{brightness,max_brightness}."""

    def __init__(self, device_dir: str = "", class_dir: Path = BACKLIGHT_CLASS_DIR) -> None:
        if device_dir:
            path = Path(device_dir)
        else:
            path = detect_backlight_dir(class_dir)
            if path is None:
                raise BacklightReadError(f"No backlight device found under {class_dir}")
            logger.info("Detected backlight device %s", path)

        self._dir = path
        self.device_id = path.name

    @property
    def brightness_path(self) -> Path:
        return self._dir / "brightness"

    @property
    def max_brightness_path(self) -> Path:
        return self._dir / "max_brightness"

    def read_brightness(self) -> int:
        try:
            return sysfs.read_int(self.brightness_path)
        except (OSError, ValueError) as e:
            raise BacklightReadError(f"cannot get backlight value from {self.brightness_path}: {e}") from e

    def read_max_brightness(self) -> int:
        try:
            return sysfs.read_int(self.max_brightness_path)
        except (OSError, ValueError) as e:
            raise BacklightReadError(
                f"cannot get backlight max value from {self.max_brightness_path}: {e}"
            ) from e

    def write_brightness(self, level: int) -> None:
        try:
            sysfs.write_int(self.brightness_path, level)
        except OSError as e:
            raise BacklightWriteError(f"cannot set backlight to {level}: {e}") from e
