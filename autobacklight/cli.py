"""
Standalone ambient backlight controller.

Reads an ambient light sensor, averages the last N probes, maps the average
to a backlight level between --min and --max, and changes the backlight in
small animated steps when the change is above --sensitivity.

Usage:
    autobacklight                              # defaults (IIO sensor, intel_backlight)
    autobacklight --dryrun --debug             # only print what would happen
    autobacklight --min 20 --ratio 30 --wait 2s
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from typing import Optional, Sequence

from .core.config import Settings
from .core.log import configure_logging
from .core.timeutil import parse_duration
from .domain.errors import ConfigError, DeviceError
from .services.builder import build_loop
from .services.control_loop import ControlLoop

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DEVICE_ERROR = 1
EXIT_CONFIG_ERROR = 2


def _duration(text: str) -> float:
    try:
        return parse_duration(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="autobacklight",
        description="Adjust the display backlight from an ambient light sensor",
    )

    # Unset options fall back to Settings (environment / .env / defaults)
    p.add_argument("--probes", type=int, help="Number N of illuminance probes to average")
    p.add_argument("--min", dest="min_brightness", type=int, help="Minimum value N for backlight")
    p.add_argument("--max", dest="max_brightness", type=int,
                   help="Maximum value N for backlight (0 = autodetected)")
    p.add_argument("--sensitivity", type=int,
                   help="Minimum amount S of backlight change to perform")
    p.add_argument("--sensitivity-unit", choices=["absolute", "percent"],
                   help="Measure sensitivity in backlight units or percent of max")
    p.add_argument("--ratio", type=int,
                   help="Ratio R of light change: number of lux for a 1%% change in backlight")

    p.add_argument("--animation-steps", "--ramp-step", dest="ramp_step", type=int,
                   help="Number N of backlight to add or remove to smoothly change backlight")
    p.add_argument("--animation", "--ramp-interval", dest="ramp_interval_s", type=_duration,
                   help="Duration T between animation steps (e.g. 200ms)")
    p.add_argument("--no-animation", dest="ramp", action="store_false", default=None,
                   help="Jump straight to the new backlight level")
    p.add_argument("--wait", "--poll-interval", dest="poll_interval_s", type=_duration,
                   help="Duration T between checks for changed light conditions (e.g. 4s)")
    p.add_argument("--no-warmup", dest="warmup", action="store_false", default=None,
                   help="Act before the probe window has been filled once")

    p.add_argument("--dryrun", "--dry-run", dest="dry_run", action="store_true", default=None,
                   help="Do not set backlight, only print what would happen")
    p.add_argument("--debug", action="store_true", default=None,
                   help="Print values read from sensors every cycle")

    p.add_argument("--sensor", dest="sensor_mode", choices=["sysfs", "rs485", "sim"])
    p.add_argument("--backlight", dest="backlight_mode", choices=["sysfs", "sim"])
    p.add_argument("--illuminance-path", help="IIO illuminance file (empty = autodetect)")
    p.add_argument("--backlight-dir", help="Backlight sysfs directory (empty = autodetect)")
    p.add_argument("--log-file", help="Also log to this rotating file")

    return p


def settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {k: v for k, v in vars(args).items() if v is not None}
    return Settings(**overrides)


async def run_until_stopped(loop: ControlLoop) -> None:
    aio_loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            aio_loop.add_signal_handler(sig, loop.request_stop)
        except (NotImplementedError, RuntimeError):
            # Not available on this platform / thread; rely on KeyboardInterrupt
            pass
    await loop.run()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        s = settings_from_args(args)
    except ValueError as e:
        print(f"autobacklight: invalid configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(s.effective_log_level, s.log_file)

    try:
        loop = build_loop(s)
        asyncio.run(run_until_stopped(loop))
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_CONFIG_ERROR
    except DeviceError as e:
        logger.critical("%s", e)
        return EXIT_DEVICE_ERROR
    except KeyboardInterrupt:
        logger.info("Shutting down")

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
