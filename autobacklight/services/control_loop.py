from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from ..core.timeutil import now_utc
from ..domain.controller import BrightnessController
from ..domain.errors import DeviceError
from ..domain.interfaces import BacklightDevice, DiagnosticsSink, SensorSource
from ..domain.models import ControllerConfig, LoopState, Observation, SensitivityUnit
from ..domain.ramper import Ramper
from ..domain.window import SampleWindow
from .diagnostics import LoggingDiagnostics

logger = logging.getLogger(__name__)


@dataclass
class LiveState:
    state: str = LoopState.SAMPLING.value
    running: bool = False
    current: Optional[int] = None
    last_sample: Optional[int] = None
    average: Optional[float] = None
    window_fill: int = 0
    window_capacity: int = 0
    warm: bool = False
    target: Optional[int] = None
    percent: Optional[int] = None
    last_decision: Optional[bool] = None
    last_reason: Optional[str] = None
    writes: int = 0
    last_write_utc: Optional[datetime] = None
    error: Optional[str] = None


class ControlLoop:
    """
    Sampling -> Evaluating -> (Applying | Idle) -> Sampling, forever.

    - Sampling reads the backlight and one illuminance sample; while the
      window is still warming up it samples again straight away.
    - Evaluating maps the window average to a target and runs the
      hysteresis gate.
    - Applying ramps to the target, then samples again without sleeping.
    - Idle waits poll_interval (interruptible by stop) before sampling.

    Device errors are not handled here: they end run() with the exception.
    """

    def __init__(
        self,
        sensor: SensorSource,
        backlight: BacklightDevice,
        config: ControllerConfig,
        diagnostics: Optional[DiagnosticsSink] = None,
        ramper: Optional[Ramper] = None,
    ) -> None:
        self._sensor = sensor
        self._backlight = backlight
        self._config = config
        self._diag = diagnostics or LoggingDiagnostics()
        self._ramper = ramper or Ramper(config)
        self._controller = BrightnessController(config)
        self._window = SampleWindow(config.probes)

        self._task: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()

        self._current: Optional[int] = None
        self._observation: Optional[Observation] = None
        self.live = LiveState(window_capacity=config.probes)

        self._handlers = {
            LoopState.SAMPLING: self._sample,
            LoopState.EVALUATING: self._evaluate,
            LoopState.APPLYING: self._apply,
            LoopState.IDLE: self._idle,
        }

    @property
    def config(self) -> ControllerConfig:
        return self._config

    @property
    def window(self) -> SampleWindow:
        return self._window

    async def start(self) -> asyncio.Task:
        self._stop.clear()
        self._task = asyncio.create_task(self.run(), name="control_loop")
        return self._task

    async def stop(self) -> None:
        self._stop.set()
        task, self._task = self._task, None
        if task is not None and not task.done():
            await task

    def request_stop(self) -> None:
        self._stop.set()

    async def run(self) -> None:
        c = self._config
        logger.info(
            "Control loop started (probes=%d min=%d max=%d ratio=%d sensitivity=%d%s "
            "ramp=%s step=%d poll=%.2fs ramp_interval=%.2fs dry_run=%s)",
            c.probes, c.min_brightness, c.max_brightness, c.ratio_lux, c.sensitivity,
            "%" if c.sensitivity_unit is SensitivityUnit.PERCENT else "",
            c.ramp, c.ramp_step, c.poll_interval, c.ramp_interval, c.dry_run,
        )

        self.live.running = True
        state = LoopState.SAMPLING
        try:
            while not self._stop.is_set():
                state = await self.step(state)
        except DeviceError as e:
            self.live.error = str(e)
            raise
        finally:
            self.live.running = False

        logger.info("Control loop stopped")

    async def step(self, state: LoopState) -> LoopState:
        """Execute one state and return the next one."""
        self.live.state = state.value
        return await self._handlers[state]()

    # --- states ---

    async def _sample(self) -> LoopState:
        self._current = await self._io(self._backlight.read_brightness)
        sample = await self._io(self._sensor.read_illuminance)
        self._window.push(sample)

        self.live.current = self._current
        self.live.last_sample = sample
        self.live.window_fill = len(self._window)
        self.live.warm = self._window.is_warm

        if self._config.warmup and not self._window.is_warm:
            logger.debug(
                "Warming up: %d/%d samples (last=%d)",
                len(self._window), self._window.capacity, sample,
            )
            return LoopState.SAMPLING
        return LoopState.EVALUATING

    async def _evaluate(self) -> LoopState:
        average = self._window.average()
        if average is None or self._current is None:
            return LoopState.SAMPLING

        obs = self._controller.decide(self._current, average, sample=self.live.last_sample)
        self._observation = obs

        self.live.average = obs.average
        self.live.target = obs.target
        self.live.percent = obs.percent
        self.live.last_decision = obs.apply
        self.live.last_reason = obs.reason

        if self._config.debug:
            self._diag.observe(obs)

        if not obs.apply:
            return LoopState.IDLE

        if self._config.dry_run:
            logger.info(
                "dry-run: would change backlight to %d%%; illuminance = %.1f, backlight = %d (was %d)",
                obs.percent, obs.average, obs.target, obs.current,
            )
            await self._ramper.apply(obs.current, obs.target, self._write, self._wait)
            return LoopState.IDLE

        logger.info(
            "change backlight to %d%%; illuminance = %.1f, backlight = %d (was %d)",
            obs.percent, obs.average, obs.target, obs.current,
        )
        return LoopState.APPLYING

    async def _apply(self) -> LoopState:
        obs = self._observation
        if obs is not None:
            await self._ramper.apply(obs.current, obs.target, self._write, self._wait)
        # Re-check conditions right away after changing the backlight
        return LoopState.SAMPLING

    async def _idle(self) -> LoopState:
        await self._wait(self._config.poll_interval)
        return LoopState.SAMPLING

    # --- helpers ---

    async def _write(self, level: int) -> None:
        await self._io(self._backlight.write_brightness, level)
        self.live.writes += 1
        self.live.current = level
        self.live.last_write_utc = now_utc()

    async def _wait(self, seconds: float) -> bool:
        """Sleep with cancellation awareness. True if a stop was requested."""
        if self._stop.is_set():
            return True
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    async def _io(self, fn: Callable[..., Any], *args: Any) -> Any:
        # Device calls block; keep them off the event loop
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn, *args)
