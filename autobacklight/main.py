from __future__ import annotations

import asyncio
import logging
import os
import signal
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException

from .core.config import Settings
from .core.log import configure_logging

from .api.routes import router as api_router
import autobacklight.api.routes as routes_module

from .domain.interfaces import BacklightDevice
from .sensors.base import IlluminanceSensor
from .sensors.simulated_lux_sensor import SimulatedLuxSensor
from .services.builder import build_loop, build_sensor


logger = logging.getLogger(__name__)


def terminate_process(exc: BaseException) -> None:
    # Device errors are fatal: take the whole service down
    os.kill(os.getpid(), signal.SIGTERM)


def create_app(
    app_settings: Optional[Settings] = None,
    sensor: Optional[IlluminanceSensor] = None,
    backlight: Optional[BacklightDevice] = None,
    on_fatal: Callable[[BaseException], None] = terminate_process,
    setup_logging: bool = False,
) -> FastAPI:
    cfg = app_settings if app_settings is not None else Settings()

    def _on_loop_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.critical("Control loop failed: %s", exc)
            on_fatal(exc)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if setup_logging:
            configure_logging(cfg.effective_log_level, cfg.log_file)
        logger.info("Starting %s (sensor=%s backlight=%s)", cfg.app_name, cfg.sensor_mode, cfg.backlight_mode)

        app.state.sensor = sensor if sensor is not None else build_sensor(cfg)
        app.state.loop = build_loop(cfg, sensor=app.state.sensor, backlight=backlight)

        task = await app.state.loop.start()
        task.add_done_callback(_on_loop_done)

        try:
            yield
        finally:
            await app.state.loop.stop()

            close = getattr(app.state.sensor, "close", None)
            if close is not None:
                close()

            logger.info("Shutdown complete")

    app = FastAPI(title=cfg.app_name, lifespan=lifespan)

    def get_loop():
        return app.state.loop

    def get_settings() -> Settings:
        return cfg

    def get_sim_sensor() -> SimulatedLuxSensor:
        if not isinstance(app.state.sensor, SimulatedLuxSensor):
            raise HTTPException(status_code=409, detail="Simulated sensor not active (sensor_mode is not 'sim')")
        return app.state.sensor

    # Make the dependency functions in routes resolve to the real ones
    app.dependency_overrides[routes_module.get_loop] = get_loop
    app.dependency_overrides[routes_module.get_settings] = get_settings
    app.dependency_overrides[routes_module.get_sim_sensor] = get_sim_sensor

    app.include_router(api_router, prefix="/api")
    return app


app = create_app(setup_logging=True)
