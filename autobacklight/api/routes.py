from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends

from ..core.config import Settings
from ..core.timeutil import now_utc
from ..sensors.simulated_lux_sensor import PatternConfig, SimulatedLuxSensor
from ..services.control_loop import ControlLoop
from .schemas import SimManualRequest, SimPatternRequest

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependency getters ---
# Placeholders; create_app() binds the real ones via app.dependency_overrides.
def get_loop() -> ControlLoop:  # overridden in main
    raise RuntimeError("Control loop dependency not configured")

def get_settings() -> Settings:  # overridden in main
    raise RuntimeError("Settings dependency not configured")

def get_sim_sensor() -> SimulatedLuxSensor:  # overridden in main
    raise RuntimeError("Simulated sensor dependency not configured")


@router.get("/live")
async def get_live(loop: ControlLoop = Depends(get_loop)):
    live = loop.live
    return {
        "now_utc": now_utc().isoformat(),
        "state": live.state,
        "running": live.running,
        "backlight": {
            "current": live.current,
            "target": live.target,
            "writes": live.writes,
            "last_write_utc": live.last_write_utc.isoformat() if live.last_write_utc else None,
        },
        "ambient": {
            "last_sample": live.last_sample,
            "average": live.average,
            "percent": live.percent,
            "window_fill": live.window_fill,
            "window_capacity": live.window_capacity,
            "warm": live.warm,
        },
        "decision": {
            "apply": live.last_decision,
            "reason": live.last_reason,
        },
        "error": live.error,
    }


@router.get("/settings")
async def get_settings_api(
    settings: Settings = Depends(get_settings),
    loop: ControlLoop = Depends(get_loop),
):
    controller = asdict(loop.config)
    controller["sensitivity_unit"] = loop.config.sensitivity_unit.value
    return {
        "settings": settings.model_dump(),
        "controller": controller,
    }


# --- Simulation endpoints ---
@router.get("/sim/status")
async def sim_status(sensor: SimulatedLuxSensor = Depends(get_sim_sensor)):
    return sensor.status()


@router.post("/sim/enable")
async def sim_enable(sensor: SimulatedLuxSensor = Depends(get_sim_sensor)):
    sensor.enable()
    return {"ok": True, "enabled": True}


@router.post("/sim/disable")
async def sim_disable(sensor: SimulatedLuxSensor = Depends(get_sim_sensor)):
    # The next sensor read fails, which stops the controller
    sensor.disable()
    logger.warning("Simulated sensor disabled via API")
    return {"ok": True, "enabled": False}


@router.post("/sim/lux/manual")
async def sim_set_manual(req: SimManualRequest, sensor: SimulatedLuxSensor = Depends(get_sim_sensor)):
    sensor.set_manual(req.value)
    return {"ok": True, "mode": "manual", "value": req.value}


@router.post("/sim/lux/pattern")
async def sim_set_pattern(req: SimPatternRequest, sensor: SimulatedLuxSensor = Depends(get_sim_sensor)):
    cfg = PatternConfig(**req.model_dump())
    sensor.set_pattern(cfg)
    return {"ok": True, "pattern": asdict(cfg)}
