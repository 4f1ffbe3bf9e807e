from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Literal


class SimManualRequest(BaseModel):
    value: int = Field(ge=0)


class SimPatternRequest(BaseModel):
    type: Literal["sine", "step", "ramp", "random"]
    baseline: float = 1000
    amplitude: float = 800
    period_s: float = Field(default=600, gt=0)
    noise: float = Field(default=20, ge=0)
    step_low: float = 200
    step_high: float = 1800
    step_period_s: float = Field(default=120, gt=0)
    ramp_min: float = 0
    ramp_max: float = 2000
    ramp_period_s: float = Field(default=600, gt=0)
