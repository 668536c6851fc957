# /fhr_simulator/api_models.py
from pydantic import BaseModel, Field
from typing import List, Optional


class PointerEventParams(BaseModel):
    x: float = Field(..., description="Pointer x relative to the chart's left edge (on-screen units).")
    y: float = Field(0.0, description="Pointer y relative to the chart's top edge (on-screen units).")
    width: float = Field(..., gt=0, description="On-screen chart width.")
    height: float = Field(..., gt=0, description="On-screen chart height.")
    is_touch: bool = Field(False)


class PointerEventResponse(BaseModel):
    dirty: bool
    prevent_default: bool
    dragging_index: Optional[int] = None


class CorrectAnswerResponse(BaseModel):
    baseline: int
    variability_name: str
    range_low: float
    range_high: float
    range_text: str


class AccelerationEventModel(BaseModel):
    start_sec: float
    peak_sec: float
    end_sec: float
    amp: int
    start_idx: int
    peak_idx: int
    end_idx: int
    baseline: int


class MarkerModel(BaseModel):
    x_norm: float = Field(..., ge=0.0, le=1.0)


class OverlayStateModel(BaseModel):
    show_baseline: bool
    show_accel_truth: bool


class StripResponse(BaseModel):
    """Learner-visible strip state. Ground truth stays behind the reveal endpoints."""
    fhr_trace: List[float]
    toco_trace: List[float]
    markers: List[MarkerModel]
    overlays: OverlayStateModel
    accelerations: Optional[List[AccelerationEventModel]] = Field(
        None, description="Only populated once acceleration truth has been revealed.")
    baseline: Optional[int] = Field(None, description="Only populated once the baseline has been revealed.")


class CommandResponse(BaseModel):
    dirty: bool
    text: Optional[str] = None
