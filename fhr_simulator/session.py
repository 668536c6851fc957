# /fhr_simulator/session.py
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .baseline import pick_baseline
from .chart_rendering import ChartDisplayList, build_fhr_chart, build_toco_chart
from .grid_mapping import SurfaceSize
from .markers import MarkerInteractionModel, PointerResult
from .random_variates import RandomVariate
from .trace_generation import (
    AccelerationEvent, Contraction, apply_accelerations, generate_fhr_trace, generate_toco_trace
)
from .variability import VariabilityBand, pick_variability

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorrectAnswer:
    baseline: int
    variability_name: str
    range_low: float
    range_high: float

    @property
    def range_text(self) -> str:
        return f"{self.range_low:.0f} – {self.range_high:.0f} bpm"


@dataclass
class OverlayState:
    show_baseline: bool = False
    show_accel_truth: bool = False


@dataclass
class StripSession:
    """
    One learner's current strip: traces, ground truth, overlays and markers.

    Owned by the host (UI or HTTP layer). Every mutating command returns True
    when the charts need a repaint; the host decides when to redraw.
    """
    rv: RandomVariate = field(default_factory=RandomVariate)
    baseline: Optional[int] = None
    band: Optional[VariabilityBand] = None
    fhr_trace: np.ndarray = field(default_factory=lambda: np.empty(0))
    accelerations: List[AccelerationEvent] = field(default_factory=list)
    toco_trace: np.ndarray = field(default_factory=lambda: np.empty(0))
    contractions: List[Contraction] = field(default_factory=list)
    correct_answer: Optional[CorrectAnswer] = None
    overlays: OverlayState = field(default_factory=OverlayState)
    marker_model: MarkerInteractionModel = field(default_factory=MarkerInteractionModel)

    @classmethod
    def seeded(cls, seed: Optional[int]) -> "StripSession":
        return cls(rv=RandomVariate(seed=seed))

    # --- Regeneration ---
    def regenerate(self) -> bool:
        baseline = pick_baseline(self.rv)
        band = pick_variability(self.rv)

        trace = generate_fhr_trace(baseline, band, self.rv)
        accelerations = apply_accelerations(trace, baseline, band.allows_accelerations, self.rv)
        toco_trace, contractions = generate_toco_trace(self.rv)

        self.baseline = baseline
        self.band = band
        self.fhr_trace = trace
        self.accelerations = accelerations
        self.toco_trace = toco_trace
        self.contractions = contractions
        self.correct_answer = CorrectAnswer(
            baseline=baseline,
            variability_name=band.label,
            range_low=baseline - band.amplitude,
            range_high=baseline + band.amplitude,
        )
        self.overlays = OverlayState()
        self.marker_model.clear()

        logger.info(
            "New strip: baseline=%d bpm, variability=%s, accelerations=%d, contractions=%d",
            baseline, band.name.value, len(accelerations), len(contractions)
        )
        return True

    @property
    def has_strip(self) -> bool:
        return self.correct_answer is not None

    # --- Queries ---
    def get_correct_answer(self) -> Optional[CorrectAnswer]:
        return self.correct_answer

    @property
    def markers(self):
        return self.marker_model.markers

    # --- Quiz checks ---
    def reveal_baseline(self) -> bool:
        self.overlays.show_baseline = True
        return True

    def reveal_acceleration_truth(self) -> bool:
        self.overlays.show_accel_truth = True
        return True

    def reveal_variability(self) -> Optional[str]:
        return self.correct_answer.variability_name if self.correct_answer else None

    def reveal_range(self) -> Optional[str]:
        return self.correct_answer.range_text if self.correct_answer else None

    # --- Markers ---
    def add_marker(self) -> bool:
        return self.marker_model.add_marker()

    def pointer_down(self, x, y, width, height, is_touch=False) -> PointerResult:
        return self.marker_model.pointer_down(x, y, width, height, is_touch=is_touch)

    def pointer_move(self, x, width, is_touch=False) -> PointerResult:
        return self.marker_model.pointer_move(x, width, is_touch=is_touch)

    def pointer_up(self) -> PointerResult:
        return self.marker_model.pointer_up()

    # --- Rendering ---
    def render_fhr(self, surface: SurfaceSize) -> ChartDisplayList:
        return build_fhr_chart(
            surface, self.fhr_trace,
            baseline=self.baseline,
            accelerations=self.accelerations,
            markers=self.markers,
            show_baseline=self.overlays.show_baseline,
            show_accel_truth=self.overlays.show_accel_truth,
        )

    def render_toco(self, surface: SurfaceSize) -> ChartDisplayList:
        return build_toco_chart(surface, self.toco_trace)
