# /fhr_simulator/trace_generation.py
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .constants import (
    TOTAL_POINTS, TOTAL_SECONDS, ACCELERATION_PARAMS, TOCO_PARAMS
)
from .random_variates import RandomVariate
from .variability import VariabilityBand
from .waveform_primitives import soft_reflect, hard_clamp, triangular_ramp, half_sine_dome

logger = logging.getLogger(__name__)


# --- Ground-Truth Records ---
@dataclass
class AccelerationEvent:
    start_sec: float
    peak_sec: float
    end_sec: float
    amp: int
    start_idx: int
    peak_idx: int
    end_idx: int
    baseline: int

    @classmethod
    def from_seconds(cls, start_sec, peak_sec, end_sec, amp, baseline, total_points=TOTAL_POINTS):
        return cls(
            start_sec=start_sec, peak_sec=peak_sec, end_sec=end_sec, amp=amp,
            start_idx=seconds_to_index(start_sec, total_points),
            peak_idx=seconds_to_index(peak_sec, total_points),
            end_idx=seconds_to_index(end_sec, total_points),
            baseline=baseline,
        )


@dataclass
class Contraction:
    start_sec: float
    end_sec: float
    amp: int

    @classmethod
    def centered(cls, center_sec: float, duration_sec: float, amp: int) -> "Contraction":
        return cls(start_sec=center_sec - duration_sec / 2, end_sec=center_sec + duration_sec / 2, amp=amp)


def seconds_to_index(sec: float, total_points: int = TOTAL_POINTS) -> int:
    return int(math.floor(sec / TOTAL_SECONDS * (total_points - 1)))


def sample_times(total_points: int = TOTAL_POINTS) -> np.ndarray:
    """Strip time in seconds of every sample (first at 0, last at 600)."""
    if total_points <= 1:
        return np.zeros(total_points)
    return np.arange(total_points) / (total_points - 1) * TOTAL_SECONDS


# --- FHR Variability Walk ---
def generate_fhr_trace(baseline: int, band: VariabilityBand, rv: RandomVariate,
                       total_points: int = TOTAL_POINTS) -> np.ndarray:
    """
    Bounded random walk around the baseline (variability only, no accels).

    Each sample moves by a fresh uniform delta in [-step, step]. Samples that
    leave [baseline - amplitude, baseline + amplitude] are softly reflected
    back inside the band.
    """
    trace = np.empty(total_points, dtype=float)
    if total_points == 0:
        return trace

    min_bpm = baseline - band.amplitude
    max_bpm = baseline + band.amplitude
    current_bpm = float(baseline)
    trace[0] = current_bpm

    for i in range(1, total_points):
        current_bpm += rv.uniform(-band.step, band.step)
        current_bpm = soft_reflect(current_bpm, min_bpm, max_bpm, band.step, rv)
        trace[i] = current_bpm

    return trace


# --- Accelerations ---
def add_acceleration(trace: np.ndarray, event: AccelerationEvent) -> None:
    """Add one triangular acceleration on top of the existing samples, in place."""
    if trace.size == 0:
        return
    last_idx = min(event.end_idx, trace.size - 1)
    if last_idx < event.start_idx:
        return
    window = np.arange(event.start_idx, last_idx + 1)
    trace[window] += event.amp * triangular_ramp(window, event.start_idx, event.peak_idx, event.end_idx)


def draw_acceleration(baseline: int, rv: RandomVariate, total_points: int = TOTAL_POINTS) -> AccelerationEvent:
    params = ACCELERATION_PARAMS
    duration_sec = rv.randint(*params["duration_range_sec"])
    max_onset_to_peak = min(params["max_onset_to_peak_sec"], duration_sec - params["min_downslope_sec"])
    onset_to_peak_sec = rv.randint(params["min_onset_to_peak_sec"], max_onset_to_peak)
    amp = rv.randint(*params["amplitude_range_bpm"])
    margin = params["edge_margin_sec"]
    start_sec = rv.randint(margin, TOTAL_SECONDS - duration_sec - margin)

    return AccelerationEvent.from_seconds(
        start_sec=start_sec,
        peak_sec=start_sec + onset_to_peak_sec,
        end_sec=start_sec + duration_sec,
        amp=amp,
        baseline=baseline,
        total_points=total_points,
    )


def apply_accelerations(trace: np.ndarray, baseline: int, allow_accels: bool,
                        rv: RandomVariate) -> List[AccelerationEvent]:
    """
    Overlay 0-2 accelerations on an already-walked trace (mutated in place).

    Returns the ground-truth events in generation order. Events are not
    checked for overlap; overlapping ramps stack additively.
    """
    events: List[AccelerationEvent] = []
    if trace.size == 0 or not allow_accels:
        return events

    accel_count = rv.randint(0, ACCELERATION_PARAMS["max_count"])
    for _ in range(accel_count):
        event = draw_acceleration(baseline, rv, total_points=trace.size)
        add_acceleration(trace, event)
        events.append(event)
        logger.debug(
            "Injected acceleration +%d bpm at %ss (peak %ss, end %ss)",
            event.amp, event.start_sec, event.peak_sec, event.end_sec
        )
    return events


# --- TOCO ---
def draw_contractions(rv: RandomVariate) -> List[Contraction]:
    params = TOCO_PARAMS
    contractions = []
    count = rv.randint(0, params["max_contractions"])
    for _ in range(count):
        center_min = rv.uniform(*params["center_range_min"])
        duration_sec = rv.randint(*params["duration_range_sec"])
        amp = rv.randint(*params["amplitude_range"])
        contractions.append(Contraction.centered(center_min * 60, duration_sec, amp))
        logger.debug("Placed contraction amp=%d centred at %.2f min for %ds", amp, center_min, duration_sec)
    return contractions


def contraction_profile(t_points, contractions: Sequence[Contraction]) -> np.ndarray:
    """Uterine pressure added by contractions; the tallest dome wins where they overlap."""
    t_points = np.asarray(t_points, dtype=float)
    profile = np.zeros_like(t_points)
    for c in contractions:
        profile = np.maximum(profile, half_sine_dome(t_points, c.start_sec, c.end_sec, c.amp))
    return profile


def generate_toco_trace(rv: RandomVariate, contractions: Optional[List[Contraction]] = None,
                        total_points: int = TOTAL_POINTS):
    """
    Uterine activity trace, independent of the FHR trace.

    A squiggly tonus walk hard-clamped to [8, 25], plus at most one
    half-sine contraction dome, plus small measurement noise. Pass
    `contractions` to place them explicitly instead of drawing them.

    Returns:
        (trace, contractions) with trace values clamped to [0, 100]
    """
    params = TOCO_PARAMS
    if contractions is None:
        contractions = draw_contractions(rv)

    trace = np.empty(total_points, dtype=float)
    added = contraction_profile(sample_times(total_points), contractions)
    tonus_low, tonus_high = params["tonus_clamp"]
    value_low, value_high = params["value_range"]
    tonus = rv.uniform(*params["tonus_start_range"])

    for i in range(total_points):
        tonus = hard_clamp(tonus + rv.uniform(-params["tonus_step"], params["tonus_step"]), tonus_low, tonus_high)
        value = tonus + added[i] + rv.uniform(-params["noise_amplitude"], params["noise_amplitude"])
        trace[i] = hard_clamp(value, value_low, value_high)

    return trace, contractions
