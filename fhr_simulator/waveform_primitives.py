# /fhr_simulator/waveform_primitives.py
import numpy as np

from .random_variates import RandomVariate


# --- Boundary Policies ---
def soft_reflect(value, low, high, step, rv: RandomVariate):
    """
    Keep a random-walk sample inside [low, high] without sticking to the rail.

    A sample that crosses a bound is re-injected just inside it, at a random
    offset of up to one step. Unlike a hard clamp this never leaves the walk
    flat-lined on the boundary.
    """
    if value < low:
        value = low + rv.random() * step
    if value > high:
        value = high - rv.random() * step
    return value


def hard_clamp(value, low, high):
    return max(low, min(high, value))


# --- Event Shapes ---
def triangular_ramp(indices, start_idx, peak_idx, end_idx):
    """
    Piecewise-linear 0 -> 1 -> 0 envelope over [start_idx, end_idx].

    Rises from start to peak, falls from peak to end. A zero-length upslope
    or downslope uses a denominator of 1 instead of 0.

    Args:
        indices: Sample indices (scalar or array) to evaluate
        start_idx: Onset index (factor 0)
        peak_idx: Peak index (factor 1)
        end_idx: Offset index (factor 0)

    Returns:
        Ramp factors clamped to [0, 1], zero outside the window
    """
    indices = np.asarray(indices, dtype=float)
    rise_denom = (peak_idx - start_idx) or 1
    fall_denom = (end_idx - peak_idx) or 1

    rising = (indices - start_idx) / rise_denom
    falling = 1.0 - (indices - peak_idx) / fall_denom
    factors = np.where(indices <= peak_idx, rising, falling)
    factors = np.clip(factors, 0.0, 1.0)

    in_window = (indices >= start_idx) & (indices <= end_idx)
    return np.where(in_window, factors, 0.0)


def half_sine_dome(t_points, start, end, amplitude):
    """
    Symmetric contraction hump: amplitude * sin(pi * phase) inside [start, end].

    Phase is the fractional position inside the window, clamped to [0, 1].
    Points outside the window contribute 0.
    """
    t_points = np.asarray(t_points, dtype=float)
    if end <= start:
        return np.zeros_like(t_points)
    phase = np.clip((t_points - start) / (end - start), 0.0, 1.0)
    dome = amplitude * np.sin(np.pi * phase)
    in_window = (t_points >= start) & (t_points <= end)
    return np.where(in_window, dome, 0.0)
