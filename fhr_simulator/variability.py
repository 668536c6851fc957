# /fhr_simulator/variability.py
import enum
import logging
from dataclasses import dataclass

from .constants import VARIABILITY_BAND_TABLE
from .random_variates import RandomVariate

logger = logging.getLogger(__name__)


class VariabilityName(str, enum.Enum):
    ABSENT = "absent"
    MINIMAL = "minimal"
    MODERATE = "moderate"
    MARKED = "marked"


# Accelerations are only generated on top of at least moderate variability.
ACCELERATION_ELIGIBLE_BANDS = frozenset({VariabilityName.MODERATE, VariabilityName.MARKED})


@dataclass(frozen=True)
class VariabilityBand:
    name: VariabilityName
    amplitude: float  # ± bpm around baseline
    step: float       # max per-sample delta of the walk

    @property
    def label(self) -> str:
        return VARIABILITY_BAND_TABLE[self.name.value]["label"]

    @property
    def allows_accelerations(self) -> bool:
        return self.name in ACCELERATION_ELIGIBLE_BANDS


def band_for_probability(r: float) -> VariabilityName:
    """Map a uniform draw in [0, 1) onto the weighted band table."""
    for band_key, entry in VARIABILITY_BAND_TABLE.items():
        if entry["min_p"] <= r < entry["max_p"]:
            return VariabilityName(band_key)
    # r == 1.0 can only come from a scripted source; treat it as the top band
    return VariabilityName.MARKED


def build_band(name: VariabilityName, rv: RandomVariate) -> VariabilityBand:
    """Draw the amplitude for a known band and derive its step size."""
    entry = VARIABILITY_BAND_TABLE[name.value]
    amp_low, amp_high = entry["amplitude_range"]
    if amp_low == amp_high:
        amplitude = float(amp_low)
    else:
        amplitude = rv.uniform(amp_low, amp_high)

    if entry["fixed_step"] is not None:
        step = float(entry["fixed_step"])
    else:
        step = amplitude * entry["step_ratio"]
    return VariabilityBand(name=name, amplitude=amplitude, step=step)


def pick_variability(rv: RandomVariate) -> VariabilityBand:
    """
    Weighted pick of a fetal variability band.

    Weights: Absent 15%, Minimal 30%, Moderate 35%, Marked 20%. Amplitude is
    drawn uniformly inside the band's range (Absent is fixed at 0.5 bpm).
    """
    name = band_for_probability(rv.random())
    band = build_band(name, rv)
    logger.debug("Picked variability %s (amplitude=%.2f, step=%.2f)", band.label, band.amplitude, band.step)
    return band
