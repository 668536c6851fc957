import logging
import math

from .constants import BASELINE_PARAMS
from .random_variates import RandomVariate

logger = logging.getLogger(__name__)


def round_to_nearest(value: float, multiple: int = BASELINE_PARAMS["rounding_bpm"]) -> int:
    """Round half up to the nearest multiple (112.5 -> 115, 107 -> 105)."""
    return int(math.floor(value / multiple + 0.5)) * multiple


def pick_baseline(rv: RandomVariate) -> int:
    """
    Baseline FHR: 90-180 bpm overall, but 80% of strips land within 110-160.
    The raw draw is rounded to the nearest 5 bpm.
    """
    if rv.random() < BASELINE_PARAMS["normal_probability"]:
        raw_baseline = rv.randint(*BASELINE_PARAMS["normal_range_bpm"])
    elif rv.random() < BASELINE_PARAMS["brady_probability"]:
        raw_baseline = rv.randint(*BASELINE_PARAMS["brady_range_bpm"])
    else:
        raw_baseline = rv.randint(*BASELINE_PARAMS["tachy_range_bpm"])

    baseline = round_to_nearest(raw_baseline)
    logger.debug("Picked baseline %d bpm (raw %d)", baseline, raw_baseline)
    return baseline
