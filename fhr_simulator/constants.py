# --- Strip Generation Constants ---
from dataclasses import dataclass
from typing import Dict, Tuple

# --- Strip Geometry ---
TOTAL_MINUTES = 10
SECONDS_PER_SMALL_BOX = 10
SMALL_BOXES_PER_MINUTE = 60 // SECONDS_PER_SMALL_BOX  # 6
TOTAL_SMALL_BOXES = TOTAL_MINUTES * SMALL_BOXES_PER_MINUTE  # 60
POINTS_PER_SMALL_BOX = 10
TOTAL_POINTS = TOTAL_SMALL_BOXES * POINTS_PER_SMALL_BOX  # 600
TOTAL_SECONDS = TOTAL_MINUTES * 60  # 600

# --- Variability Bands ---
# Amplitude is ± from baseline (peak-to-trough = 2 * amplitude).
# Each entry: cumulative probability window [min_p, max_p), amplitude range
# (a degenerate range means a fixed amplitude), and either a step ratio
# (step = amplitude * ratio) or a fixed step.
VARIABILITY_BAND_TABLE = {
    "absent": {
        "min_p": 0.00, "max_p": 0.15,
        "amplitude_range": (0.5, 0.5),
        "step_ratio": None, "fixed_step": 0.2,
        "label": "Absent",
    },
    "minimal": {
        "min_p": 0.15, "max_p": 0.45,
        "amplitude_range": (0.8, 2.5),
        "step_ratio": 0.6, "fixed_step": None,
        "label": "Minimal (1–5 bpm)",
    },
    "moderate": {
        "min_p": 0.45, "max_p": 0.80,
        "amplitude_range": (3.0, 12.5),
        "step_ratio": 0.5, "fixed_step": None,
        "label": "Moderate (6–25 bpm)",
    },
    "marked": {
        "min_p": 0.80, "max_p": 1.00,
        "amplitude_range": (13.0, 25.0),
        "step_ratio": 0.4, "fixed_step": None,
        "label": "Marked (> 25 bpm)",
    },
}

# --- Baseline Selection ---
BASELINE_PARAMS = {
    "normal_probability": 0.8,
    "normal_range_bpm": (110, 160),
    "brady_probability": 0.5,  # of the remaining 20%
    "brady_range_bpm": (90, 109),
    "tachy_range_bpm": (161, 180),
    "rounding_bpm": 5,
}

# --- Accelerations ---
ACCELERATION_PARAMS = {
    "max_count": 2,
    "duration_range_sec": (15, 90),
    "min_onset_to_peak_sec": 5,
    "max_onset_to_peak_sec": 30,
    "min_downslope_sec": 5,
    "amplitude_range_bpm": (15, 30),
    "edge_margin_sec": 10,
}

# --- TOCO / Contractions ---
TOCO_PARAMS = {
    "max_contractions": 1,
    "center_range_min": (3.0, 7.0),
    "duration_range_sec": (60, 120),
    "amplitude_range": (35, 70),
    "tonus_start_range": (10.0, 15.0),
    "tonus_step": 1.5,
    "tonus_clamp": (8.0, 25.0),
    "noise_amplitude": 1.0,
    "value_range": (0.0, 100.0),
}

# --- Chart Geometry ---
MOBILE_BREAKPOINT_CSS_PX = 700
MOBILE_FONT_FACTOR = 0.85
LABEL_MINUTES = (1, 4, 7)
LABEL_X_OFFSET = 4
CRISP_LINE_OFFSET = 0.5
OVERLAY_FONT_CSS_PX = 15

# Marker hit-testing (CSS pixels)
MAX_USER_MARKERS = 3
MARKER_DEFAULT_X_NORM = 0.5
MARKER_GRAB_BAND_HEIGHT = 40
MARKER_GRAB_TOLERANCE_X = 10


@dataclass(frozen=True)
class GridSpec:
    """Value domain and grid steps for one strip chart."""
    value_min: float
    value_max: float
    minor_step: float
    major_step: float
    label_step: float
    label_font_css_px: float
    use_font_scaling: bool


FHR_GRID = GridSpec(
    value_min=30, value_max=240,
    minor_step=10, major_step=30, label_step=30,
    label_font_css_px=14, use_font_scaling=True,
)
TOCO_GRID = GridSpec(
    value_min=0, value_max=100,
    minor_step=10, major_step=20, label_step=20,
    label_font_css_px=10, use_font_scaling=False,
)

# --- Colours (CSS colour strings as drawn on the strip) ---
COLORS: Dict[str, str] = {
    "grid_minor": "rgba(255,0,0,0.25)",
    "grid_major": "rgba(255,0,0,0.75)",
    "grid_label": "rgba(239,68,68,1)",
    "trace": "#111827",
    "baseline_overlay": "rgba(37,99,235,0.9)",
    "baseline_label": "rgba(37,99,235,0.95)",
    "marker_line": "rgba(37,99,235,0.9)",
    "marker_label": "rgba(37,99,235,0.95)",
    "accel_truth": "rgba(220,38,38,0.98)",
}

LINE_WIDTHS: Dict[str, float] = {
    "grid_minor": 0.5,
    "grid_major": 1.0,
    "trace": 1.5,
    "overlay": 1.0,
}

DASH_PATTERNS: Dict[str, Tuple[float, float]] = {
    "baseline_overlay": (6, 4),
    "marker_line": (4, 4),
}
