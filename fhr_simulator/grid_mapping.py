# /fhr_simulator/grid_mapping.py
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .constants import (
    TOTAL_MINUTES, TOTAL_SMALL_BOXES, SMALL_BOXES_PER_MINUTE, TOTAL_POINTS,
    MOBILE_BREAKPOINT_CSS_PX, MOBILE_FONT_FACTOR, LABEL_MINUTES, LABEL_X_OFFSET,
    CRISP_LINE_OFFSET, GridSpec
)


@dataclass(frozen=True)
class SurfaceSize:
    """
    A drawing surface as the host sizes it.

    `width`/`height` are the backing resolution that coordinates are computed
    in. `css_width` is the on-screen width; when it is unknown (None or 0)
    the surface is assumed to be displayed 1:1.
    """
    width: float
    height: float
    css_width: Optional[float] = None

    @property
    def backing_scale(self) -> float:
        if not self.css_width:
            return 1.0
        return self.width / self.css_width

    @property
    def css_height(self) -> float:
        return self.height / self.backing_scale


def scaled_font_size(target_css_px: float, surface: SurfaceSize) -> float:
    """
    Convert an on-screen font size into surface units.

    Compensates for the backing-store scale and shrinks labels by 15% on
    narrow (mobile-ish) displays.
    """
    factor = 1.0
    if surface.css_width is not None and surface.css_width < MOBILE_BREAKPOINT_CSS_PX:
        factor = MOBILE_FONT_FACTOR
    return target_css_px * factor * surface.backing_scale


def format_grid_value(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def stepped_values(value_min: float, value_max: float, step: float) -> List[float]:
    """value_min, value_min + step, ... up to and including value_max."""
    if step <= 0 or value_max < value_min:
        return []
    count = int(math.floor((value_max - value_min) / step + 1e-9))
    return [value_min + k * step for k in range(count + 1)]


class GridCoordinateMapper:
    """
    Pure geometry for one strip chart: value domain on y, 10-minute strip on x.

    Nothing here touches a drawing surface; the renderer turns these
    coordinates into draw commands.
    """

    def __init__(self, width: float, height: float, value_min: float, value_max: float,
                 total_points: int = TOTAL_POINTS):
        self.width = width
        self.height = height
        self.value_min = value_min
        self.value_max = value_max
        self.total_points = total_points

    @classmethod
    def for_grid(cls, surface: SurfaceSize, grid: GridSpec, total_points: int = TOTAL_POINTS):
        return cls(surface.width, surface.height, grid.value_min, grid.value_max, total_points)

    # --- Scales ---
    @property
    def small_box_width(self) -> float:
        return self.width / TOTAL_SMALL_BOXES

    @property
    def minute_width(self) -> float:
        return self.small_box_width * SMALL_BOXES_PER_MINUTE

    @property
    def pixels_per_unit(self) -> float:
        return self.height / (self.value_max - self.value_min)

    @property
    def x_step(self) -> float:
        # A single-point (or empty) trace has no spacing to divide into
        if self.total_points > 1:
            return self.width / (self.total_points - 1)
        return self.width

    # --- Forward / inverse transforms ---
    def value_to_y(self, value: float, clamp: bool = False) -> float:
        if clamp:
            value = max(self.value_min, min(self.value_max, value))
        return self.height - (value - self.value_min) * self.pixels_per_unit

    def y_to_value(self, y: float) -> float:
        return self.value_min + (self.height - y) / self.pixels_per_unit

    def index_to_x(self, index: float) -> float:
        return index * self.x_step

    def norm_to_x(self, x_norm: float) -> float:
        return x_norm * self.width

    def trace_points(self, trace) -> List[Tuple[float, float]]:
        """Polyline vertices for a trace, one per sample, values clamped to the grid."""
        return [(self.index_to_x(i), self.value_to_y(float(v), clamp=True)) for i, v in enumerate(trace)]

    # --- Grid lines ---
    def vertical_minor_xs(self) -> List[float]:
        """Every 10 seconds."""
        return [i * self.small_box_width + CRISP_LINE_OFFSET for i in range(TOTAL_SMALL_BOXES + 1)]

    def vertical_major_xs(self) -> List[float]:
        """Every minute."""
        return [i * self.minute_width + CRISP_LINE_OFFSET for i in range(TOTAL_MINUTES + 1)]

    def horizontal_ys(self, step: float) -> List[float]:
        return [self.value_to_y(v) + CRISP_LINE_OFFSET for v in stepped_values(self.value_min, self.value_max, step)]

    def value_labels(self, label_step: float) -> List[Tuple[str, float, float]]:
        """(text, x, y) for every labelled value, repeated at minutes 1, 4 and 7."""
        labels = []
        for value in stepped_values(self.value_min, self.value_max, label_step):
            y = self.value_to_y(value)
            for minute in LABEL_MINUTES:
                labels.append((format_grid_value(value), minute * self.minute_width + LABEL_X_OFFSET, y))
        return labels
