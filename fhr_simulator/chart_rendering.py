# /fhr_simulator/chart_rendering.py
import io
import re
from typing import Annotated, List, Literal, Optional, Sequence, Tuple, Union

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.colors import to_rgba
from pydantic import BaseModel, Field

from .constants import (
    FHR_GRID, TOCO_GRID, COLORS, LINE_WIDTHS, DASH_PATTERNS, OVERLAY_FONT_CSS_PX, GridSpec
)
from .grid_mapping import GridCoordinateMapper, SurfaceSize, scaled_font_size


# --- Display List ---
class LineCommand(BaseModel):
    kind: Literal["line"] = "line"
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float
    dash: Optional[Tuple[float, float]] = None


class PolylineCommand(BaseModel):
    kind: Literal["polyline"] = "polyline"
    points: List[Tuple[float, float]]
    color: str
    width: float


class TextCommand(BaseModel):
    kind: Literal["text"] = "text"
    text: str
    x: float
    y: float
    color: str
    font_px: float
    align: Literal["left", "center"] = "left"
    baseline: Literal["top", "middle", "bottom"] = "middle"


DrawCommand = Annotated[Union[LineCommand, PolylineCommand, TextCommand], Field(discriminator="kind")]


class ChartDisplayList(BaseModel):
    width: float
    height: float
    commands: List[DrawCommand] = Field(default_factory=list)


# --- Chart Builders ---
def grid_commands(mapper: GridCoordinateMapper, grid: GridSpec, surface: SurfaceSize) -> List[DrawCommand]:
    """Minor then major vertical lines, minor then major horizontal lines, then value labels."""
    commands: List[DrawCommand] = []
    w, h = mapper.width, mapper.height

    for style, xs in (("grid_minor", mapper.vertical_minor_xs()), ("grid_major", mapper.vertical_major_xs())):
        commands.extend(
            LineCommand(x1=x, y1=0, x2=x, y2=h, color=COLORS[style], width=LINE_WIDTHS[style]) for x in xs
        )
    for style, step in (("grid_minor", grid.minor_step), ("grid_major", grid.major_step)):
        commands.extend(
            LineCommand(x1=0, y1=y, x2=w, y2=y, color=COLORS[style], width=LINE_WIDTHS[style])
            for y in mapper.horizontal_ys(step)
        )

    font_px = grid.label_font_css_px
    if grid.use_font_scaling:
        font_px = scaled_font_size(grid.label_font_css_px, surface)
    commands.extend(
        TextCommand(text=text, x=x, y=y, color=COLORS["grid_label"], font_px=font_px)
        for text, x, y in mapper.value_labels(grid.label_step)
    )
    return commands


def trace_command(mapper: GridCoordinateMapper, trace) -> PolylineCommand:
    return PolylineCommand(points=mapper.trace_points(trace), color=COLORS["trace"], width=LINE_WIDTHS["trace"])


def baseline_overlay_commands(mapper: GridCoordinateMapper, baseline: int, surface: SurfaceSize) -> List[DrawCommand]:
    y = mapper.value_to_y(baseline, clamp=True)
    return [
        LineCommand(x1=0, y1=y + 0.5, x2=mapper.width, y2=y + 0.5, color=COLORS["baseline_overlay"],
                    width=LINE_WIDTHS["overlay"], dash=DASH_PATTERNS["baseline_overlay"]),
        TextCommand(text=f"{baseline} bpm", x=4, y=y - 2, color=COLORS["baseline_label"],
                    font_px=scaled_font_size(OVERLAY_FONT_CSS_PX, surface), baseline="bottom"),
    ]


def marker_commands(mapper: GridCoordinateMapper, markers: Sequence, surface: SurfaceSize) -> List[DrawCommand]:
    commands: List[DrawCommand] = []
    for marker in markers:
        x = mapper.norm_to_x(marker.x_norm) + 0.5
        commands.append(LineCommand(x1=x, y1=0, x2=x, y2=mapper.height, color=COLORS["marker_line"],
                                    width=LINE_WIDTHS["overlay"], dash=DASH_PATTERNS["marker_line"]))
    font_px = scaled_font_size(OVERLAY_FONT_CSS_PX, surface)
    for marker in markers:
        commands.append(TextCommand(text="accel", x=mapper.norm_to_x(marker.x_norm), y=mapper.height - 2,
                                    color=COLORS["marker_label"], font_px=font_px, align="center",
                                    baseline="bottom"))
    return commands


def acceleration_truth_commands(mapper: GridCoordinateMapper, accelerations: Sequence,
                                surface: SurfaceSize) -> List[DrawCommand]:
    font_px = scaled_font_size(OVERLAY_FONT_CSS_PX, surface)
    if not accelerations:
        return [TextCommand(text="NO ACCELS", x=mapper.width / 2, y=2, color=COLORS["accel_truth"],
                            font_px=font_px, align="center", baseline="top")]
    return [
        TextCommand(text="ACCEL", x=mapper.index_to_x(event.peak_idx), y=2, color=COLORS["accel_truth"],
                    font_px=font_px, align="center", baseline="top")
        for event in accelerations
    ]


def build_fhr_chart(surface: SurfaceSize, trace, baseline: Optional[int] = None, accelerations: Sequence = (),
                    markers: Sequence = (), show_baseline: bool = False,
                    show_accel_truth: bool = False) -> ChartDisplayList:
    """
    Full FHR strip: grid, trace, then the truth and guess overlays.

    With no trace only the grid is drawn.
    """
    trace = [] if trace is None else trace
    mapper = GridCoordinateMapper.for_grid(surface, FHR_GRID, total_points=len(trace))
    chart = ChartDisplayList(width=surface.width, height=surface.height)
    chart.commands.extend(grid_commands(mapper, FHR_GRID, surface))
    if len(trace) == 0:
        return chart

    chart.commands.append(trace_command(mapper, trace))
    if show_baseline and baseline is not None:
        chart.commands.extend(baseline_overlay_commands(mapper, baseline, surface))
    chart.commands.extend(marker_commands(mapper, markers, surface))
    if show_accel_truth:
        chart.commands.extend(acceleration_truth_commands(mapper, accelerations, surface))
    return chart


def build_toco_chart(surface: SurfaceSize, trace) -> ChartDisplayList:
    trace = [] if trace is None else trace
    mapper = GridCoordinateMapper.for_grid(surface, TOCO_GRID, total_points=len(trace))
    chart = ChartDisplayList(width=surface.width, height=surface.height)
    chart.commands.extend(grid_commands(mapper, TOCO_GRID, surface))
    if len(trace) > 0:
        chart.commands.append(trace_command(mapper, trace))
    return chart


# --- Raster Adapter ---
_CSS_RGBA = re.compile(r"rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)")

_VERTICAL_ALIGN = {"top": "top", "middle": "center", "bottom": "bottom"}


def css_color_to_rgba(color: str) -> Tuple[float, float, float, float]:
    match = _CSS_RGBA.fullmatch(color.strip())
    if match:
        r, g, b, a = match.groups()
        return (float(r) / 255, float(g) / 255, float(b) / 255, float(a) if a is not None else 1.0)
    return to_rgba(color)


def dash_to_points(dash: Sequence[float], dpi: int = 100) -> Tuple[float, ...]:
    """Surface-pixel dash lengths as matplotlib points at the given dpi."""
    return tuple(length * 72.0 / dpi for length in dash)


def render_png(chart: ChartDisplayList, dpi: int = 100) -> bytes:
    """
    Rasterise a display list with matplotlib. Surface units map 1:1 onto output pixels.

    Dashes are drawn unscaled by line width so they keep their on-surface lengths.
    """
    px_to_pt = 72.0 / dpi
    with plt.rc_context({"lines.scale_dashes": False}):
        return _rasterise(chart, dpi, px_to_pt)


def _rasterise(chart: ChartDisplayList, dpi: int, px_to_pt: float) -> bytes:
    fig = plt.figure(figsize=(chart.width / dpi, chart.height / dpi), dpi=dpi)
    try:
        ax = fig.add_axes((0, 0, 1, 1))
        ax.set_xlim(0, chart.width)
        ax.set_ylim(chart.height, 0)
        ax.set_axis_off()

        for cmd in chart.commands:
            if isinstance(cmd, LineCommand):
                linestyle = (0, dash_to_points(cmd.dash, dpi)) if cmd.dash else "solid"
                ax.plot([cmd.x1, cmd.x2], [cmd.y1, cmd.y2], color=css_color_to_rgba(cmd.color),
                        linewidth=cmd.width * px_to_pt, linestyle=linestyle)
            elif isinstance(cmd, PolylineCommand):
                if cmd.points:
                    xs, ys = zip(*cmd.points)
                    ax.plot(xs, ys, color=css_color_to_rgba(cmd.color), linewidth=cmd.width * px_to_pt)
            elif isinstance(cmd, TextCommand):
                ax.text(cmd.x, cmd.y, cmd.text, color=css_color_to_rgba(cmd.color),
                        fontsize=cmd.font_px * px_to_pt, family="sans-serif",
                        ha=cmd.align, va=_VERTICAL_ALIGN[cmd.baseline])

        buffer = io.BytesIO()
        fig.savefig(buffer, format="png", dpi=dpi)
        return buffer.getvalue()
    finally:
        plt.close(fig)
