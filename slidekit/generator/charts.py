"""Chart dispatch - renders a ChartSpec as a python-pptx chart shape.

Dispatch is a pure function of ``spec.chart_type``:

    bar      - clustered columns      }
    line     - 3pt line with markers  }  shared category-axis helper
    area     - filled area, 60% opaque }
    pie      - one slice per point, palette colors, "<name> <pct>%" labels
    scatter  - numeric x/y markers on two value axes

An unknown chart type draws a labelled "Unsupported chart type" text box
instead of raising, so one bad chart never aborts the rest of the slide.
Data that cannot be plotted (missing keys, non-numeric values, wrong point
count) degrades the same way with "Unsupported chart data".

Usage:
    from slidekit.generator.charts import ChartSpec, render_chart

    artifact = render_chart(slide, spec, position, design)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from lxml import etree
from pptx.chart.data import CategoryChartData, XyChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import (
    XL_CHART_TYPE,
    XL_LABEL_POSITION,
    XL_LEGEND_POSITION,
    XL_MARKER_STYLE,
)
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.util import Inches, Pt

from slidekit.schema.design_system import DesignSystem, normalize_hex, palette_color
from slidekit.schema.models import ChartType, Position

logger = logging.getLogger(__name__)

MIN_POINTS = 2
MAX_POINTS = 12

# Fixed field names that do not follow data_key/category_key.
PIE_NAME_KEY = "name"
SCATTER_X_KEY = "x"
SCATTER_Y_KEY = "y"

UNSUPPORTED_CHART_TYPE = "Unsupported chart type"
UNSUPPORTED_CHART_DATA = "Unsupported chart data"

LINE_WIDTH_PT = 3.0
MARKER_SIZE = 8
AREA_FILL_OPACITY = 0.6


# ---------------------------------------------------------------------------
# Spec and artifact
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChartSpec:
    """Everything needed to draw one chart. Never mutated by the dispatcher."""
    chart_type: str
    data: tuple[Mapping[str, Any], ...]
    data_key: str = "value"
    category_key: str = "name"
    color: str = "#3b82f6"
    show_legend: bool = False
    show_tooltip: bool = True

    @classmethod
    def from_instance(cls, values: Mapping[str, Any]) -> "ChartSpec":
        """Build a spec from a normalized chart-with-caption SlideInstance."""
        return cls(
            chart_type=values["chartType"],
            data=tuple(values["data"]),
            data_key=values["dataKey"],
            category_key=values["categoryKey"],
            color=values["color"],
            show_legend=values["showLegend"],
            show_tooltip=values["showTooltip"],
        )


@dataclass
class ChartArtifact:
    """What render_chart drew: the shape plus the resolved series data."""
    kind: str                                   # "chart" or "unsupported"
    chart_type: str
    shape: Any = None                           # python-pptx GraphicFrame / Shape
    categories: list[str] = field(default_factory=list)
    values: list[float] = field(default_factory=list)
    colors: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    message: str = ""

    @property
    def supported(self) -> bool:
        return self.kind == "chart"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _hex_to_rgb(hex_color: str) -> RGBColor:
    """Convert '#RRGGBB' hex string to an RGBColor."""
    return RGBColor.from_string(normalize_hex(hex_color).lstrip("#").upper())


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _tag(chart_type: Any) -> str:
    """Chart type as a plain string, whether given as str or ChartType."""
    if isinstance(chart_type, ChartType):
        return chart_type.value
    return chart_type if isinstance(chart_type, str) else repr(chart_type)


def _series_color(spec: ChartSpec, design: DesignSystem) -> str:
    """The spec's color, or the first palette color when it is not hex."""
    try:
        return normalize_hex(spec.color)
    except (AttributeError, ValueError):
        fallback = palette_color(0, design.chart_palette)
        logger.warning("Invalid chart color %r, using %s", spec.color, fallback)
        return fallback


def percent_label(value: float, total: float) -> int:
    """Share of ``total`` as a whole percent, rounding halves up."""
    if total == 0:
        return 0
    return int(math.floor(value / total * 100 + 0.5))


def _set_fill_alpha(series, opacity: float) -> None:
    """Give a series' solid fill an alpha channel (python-pptx has no API)."""
    spPr = series._element.spPr
    if spPr is None:
        return
    srgb = spPr.find(qn("a:solidFill") + "/" + qn("a:srgbClr"))
    if srgb is None:
        return
    for old in srgb.findall(qn("a:alpha")):
        srgb.remove(old)
    etree.SubElement(srgb, qn("a:alpha"), val=str(int(opacity * 100000)))


def _add_chart_frame(slide, xl_chart_type, position: Position, chart_data):
    return slide.shapes.add_chart(
        xl_chart_type,
        Inches(position.left),
        Inches(position.top),
        Inches(position.width),
        Inches(position.height),
        chart_data,
    )


def _apply_chart_style(chart, spec: ChartSpec, design: DesignSystem) -> None:
    """Font, legend and value labels, identical for every chart type."""
    chart.font.name = design.primary_font
    chart.font.size = Pt(design.caption_size_pt)

    chart.has_legend = bool(spec.show_legend)
    if spec.show_legend:
        chart.legend.include_in_layout = False
        chart.legend.position = XL_LEGEND_POSITION.BOTTOM
        chart.legend.font.name = design.primary_font
        chart.legend.font.size = Pt(design.caption_size_pt)


def _apply_value_labels(plot, spec: ChartSpec) -> None:
    # Static slides have no hover, value labels stand in for the tooltip.
    plot.has_data_labels = bool(spec.show_tooltip)
    if spec.show_tooltip:
        labels = plot.data_labels
        labels.show_value = True
        labels.number_format = "General"
        labels.number_format_is_linked = False


def _unsupported(slide, position: Position, design: DesignSystem,
                 chart_type: str, message: str) -> ChartArtifact:
    """Draw the fixed, clearly labelled fallback box."""
    txbox = slide.shapes.add_textbox(
        Inches(position.left), Inches(position.top),
        Inches(position.width), Inches(position.height),
    )
    txbox.name = "chart-unsupported"
    tf = txbox.text_frame
    tf.word_wrap = True
    tf.vertical_anchor = MSO_ANCHOR.MIDDLE
    p = tf.paragraphs[0]
    p.alignment = PP_ALIGN.CENTER
    run = p.add_run()
    run.text = message
    run.font.name = design.primary_font
    run.font.size = Pt(design.body_size_pt)
    run.font.color.rgb = _hex_to_rgb(design.muted_text)
    return ChartArtifact(kind="unsupported", chart_type=chart_type,
                         shape=txbox, message=message)


# ---------------------------------------------------------------------------
# Point extraction
# ---------------------------------------------------------------------------

def _category_points(spec: ChartSpec) -> tuple[list[str], list[float]] | None:
    """(categories, values) from category_key/data_key, or None if absent."""
    categories: list[str] = []
    values: list[float] = []
    for point in spec.data:
        category = point.get(spec.category_key)
        value = point.get(spec.data_key)
        if category is None or not _is_number(value):
            return None
        categories.append(str(category))
        values.append(float(value))
    return categories, values


def _pie_points(spec: ChartSpec) -> tuple[list[str], list[float]] | None:
    names: list[str] = []
    values: list[float] = []
    for point in spec.data:
        name = point.get(PIE_NAME_KEY)
        value = point.get(spec.data_key)
        if name is None or not _is_number(value) or value < 0:
            return None
        names.append(str(name))
        values.append(float(value))
    return names, values


def _xy_points(spec: ChartSpec) -> list[tuple[float, float]] | None:
    points: list[tuple[float, float]] = []
    for point in spec.data:
        x = point.get(SCATTER_X_KEY)
        y = point.get(SCATTER_Y_KEY)
        if not (_is_number(x) and _is_number(y)):
            return None
        points.append((float(x), float(y)))
    return points


# ---------------------------------------------------------------------------
# Category-axis charts (bar, line, area)
# ---------------------------------------------------------------------------

def _style_bar(series, color: RGBColor) -> None:
    series.format.fill.solid()
    series.format.fill.fore_color.rgb = color


def _style_line(series, color: RGBColor) -> None:
    series.smooth = True
    series.format.line.color.rgb = color
    series.format.line.width = Pt(LINE_WIDTH_PT)
    series.marker.style = XL_MARKER_STYLE.CIRCLE
    series.marker.size = MARKER_SIZE
    series.marker.format.fill.solid()
    series.marker.format.fill.fore_color.rgb = color


def _style_area(series, color: RGBColor) -> None:
    series.format.fill.solid()
    series.format.fill.fore_color.rgb = color
    _set_fill_alpha(series, AREA_FILL_OPACITY)
    series.format.line.color.rgb = color


_CATEGORY_CHARTS: dict[str, tuple[int, Callable]] = {
    ChartType.BAR.value: (XL_CHART_TYPE.COLUMN_CLUSTERED, _style_bar),
    ChartType.LINE.value: (XL_CHART_TYPE.LINE_MARKERS, _style_line),
    ChartType.AREA.value: (XL_CHART_TYPE.AREA, _style_area),
}


def _render_category_chart(slide, spec: ChartSpec, position: Position,
                           design: DesignSystem) -> ChartArtifact:
    tag = _tag(spec.chart_type)
    extracted = _category_points(spec)
    if extracted is None:
        logger.warning("Chart data lacks %r/%r on every point",
                       spec.category_key, spec.data_key)
        return _unsupported(slide, position, design, tag, UNSUPPORTED_CHART_DATA)
    categories, values = extracted

    chart_data = CategoryChartData()
    chart_data.categories = categories
    chart_data.add_series(spec.data_key, tuple(values))

    xl_chart_type, style_series = _CATEGORY_CHARTS[tag]
    frame = _add_chart_frame(slide, xl_chart_type, position, chart_data)
    chart = frame.chart

    color = _series_color(spec, design)
    plot = chart.plots[0]
    style_series(plot.series[0], _hex_to_rgb(color))
    chart.value_axis.has_major_gridlines = True
    chart.category_axis.has_major_gridlines = False

    _apply_chart_style(chart, spec, design)
    _apply_value_labels(plot, spec)

    return ChartArtifact(kind="chart", chart_type=tag, shape=frame,
                         categories=categories, values=values,
                         colors=[color])


# ---------------------------------------------------------------------------
# Pie
# ---------------------------------------------------------------------------

def _render_pie(slide, spec: ChartSpec, position: Position,
                design: DesignSystem) -> ChartArtifact:
    extracted = _pie_points(spec)
    if extracted is None:
        logger.warning("Pie data lacks %r/%r or has negative values",
                       PIE_NAME_KEY, spec.data_key)
        return _unsupported(slide, position, design, ChartType.PIE.value,
                            UNSUPPORTED_CHART_DATA)
    names, values = extracted
    total = sum(values)

    chart_data = CategoryChartData()
    chart_data.categories = names
    chart_data.add_series(spec.data_key, tuple(values))

    frame = _add_chart_frame(slide, XL_CHART_TYPE.PIE, position, chart_data)
    chart = frame.chart
    _apply_chart_style(chart, spec, design)

    # Slice colors come from the palette, never from spec.color.
    colors = [palette_color(i, design.chart_palette) for i in range(len(values))]
    labels = [f"{name} {percent_label(value, total)}%"
              for name, value in zip(names, values)]

    series = chart.plots[0].series[0]
    for idx, point in enumerate(series.points):
        point.format.fill.solid()
        point.format.fill.fore_color.rgb = _hex_to_rgb(colors[idx])
        point.data_label.text_frame.text = labels[idx]
        point.data_label.position = XL_LABEL_POSITION.OUTSIDE_END

    return ChartArtifact(kind="chart", chart_type=ChartType.PIE.value,
                         shape=frame, categories=names, values=values,
                         colors=colors, labels=labels)


# ---------------------------------------------------------------------------
# Scatter
# ---------------------------------------------------------------------------

def _render_scatter(slide, spec: ChartSpec, position: Position,
                    design: DesignSystem) -> ChartArtifact:
    points = _xy_points(spec)
    if points is None:
        logger.warning("Scatter data lacks numeric %r/%r on every point",
                       SCATTER_X_KEY, SCATTER_Y_KEY)
        return _unsupported(slide, position, design, ChartType.SCATTER.value,
                            UNSUPPORTED_CHART_DATA)

    chart_data = XyChartData()
    xy_series = chart_data.add_series(spec.data_key)
    for x, y in points:
        xy_series.add_data_point(x, y)

    frame = _add_chart_frame(slide, XL_CHART_TYPE.XY_SCATTER, position, chart_data)
    chart = frame.chart

    color = _series_color(spec, design)
    series = chart.plots[0].series[0]
    series.marker.style = XL_MARKER_STYLE.CIRCLE
    series.marker.size = MARKER_SIZE
    series.marker.format.fill.solid()
    series.marker.format.fill.fore_color.rgb = _hex_to_rgb(color)
    chart.value_axis.has_major_gridlines = True

    _apply_chart_style(chart, spec, design)
    _apply_value_labels(chart.plots[0], spec)

    return ChartArtifact(kind="chart", chart_type=ChartType.SCATTER.value,
                         shape=frame,
                         categories=[str(x) for x, _ in points],
                         values=[y for _, y in points],
                         colors=[color])


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

_DISPATCH: dict[str, Callable[..., ChartArtifact]] = {
    ChartType.BAR.value: _render_category_chart,
    ChartType.LINE.value: _render_category_chart,
    ChartType.AREA.value: _render_category_chart,
    ChartType.PIE.value: _render_pie,
    ChartType.SCATTER.value: _render_scatter,
}


def render_chart(slide, spec: ChartSpec, position: Position,
                 design: DesignSystem | None = None) -> ChartArtifact:
    """Draw ``spec`` on ``slide`` inside ``position``.

    Args:
        slide: python-pptx Slide object.
        spec: Chart type tag, data points, keys, color and toggles.
        position: Where the chart goes, in inches.
        design: DesignSystem for fonts and palette (defaults if omitted).

    Returns:
        ChartArtifact describing the drawn chart, or the labelled fallback
        when the type is unknown or the data cannot be plotted. Never raises
        for a well-formed slide.
    """
    design = design or DesignSystem()
    tag = _tag(spec.chart_type)
    handler = _DISPATCH.get(tag)
    if handler is None:
        logger.warning("Unsupported chart type %r", tag)
        return _unsupported(slide, position, design, tag, UNSUPPORTED_CHART_TYPE)

    count = len(spec.data)
    if not MIN_POINTS <= count <= MAX_POINTS:
        logger.warning("Chart has %d point(s), expected %d-%d",
                       count, MIN_POINTS, MAX_POINTS)
        return _unsupported(slide, position, design, tag, UNSUPPORTED_CHART_DATA)

    return handler(slide, spec, position, design)
