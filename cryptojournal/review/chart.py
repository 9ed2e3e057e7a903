"""
Capital chart geometry.

Maps (date, capital) samples onto a line chart inside a fixed canvas,
and renders the result as SVG. Pure functions; nothing here is stored.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence, Union
from xml.sax.saxutils import escape

from cryptojournal.core.utils import format_compact_currency, format_short_date

logger = logging.getLogger(__name__)

TREND_UP = "up"
TREND_DOWN = "down"

UP_COLOR = "#10b981"
DOWN_COLOR = "#ef4444"
AXIS_COLOR = "#3f3f46"
LABEL_COLOR = "#a1a1aa"

PADDING_TOP = 60
PADDING_BOTTOM = 80
RANGE_PADDING = 0.15
Y_INTERVALS = 6
MAX_X_LABELS = 8


@dataclass
class CapitalSample:
    date: datetime
    capital: Union[Decimal, float, int]


@dataclass
class ChartPoint:
    x: float
    y: float


@dataclass
class AxisLabel:
    text: str
    x: float
    y: float
    value: Optional[float] = None


@dataclass
class Padding:
    top: int
    right: int
    bottom: int
    left: int


@dataclass
class ChartGeometry:
    """
    Pixel-space chart.

    When ok is False only reason (and the canvas size) is set.
    """

    width: int
    height: int
    ok: bool = True
    reason: Optional[str] = None
    padding: Optional[Padding] = None
    min_value: float = 0.0
    max_value: float = 0.0
    points: List[ChartPoint] = field(default_factory=list)
    y_labels: List[AxisLabel] = field(default_factory=list)
    x_labels: List[AxisLabel] = field(default_factory=list)
    trend: Optional[str] = None
    color: Optional[str] = None

    @classmethod
    def insufficient(cls, width: int, height: int, reason: str) -> "ChartGeometry":
        return cls(width=width, height=height, ok=False, reason=reason)


def left_padding(max_value: float) -> int:
    """Wider margin for longer Y labels."""
    if max_value >= 1_000_000:
        return 100
    if max_value >= 100_000:
        return 90
    if max_value >= 10_000:
        return 85
    return 80


def right_padding(width: int) -> int:
    if width < 600:
        return 60
    if width > 1000:
        return 100
    return 80


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def map_capital_chart(
    samples: Sequence[CapitalSample],
    width: int = 800,
    height: int = 400,
) -> ChartGeometry:
    """
    Lay out capital samples on a width x height canvas.

    Degenerate input (fewer than two samples, flat capital or a single
    instant) returns an insufficient-data geometry instead of raising.
    """
    usable = [s for s in samples if _finite(float(s.capital))]
    if len(usable) < len(samples):
        logger.warning(f"Dropped {len(samples) - len(usable)} non-finite capital sample(s)")

    if not usable:
        return ChartGeometry.insufficient(width, height, "No data available")
    if len(usable) < 2:
        return ChartGeometry.insufficient(width, height, "Need at least 2 data points")

    data = sorted(usable, key=lambda s: s.date)
    values = [float(s.capital) for s in data]

    low = min(values)
    high = max(values)
    if high - low == 0:
        return ChartGeometry.insufficient(width, height, "Capital has not changed")

    start = data[0].date
    span = (data[-1].date - start).total_seconds()
    if span == 0:
        return ChartGeometry.insufficient(width, height, "All samples share one date")

    padding = Padding(
        top=PADDING_TOP,
        right=right_padding(width),
        bottom=PADDING_BOTTOM,
        left=left_padding(high),
    )
    chart_width = width - padding.left - padding.right
    chart_height = height - padding.top - padding.bottom
    baseline = height - padding.bottom

    value_range = high - low
    padded_min = max(0.0, low - value_range * RANGE_PADDING)
    padded_max = high + value_range * RANGE_PADDING
    padded_range = padded_max - padded_min

    points = []
    for sample, value in zip(data, values):
        x = padding.left + (sample.date - start).total_seconds() / span * chart_width
        y = baseline - (value - padded_min) / padded_range * chart_height
        if _finite(x, y):
            points.append(ChartPoint(x, y))

    y_labels = []
    for i in range(Y_INTERVALS + 1):
        value = padded_min + padded_range * i / Y_INTERVALS
        y = baseline - i / Y_INTERVALS * chart_height
        if _finite(value, y):
            y_labels.append(AxisLabel(format_compact_currency(value), padding.left, y, value))

    x_labels = []
    count = len(data)
    label_count = min(MAX_X_LABELS, count)
    for i in range(label_count):
        index = (i * (count - 1)) // (label_count - 1)
        x = padding.left + index / (count - 1) * chart_width
        if _finite(x):
            x_labels.append(AxisLabel(format_short_date(data[index].date), x, baseline))

    trend = TREND_UP if values[-1] >= values[0] else TREND_DOWN

    return ChartGeometry(
        width=width,
        height=height,
        padding=padding,
        min_value=padded_min,
        max_value=padded_max,
        points=points,
        y_labels=y_labels,
        x_labels=x_labels,
        trend=trend,
        color=UP_COLOR if trend == TREND_UP else DOWN_COLOR,
    )


def render_svg(geometry: ChartGeometry) -> str:
    """SVG document for a mapped chart."""
    w, h = geometry.width, geometry.height
    lines = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{h}" viewBox="0 0 {w} {h}">',
    ]

    if not geometry.ok:
        lines.append(
            f'<text x="{w / 2:.1f}" y="{h / 2:.1f}" text-anchor="middle" '
            f'fill="{LABEL_COLOR}">{escape(geometry.reason or "")}</text>'
        )
        lines.append("</svg>")
        return "\n".join(lines)

    pad = geometry.padding
    baseline = h - pad.bottom
    right = w - pad.right

    # Axes
    lines.append(
        f'<line x1="{pad.left}" y1="{pad.top}" x2="{pad.left}" y2="{baseline}" '
        f'stroke="{AXIS_COLOR}" stroke-width="2"/>'
    )
    lines.append(
        f'<line x1="{pad.left}" y1="{baseline}" x2="{right}" y2="{baseline}" '
        f'stroke="{AXIS_COLOR}" stroke-width="2"/>'
    )

    for label in geometry.y_labels:
        lines.append(
            f'<line x1="{pad.left}" y1="{label.y:.2f}" x2="{right}" y2="{label.y:.2f}" '
            f'stroke="{AXIS_COLOR}" stroke-width="0.5" opacity="0.3"/>'
        )
        lines.append(
            f'<text x="{pad.left - 8}" y="{label.y + 4:.2f}" text-anchor="end" '
            f'font-size="12" fill="{LABEL_COLOR}">{escape(label.text)}</text>'
        )

    for label in geometry.x_labels:
        lines.append(
            f'<line x1="{label.x:.2f}" y1="{baseline}" x2="{label.x:.2f}" y2="{baseline + 5}" '
            f'stroke="{AXIS_COLOR}" stroke-width="1"/>'
        )
        lines.append(
            f'<text x="{label.x:.2f}" y="{baseline + 20}" text-anchor="middle" '
            f'font-size="12" fill="{LABEL_COLOR}">{escape(label.text)}</text>'
        )

    coords = " ".join(f"{p.x:.2f},{p.y:.2f}" for p in geometry.points)
    lines.append(
        f'<polyline points="{coords}" fill="none" stroke="{geometry.color}" '
        f'stroke-width="3" stroke-linecap="round" stroke-linejoin="round"/>'
    )
    for p in geometry.points:
        lines.append(f'<circle cx="{p.x:.2f}" cy="{p.y:.2f}" r="4" fill="{geometry.color}"/>')

    lines.append("</svg>")
    return "\n".join(lines)
