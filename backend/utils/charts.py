"""Geometry for the small inline SVG charts on the dashboard."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

CHART_WIDTH = 320
CHART_HEIGHT = 160
PADDING_LEFT = 36
PADDING_BOTTOM = 22
PADDING_TOP = 8


@dataclass(frozen=True)
class ChartPoint:
    label: str
    value: float
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class Chart:
    points: list[ChartPoint]
    max_value: float
    baseline: float
    width: int = CHART_WIDTH
    height: int = CHART_HEIGHT

    @property
    def polyline(self) -> str:
        return " ".join(f"{p.x:.1f},{p.y:.1f}" for p in self.points)


def _scale_max(values: list[float]) -> float:
    top = max(values, default=0.0)
    return top if top > 0 else 1.0


def _plot_area() -> tuple[float, float]:
    return CHART_WIDTH - PADDING_LEFT, CHART_HEIGHT - PADDING_BOTTOM - PADDING_TOP


def bar_chart(series: list[dict[str, Any]], value_key: str) -> Chart:
    values = [float(p[value_key]) for p in series]
    top = _scale_max(values)
    plot_w, plot_h = _plot_area()
    baseline = PADDING_TOP + plot_h
    slot = plot_w / max(len(series), 1)
    bar_w = slot * 0.6
    points = []
    for i, (p, v) in enumerate(zip(series, values)):
        h = plot_h * v / top
        points.append(
            ChartPoint(
                label=str(p["date"])[5:],
                value=v,
                x=PADDING_LEFT + i * slot + (slot - bar_w) / 2,
                y=baseline - h,
                width=bar_w,
                height=h,
            )
        )
    return Chart(points=points, max_value=max(values, default=0.0), baseline=baseline)


def line_chart(series: list[dict[str, Any]], value_key: str) -> Chart:
    values = [float(p[value_key]) for p in series]
    top = _scale_max(values)
    plot_w, plot_h = _plot_area()
    baseline = PADDING_TOP + plot_h
    slot = plot_w / max(len(series), 1)
    points = [
        ChartPoint(
            label=str(p["date"])[5:],
            value=v,
            x=PADDING_LEFT + i * slot + slot / 2,
            y=baseline - plot_h * v / top,
        )
        for i, (p, v) in enumerate(zip(series, values))
    ]
    return Chart(points=points, max_value=max(values, default=0.0), baseline=baseline)
