"""
Plotly rendering adapter.
Turns a ChartDescription into a plotly Figure and serializes it.
"""

import base64
import json
import logging
from typing import Any, Dict, List, Optional

import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from figure_catalog.exceptions import ConfigurationError
from figure_catalog.models import ChartDescription, Layer, ScaleSpec
from figure_compiler.formatting import axis_tickformat

logger = logging.getLogger(__name__)

# Legend rank offset per aesthetic, so the fill legend precedes the line legend
_LEGEND_BLOCK = 1000


class FigureRenderer:
    """
    Draws chart descriptions with plotly.
    Vertical descriptions map x to the horizontal axis; 'h' descriptions
    draw the x aesthetic on the vertical axis.
    """

    def build_figure(self, description: ChartDescription) -> go.Figure:
        """Build the plotly figure for a description."""
        facet = description.facet
        levels = list(facet.levels) if facet else [None]
        self._horizontal = description.orientation == "h"
        self._faceted = facet is not None
        self._shown_legend = set()

        if facet:
            fig = make_subplots(
                rows=len(levels),
                cols=1,
                subplot_titles=[str(level) for level in levels],
                row_heights=self._row_heights(description, levels),
                vertical_spacing=min(0.08, 0.3 / max(len(levels), 1)),
            )
            self._style_strips(fig, description)
        else:
            fig = go.Figure()

        for layer in description.layers:
            frame = pd.DataFrame(layer.data)
            for row, level in enumerate(levels, start=1):
                subset = frame
                if level is not None and not frame.empty:
                    subset = frame[frame[layer.mapping.get("facet", facet.column)] == level]
                if subset.empty:
                    continue

                if layer.geometry == "bar":
                    self._add_bars(fig, description, layer, subset, row)
                elif layer.geometry == "line":
                    self._add_lines(fig, description, layer, subset, row)
                elif layer.geometry == "label":
                    self._add_labels(fig, layer, subset, row)
                else:
                    raise ConfigurationError(f"Unsupported geometry '{layer.geometry}'", binding="geometry")

        self._apply_axes(fig, description, levels)
        self._apply_layout(fig, description)
        return fig

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def _add_bars(self, fig, description: ChartDescription, layer: Layer, subset: pd.DataFrame, row: int):
        x_col, y_col, fill_col = layer.mapping["x"], layer.mapping["y"], layer.mapping["fill"]
        fill_scale = description.get_scale("fill")

        values = subset[y_col].astype(float)
        if layer.params.get("position") == "fill":
            totals = subset.groupby(x_col, sort=False)[y_col].transform("sum").astype(float)
            values = (values / totals.where(totals != 0)).fillna(0.0)

        for rank, (brk, label, color) in enumerate(zip(fill_scale.breaks, fill_scale.labels, fill_scale.colors)):
            mask = subset[fill_col] == brk
            if not mask.any():
                continue
            categories = subset.loc[mask, x_col].tolist()
            heights = values[mask].tolist()
            trace = go.Bar(
                x=heights if self._horizontal else categories,
                y=categories if self._horizontal else heights,
                orientation="h" if self._horizontal else "v",
                name=label,
                marker_color=color,
                width=layer.params.get("width"),
                legendgroup=f"fill:{brk}",
                showlegend=self._first_legend_entry(f"fill:{brk}"),
                legendrank=self._legend_rank(description, "fill", rank, len(fill_scale.breaks)),
                hoverinfo="name+y" if not self._horizontal else "name+x",
            )
            self._add_trace(fig, trace, row)

    def _add_lines(self, fig, description: ChartDescription, layer: Layer, subset: pd.DataFrame, row: int):
        x_col, y_col, color_col = layer.mapping["x"], layer.mapping["y"], layer.mapping["color"]
        color_scale = description.get_scale("color")
        x_order = {value: i for i, value in enumerate(description.get_scale("x").breaks)}

        for rank, (brk, label, color) in enumerate(zip(color_scale.breaks, color_scale.labels, color_scale.colors)):
            line = subset[subset[color_col] == brk]
            if line.empty:
                continue
            line = line.assign(_order=line[x_col].map(x_order)).sort_values("_order", kind="stable")
            trace = go.Scatter(
                x=line[x_col].tolist(),
                y=line[y_col].tolist(),
                mode="lines",
                name=label,
                line={"color": color, "width": layer.params.get("width", 2)},
                legendgroup=f"color:{brk}",
                showlegend=self._first_legend_entry(f"color:{brk}"),
                legendrank=self._legend_rank(description, "color", rank, len(color_scale.breaks)),
            )
            self._add_trace(fig, trace, row)

    def _add_labels(self, fig, layer: Layer, subset: pd.DataFrame, row: int):
        x_col, y_col, text_col = layer.mapping["x"], layer.mapping["y"], layer.mapping["label"]
        params = layer.params
        target = self._target(fig, row)

        for record in subset.to_dict("records"):
            category, value = record[x_col], record[y_col]
            fig.add_annotation(
                x=value if self._horizontal else category,
                y=category if self._horizontal else value,
                text=str(record[text_col]),
                showarrow=False,
                bgcolor=params.get("fill", "#FFFFFF"),
                borderpad=max(1, int(round(params.get("padding", 0.1) * 10))),
                font={
                    "family": params.get("family"),
                    "size": params.get("size"),
                    "color": params.get("color"),
                },
                **target
            )

    # ------------------------------------------------------------------
    # Axes, legend, theme
    # ------------------------------------------------------------------

    def _apply_axes(self, fig, description: ChartDescription, levels: List[Any]):
        theme = description.theme
        category_scale = description.get_scale("x")
        value_scale = description.get_scale("y")

        category_axis = {
            "type": "category",
            "categoryorder": "array",
            "categoryarray": category_scale.breaks,
            "showgrid": False,
            "showline": category_scale.show_line,
            "linecolor": theme.color,
            "ticks": "outside" if category_scale.show_ticks else "",
            "title_text": description.axis_titles.get("x", ""),
        }
        value_axis = {
            "showgrid": True,
            "gridcolor": theme.grid_color,
            "zeroline": False,
            "showline": value_scale.show_line,
            "linecolor": theme.color,
            "tickformat": axis_tickformat(value_scale.label_format),
            "rangemode": "tozero",
            "title_text": description.axis_titles.get("y", ""),
        }
        value_range = self._value_range(value_scale)
        if value_range is not None:
            value_axis["range"] = value_range

        if self._horizontal:
            fig.update_yaxes(**category_axis)
            fig.update_xaxes(**value_axis)
        else:
            fig.update_xaxes(**category_axis)
            fig.update_yaxes(**value_axis)

        # Panels only show their own categories when the category axis is free
        facet = description.facet
        if facet and facet.free_space:
            bar_frame = pd.DataFrame(
                [record for layer in description.get_layers("bar") for record in layer.data]
            )
            x_col = description.get_layers("bar")[0].mapping["x"] if description.get_layers("bar") else None
            for row, level in enumerate(levels, start=1):
                if x_col is None or bar_frame.empty:
                    break
                present = set(bar_frame.loc[bar_frame[facet.column] == level, x_col])
                categories = [c for c in category_scale.breaks if c in present]
                if self._horizontal:
                    fig.update_yaxes(categoryarray=categories, row=row, col=1)
                else:
                    fig.update_xaxes(categoryarray=categories, row=row, col=1)

    def _value_range(self, scale: ScaleSpec) -> Optional[List[float]]:
        if scale.limits:
            return list(scale.limits)
        if scale.label_format == "percent":
            return [0.0 - scale.expand[0], 1.0 + scale.expand[1]]
        return None

    def _apply_layout(self, fig, description: ChartDescription):
        theme = description.theme
        legend = description.legend

        fig.update_layout(
            barmode="stack",
            bargap=0.1,
            separators=description.separators,
            font={"family": theme.font_family, "size": theme.font_size, "color": theme.color},
            plot_bgcolor=theme.background,
            paper_bgcolor=theme.background,
            margin=theme.margin,
            showlegend=legend.show and legend.position != "none",
            legend={
                "orientation": "h" if legend.position == "bottom" else "v",
                "x": 0.0,
                "y": -0.08 if legend.position == "bottom" else 1.0,
                "xanchor": "left",
                "yanchor": "top",
                "title": {"text": ""},
                "traceorder": "normal",
            },
        )

        if description.caption:
            caption = theme.caption
            fig.add_annotation(
                text=description.caption,
                xref="paper",
                yref="paper",
                x=caption.get("x", 0.0),
                y=caption.get("y", -0.12),
                xanchor="left",
                yanchor="top",
                align=caption.get("align", "left"),
                showarrow=False,
                font={"size": caption.get("font_size"), "color": caption.get("font_color")},
            )

    def _style_strips(self, fig, description: ChartDescription):
        strip = description.theme.strip
        for annotation in fig.layout.annotations:
            annotation.update(
                font={"size": strip.get("font_size"), "color": strip.get("font_color")},
                bgcolor=strip.get("background"),
            )

    def _row_heights(self, description: ChartDescription, levels: List[Any]) -> Optional[List[float]]:
        """Panel heights proportional to category counts when space is free."""
        facet = description.facet
        bar_layers = description.get_layers("bar")
        if not facet.free_space or not bar_layers:
            return None
        frame = pd.DataFrame(bar_layers[0].data)
        x_col = bar_layers[0].mapping["x"]
        counts = [max(frame.loc[frame[facet.column] == level, x_col].nunique(), 1) for level in levels]
        total = sum(counts)
        return [count / total for count in counts]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _legend_rank(self, description: ChartDescription, aesthetic: str, rank: int, count: int) -> int:
        order = description.legend.order
        block = order.index(aesthetic) if aesthetic in order else len(order)
        if description.legend.reverse:
            rank = count - 1 - rank
        return (block + 1) * _LEGEND_BLOCK + rank

    def _first_legend_entry(self, key: str) -> bool:
        if key in self._shown_legend:
            return False
        self._shown_legend.add(key)
        return True

    def _target(self, fig, row: int) -> Dict[str, int]:
        if not self._faceted:
            return {}
        return {"row": row, "col": 1}

    def _add_trace(self, fig, trace, row: int):
        fig.add_trace(trace, **self._target(fig, row))


def build_figure(description: ChartDescription) -> go.Figure:
    """Build a plotly figure for a chart description."""
    return FigureRenderer().build_figure(description)


def figure_to_dict(fig: go.Figure, include_image: bool = False, width: int = 800, height: int = 500) -> Dict[str, Any]:
    """Convert plotly figure to a JSON-serializable dictionary."""
    fig_dict = json.loads(fig.to_json())

    result = {
        "type": "plotly",
        "figure": fig_dict,
        "layout": fig_dict.get("layout", {}),
        "data": fig_dict.get("data", []),
    }

    if include_image:
        # Static export goes through kaleido
        img_bytes = fig.to_image(format="png", width=width, height=height)
        result["image_base64"] = base64.b64encode(img_bytes).decode("utf-8")

    return result
