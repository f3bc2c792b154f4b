"""
Chart templates for the five RUB figure types.

Each template validates its column bindings, resolves categorical order and
colors, computes value label geometry and assembles a ChartDescription.
Templates never render; see visualization.renderer.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

import pandas as pd

from config import PLOT_CONFIG
from figure_catalog.exceptions import UnknownFigureType, UnsupportedCombination
from figure_catalog.models import (
    DEFAULT_STYLE,
    ChartDescription,
    FacetSpec,
    FigureKind,
    Layer,
    LegendSpec,
    PlotStyle,
    ScaleSpec,
)
from figure_catalog.palettes import get_palette_colors
from figure_compiler.factors import category_order, resolve_factor
from figure_compiler.formatting import (
    build_caption,
    format_number,
    format_percent,
    plotly_separators,
)
from figure_compiler.labels import POSITION_COLUMN, VALUE_COLUMN, compute_label_positions
from figure_compiler.palette import palette_colors, select_palette
from figure_compiler.validator import validator
from visualization.theme import theme_rub

logger = logging.getLogger(__name__)

FIGURE_TYPE_COLUMN = "figure_type_id"
LABEL_TEXT_COLUMN = "label_text"
CONTRAST_PALETTE = "discrete_contrast"
LINE_PALETTE = "discrete"

LabelBinding = Optional[Union[str, Mapping[Any, str]]]


# ==========================================
# SHARED HELPERS
# ==========================================

def to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Plain records: categoricals as values, missing values as None."""
    plain = df.copy()
    for column in plain.columns:
        if isinstance(plain[column].dtype, pd.CategoricalDtype):
            plain[column] = plain[column].astype(object)
    plain = plain.astype(object).where(pd.notna(plain), None)
    return plain.to_dict("records")


def distinct_figure_types(table: pd.DataFrame, column: str = FIGURE_TYPE_COLUMN) -> List[int]:
    """Distinct figure type tags in first-occurrence order."""
    validator.require(table, {"figure_type": column}, required=["figure_type"])
    tags = []
    for raw in pd.unique(table[column].dropna()):
        try:
            tag = int(raw)
        except (TypeError, ValueError):
            raise UnknownFigureType(raw)
        if tag != raw and str(tag) != str(raw).strip():
            raise UnknownFigureType(raw)
        if tag not in tags:
            tags.append(tag)
    return tags


def _label_bindings(fill_label: LabelBinding) -> Optional[str]:
    return fill_label if isinstance(fill_label, str) else None


def _facet_spec(df: pd.DataFrame, facet: Optional[str], free_space: bool = False) -> Optional[FacetSpec]:
    if not facet:
        return None
    return FacetSpec(
        column=facet,
        levels=category_order(df[facet]),
        ncol=1,
        free_scales="y",
        free_space=free_space
    )


def _discrete_axis(df: pd.DataFrame, column: str, **kwargs) -> ScaleSpec:
    breaks = category_order(df[column])
    return ScaleSpec(
        aesthetic=kwargs.pop("aesthetic", "x"),
        kind="discrete",
        breaks=breaks,
        labels=[str(b) for b in breaks],
        **kwargs
    )


def _label_params(style: PlotStyle) -> Dict[str, Any]:
    """White boxes, square corners, accent-colored text, no legend entry."""
    return {
        "size": style.label_size,
        "family": style.base_family,
        "color": style.color,
        "fill": "#FFFFFF",
        "radius": 0,
        "padding": 0.10,
        "show_legend": False,
    }


def _fill_scale(
    df: pd.DataFrame,
    fill: str,
    labels: List[str],
    colors_n: int,
    advisories: List[str]
) -> ScaleSpec:
    selection = select_palette(colors_n)
    if selection.advisory:
        advisories.append(selection.advisory)
    breaks = list(df[fill].cat.categories)
    return ScaleSpec(
        aesthetic="fill",
        kind="discrete",
        breaks=breaks,
        labels=labels,
        palette=selection.name,
        colors=palette_colors(selection)[:len(breaks)] if breaks else [],
    )


def _stacked_bars(
    kind: FigureKind,
    table: pd.DataFrame,
    x: str,
    y: str,
    fill: str,
    y_axis_label: str,
    fill_reverse: bool,
    fill_label: LabelBinding,
    caption: str,
    cutoff: float,
    facet: Optional[str],
    style: PlotStyle
) -> ChartDescription:
    """Vertical stacked bars; absolute for type 1, scaled to 100% for type 2."""
    is_percentage = kind == FigureKind.STACKED_PERCENT

    validator.require(
        table,
        {"x": x, "y": y, "fill": fill, "fill_label": _label_bindings(fill_label), "facet": facet},
        required=["x", "y", "fill"],
        numeric=["y"]
    )
    logger.debug(f"Assembling {kind.value} figure: x={x}, y={y}, fill={fill}, facet={facet}")

    advisories: List[str] = []
    colors_n = int(table[fill].nunique())

    df, fill_levels = resolve_factor(table, fill, fill_label, reverse=fill_reverse)

    df_label = compute_label_positions(
        df,
        x=x,
        y=y,
        fill=fill,
        facet=facet,
        cutoff=cutoff,
        is_percentage=is_percentage
    )
    if is_percentage:
        df_label[LABEL_TEXT_COLUMN] = df_label[VALUE_COLUMN].map(format_percent)
    else:
        df_label[LABEL_TEXT_COLUMN] = df_label[VALUE_COLUMN].map(
            lambda v: format_number(v, style.decimal_mark, style.big_mark)
        )

    has_y_axis_label = bool(y_axis_label)
    has_facet = bool(facet)

    bar_mapping = {"x": x, "y": y, "fill": fill}
    label_mapping = {"x": x, "y": POSITION_COLUMN, "label": LABEL_TEXT_COLUMN, "group": fill}
    if facet:
        bar_mapping["facet"] = facet
        label_mapping["facet"] = facet

    layers = [
        Layer(
            geometry="bar",
            data=to_records(df),
            mapping=bar_mapping,
            params={"position": "fill" if is_percentage else "stack", "width": style.bar_width},
        ),
        Layer(
            geometry="label",
            data=to_records(df_label),
            mapping=label_mapping,
            params=_label_params(style),
        ),
    ]

    scales = {
        "x": _discrete_axis(df, x),
        "y": ScaleSpec(
            aesthetic="y",
            kind="continuous",
            label_format="percent" if is_percentage else "number",
            expand=[0.0, 0.0],
        ),
        "fill": _fill_scale(df, fill, fill_levels, colors_n, advisories),
    }

    return ChartDescription(
        figure_kind=kind,
        layers=layers,
        scales=scales,
        facet=_facet_spec(df, facet),
        legend=LegendSpec(reverse=False, byrow=True, order=["fill"]),
        caption=build_caption(caption, style.caption_prefix),
        axis_titles={"x": "", "y": y_axis_label or ""},
        orientation="v",
        separators=plotly_separators(style.decimal_mark, style.big_mark),
        theme=theme_rub(style, has_facet=has_facet, y_axis_label=has_y_axis_label),
        advisories=advisories,
    )


# ==========================================
# FIGURE TYPES
# ==========================================

def plot_type_1(
    table: pd.DataFrame,
    x: str,
    y: str,
    fill: str,
    y_axis_label: str = "",
    fill_reverse: bool = False,
    fill_label: LabelBinding = None,
    caption: str = "",
    cutoff: float = PLOT_CONFIG["bar_cutoff"],
    facet: Optional[str] = None,
    style: PlotStyle = DEFAULT_STYLE
) -> ChartDescription:
    """
    Vertical stacked bar chart (figure type 1).

    Args:
        table: Observation table
        x: Discrete x column (e.g. term)
        y: Numeric count column
        fill: Discrete column whose groups are stacked (e.g. degree)
        y_axis_label: Optional y-axis title
        fill_reverse: Reverse the stacking order of the fill column
        fill_label: Column (or mapping) with display names for fill values
        caption: Data source; the caption prefix is added automatically
        cutoff: Labels with a raw value below cutoff are suppressed
        facet: Optional column to split the chart into panels
        style: Fonts, colors and number formatting
    """
    return _stacked_bars(
        FigureKind.STACKED_COUNT, table, x, y, fill, y_axis_label,
        fill_reverse, fill_label, caption, cutoff, facet, style
    )


def plot_type_2(
    table: pd.DataFrame,
    x: str,
    y: str,
    fill: str,
    y_axis_label: str = "",
    fill_label: LabelBinding = None,
    fill_reverse: bool = False,
    facet: Optional[str] = None,
    caption: str = "",
    cutoff: float = PLOT_CONFIG["bar_cutoff"],
    style: PlotStyle = DEFAULT_STYLE
) -> ChartDescription:
    """
    Vertical stacked bar chart scaled to 100% (figure type 2).

    Labels show each segment's share of its bar; shares below cutoff are
    suppressed.
    """
    return _stacked_bars(
        FigureKind.STACKED_PERCENT, table, x, y, fill, y_axis_label,
        fill_reverse, fill_label, caption, cutoff, facet, style
    )


def plot_type_3(
    table: pd.DataFrame,
    x: str,
    y: str,
    fill: str,
    x_axis_label: str = "",
    fill_label: LabelBinding = None,
    fill_reverse: bool = False,
    legend_reverse: bool = False,
    facet: Optional[str] = None,
    caption: str = "",
    cutoff: float = PLOT_CONFIG["bar_cutoff"],
    style: PlotStyle = DEFAULT_STYLE
) -> ChartDescription:
    """
    Horizontal stacked bar chart scaled to 100% (figure type 3).

    Callers bind x to the displayed horizontal axis (the numeric shares) and
    y to the displayed vertical axis (the survey groups). Internally the
    chart is assembled with the groups as category axis and the shares as
    stacking axis, then flipped for display.

    The group axis is always reverse-ordered so the first group is drawn at
    the top. The fill order is reversed unless fill_reverse, and the legend
    is reversed unless legend_reverse.
    """
    validator.require(
        table,
        {"x": x, "y": y, "fill": fill, "fill_label": _label_bindings(fill_label), "facet": facet},
        required=["x", "y", "fill"],
        numeric=["x"]
    )
    logger.debug(f"Assembling horizontal_percent figure: x={x}, y={y}, fill={fill}, facet={facet}")

    advisories: List[str] = []
    colors_n = int(table[fill].nunique())

    # Flipping the axes inverts top-to-bottom order, so groups are always reversed
    df, _ = resolve_factor(table, y, reverse=True)
    df, fill_levels = resolve_factor(df, fill, fill_label, reverse=fill_reverse, figure_type=3)

    # Internally swapped: groups are the category axis, shares are stacked
    df_label = compute_label_positions(
        df,
        x=y,
        y=x,
        fill=fill,
        facet=facet,
        cutoff=cutoff,
        is_percentage=True
    )
    df_label[LABEL_TEXT_COLUMN] = df_label[VALUE_COLUMN].map(format_percent)

    bar_mapping = {"x": y, "y": x, "fill": fill}
    label_mapping = {"x": y, "y": POSITION_COLUMN, "label": LABEL_TEXT_COLUMN, "group": fill}
    if facet:
        bar_mapping["facet"] = facet
        label_mapping["facet"] = facet

    layers = [
        Layer(
            geometry="bar",
            data=to_records(df),
            mapping=bar_mapping,
            params={"position": "fill", "width": 0.9},
        ),
        Layer(
            geometry="label",
            data=to_records(df_label),
            mapping=label_mapping,
            params=_label_params(style),
        ),
    ]

    scales = {
        "x": ScaleSpec(
            aesthetic="x",
            kind="discrete",
            breaks=list(df[y].cat.categories),
            labels=[str(c) for c in df[y].cat.categories],
            expand=[0.0, 0.0],
            show_ticks=False,
            show_line=False,
        ),
        "y": ScaleSpec(
            aesthetic="y",
            kind="continuous",
            label_format="percent",
            expand=[0.0, 0.025],
        ),
        "fill": _fill_scale(df, fill, fill_levels, colors_n, advisories),
    }

    has_x_axis_label = bool(x_axis_label)

    return ChartDescription(
        figure_kind=FigureKind.HORIZONTAL_PERCENT,
        layers=layers,
        scales=scales,
        facet=_facet_spec(df, facet, free_space=True),
        legend=LegendSpec(reverse=not legend_reverse, byrow=True, order=["fill"]),
        caption=build_caption(caption, style.caption_prefix),
        # Titles are keyed by the internal axes; 'y' is displayed horizontally
        axis_titles={"x": "", "y": x_axis_label or ""},
        orientation="h",
        separators=plotly_separators(style.decimal_mark, style.big_mark),
        theme=theme_rub(style, has_facet=bool(facet), x_axis_label=has_x_axis_label),
        advisories=advisories,
    )


def plot_type_4(
    table: pd.DataFrame,
    x: str,
    y: str,
    group: str,
    x_axis_label: str = "",
    y_axis_label: str = "",
    group_label: LabelBinding = None,
    caption: str = "",
    cutoff: float = PLOT_CONFIG["line_cutoff"],
    facet: Optional[str] = None,
    style: PlotStyle = DEFAULT_STYLE
) -> ChartDescription:
    """
    Grouped line chart (figure type 4).

    One line per group. Only points with a value >= cutoff get a label. The
    y-axis starts at 0 and ends at 1.1 times the largest value.
    """
    validator.require(
        table,
        {"x": x, "y": y, "group": group, "group_label": _label_bindings(group_label), "facet": facet},
        required=["x", "y", "group"],
        numeric=["y"]
    )
    logger.debug(f"Assembling grouped_line figure: x={x}, y={y}, group={group}, facet={facet}")

    advisories: List[str] = []
    colors_n = int(table[group].nunique())
    # Lines always draw from the full brand palette; only the advisory depends on the count
    advisory = select_palette(colors_n).advisory
    if advisory:
        advisories.append(advisory)

    df, group_levels = resolve_factor(table, group, group_label)

    df_label = df[df[y] >= cutoff].copy()
    df_label[LABEL_TEXT_COLUMN] = df_label[y].map(
        lambda v: format_number(v, style.decimal_mark, style.big_mark)
    )

    max_y = df[y].max() if not df.empty else None
    limits = [0.0, float(max_y) * 1.1] if max_y is not None and max_y > 0 else None

    line_mapping = {"x": x, "y": y, "group": group, "color": group}
    label_mapping = {"x": x, "y": y, "label": LABEL_TEXT_COLUMN, "group": group}
    if facet:
        line_mapping["facet"] = facet
        label_mapping["facet"] = facet

    layers = [
        Layer(
            geometry="line",
            data=to_records(df),
            mapping=line_mapping,
            params={"width": style.line_width},
        ),
        Layer(
            geometry="label",
            data=to_records(df_label),
            mapping=label_mapping,
            params=_label_params(style),
        ),
    ]

    breaks = list(df[group].cat.categories)
    scales = {
        "x": _discrete_axis(df, x),
        "y": ScaleSpec(
            aesthetic="y",
            kind="continuous",
            label_format="number",
            limits=limits,
            expand=[0.0, 0.0],
        ),
        "color": ScaleSpec(
            aesthetic="color",
            kind="discrete",
            breaks=breaks,
            labels=group_levels,
            palette=LINE_PALETTE,
            colors=get_palette_colors(LINE_PALETTE, len(breaks)),
        ),
    }

    return ChartDescription(
        figure_kind=FigureKind.GROUPED_LINE,
        layers=layers,
        scales=scales,
        facet=_facet_spec(df, facet),
        legend=LegendSpec(reverse=False, byrow=True, order=["color"]),
        caption=build_caption(caption, style.caption_prefix),
        axis_titles={"x": x_axis_label or "", "y": y_axis_label or ""},
        orientation="v",
        separators=plotly_separators(style.decimal_mark, style.big_mark),
        theme=theme_rub(
            style,
            has_facet=bool(facet),
            x_axis_label=bool(x_axis_label),
            y_axis_label=bool(y_axis_label)
        ),
        advisories=advisories,
    )


def plot_type_1_and_4(
    table: pd.DataFrame,
    x: str,
    y: str,
    fill: str,
    group: str,
    x_axis_label: str = "",
    y_axis_label: str = "",
    fill_reverse: bool = False,
    fill_label: LabelBinding = None,
    group_label: LabelBinding = None,
    caption: str = "",
    cutoff: float = PLOT_CONFIG["bar_cutoff"],
    facet: Optional[str] = None,
    style: PlotStyle = DEFAULT_STYLE,
    figure_type_column: str = FIGURE_TYPE_COLUMN
) -> ChartDescription:
    """
    Grouped line chart on top of a vertical stacked bar chart.

    Rows tagged 1 form the bars, rows tagged 4 form the lines. Both halves
    are built independently and their layers are combined on one x-axis.
    The fill legend comes first, the line legend second.
    """
    tags = distinct_figure_types(table, figure_type_column)
    if set(tags) != {1, 4}:
        raise UnsupportedCombination(tags)

    validator.require(
        table,
        {"group": group, "group_label": _label_bindings(group_label)},
        required=["group"]
    )

    tag_values = pd.to_numeric(table[figure_type_column], errors="coerce")
    df_t1 = table[tag_values == 1]
    df_t4 = table[tag_values == 4]

    bars = plot_type_1(
        df_t1,
        x=x,
        y=y,
        fill=fill,
        y_axis_label=y_axis_label,
        fill_reverse=fill_reverse,
        fill_label=fill_label,
        caption=caption,
        cutoff=cutoff,
        facet=facet,
        style=style
    )

    overlay_layers, color_scale = _line_overlay(df_t4, x, y, group, group_label, facet, style)

    # Bars' x order first, then x values only the lines have
    x_scale = bars.get_scale("x")
    x_breaks = list(x_scale.breaks)
    for value in category_order(df_t4[x]):
        if value not in x_breaks:
            x_breaks.append(value)

    facet_spec = bars.facet
    if facet_spec is not None:
        levels = list(facet_spec.levels)
        for value in category_order(df_t4[facet]):
            if value not in levels:
                levels.append(value)
        facet_spec = facet_spec.model_copy(update={"levels": levels})

    scales = dict(bars.scales)
    scales["x"] = x_scale.model_copy(update={"breaks": x_breaks, "labels": [str(b) for b in x_breaks]})
    scales["color"] = color_scale

    return bars.model_copy(update={
        "figure_kind": FigureKind.BAR_WITH_LINE,
        "layers": list(bars.layers) + overlay_layers,
        "scales": scales,
        "facet": facet_spec,
        "legend": LegendSpec(reverse=False, byrow=True, order=["fill", "color"]),
        "axis_titles": {"x": x_axis_label or "", "y": y_axis_label or ""},
        "theme": theme_rub(
            style,
            has_facet=bool(facet),
            x_axis_label=bool(x_axis_label),
            y_axis_label=bool(y_axis_label)
        ),
    })


def _line_overlay(
    df_t4: pd.DataFrame,
    x: str,
    y: str,
    group: str,
    group_label: LabelBinding,
    facet: Optional[str],
    style: PlotStyle
):
    """Line and label layers plus color scale for the line half of the composite."""
    validator.require(df_t4, {"x": x, "y": y, "group": group, "facet": facet}, required=["x", "y", "group"], numeric=["y"])

    df, group_levels = resolve_factor(df_t4, group, group_label)
    df_label = df.copy()
    df_label[LABEL_TEXT_COLUMN] = df_label[y].map(
        lambda v: format_number(v, style.decimal_mark, style.big_mark)
    )

    line_mapping = {"x": x, "y": y, "group": group, "color": group}
    label_mapping = {"x": x, "y": y, "label": LABEL_TEXT_COLUMN, "group": group}
    if facet:
        line_mapping["facet"] = facet
        label_mapping["facet"] = facet

    layers = [
        Layer(
            geometry="line",
            data=to_records(df),
            mapping=line_mapping,
            params={"width": style.line_width},
        ),
        Layer(
            geometry="label",
            data=to_records(df_label),
            mapping=label_mapping,
            params=_label_params(style),
        ),
    ]

    breaks = list(df[group].cat.categories)
    color_scale = ScaleSpec(
        aesthetic="color",
        kind="discrete",
        breaks=breaks,
        labels=group_levels,
        palette=CONTRAST_PALETTE,
        colors=get_palette_colors(CONTRAST_PALETTE, len(breaks)),
    )
    return layers, color_scale
