"""
Figure dispatch.
Inspects the figure type tags of a table and routes it to its template.
No guessing - the tags alone decide the template.
"""

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from figure_catalog.exceptions import EmptyInput, UnknownFigureType, UnsupportedCombination
from figure_catalog.models import DEFAULT_STYLE, ChartDescription, FigureKind, PlotStyle
from figure_compiler.validator import validator
from visualization.chart_templates import (
    FIGURE_TYPE_COLUMN,
    distinct_figure_types,
    plot_type_1,
    plot_type_1_and_4,
    plot_type_2,
    plot_type_3,
)
from visualization.renderer import build_figure, figure_to_dict

logger = logging.getLogger(__name__)


# Canonical column names of a figure table
X_COLUMN = "x"
Y_COLUMN = "y"
FILL_COLUMN = "fill"
FILL_LABEL_COLUMN = "fill_label"
GROUP_COLUMN = "group"
GROUP_LABEL_COLUMN = "group_label"
FACET_COLUMN = "facet"
Y_LABEL_COLUMN = "y_label"
CAPTION_COLUMN = "source_caption"
FILL_REVERSE_COLUMN = "fill_reverse"

SINGLE_TYPE_KINDS = {
    1: FigureKind.STACKED_COUNT,
    2: FigureKind.STACKED_PERCENT,
    3: FigureKind.HORIZONTAL_PERCENT,
}

# Columns each dispatchable template needs, for discovery endpoints
REQUIRED_COLUMNS = {
    FigureKind.STACKED_COUNT: [X_COLUMN, Y_COLUMN, FILL_COLUMN],
    FigureKind.STACKED_PERCENT: [X_COLUMN, Y_COLUMN, FILL_COLUMN],
    FigureKind.HORIZONTAL_PERCENT: [X_COLUMN, Y_COLUMN, FILL_COLUMN],
    FigureKind.GROUPED_LINE: [X_COLUMN, Y_COLUMN, GROUP_COLUMN],
    FigureKind.BAR_WITH_LINE: [X_COLUMN, Y_COLUMN, FILL_COLUMN, GROUP_COLUMN],
}


class FigureDispatcher:
    """
    Renders figure tables deterministically.
    Rules:
    - one tag 1, 2 or 3 = that template
    - tags {1, 4} in any order = bars with line overlay
    - any other single tag = UnknownFigureType
    - any other combination = UnsupportedCombination
    - no rows or no tags = EmptyInput
    """

    def __init__(self, style: PlotStyle = DEFAULT_STYLE, figure_type_column: str = FIGURE_TYPE_COLUMN):
        self.style = style
        self.figure_type_column = figure_type_column

    def determine_figure_kind(self, table: pd.DataFrame) -> FigureKind:
        """Decide the template from the distinct figure type tags."""
        # Zero rows is EmptyInput even when the table has no columns at all
        if isinstance(table, pd.DataFrame) and table.empty:
            raise EmptyInput("Table has no rows", column=self.figure_type_column)
        validator.require(table, {"figure_type": self.figure_type_column}, required=["figure_type"])

        tags = distinct_figure_types(table, self.figure_type_column)

        if not tags:
            raise EmptyInput(
                f"Column '{self.figure_type_column}' holds no figure type tags",
                column=self.figure_type_column
            )
        if len(tags) == 1:
            if tags[0] not in SINGLE_TYPE_KINDS:
                raise UnknownFigureType(tags[0])
            return SINGLE_TYPE_KINDS[tags[0]]
        if len(tags) == 2 and set(tags) == {1, 4}:
            return FigureKind.BAR_WITH_LINE
        raise UnsupportedCombination(tags)

    def render(self, table: pd.DataFrame) -> ChartDescription:
        """
        Main method: build the chart description for a figure table.
        Same table ALWAYS produces the same description.
        """
        kind = self.determine_figure_kind(table)
        logger.info(f"Rendering {len(table)} rows as {kind.value}")

        handlers = {
            FigureKind.STACKED_COUNT: self._render_stacked_count,
            FigureKind.STACKED_PERCENT: self._render_stacked_percent,
            FigureKind.HORIZONTAL_PERCENT: self._render_horizontal_percent,
            FigureKind.BAR_WITH_LINE: self._render_bar_with_line,
        }
        if kind not in handlers:
            raise UnknownFigureType(kind.value)

        description = handlers[kind](table)
        for advisory in description.advisories:
            logger.warning(advisory)
        return description

    def render_figure(self, table: pd.DataFrame, include_image: bool = False) -> Dict[str, Any]:
        """Chart description plus the plotly figure as a JSON-ready dict."""
        description = self.render(table)
        figure = figure_to_dict(build_figure(description), include_image=include_image)
        return {
            "figure_kind": description.figure_kind.value,
            "description": description.model_dump(mode="json"),
            "figure": figure,
        }

    # ------------------------------------------------------------------
    # Template handlers
    # ------------------------------------------------------------------

    def _render_stacked_count(self, table: pd.DataFrame) -> ChartDescription:
        return plot_type_1(
            table,
            x=X_COLUMN,
            y=Y_COLUMN,
            fill=FILL_COLUMN,
            y_axis_label=_first_value(table, Y_LABEL_COLUMN, ""),
            fill_label=_optional_column(table, FILL_LABEL_COLUMN),
            caption=_first_value(table, CAPTION_COLUMN, ""),
            facet=_optional_column(table, FACET_COLUMN),
            style=self.style
        )

    def _render_stacked_percent(self, table: pd.DataFrame) -> ChartDescription:
        return plot_type_2(
            table,
            x=X_COLUMN,
            y=Y_COLUMN,
            fill=FILL_COLUMN,
            fill_label=_optional_column(table, FILL_LABEL_COLUMN),
            fill_reverse=_as_bool(_first_value(table, FILL_REVERSE_COLUMN, False)),
            facet=_optional_column(table, FACET_COLUMN),
            caption=_first_value(table, CAPTION_COLUMN, ""),
            style=self.style
        )

    def _render_horizontal_percent(self, table: pd.DataFrame) -> ChartDescription:
        # Table keeps the caller's view: x holds the shares, y the groups
        return plot_type_3(
            table,
            x=X_COLUMN,
            y=Y_COLUMN,
            fill=FILL_COLUMN,
            fill_label=_optional_column(table, FILL_LABEL_COLUMN),
            fill_reverse=_as_bool(_first_value(table, FILL_REVERSE_COLUMN, False)),
            facet=_optional_column(table, FACET_COLUMN),
            caption=_first_value(table, CAPTION_COLUMN, ""),
            style=self.style
        )

    def _render_bar_with_line(self, table: pd.DataFrame) -> ChartDescription:
        tag_values = pd.to_numeric(table[self.figure_type_column], errors="coerce")
        bars = table[tag_values == 1]
        return plot_type_1_and_4(
            table,
            x=X_COLUMN,
            y=Y_COLUMN,
            fill=FILL_COLUMN,
            group=GROUP_COLUMN,
            y_axis_label=_first_value(bars, Y_LABEL_COLUMN, ""),
            fill_reverse=_as_bool(_first_value(bars, FILL_REVERSE_COLUMN, False)),
            fill_label=_optional_column(table, FILL_LABEL_COLUMN),
            group_label=_optional_column(table, GROUP_LABEL_COLUMN),
            caption=_first_value(bars, CAPTION_COLUMN, ""),
            facet=_optional_column(table, FACET_COLUMN),
            style=self.style,
            figure_type_column=self.figure_type_column
        )


def _optional_column(table: pd.DataFrame, column: str) -> Optional[str]:
    """Column name if the table has it with at least one value."""
    if column in table.columns and table[column].notna().any():
        return column
    return None


def _first_value(table: pd.DataFrame, column: str, default: Any) -> Any:
    """Per-figure metadata is stored on every row; the first row wins."""
    if column not in table.columns or table.empty:
        return default
    value = table[column].iloc[0]
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return default
    return value


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "t")
    return bool(value)


def determine_figure_kind(table: pd.DataFrame) -> FigureKind:
    """Template a table would be rendered with."""
    return FigureDispatcher().determine_figure_kind(table)


def render(table: pd.DataFrame, style: PlotStyle = DEFAULT_STYLE) -> ChartDescription:
    """Build the chart description for a figure table."""
    return FigureDispatcher(style=style).render(table)


def list_figure_types() -> List[Dict[str, Any]]:
    """Available templates with their tags and required columns."""
    return [
        {
            "figure_kind": kind.value,
            "figure_type_ids": kind.figure_type_ids,
            "required_columns": REQUIRED_COLUMNS[kind],
            "dispatchable": kind != FigureKind.GROUPED_LINE,
        }
        for kind in FigureKind
    ]
