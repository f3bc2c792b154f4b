"""
Tests for tag-based figure dispatch.
"""

import pandas as pd
import pytest

from figure_catalog.exceptions import (
    ConfigurationError, EmptyInput, UnknownFigureType, UnsupportedCombination
)
from figure_catalog.models import FigureKind, PlotStyle
from figure_compiler.formatting import axis_tickformat
from visualization.generator import FigureDispatcher, determine_figure_kind, list_figure_types, render


class TestDetermineFigureKind:
    """Test template selection from tags."""

    def test_single_tags(self, count_table, percent_table, horizontal_table):
        """Test tags 1, 2 and 3 select their templates."""
        assert determine_figure_kind(count_table) == FigureKind.STACKED_COUNT
        assert determine_figure_kind(percent_table) == FigureKind.STACKED_PERCENT
        assert determine_figure_kind(horizontal_table) == FigureKind.HORIZONTAL_PERCENT

    def test_composite_in_any_order(self, composite_table):
        """Test tags {1, 4} select the composite regardless of row order."""
        assert determine_figure_kind(composite_table) == FigureKind.BAR_WITH_LINE
        reordered = composite_table.iloc[::-1].reset_index(drop=True)
        assert determine_figure_kind(reordered) == FigureKind.BAR_WITH_LINE

    def test_unsupported_combination(self, count_table):
        """Test tags {1, 2} cannot be combined."""
        table = count_table.assign(figure_type_id=[1, 1, 2, 2])
        with pytest.raises(UnsupportedCombination) as exc_info:
            determine_figure_kind(table)
        assert exc_info.value.tags == [1, 2]

    def test_line_alone_is_unknown(self, line_table):
        """Test tag 4 on its own has no dispatchable template."""
        with pytest.raises(UnknownFigureType) as exc_info:
            determine_figure_kind(line_table)
        assert exc_info.value.tag == 4

    def test_unknown_tag(self, count_table):
        """Test tags outside 1-4 are rejected."""
        with pytest.raises(UnknownFigureType):
            determine_figure_kind(count_table.assign(figure_type_id=7))

    def test_non_integer_tag(self, count_table):
        """Test text tags are rejected."""
        with pytest.raises(UnknownFigureType):
            determine_figure_kind(count_table.assign(figure_type_id="bar"))

    def test_empty_table(self, count_table):
        """Test a table without rows."""
        with pytest.raises(EmptyInput):
            determine_figure_kind(count_table.iloc[0:0])

    def test_table_without_columns(self):
        """Test a table without rows or columns is empty, not misconfigured."""
        with pytest.raises(EmptyInput):
            determine_figure_kind(pd.DataFrame())
        with pytest.raises(EmptyInput):
            render(pd.DataFrame([]))

    def test_no_tags(self, count_table):
        """Test a table whose tags are all missing."""
        with pytest.raises(EmptyInput):
            determine_figure_kind(count_table.assign(figure_type_id=None))

    def test_missing_tag_column(self, count_table):
        """Test the figure type column is required."""
        with pytest.raises(ConfigurationError):
            determine_figure_kind(count_table.drop(columns=["figure_type_id"]))


class TestRender:
    """Test rendering through the dispatcher."""

    def test_percent_table(self, percent_table):
        """Test a type-2 table gets a percentage y-axis."""
        description = render(percent_table)

        assert description.figure_kind == FigureKind.STACKED_PERCENT
        assert axis_tickformat(description.get_scale("y").label_format) == ".0%"

    def test_metadata_columns(self, count_table):
        """Test axis label and caption are read from the table."""
        description = render(count_table)

        assert description.axis_titles["y"] == "Studierende"
        assert description.caption == "Quelle: Studierendenstatistik"

    def test_fill_reverse_column(self, percent_table):
        """Test the fill_reverse flag column."""
        description = render(percent_table.assign(fill_reverse="TRUE"))
        assert description.get_scale("fill").breaks == ["Other", "Studying"]

    def test_fill_label_column(self, percent_table):
        """Test display labels from the fill_label column."""
        table = percent_table.assign(
            fill_label=percent_table["fill"].map({"Studying": "Im Studium", "Other": "Sonstige"})
        )
        assert render(table).get_scale("fill").labels == ["Im Studium", "Sonstige"]

    def test_composite(self, composite_table):
        """Test the composite reads its caption from the bar rows."""
        description = render(composite_table)

        assert description.figure_kind == FigureKind.BAR_WITH_LINE
        assert description.caption == "Quelle: Amtliche Statistik"

    def test_deterministic(self, horizontal_table):
        """Test the same table gives the same description."""
        assert render(horizontal_table) == render(horizontal_table)

    def test_style(self, count_table):
        """Test the dispatcher passes its style to the template."""
        description = render(count_table, style=PlotStyle(base_size=14))
        assert description.theme.font_size == 14

    def test_render_figure(self, percent_table):
        """Test the serialized figure bundle."""
        result = FigureDispatcher().render_figure(percent_table)

        assert result["figure_kind"] == "stacked_percent"
        assert result["figure"]["type"] == "plotly"
        assert result["description"]["figure_kind"] == "stacked_percent"
        assert "image_base64" not in result["figure"]


class TestListFigureTypes:
    """Test template discovery."""

    def test_all_kinds_listed(self):
        """Test every figure kind is listed with its tags."""
        types = {entry["figure_kind"]: entry for entry in list_figure_types()}

        assert len(types) == 5
        assert types["bar_with_line"]["figure_type_ids"] == [1, 4]
        assert types["grouped_line"]["dispatchable"] is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
