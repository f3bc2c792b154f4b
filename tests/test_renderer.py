"""
Tests for the plotly renderer.
"""

import pytest

from visualization.chart_templates import plot_type_1, plot_type_1_and_4, plot_type_2, plot_type_3, plot_type_4
from visualization.renderer import build_figure, figure_to_dict


def _bars(fig):
    return [trace for trace in fig.data if trace.type == "bar"]


class TestBuildFigure:
    """Test figure construction from descriptions."""

    def test_one_trace_per_fill_group(self, count_table):
        """Test stacked count bars."""
        fig = build_figure(plot_type_1(count_table, "x", "y", "fill", caption="HIS"))
        bars = _bars(fig)

        assert [trace.name for trace in bars] == ["Bachelor", "Master"]
        assert list(bars[0].y) == [120, 150]
        assert fig.layout.barmode == "stack"
        assert fig.layout.separators == ",."

    def test_annotations(self, count_table):
        """Test value labels and the source caption are annotations."""
        fig = build_figure(plot_type_1(count_table, "x", "y", "fill", caption="HIS"))
        texts = [annotation.text for annotation in fig.layout.annotations]

        assert "Quelle: HIS" in texts
        assert "121" in texts
        assert len(texts) == 5

    def test_percent_bars_normalized(self, count_table):
        """Test 100% bars are scaled to shares."""
        fig = build_figure(plot_type_2(count_table.assign(figure_type_id=2), "x", "y", "fill"))
        bars = _bars(fig)

        assert bars[0].y[0] + bars[1].y[0] == pytest.approx(1.0)
        assert fig.layout.yaxis.tickformat == ".0%"

    def test_horizontal_orientation(self, horizontal_table):
        """Test type 3 draws horizontal bars with the groups on the vertical axis."""
        fig = build_figure(plot_type_3(horizontal_table, "x", "y", "fill"))
        bars = _bars(fig)

        assert all(trace.orientation == "h" for trace in bars)
        assert list(fig.layout.yaxis.categoryarray) == ["Group B", "Group A"]
        assert list(fig.layout.xaxis.range) == pytest.approx([0.0, 1.025])

    def test_lines(self, line_table):
        """Test one line per group with the configured axis limits."""
        fig = build_figure(plot_type_4(line_table, "x", "y", "group"))
        lines = [trace for trace in fig.data if trace.type == "scatter"]

        assert [trace.name for trace in lines] == ["Law", "Medicine"]
        assert fig.layout.yaxis.range[1] == pytest.approx(44.0)

    def test_composite_legend_order(self, composite_table):
        """Test fill entries rank before line entries."""
        fig = build_figure(plot_type_1_and_4(composite_table, "x", "y", "fill", "group"))
        bar_ranks = [trace.legendrank for trace in fig.data if trace.type == "bar"]
        line_ranks = [trace.legendrank for trace in fig.data if trace.type == "scatter"]

        assert max(bar_ranks) < min(line_ranks)

    def test_facets(self, count_table):
        """Test one panel per facet level with a single legend entry per group."""
        table = count_table.assign(facet=["east", "east", "west", "west"])
        fig = build_figure(plot_type_1(table, "x", "y", "fill", facet="facet"))
        bars = _bars(fig)

        assert len(bars) == 4
        assert sum(1 for trace in bars if trace.showlegend) == 2


class TestFigureToDict:
    """Test figure serialization."""

    def test_serialization(self, count_table):
        """Test JSON-ready figure without image."""
        result = figure_to_dict(build_figure(plot_type_1(count_table, "x", "y", "fill")))

        assert result["type"] == "plotly"
        assert len(result["data"]) == 2
        assert "image_base64" not in result


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
