"""
Tests for the figure catalog: models, palettes and errors.
"""

import pytest
from pydantic import ValidationError

from figure_catalog.exceptions import (
    ConfigurationError, EmptyInput, FigureError, SchemaMismatch,
    UnknownFigureType, UnsupportedCombination
)
from figure_catalog.models import (
    DEFAULT_STYLE, ChartDescription, FigureKind, Layer, PlotStyle, ScaleSpec, ThemeSpec
)
from figure_catalog.palettes import (
    MAX_DISCRETE_COLORS, RUB_PALETTES, get_palette_colors, list_palettes
)


class TestPlotStyle:
    """Test PlotStyle model."""

    def test_defaults(self):
        """Test German defaults of the corporate style."""
        assert DEFAULT_STYLE.base_family == "RubFlama"
        assert DEFAULT_STYLE.base_size == 11
        assert DEFAULT_STYLE.caption_prefix == "Quelle:"
        assert DEFAULT_STYLE.decimal_mark == ","
        assert DEFAULT_STYLE.big_mark == "."
        assert DEFAULT_STYLE.bar_width == 0.55

    def test_style_is_immutable(self):
        """Test that a style cannot be changed after creation."""
        with pytest.raises(ValidationError):
            DEFAULT_STYLE.base_size = 20

    def test_label_size_scales_with_base_size(self):
        """Test value label size follows base_size / 5."""
        small = PlotStyle(base_size=10)
        large = PlotStyle(base_size=20)
        assert large.label_size == pytest.approx(2 * small.label_size, rel=0.01)

    def test_invalid_bar_width(self):
        """Test bar width must be within (0, 1]."""
        with pytest.raises(ValidationError):
            PlotStyle(bar_width=1.5)


class TestFigureKind:
    """Test FigureKind enum."""

    def test_figure_type_ids(self):
        """Test each kind reports the tags that select it."""
        assert FigureKind.STACKED_COUNT.figure_type_ids == [1]
        assert FigureKind.HORIZONTAL_PERCENT.figure_type_ids == [3]
        assert FigureKind.BAR_WITH_LINE.figure_type_ids == [1, 4]


class TestChartDescription:
    """Test ChartDescription accessors."""

    def _description(self):
        theme = ThemeSpec(font_family="RubFlama", font_size=11, color="#17365C", label_size=1.0)
        return ChartDescription(
            figure_kind=FigureKind.STACKED_COUNT,
            layers=[
                Layer(geometry="bar", mapping={"x": "x", "y": "y", "fill": "fill"}),
                Layer(geometry="label", data=[{"x": "a"}], mapping={"x": "x", "y": "position"}),
            ],
            scales={"x": ScaleSpec(aesthetic="x", kind="discrete", breaks=["a"], labels=["a"])},
            theme=theme,
        )

    def test_get_layers(self):
        """Test filtering layers by geometry."""
        description = self._description()
        assert len(description.get_layers("bar")) == 1
        assert description.get_layers("label")[0].row_count == 1
        assert description.get_layers("line") == []

    def test_get_missing_scale(self):
        """Test missing scales raise KeyError."""
        with pytest.raises(KeyError):
            self._description().get_scale("color")

    def test_scale_maps(self):
        """Test break-to-color and break-to-label maps."""
        scale = ScaleSpec(aesthetic="fill", kind="discrete", breaks=["A", "B"],
                          labels=["Alpha", "Beta"], colors=["#000000", "#FFFFFF"])
        assert scale.color_map() == {"A": "#000000", "B": "#FFFFFF"}
        assert scale.label_map()["B"] == "Beta"


class TestPalettes:
    """Test the palette table."""

    def test_discrete_palettes_have_matching_length(self):
        """Test discrete_n holds exactly n colors."""
        for n in range(MAX_DISCRETE_COLORS + 1):
            assert len(RUB_PALETTES[f"discrete_{n}"]) == n

    def test_list_palettes(self):
        """Test the generic and contrast palettes are listed."""
        names = list_palettes()
        assert "discrete" in names
        assert "discrete_contrast" in names

    def test_exact_count(self):
        """Test requesting fewer colors than the palette holds."""
        assert get_palette_colors("discrete_3", 2) == list(RUB_PALETTES["discrete_3"][:2])

    def test_interpolated_colors(self):
        """Test palettes are extended to the requested length."""
        colors = get_palette_colors("discrete_8", 11)
        assert len(colors) == 11
        assert len(set(colors)) > 8

    def test_single_color_repeated(self):
        """Test a one-color palette is repeated."""
        assert get_palette_colors("discrete_1", 3) == [RUB_PALETTES["discrete_1"][0]] * 3

    def test_unknown_palette(self):
        """Test unknown palette names are configuration errors."""
        with pytest.raises(ConfigurationError):
            get_palette_colors("rainbow", 3)


class TestExceptions:
    """Test error types."""

    def test_all_errors_are_figure_errors(self):
        """Test the common base class."""
        for error in (
            SchemaMismatch("fill", "C"),
            ConfigurationError("missing"),
            UnknownFigureType(7),
            UnsupportedCombination([1, 2]),
            EmptyInput(),
        ):
            assert isinstance(error, FigureError)
            assert isinstance(error, ValueError)

    def test_schema_mismatch_names_value(self):
        """Test SchemaMismatch carries column and value."""
        error = SchemaMismatch("fill", "C", "fill_label")
        assert error.column == "fill"
        assert error.value == "C"
        assert "fill_label" in str(error)

    def test_unsupported_combination_sorts_tags(self):
        """Test tags are reported in a stable order."""
        assert UnsupportedCombination([2, 1]).tags == [1, 2]

    def test_unknown_figure_type_tag(self):
        """Test the offending tag is kept."""
        assert UnknownFigureType(9).tag == 9


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
