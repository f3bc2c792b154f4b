"""
Figure catalog package - the vocabulary of RUB figures.
Defines figure kinds, plot style, palettes, chart descriptions and errors.
"""

from figure_catalog.exceptions import (
    FigureError,
    SchemaMismatch,
    ConfigurationError,
    UnknownFigureType,
    UnsupportedCombination,
    EmptyInput
)

from figure_catalog.models import (
    FigureKind,
    PlotStyle,
    DEFAULT_STYLE,
    PaletteSelection,
    ScaleSpec,
    FacetSpec,
    LegendSpec,
    ThemeSpec,
    Layer,
    ChartDescription
)

from figure_catalog.palettes import (
    RUB_PALETTES,
    MAX_DISCRETE_COLORS,
    get_palette_colors,
    list_palettes
)

__all__ = [
    'FigureError',
    'SchemaMismatch',
    'ConfigurationError',
    'UnknownFigureType',
    'UnsupportedCombination',
    'EmptyInput',
    'FigureKind',
    'PlotStyle',
    'DEFAULT_STYLE',
    'PaletteSelection',
    'ScaleSpec',
    'FacetSpec',
    'LegendSpec',
    'ThemeSpec',
    'Layer',
    'ChartDescription',
    'RUB_PALETTES',
    'MAX_DISCRETE_COLORS',
    'get_palette_colors',
    'list_palettes'
]

__version__ = "1.0.0"
