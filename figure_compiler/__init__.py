"""
Figure compiler package - pure data preparation for figure templates.
Factor ordering, label geometry, palette selection and number formatting.
"""

from figure_compiler.validator import BindingValidator
from figure_compiler.factors import (
    resolve_factor,
    category_order,
    effective_reverse
)
from figure_compiler.labels import compute_label_positions
from figure_compiler.palette import select_palette, palette_colors
from figure_compiler.formatting import (
    format_number,
    format_percent,
    build_caption,
    plotly_separators
)

__all__ = [
    'BindingValidator',
    'resolve_factor',
    'category_order',
    'effective_reverse',
    'compute_label_positions',
    'select_palette',
    'palette_colors',
    'format_number',
    'format_percent',
    'build_caption',
    'plotly_separators'
]

__version__ = "1.0.0"
