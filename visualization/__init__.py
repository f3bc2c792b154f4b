"""
Visualization package for RUB figures.
Tag-based template dispatch - the figure_type_id column alone decides the chart.
"""

from visualization.chart_templates import (
    plot_type_1,
    plot_type_2,
    plot_type_3,
    plot_type_4,
    plot_type_1_and_4
)

from visualization.generator import (
    FigureDispatcher,
    determine_figure_kind,
    render
)

from visualization.renderer import (
    FigureRenderer,
    build_figure,
    figure_to_dict
)

from visualization.theme import theme_rub

__all__ = [
    'plot_type_1',
    'plot_type_2',
    'plot_type_3',
    'plot_type_4',
    'plot_type_1_and_4',
    'FigureDispatcher',
    'determine_figure_kind',
    'render',
    'FigureRenderer',
    'build_figure',
    'figure_to_dict',
    'theme_rub'
]

__version__ = "1.0.0"
