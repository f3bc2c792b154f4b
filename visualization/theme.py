"""
RUB corporate theme.
Display parameters merged into every chart description.
"""

from config import RUB_COLORS
from figure_catalog.models import DEFAULT_STYLE, PlotStyle, ThemeSpec


def theme_rub(
    style: PlotStyle = DEFAULT_STYLE,
    has_facet: bool = False,
    x_axis_label: bool = False,
    y_axis_label: bool = False
) -> ThemeSpec:
    """
    Build the theme for one figure.

    Args:
        style: Font family, base size and accent color
        has_facet: Whether the figure is split into panels (adds strip styling
            and more room at the top)
        x_axis_label: Whether an x-axis title is shown
        y_axis_label: Whether a y-axis title is shown
    """
    margin = {
        "l": 70 if y_axis_label else 40,
        "r": 20,
        "t": 40 if has_facet else 20,
        "b": 100 if x_axis_label else 80,
    }

    strip = {}
    if has_facet:
        strip = {
            "font_size": style.base_size,
            "font_color": style.color,
            "background": RUB_COLORS["gray"],
        }

    return ThemeSpec(
        font_family=style.base_family,
        font_size=style.base_size,
        color=style.color,
        label_size=style.label_size,
        has_facet=has_facet,
        show_x_title=x_axis_label,
        show_y_title=y_axis_label,
        background=RUB_COLORS["white"],
        grid_color=RUB_COLORS["gray"],
        margin=margin,
        caption={
            "font_size": round(style.base_size * 0.8, 1),
            "font_color": style.color,
            "align": "left",
            "x": 0.0,
            "y": -0.18 if x_axis_label else -0.12,
        },
        strip=strip,
    )
