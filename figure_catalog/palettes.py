"""
Static palette table of the RUB corporate design.
Read-only after import; palettes are looked up by name.
"""

from typing import Dict, List, Tuple

from plotly.colors import hex_to_rgb, label_rgb, sample_colorscale

from config import RUB_COLORS
from figure_catalog.exceptions import ConfigurationError


MAX_DISCRETE_COLORS = 8

_BRAND_ORDER = (
    RUB_COLORS["blue"],
    RUB_COLORS["green"],
    RUB_COLORS["light_blue"],
    RUB_COLORS["light_green"],
    RUB_COLORS["dark_gray"],
    RUB_COLORS["mid_gray"],
    RUB_COLORS["gray"],
    RUB_COLORS["orange"],
)

RUB_PALETTES: Dict[str, Tuple[str, ...]] = {
    "discrete_0": (),
    "discrete_1": (RUB_COLORS["blue"],),
    "discrete_2": (RUB_COLORS["blue"], RUB_COLORS["green"]),
    "discrete_3": (RUB_COLORS["blue"], RUB_COLORS["green"], RUB_COLORS["gray"]),
    "discrete_4": (
        RUB_COLORS["blue"], RUB_COLORS["light_blue"],
        RUB_COLORS["green"], RUB_COLORS["light_green"],
    ),
    "discrete_5": (
        RUB_COLORS["blue"], RUB_COLORS["light_blue"],
        RUB_COLORS["green"], RUB_COLORS["light_green"],
        RUB_COLORS["gray"],
    ),
    "discrete_6": (
        RUB_COLORS["blue"], RUB_COLORS["light_blue"],
        RUB_COLORS["green"], RUB_COLORS["light_green"],
        RUB_COLORS["dark_gray"], RUB_COLORS["gray"],
    ),
    "discrete_7": (
        RUB_COLORS["blue"], RUB_COLORS["light_blue"],
        RUB_COLORS["green"], RUB_COLORS["light_green"],
        RUB_COLORS["dark_gray"], RUB_COLORS["mid_gray"], RUB_COLORS["gray"],
    ),
    "discrete_8": _BRAND_ORDER,
    "discrete": _BRAND_ORDER,
    "discrete_contrast": (
        RUB_COLORS["orange"],
        RUB_COLORS["dark_gray"],
        RUB_COLORS["light_green"],
        RUB_COLORS["light_blue"],
    ),
}


def list_palettes() -> List[str]:
    """Names of all predefined palettes."""
    return list(RUB_PALETTES)


def get_palette_colors(name: str, n: int) -> List[str]:
    """
    Get exactly n colors from a named palette.

    Palettes shorter than n are extended by sampling a colorscale spanning the
    predefined colors, so the result always has n entries.
    """
    if name not in RUB_PALETTES:
        raise ConfigurationError(f"Palette '{name}' not found in palette table", binding="palette")
    if n < 0:
        raise ConfigurationError(f"Number of colors must be non-negative, got {n}", binding="palette")

    colors = list(RUB_PALETTES[name])
    if n <= len(colors):
        return colors[:n]

    # discrete_0 has nothing to interpolate from
    if not colors:
        colors = list(RUB_PALETTES["discrete"])
    if len(colors) == 1:
        return colors * n

    rgb = [label_rgb(hex_to_rgb(c)) if c.startswith("#") else c for c in colors]
    step = 1 / (len(rgb) - 1)
    colorscale = [[round(i * step, 10), c] for i, c in enumerate(rgb)]
    colorscale[-1][0] = 1.0
    return sample_colorscale(colorscale, n)
