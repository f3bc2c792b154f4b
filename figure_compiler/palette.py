"""
Discrete palette selection by number of requested colors.
"""

import logging
from typing import List

from figure_catalog.exceptions import ConfigurationError
from figure_catalog.models import PaletteSelection
from figure_catalog.palettes import MAX_DISCRETE_COLORS, get_palette_colors

logger = logging.getLogger(__name__)


def select_palette(requested_count: int) -> PaletteSelection:
    """
    Name of the predefined discrete palette for requested_count colors.

    The palette table holds discrete palettes for up to eight colors. Above
    that, the eight-color palette is selected and an advisory is attached;
    the palette table interpolates the additional colors.
    """
    if isinstance(requested_count, bool) or int(requested_count) != requested_count or requested_count < 0:
        raise ConfigurationError(
            f"Number of requested colors must be a non-negative integer, got {requested_count!r}",
            binding="colors_n"
        )
    requested_count = int(requested_count)

    advisory = None
    if requested_count > MAX_DISCRETE_COLORS:
        advisory = (
            f"Number of requested colors ({requested_count}) exceeds {MAX_DISCRETE_COLORS}. "
            f"No predefined palette for more than {MAX_DISCRETE_COLORS} discrete colors exists; "
            "additional colors will be interpolated."
        )

    return PaletteSelection(
        name=f"discrete_{min(requested_count, MAX_DISCRETE_COLORS)}",
        requested=requested_count,
        advisory=advisory
    )


def palette_colors(selection: PaletteSelection) -> List[str]:
    """Colors for a selection, logging its advisory."""
    if selection.advisory:
        logger.warning(selection.advisory)
    return get_palette_colors(selection.name, selection.requested)
