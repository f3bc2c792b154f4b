"""
Figure Catalog Models
Declarative building blocks of a RUB figure: style, scales, layers and the
complete chart description handed to the renderer.
"""

from typing import Any, Dict, List, Literal, Optional
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field

from config import PLOT_CONFIG


class FigureKind(str, Enum):
    """Supported figure templates."""
    STACKED_COUNT = "stacked_count"            # type 1
    STACKED_PERCENT = "stacked_percent"        # type 2
    HORIZONTAL_PERCENT = "horizontal_percent"  # type 3
    GROUPED_LINE = "grouped_line"              # type 4
    BAR_WITH_LINE = "bar_with_line"            # types 1 and 4 combined

    @property
    def figure_type_ids(self) -> List[int]:
        """Figure type tags that select this template."""
        return list(FIGURE_TYPE_IDS[self])


FIGURE_TYPE_IDS = {
    FigureKind.STACKED_COUNT: (1,),
    FigureKind.STACKED_PERCENT: (2,),
    FigureKind.HORIZONTAL_PERCENT: (3,),
    FigureKind.GROUPED_LINE: (4,),
    FigureKind.BAR_WITH_LINE: (1, 4),
}


class PlotStyle(BaseModel):
    """
    Immutable visual conventions passed into every template call.
    Defaults come from PLOT_CONFIG.
    """
    model_config = ConfigDict(frozen=True)

    base_family: str = Field(PLOT_CONFIG["base_family"], description="Font family")
    base_size: float = Field(PLOT_CONFIG["base_size"], description="Base font size in pt", gt=0)
    color: str = Field(PLOT_CONFIG["color"], description="Accent color for text and labels")
    caption_prefix: str = Field(PLOT_CONFIG["caption_prefix"], description="Prefix of the source caption")
    decimal_mark: str = Field(PLOT_CONFIG["decimal_mark"], min_length=1, max_length=1)
    big_mark: str = Field(PLOT_CONFIG["big_mark"], min_length=1, max_length=1)
    bar_width: float = Field(PLOT_CONFIG["bar_width"], gt=0, le=1)
    line_width: float = Field(PLOT_CONFIG["line_width"], gt=0)

    @property
    def label_size(self) -> float:
        """Value label font size in pt (base_size / 5 mm)."""
        return round(self.base_size / 5 * 72.27 / 25.4, 2)


DEFAULT_STYLE = PlotStyle()


class PaletteSelection(BaseModel):
    """Palette chosen for a number of discrete colors, plus an optional advisory."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Palette name in the palette table")
    requested: int = Field(..., ge=0, description="Number of requested colors")
    advisory: Optional[str] = Field(None, description="Non-fatal note about the selection")


class ScaleSpec(BaseModel):
    """Scale for one aesthetic (x, y, fill, color)."""
    aesthetic: Literal["x", "y", "fill", "color"]
    kind: Literal["continuous", "discrete"]

    # Continuous scales
    label_format: Optional[Literal["number", "percent"]] = None
    limits: Optional[List[float]] = None
    expand: List[float] = Field(default_factory=lambda: [0.0, 0.0], description="Lower and upper expansion (fraction)")

    # Discrete scales: breaks in drawing order and their display labels
    breaks: List[Any] = Field(default_factory=list)
    labels: List[str] = Field(default_factory=list)

    # Color scales
    palette: Optional[str] = None
    colors: List[str] = Field(default_factory=list)

    show_ticks: bool = True
    show_line: bool = True

    def color_map(self) -> Dict[Any, str]:
        """Map every break to its color."""
        return dict(zip(self.breaks, self.colors))

    def label_map(self) -> Dict[Any, str]:
        """Map every break to its display label."""
        return dict(zip(self.breaks, self.labels))


class FacetSpec(BaseModel):
    """Split the chart into one panel per facet value."""
    column: str
    levels: List[Any] = Field(default_factory=list)
    ncol: int = 1
    free_scales: Literal["x", "y", "both", "none"] = "y"
    free_space: bool = Field(False, description="Panel size proportional to the number of categories")


class LegendSpec(BaseModel):
    """Legend ordering and layout."""
    show: bool = True
    reverse: bool = False
    byrow: bool = True
    order: List[str] = Field(default_factory=lambda: ["fill"], description="Aesthetics in legend order")
    position: Literal["bottom", "right", "none"] = "bottom"


class ThemeSpec(BaseModel):
    """Display parameters produced by the theme provider."""
    font_family: str
    font_size: float
    color: str
    label_size: float
    has_facet: bool = False
    show_x_title: bool = False
    show_y_title: bool = False
    background: str = "#FFFFFF"
    grid_color: str = "#E7E7E7"
    margin: Dict[str, int] = Field(default_factory=lambda: {"l": 60, "r": 20, "t": 20, "b": 80})
    caption: Dict[str, Any] = Field(default_factory=dict)
    strip: Dict[str, Any] = Field(default_factory=dict)


class Layer(BaseModel):
    """One geometry layer bound to its own data subset and aesthetic mapping."""
    geometry: Literal["bar", "line", "label"]
    data: List[Dict[str, Any]] = Field(default_factory=list)
    mapping: Dict[str, str] = Field(..., description="Aesthetic -> column name")
    params: Dict[str, Any] = Field(default_factory=dict)

    @property
    def row_count(self) -> int:
        return len(self.data)


class ChartDescription(BaseModel):
    """
    Complete declarative description of one figure.
    Built once per call, handed to the renderer, then discarded.
    """
    figure_kind: FigureKind
    layers: List[Layer] = Field(default_factory=list)
    scales: Dict[str, ScaleSpec] = Field(default_factory=dict)
    facet: Optional[FacetSpec] = None
    legend: LegendSpec = Field(default_factory=LegendSpec)
    caption: str = ""
    axis_titles: Dict[str, str] = Field(default_factory=lambda: {"x": "", "y": ""})
    orientation: Literal["v", "h"] = Field("v", description="'h' draws categories on the vertical axis")
    separators: str = Field(",.", description="Decimal mark followed by grouping mark")
    theme: ThemeSpec
    advisories: List[str] = Field(default_factory=list)

    def get_layers(self, geometry: str) -> List[Layer]:
        """All layers of one geometry, in drawing order."""
        return [layer for layer in self.layers if layer.geometry == geometry]

    def get_scale(self, aesthetic: str) -> ScaleSpec:
        """Get a scale by aesthetic."""
        if aesthetic not in self.scales:
            raise KeyError(f"Scale '{aesthetic}' not defined for {self.figure_kind.value}")
        return self.scales[aesthetic]
