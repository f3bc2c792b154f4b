"""
Locale-aware number, percentage and caption formatting.
Defaults follow the German convention: 1.234,5 and 60%.
"""

from typing import Any, Optional

import pandas as pd


def _is_missing(value: Any) -> bool:
    try:
        return value is None or bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def format_number(
    value: Any,
    decimal_mark: str = ",",
    big_mark: str = ".",
    decimals: Optional[int] = None
) -> str:
    """
    Format a count with grouping and decimal marks.

    Integral values get no decimals; other values get up to two, without
    trailing zeros, unless decimals is given.
    """
    if _is_missing(value):
        return ""
    number = float(value)

    trim = decimals is None
    if decimals is None:
        decimals = 0 if number.is_integer() else 2

    text = f"{number:,.{decimals}f}"
    if trim and "." in text:
        text = text.rstrip("0").rstrip(".")

    # Swap marks through a placeholder so ',' -> '.' and '.' -> ',' do not collide
    return text.replace(",", "\0").replace(".", decimal_mark).replace("\0", big_mark)


def format_percent(value: Any, decimals: int = 0, decimal_mark: str = ",") -> str:
    """Format a proportion as a percentage: 0.6 -> '60%'."""
    if _is_missing(value):
        return ""
    text = f"{float(value) * 100:.{decimals}f}"
    return text.replace(".", decimal_mark) + "%"


def build_caption(caption: Any, prefix: str = "Quelle:") -> str:
    """Prefix a source caption; an empty caption stays empty."""
    if _is_missing(caption):
        return ""
    caption = str(caption).strip()
    if not caption:
        return ""
    return f"{prefix} {caption}" if prefix else caption


def plotly_separators(decimal_mark: str = ",", big_mark: str = ".") -> str:
    """Plotly layout.separators: decimal mark followed by grouping mark."""
    return f"{decimal_mark}{big_mark}"


def axis_tickformat(label_format: Optional[str]) -> Optional[str]:
    """d3 tick format for a continuous axis."""
    if label_format == "percent":
        return ".0%"
    if label_format == "number":
        return ",~r"
    return None
