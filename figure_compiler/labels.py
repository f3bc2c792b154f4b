"""
Value label placement for stacked bars.

Each stack segment gets one label at the vertical midpoint of the interval it
occupies. Labels on small segments are dropped so they do not overlap.
"""

import logging
from typing import List, Optional

import pandas as pd

from figure_catalog.exceptions import SchemaMismatch
from figure_compiler.factors import category_order
from figure_compiler.validator import validator

logger = logging.getLogger(__name__)

VALUE_COLUMN = "value"
POSITION_COLUMN = "position"


def compute_label_positions(
    table: pd.DataFrame,
    x: str,
    y: str,
    fill: str,
    facet: Optional[str] = None,
    cutoff: float = 0.04,
    is_percentage: bool = False
) -> pd.DataFrame:
    """
    Compute label values and positions for a stacked bar chart.

    Rows are grouped by x (and facet). Within a group they are stacked in the
    fill column's category order, first category at the bottom, and every row
    gets position = sum of the values below it + value / 2.

    With is_percentage the values of each group are first rescaled to sum to
    1.0 and a label is dropped when its share is below cutoff. Otherwise the
    raw value is kept and a label is dropped when it is below cutoff.

    Returns:
        One row per retained segment with the x, facet and fill columns, the
        raw y column, 'value' (displayed number) and 'position'.
    """
    bindings = {"x": x, "y": y, "fill": fill, "facet": facet}
    validator.require(table, bindings, required=["x", "y", "fill"], numeric=["y"])

    keys = [x] + ([facet] if facet else [])
    columns = keys + [fill, y]
    output_columns = columns + [VALUE_COLUMN, POSITION_COLUMN]

    if table.empty:
        return pd.DataFrame(columns=output_columns)

    df = table[columns].copy()
    if df[fill].isna().any():
        raise SchemaMismatch(fill, None)

    # Stack order: fill categories ascending, rows keep their order otherwise
    fill_order = category_order(df[fill])
    rank = {value: i for i, value in enumerate(fill_order)}
    df["_stack"] = df[fill].astype(object).map(rank).astype(int)
    df["_row"] = range(len(df))
    df = df.sort_values(["_stack", "_row"], kind="stable")

    groups = df.groupby(keys, sort=False, observed=True, dropna=False)

    if is_percentage:
        totals = groups[y].transform("sum")
        df[VALUE_COLUMN] = (df[y] / totals.where(totals != 0)).fillna(0.0)
    else:
        df[VALUE_COLUMN] = df[y]

    cumulative = df.groupby(keys, sort=False, observed=True, dropna=False)[VALUE_COLUMN].cumsum()
    df[POSITION_COLUMN] = cumulative - df[VALUE_COLUMN] / 2

    keep = df[VALUE_COLUMN] >= cutoff
    dropped = int((~keep).sum())
    if dropped:
        logger.debug(f"Suppressed {dropped} of {len(df)} labels below cutoff {cutoff}")

    result = _restore_group_order(df[keep], table, keys)
    return result[output_columns].reset_index(drop=True)


def _restore_group_order(result: pd.DataFrame, table: pd.DataFrame, keys: List[str]) -> pd.DataFrame:
    """Order groups by first occurrence in the input, segments bottom to top."""
    if result.empty:
        return result.drop(columns=["_stack", "_row"], errors="ignore")

    first_seen = table[keys].drop_duplicates().reset_index(drop=True)
    first_seen["_group"] = range(len(first_seen))
    merged = result.merge(first_seen, on=keys, how="left")
    merged = merged.sort_values(["_group", "_stack", "_row"], kind="stable")
    return merged.drop(columns=["_group", "_stack", "_row"])
