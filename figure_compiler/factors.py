"""
Factor resolution for categorical axes.
Turns a column into an ordered categorical and returns the matching display labels.
"""

from typing import Any, List, Mapping, Optional, Tuple, Union

import pandas as pd

from figure_catalog.exceptions import ConfigurationError, SchemaMismatch
from figure_compiler.validator import validator

# Figure type whose template flips its axes for display
FLIPPED_FIGURE_TYPE = 3


def effective_reverse(reverse: bool, figure_type: Optional[int] = None) -> bool:
    """
    Reversal actually applied to the category order.

    The horizontal template draws its stacking order mirrored, so for figure
    type 3 the caller's flag is inverted here.
    """
    if figure_type == FLIPPED_FIGURE_TYPE:
        return not reverse
    return bool(reverse)


def category_order(values: pd.Series) -> List[Any]:
    """Existing categorical order, or first-occurrence order."""
    if isinstance(values.dtype, pd.CategoricalDtype):
        present = set(values.dropna())
        return [c for c in values.cat.categories if c in present]
    return pd.unique(values.dropna()).tolist()


def resolve_factor(
    table: pd.DataFrame,
    value_column: str,
    label_column: Optional[Union[str, Mapping[Any, str]]] = None,
    reverse: bool = False,
    figure_type: Optional[int] = None
) -> Tuple[pd.DataFrame, List[str]]:
    """
    Re-type value_column as an ordered categorical.

    Args:
        table: Observation table
        value_column: Column holding the category identities
        label_column: Column with display labels, or a mapping value -> label.
            Without it, values are their own labels.
        reverse: Invert the category order
        figure_type: Figure type the axis is resolved for

    Returns:
        (copy of table with the ordered column, display labels in category order)
    """
    bindings = {"value": value_column}
    if isinstance(label_column, str):
        bindings["label"] = label_column
    validator.require(table, bindings, required=["value"])

    values = table[value_column]
    if values.isna().any():
        raise SchemaMismatch(value_column, None, label_column if isinstance(label_column, str) else None)

    order = category_order(values)
    if effective_reverse(reverse, figure_type):
        order = order[::-1]

    labels = _resolve_labels(table, value_column, label_column, order)

    resolved = table.copy()
    resolved[value_column] = pd.Categorical(values, categories=order, ordered=True)
    return resolved, labels


def _resolve_labels(
    table: pd.DataFrame,
    value_column: str,
    label_column: Optional[Union[str, Mapping[Any, str]]],
    order: List[Any]
) -> List[str]:
    """Display label for every category, in order."""
    if label_column is None:
        return [str(value) for value in order]

    if isinstance(label_column, Mapping):
        mapping = dict(label_column)
        source = None
    elif isinstance(label_column, str):
        pairs = table[[value_column, label_column]].dropna(subset=[label_column])
        pairs = pairs.drop_duplicates(subset=[value_column], keep="first")
        mapping = dict(zip(pairs[value_column], pairs[label_column]))
        source = label_column
    else:
        raise ConfigurationError(
            f"Label binding for '{value_column}' must be a column name or a mapping, "
            f"got {type(label_column).__name__}",
            binding="label"
        )

    labels = []
    for value in order:
        if value not in mapping:
            raise SchemaMismatch(value_column, value, source)
        labels.append(str(mapping[value]))
    return labels
