"""
Column binding validation.
Checks that every column a template is bound to exists before any computation.
"""

from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd
from pandas.api.types import is_numeric_dtype

from figure_catalog.exceptions import ConfigurationError


class BindingValidator:
    """
    Validates column bindings against a table's schema.
    Ensures:
    1. Required bindings are given
    2. Every given binding names an existing column
    3. Value bindings point at numeric columns
    """

    def validate(
        self,
        table: pd.DataFrame,
        bindings: Dict[str, Optional[str]],
        required: Iterable[str] = (),
        numeric: Iterable[str] = ()
    ) -> List[str]:
        """
        Validate bindings against the table.
        Returns list of validation errors, empty list if valid.
        """
        return [message for _, _, message in self._problems(table, bindings, required, numeric)]

    def require(
        self,
        table: pd.DataFrame,
        bindings: Dict[str, Optional[str]],
        required: Iterable[str] = (),
        numeric: Iterable[str] = ()
    ) -> None:
        """Raise ConfigurationError naming every invalid binding."""
        problems = self._problems(table, bindings, required, numeric)
        if problems:
            binding, column, _ = problems[0]
            raise ConfigurationError(
                "; ".join(message for _, _, message in problems),
                binding=binding,
                column=column
            )

    def _problems(
        self,
        table: pd.DataFrame,
        bindings: Dict[str, Optional[str]],
        required: Iterable[str],
        numeric: Iterable[str]
    ) -> List[Tuple[str, Optional[str], str]]:
        problems = []

        if not isinstance(table, pd.DataFrame):
            return [("table", None, f"Expected a pandas DataFrame, got {type(table).__name__}")]

        # 1. Required bindings are given
        for binding in required:
            if not bindings.get(binding):
                problems.append((binding, None, f"Binding '{binding}' is required"))

        # 2. Given bindings exist
        for binding, column in bindings.items():
            if column and column not in table.columns:
                problems.append((
                    binding,
                    column,
                    f"Column '{column}' for binding '{binding}' not found in table "
                    f"(columns: {list(table.columns)})"
                ))

        # 3. Value columns are numeric
        for binding in numeric:
            column = bindings.get(binding)
            if column and column in table.columns and not is_numeric_dtype(table[column]):
                problems.append((
                    binding,
                    column,
                    f"Column '{column}' for binding '{binding}' must be numeric, "
                    f"got {table[column].dtype}"
                ))

        return problems


validator = BindingValidator()
