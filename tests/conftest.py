"""
Shared fixtures: small figure tables for every template.
"""

import pandas as pd
import pytest


@pytest.fixture
def count_table():
    """Students per term and degree, tagged for the count template."""
    return pd.DataFrame({
        "x": ["WS20", "WS20", "WS21", "WS21"],
        "y": [120, 121, 150, 3],
        "fill": ["Bachelor", "Master", "Bachelor", "Master"],
        "figure_type_id": [1, 1, 1, 1],
        "y_label": ["Studierende"] * 4,
        "source_caption": ["Studierendenstatistik"] * 4,
    })


@pytest.fixture
def percent_table():
    """Study status shares, tagged for the 100% template."""
    return pd.DataFrame({
        "x": ["T1", "T1", "T2", "T2"],
        "y": [0.6, 0.4, 0.75, 0.25],
        "fill": ["Studying", "Other", "Studying", "Other"],
        "figure_type_id": [2, 2, 2, 2],
    })


@pytest.fixture
def horizontal_table():
    """Survey answers per group, tagged for the horizontal template."""
    return pd.DataFrame({
        "x": [30, 50, 20, 10, 60, 30],
        "y": ["Group A", "Group A", "Group A", "Group B", "Group B", "Group B"],
        "fill": ["yes", "partly", "no", "yes", "partly", "no"],
        "figure_type_id": [3] * 6,
    })


@pytest.fixture
def line_table():
    """Graduates per term and faculty."""
    return pd.DataFrame({
        "x": ["2019", "2020", "2021", "2019", "2020", "2021"],
        "y": [10, 20, 40, 4, 8, 6],
        "group": ["Law", "Law", "Law", "Medicine", "Medicine", "Medicine"],
        "figure_type_id": [4] * 6,
    })


@pytest.fixture
def composite_table():
    """Stacked counts plus a line overlay in one tagged table."""
    return pd.DataFrame({
        "x": ["2020", "2020", "2021", "2021", "2020", "2021"],
        "y": [100, 50, 110, 60, 150, 170],
        "fill": ["Bachelor", "Master", "Bachelor", "Master", None, None],
        "group": [None, None, None, None, "Total", "Total"],
        "figure_type_id": [1, 1, 1, 1, 4, 4],
        "source_caption": ["Amtliche Statistik"] * 6,
    })
