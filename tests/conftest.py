import numpy as np
import pandas as pd
import pytest

SCENARIO_PRICES = [10.0, 9.0, 8.0, 9.0, 10.0, 11.0, 10.0, 9.0, 8.0, 7.0]


@pytest.fixture
def scenario_prices() -> pd.Series:
    """Ten daily closes with one up-cross and one down-cross at fast=2/slow=4."""
    index = pd.date_range("2024-01-01", periods=len(SCENARIO_PRICES), freq="D")
    return pd.Series(SCENARIO_PRICES, index=index, name="Close")


@pytest.fixture
def random_walk_prices() -> pd.Series:
    rng = np.random.default_rng(42)
    steps = rng.normal(0.0, 1.0, size=300)
    closes = 100.0 + np.cumsum(steps)
    index = pd.date_range("2023-01-02", periods=len(closes), freq="B")
    return pd.Series(closes, index=index, name="Close")
