"""Indicator computation utilities.

Indicators are computed on the close series and keep the input index so
that values line up with timestamps.
"""

from __future__ import annotations

import numpy as np
import pandas as pd


def sma(series: pd.Series, window: int) -> pd.Series:
    """Simple moving average over a trailing window.

    Position i holds the mean of the `window` prices ending at i, or NaN
    while fewer than `window` prices are available. A running sum is kept
    (add the incoming price, drop the one leaving the window) so the cost is
    O(N). A window holding a missing (NaN) price is NaN; later windows are
    defined again once it has dropped out.
    """
    if window <= 0:
        raise ValueError("window must be positive")
    x = series.astype(float).to_numpy()
    out = np.full(len(x), np.nan)
    total = 0.0
    missing = 0  # NaNs currently inside the window
    for i, price in enumerate(x):
        if np.isnan(price):
            missing += 1
        else:
            total += price
        if i >= window:
            old = x[i - window]
            if np.isnan(old):
                missing -= 1
            else:
                total -= old
        if i >= window - 1 and missing == 0:
            out[i] = total / window
    return pd.Series(out, index=series.index, name=f"sma{window}")
