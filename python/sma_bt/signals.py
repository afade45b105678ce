"""Signal generation from fast/slow SMA crossovers."""

from __future__ import annotations

import logging
from typing import List

import numpy as np
import pandas as pd

from .indicators import sma
from .types import BUY, SELL, Signal

logger = logging.getLogger(__name__)


def _is_finite(x: float) -> bool:
    return bool(np.isfinite(x))


def generate_sma_signals(prices: pd.Series, fast: int = 5, slow: int = 20) -> List[Signal]:
    """Emit BUY when fast crosses above slow, SELL when it crosses below.

    A cross is judged between bar i-1 and bar i, so both averages must be
    defined on both bars. "From at-or-below to strictly above" is a BUY and
    "from at-or-above to strictly below" is a SELL; the strict inequality on
    bar i makes the two mutually exclusive.
    """
    if fast < 1 or slow < 1:
        raise ValueError("windows must be >= 1")
    if fast >= slow:
        raise ValueError(f"fast window ({fast}) must be smaller than slow window ({slow})")

    fast_ma = sma(prices, fast).to_numpy()
    slow_ma = sma(prices, slow).to_numpy()
    px = prices.astype(float).to_numpy()
    labels = prices.index

    signals: List[Signal] = []
    for i in range(1, len(px)):
        f0, s0, f1, s1 = fast_ma[i - 1], slow_ma[i - 1], fast_ma[i], slow_ma[i]
        if not (_is_finite(f0) and _is_finite(s0) and _is_finite(f1) and _is_finite(s1)):
            continue
        if f0 <= s0 and f1 > s1:
            signals.append(Signal(kind=BUY, index=i, price=float(px[i]), timestamp=labels[i]))
        elif f0 >= s0 and f1 < s1:
            signals.append(Signal(kind=SELL, index=i, price=float(px[i]), timestamp=labels[i]))

    logger.debug("sma(%d/%d) over %d prices -> %d signals", fast, slow, len(px), len(signals))
    return signals


def local_extrema_markers(prices: pd.Series, limit: int = 10) -> List[Signal]:
    """Naive chart markers: strict local minima as BUY, maxima as SELL.

    Only interior points qualify. Display helper, not a trading rule.
    """
    px = prices.astype(float).to_numpy()
    labels = prices.index
    markers: List[Signal] = []
    for i in range(1, len(px) - 1):
        prev, cur, nxt = px[i - 1], px[i], px[i + 1]
        if cur < prev and cur < nxt:
            markers.append(Signal(kind=BUY, index=i, price=float(cur), timestamp=labels[i]))
        elif cur > prev and cur > nxt:
            markers.append(Signal(kind=SELL, index=i, price=float(cur), timestamp=labels[i]))
    return markers[: max(0, int(limit))]
