"""Point-in-time equity curve reconstruction from a trade log."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np
import pandas as pd

from .types import EquityPoint, Trade


def _valid_price(x: float) -> bool:
    return bool(np.isfinite(x)) and x != 0


def compute_equity_curve(
    trades: Sequence[Trade],
    prices: pd.Series,
    starting_cash: float = 100_000.0,
) -> List[EquityPoint]:
    """Replay `trades` against every price point.

    Trades are matched to price points by ordinal index (``Trade.index``),
    so duplicate or irregular timestamps cannot drop a fill from the curve.
    A missing (NaN) or zero price is replaced by the last valid price seen so
    far, or by the series' final price before any valid price was seen.
    """
    px = prices.astype(float).to_numpy()
    labels = prices.index
    ordered = sorted(trades, key=lambda t: t.index)

    tail = float(px[-1]) if len(px) and _valid_price(px[-1]) else 0.0
    cash = float(starting_cash)
    position = 0
    last_price = None
    k = 0

    curve: List[EquityPoint] = []
    for i in range(len(px)):
        while k < len(ordered) and ordered[k].index <= i:
            cash = ordered[k].cash_after
            position = ordered[k].position_after
            k += 1

        price = float(px[i])
        if _valid_price(price):
            last_price = price
        else:
            price = last_price if last_price is not None else tail

        curve.append(EquityPoint(timestamp=labels[i], total=float(cash + position * price)))
    return curve


def equity_frame(curve: Sequence[EquityPoint]) -> pd.DataFrame:
    """Equity curve as a DataFrame indexed by timestamp (column: Equity)."""
    return pd.DataFrame(
        [(p.timestamp, p.total) for p in curve], columns=["Date", "Equity"]
    ).set_index("Date")
