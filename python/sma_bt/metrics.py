"""Performance metrics.

Periods are treated as trading-day equivalents whatever the bar interval,
so annualization is an approximation rather than a calendar calculation.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .types import EquityPoint, PerformanceSummary

TRADING_DAYS = 252


def _totals(equity: Sequence[EquityPoint]) -> np.ndarray:
    return np.asarray([p.total for p in equity], dtype=float)


def pct_returns(equity: Sequence[EquityPoint]) -> List[float]:
    """Per-period simple returns; empty for fewer than two points."""
    x = _totals(equity)
    if len(x) < 2:
        return []
    return [float(v) for v in x[1:] / x[:-1] - 1.0]


def cagr(equity: Sequence[EquityPoint], periods_per_year: int = TRADING_DAYS) -> float:
    """CAGR with years = max(points / periods_per_year, 1 / periods_per_year)."""
    x = _totals(equity)
    if len(x) < 2:
        return 0.0
    start, end = float(x[0]), float(x[-1])
    if start <= 0 or end < 0:
        return 0.0
    years = max(len(x) / periods_per_year, 1.0 / periods_per_year)
    return float((end / start) ** (1.0 / years) - 1.0)


def sharpe(returns: Sequence[float], risk_free_rate: float = 0.0, periods_per_year: int = TRADING_DAYS) -> float:
    """Annualized Sharpe using the population std; 0 when undefined."""
    r = np.asarray(returns, dtype=float)
    if len(r) == 0 or r.max() == r.min():
        return 0.0
    std = float(r.std(ddof=0))
    if std == 0:
        return 0.0
    return float((r.mean() - risk_free_rate) / std * np.sqrt(periods_per_year))


def max_drawdown(equity: Sequence[EquityPoint]) -> float:
    """Maximum drawdown (as positive fraction)."""
    x = _totals(equity)
    if len(x) == 0:
        return 0.0
    peak = np.maximum.accumulate(x)
    dd = 1.0 - (x / np.maximum(peak, np.finfo(float).tiny))
    return float(np.nanmax(dd))


def summarize_performance(
    equity: Sequence[EquityPoint],
    trade_count: int = 0,
    risk_free_rate: float = 0.0,
    periods_per_year: int = TRADING_DAYS,
) -> PerformanceSummary:
    returns = pct_returns(equity)
    return PerformanceSummary(
        cagr=cagr(equity, periods_per_year),
        sharpe=sharpe(returns, risk_free_rate, periods_per_year),
        total_returns=returns,
        total_trades=int(trade_count),
        max_drawdown=max_drawdown(equity),
    )
