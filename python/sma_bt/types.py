"""Shared types for the SMA crossover backtester.

The guiding principle is to keep the runtime objects small and explicit.
Everything here is created fresh per run and never outlives it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Hashable, Iterable, List

import pandas as pd

BUY = "BUY"
SELL = "SELL"


@dataclass(frozen=True)
class PricePoint:
    """A single normalized price observation."""

    timestamp: Hashable
    price: float


def to_price_series(points: Iterable[PricePoint], name: str = "Close") -> pd.Series:
    """Build the core price Series (index = timestamps) from PricePoints."""
    points = list(points)
    return pd.Series(
        [float(p.price) for p in points],
        index=[p.timestamp for p in points],
        dtype=float,
        name=name,
    )


@dataclass(frozen=True)
class Signal:
    """A directional trigger at a position in the price sequence."""

    kind: str  # 'BUY'/'SELL'
    index: int
    price: float
    timestamp: Hashable


@dataclass(frozen=True)
class Trade:
    """A single executed fill."""

    kind: str  # 'BUY'/'SELL'
    timestamp: Hashable
    index: int  # ordinal position of the triggering signal
    executed_price: float
    quantity: int
    fee: float
    cash_after: float
    position_after: int


@dataclass
class PortfolioState:
    cash: float
    position: int = 0


@dataclass(frozen=True)
class PortfolioResult:
    starting_cash: float
    final_cash: float
    position: int
    final_price: float
    portfolio_value: float
    trades: List[Trade] = field(default_factory=list)


@dataclass(frozen=True)
class EquityPoint:
    timestamp: Hashable
    total: float


@dataclass(frozen=True)
class PerformanceSummary:
    cagr: float
    sharpe: float
    total_returns: List[float]
    total_trades: int = 0
    max_drawdown: float = 0.0


@dataclass(frozen=True)
class BacktestResult:
    """Everything one run produces, ready for presentation."""

    symbol: str
    signals: List[Signal]
    portfolio: PortfolioResult
    equity_curve: List[EquityPoint]
    summary: PerformanceSummary

    def to_dict(self) -> dict[str, Any]:
        p = self.portfolio
        return {
            "symbol": self.symbol,
            "starting_cash": p.starting_cash,
            "final_cash": p.final_cash,
            "position": p.position,
            "final_price": p.final_price,
            "portfolio_value": p.portfolio_value,
            "cagr": self.summary.cagr,
            "sharpe": self.summary.sharpe,
            "max_drawdown": self.summary.max_drawdown,
            "total_trades": self.summary.total_trades,
            "signals": [asdict(s) for s in self.signals],
            "trades": [asdict(t) for t in p.trades],
        }
