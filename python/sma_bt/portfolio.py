"""Cash/position portfolio simulator driven by crossover signals.

Policy:
- each BUY commits a fixed fraction of current cash (default 50%)
- each SELL liquidates the whole position (never partial)
- a signal that cannot be filled is skipped, never raised
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from .config import CostConfig
from .cost_model import SlippageFeeModel
from .types import BUY, SELL, PortfolioResult, PortfolioState, Signal, Trade

logger = logging.getLogger(__name__)


class PortfolioSimulator:
    """Single-asset long-only ledger.

    One instance per run; state is two scalars (cash, position) plus the
    append-only trade log.
    """

    def __init__(self, starting_cash: float = 100_000.0, cost_cfg: CostConfig = CostConfig()):
        if not starting_cash > 0:
            raise ValueError("starting_cash must be positive")
        self.starting_cash = float(starting_cash)
        self.cost_cfg = cost_cfg
        self.cost_model = SlippageFeeModel(cost_cfg)

        self.state = PortfolioState(cash=self.starting_cash, position=0)
        self.trade_log: List[Trade] = []
        self._last_executed: Optional[float] = None

    # ---------- public API ----------

    def run(self, signals: Iterable[Signal], prices: pd.Series) -> PortfolioResult:
        for s in signals:
            self.on_signal(s)
        return self.result(prices)

    def on_signal(self, signal: Signal) -> Optional[Trade]:
        kind = signal.kind.upper()
        if kind == BUY:
            trade = self._execute_buy(signal)
        elif kind == SELL:
            trade = self._execute_sell(signal)
        else:
            raise ValueError(f"unknown signal kind: {signal.kind!r}")
        return trade

    def result(self, prices: pd.Series) -> PortfolioResult:
        """Mark to market at the last price (or last executed price)."""
        last = float(prices.iloc[-1]) if len(prices) > 0 else float("nan")
        if np.isfinite(last) and last != 0:
            final_price = last
        elif self._last_executed is not None:
            final_price = float(self._last_executed)
        else:
            final_price = 0.0
        value = self.state.cash + self.state.position * final_price
        return PortfolioResult(
            starting_cash=self.starting_cash,
            final_cash=float(self.state.cash),
            position=int(self.state.position),
            final_price=final_price,
            portfolio_value=float(value),
            trades=list(self.trade_log),
        )

    # ---------- execution/accounting ----------

    def _execute_buy(self, signal: Signal) -> Optional[Trade]:
        fill = self.cost_model.execution(BUY, signal.price)
        cash = self.state.cash
        if not np.isfinite(fill.price) or cash <= fill.price:
            logger.debug("skip BUY at %s: cash %.2f <= price %.4f", signal.timestamp, cash, fill.price)
            return None

        spend = cash * float(self.cost_cfg.buy_cash_fraction)
        qty = int(math.floor((spend - fill.fee) / fill.price))
        if qty <= 0:
            logger.debug("skip BUY at %s: quantity %d", signal.timestamp, qty)
            return None

        self.state.cash -= qty * fill.price + fill.fee
        self.state.position += qty
        return self._record(BUY, signal, fill.price, qty, fill.fee)

    def _execute_sell(self, signal: Signal) -> Optional[Trade]:
        if self.state.position == 0:
            logger.debug("skip SELL at %s: no position", signal.timestamp)
            return None
        fill = self.cost_model.execution(SELL, signal.price)

        qty = int(self.state.position)
        self.state.cash += qty * fill.price - fill.fee
        self.state.position = 0
        return self._record(SELL, signal, fill.price, qty, fill.fee)

    def _record(self, kind: str, signal: Signal, price: float, qty: int, fee: float) -> Trade:
        trade = Trade(
            kind=kind,
            timestamp=signal.timestamp,
            index=int(signal.index),
            executed_price=float(price),
            quantity=int(qty),
            fee=float(fee),
            cash_after=float(self.state.cash),
            position_after=int(self.state.position),
        )
        self.trade_log.append(trade)
        self._last_executed = float(price)
        logger.debug("%s %d @ %.4f (fee %.4f) -> cash %.2f pos %d", kind, qty, price, fee, trade.cash_after, trade.position_after)
        return trade


def simulate_portfolio(
    signals: Iterable[Signal],
    prices: pd.Series,
    starting_cash: float = 100_000.0,
    cost_cfg: CostConfig = CostConfig(),
) -> PortfolioResult:
    """Run a fresh simulator over `signals` and mark to `prices`."""
    return PortfolioSimulator(starting_cash=starting_cash, cost_cfg=cost_cfg).run(signals, prices)
