"""Backtest runner utilities."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import pandas as pd

from .cache import Cache
from .config import BacktestConfig, CostConfig, IndicatorConfig
from .data_provider import CsvProvider, JsonPayloadProvider, PriceFrame, YfinanceProvider, standardize_prices
from .equity import compute_equity_curve, equity_frame
from .metrics import summarize_performance
from .portfolio import simulate_portfolio
from .signals import generate_sma_signals
from .types import BacktestResult

logger = logging.getLogger(__name__)


def run_backtest(
    prices: pd.Series,
    ind_cfg: IndicatorConfig = IndicatorConfig(),
    cost_cfg: CostConfig = CostConfig(),
    bt_cfg: BacktestConfig = BacktestConfig(),
) -> BacktestResult:
    """prices -> signals -> portfolio -> equity curve -> summary.

    Pure: no I/O, nothing shared between calls.
    """
    signals = generate_sma_signals(prices, fast=ind_cfg.sma_fast, slow=ind_cfg.sma_slow)
    portfolio = simulate_portfolio(signals, prices, starting_cash=bt_cfg.starting_cash, cost_cfg=cost_cfg)
    curve = compute_equity_curve(portfolio.trades, prices, starting_cash=portfolio.starting_cash)
    summary = summarize_performance(
        curve,
        trade_count=len(portfolio.trades),
        risk_free_rate=bt_cfg.risk_free_rate,
        periods_per_year=bt_cfg.periods_per_year,
    )
    logger.info(
        "%s: %d prices, %d signals, %d trades, value %.2f (CAGR %.2f%%, Sharpe %.2f)",
        bt_cfg.symbol,
        len(prices),
        len(signals),
        len(portfolio.trades),
        portfolio.portfolio_value,
        summary.cagr * 100.0,
        summary.sharpe,
    )
    return BacktestResult(
        symbol=bt_cfg.symbol,
        signals=signals,
        portfolio=portfolio,
        equity_curve=curve,
        summary=summary,
    )


def run_from_yfinance(
    symbol: str,
    start: str,
    end: str,
    interval: str = "1d",
    output_dir: str | Path = "outputs",
    ind_cfg: IndicatorConfig = IndicatorConfig(),
    cost_cfg: CostConfig = CostConfig(),
    bt_cfg: Optional[BacktestConfig] = None,
    auto_adjust: bool = False,
    cache: Optional[Cache] = None,
    cache_ttl: int = 60,
) -> dict[str, Path]:
    """Convenience runner using yfinance."""
    frame = YfinanceProvider(cache=cache, ttl=cache_ttl).fetch(
        symbol=symbol,
        start=start,
        end=end,
        interval=interval,
        auto_adjust=auto_adjust,
    )
    return _run_core(frame, output_dir, ind_cfg, cost_cfg, bt_cfg)


def run_from_csv(
    csv_path: str | Path,
    symbol: str,
    output_dir: str | Path = "outputs",
    ind_cfg: IndicatorConfig = IndicatorConfig(),
    cost_cfg: CostConfig = CostConfig(),
    bt_cfg: Optional[BacktestConfig] = None,
) -> dict[str, Path]:
    frame = CsvProvider().fetch(csv_path=csv_path, symbol=symbol)
    return _run_core(frame, output_dir, ind_cfg, cost_cfg, bt_cfg)


def run_from_payload(
    payload_path: str | Path,
    provider: str,
    symbol: str,
    output_dir: str | Path = "outputs",
    ind_cfg: IndicatorConfig = IndicatorConfig(),
    cost_cfg: CostConfig = CostConfig(),
    bt_cfg: Optional[BacktestConfig] = None,
) -> dict[str, Path]:
    """Run on a saved finnhub / twelvedata / alphavantage response."""
    frame = JsonPayloadProvider().fetch(payload_path, provider=provider, symbol=symbol)
    return _run_core(frame, output_dir, ind_cfg, cost_cfg, bt_cfg)


def _run_core(
    frame: PriceFrame,
    output_dir: str | Path,
    ind_cfg: IndicatorConfig,
    cost_cfg: CostConfig,
    bt_cfg: Optional[BacktestConfig] = None,
) -> dict[str, Path]:
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    if bt_cfg is None:
        bt_cfg = BacktestConfig(symbol=frame.symbol)
    result = run_backtest(standardize_prices(frame.prices), ind_cfg, cost_cfg, bt_cfg)

    eq = equity_frame(result.equity_curve)
    trades = pd.DataFrame(
        [asdict(x) for x in result.portfolio.trades],
        columns=["kind", "timestamp", "index", "executed_price", "quantity", "fee", "cash_after", "position_after"],
    )

    tag = frame.symbol.replace(".", "_")
    eq_path = out_dir / f"equity_{tag}.csv"
    tr_path = out_dir / f"trades_{tag}.csv"
    sm_path = out_dir / f"summary_{tag}.json"
    eq.to_csv(eq_path, encoding="utf-8")
    trades.to_csv(tr_path, index=False, encoding="utf-8")

    summary = result.to_dict()
    summary.pop("signals")
    summary.pop("trades")
    with sm_path.open("w", encoding="utf-8") as fh:
        json.dump(summary, fh, indent=2, default=str)

    return {"equity": eq_path, "trades": tr_path, "summary": sm_path}
