from __future__ import annotations

import argparse
import json

from sma_bt.backtest import run_from_csv, run_from_payload, run_from_yfinance
from sma_bt.cache import cache_from_config
from sma_bt.config import BacktestConfig, CostConfig, IndicatorConfig, ProviderConfig
from sma_bt.logging_config import setup_logging


def main():
    p = argparse.ArgumentParser(description="SMA crossover backtest on a single symbol.")
    p.add_argument("--symbol", type=str, default="AAPL")
    p.add_argument("--start", type=str, default="2023-01-01")
    p.add_argument("--end", type=str, default="2024-01-01")
    p.add_argument("--interval", type=str, default="1d")
    p.add_argument("--output_dir", type=str, default="outputs")
    p.add_argument("--csv", type=str, default=None, help="Price CSV path (Date,...,Close).")
    p.add_argument("--payload", type=str, default=None, help="Saved provider JSON response.")
    p.add_argument("--provider", type=str, default=None, help="finnhub / twelvedata / alphavantage (with --payload).")
    p.add_argument("--fast", type=int, default=5, help="Fast SMA window.")
    p.add_argument("--slow", type=int, default=20, help="Slow SMA window.")
    p.add_argument("--starting_cash", type=float, default=100_000.0)
    p.add_argument("--slippage", type=float, default=0.001, help="Slippage rate. Default 0.001 (0.1%%).")
    p.add_argument("--fee", type=float, default=0.0005, help="Fee rate per fill. Default 0.0005.")
    p.add_argument("--log_level", type=str, default="INFO")
    p.add_argument("--log_file", type=str, default=None)
    args = p.parse_args()

    setup_logging(level=args.log_level, log_file=args.log_file)
    prov_cfg = ProviderConfig.from_env()

    ind_cfg = IndicatorConfig(sma_fast=args.fast, sma_slow=args.slow)
    cost_cfg = CostConfig(slippage_rate=args.slippage, fee_rate=args.fee)
    bt_cfg = BacktestConfig(symbol=args.symbol, starting_cash=args.starting_cash)

    if args.payload:
        paths = run_from_payload(
            payload_path=args.payload,
            provider=args.provider or prov_cfg.primary_provider,
            symbol=args.symbol,
            output_dir=args.output_dir,
            ind_cfg=ind_cfg,
            cost_cfg=cost_cfg,
            bt_cfg=bt_cfg,
        )
    elif args.csv:
        paths = run_from_csv(
            csv_path=args.csv,
            symbol=args.symbol,
            output_dir=args.output_dir,
            ind_cfg=ind_cfg,
            cost_cfg=cost_cfg,
            bt_cfg=bt_cfg,
        )
    else:
        paths = run_from_yfinance(
            symbol=args.symbol,
            start=args.start,
            end=args.end,
            interval=args.interval,
            output_dir=args.output_dir,
            ind_cfg=ind_cfg,
            cost_cfg=cost_cfg,
            bt_cfg=bt_cfg,
            cache=cache_from_config(prov_cfg),
            cache_ttl=prov_cfg.cache_ttl_seconds,
        )

    print(paths["equity"])
    print(paths["trades"])
    with open(paths["summary"], encoding="utf-8") as fh:
        s = json.load(fh)
    print(
        f"value={s['portfolio_value']:.2f} CAGR={s['cagr'] * 100:.2f}% "
        f"Sharpe={s['sharpe']:.2f} trades={s['total_trades']}"
    )


if __name__ == "__main__":
    main()
