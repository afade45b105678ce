import json

import pandas as pd
import pytest

from sma_bt.backtest import run_backtest, run_from_csv, run_from_payload
from sma_bt.config import BacktestConfig, IndicatorConfig
from sma_bt.equity import compute_equity_curve
from sma_bt.metrics import summarize_performance
from sma_bt.types import BUY


def test_scenario_end_to_end(scenario_prices):
    result = run_backtest(
        scenario_prices,
        ind_cfg=IndicatorConfig(sma_fast=2, sma_slow=4),
        bt_cfg=BacktestConfig(symbol="TEST", starting_cash=1000.0),
    )
    assert (result.signals[0].kind, result.signals[0].index) == (BUY, 4)

    p = result.portfolio
    last_price = float(scenario_prices.iloc[-1])
    assert p.final_cash + p.position * last_price == pytest.approx(p.portfolio_value, abs=1e-9)
    assert len(result.equity_curve) == len(scenario_prices)
    assert result.summary.total_trades == 2
    assert result.summary.cagr < 0


def test_single_price_series():
    prices = pd.Series([123.0], index=[pd.Timestamp("2024-01-01")])
    result = run_backtest(prices, bt_cfg=BacktestConfig(starting_cash=5000.0))
    assert [pt.total for pt in result.equity_curve] == [5000.0]
    assert result.summary.cagr == 0.0
    assert result.summary.sharpe == 0.0
    assert result.summary.total_returns == []


def test_empty_series():
    result = run_backtest(pd.Series([], dtype=float))
    assert result.signals == []
    assert result.equity_curve == []
    assert result.summary.cagr == 0.0
    assert result.summary.sharpe == 0.0


def test_replaying_the_same_trades_is_stable(random_walk_prices):
    result = run_backtest(random_walk_prices, ind_cfg=IndicatorConfig(sma_fast=3, sma_slow=10))
    trades = result.portfolio.trades

    runs = []
    for _ in range(2):
        curve = compute_equity_curve(trades, random_walk_prices, starting_cash=result.portfolio.starting_cash)
        runs.append((curve, summarize_performance(curve, trade_count=len(trades))))
    assert runs[0] == runs[1]
    assert runs[0][0] == result.equity_curve


def test_to_dict_is_plain_data(scenario_prices):
    result = run_backtest(
        scenario_prices,
        ind_cfg=IndicatorConfig(sma_fast=2, sma_slow=4),
        bt_cfg=BacktestConfig(symbol="TEST", starting_cash=1000.0),
    )
    d = result.to_dict()
    assert d["symbol"] == "TEST"
    assert d["total_trades"] == 2
    assert d["trades"][0]["kind"] == BUY
    assert d["signals"][1]["index"] == 7


def test_run_from_csv_writes_outputs(tmp_path, random_walk_prices):
    df = random_walk_prices.rename("Close").to_frame()
    df.index.name = "Date"
    # provider order is irrelevant: newest first on disk
    csv_path = tmp_path / "prices.csv"
    df.iloc[::-1].to_csv(csv_path)

    paths = run_from_csv(
        csv_path,
        symbol="RW.X",
        output_dir=tmp_path / "out",
        ind_cfg=IndicatorConfig(sma_fast=3, sma_slow=10),
    )
    assert paths["equity"].name == "equity_RW_X.csv"
    assert paths["trades"].name == "trades_RW_X.csv"

    eq = pd.read_csv(paths["equity"], parse_dates=["Date"]).set_index("Date")
    assert len(eq) == len(random_walk_prices)
    assert eq.index.is_monotonic_increasing

    trades = pd.read_csv(paths["trades"])
    summary = json.loads(paths["summary"].read_text(encoding="utf-8"))
    assert summary["symbol"] == "RW.X"
    assert summary["total_trades"] == len(trades)
    assert summary["portfolio_value"] == pytest.approx(eq["Equity"].iloc[-1])


def test_run_from_payload(tmp_path):
    closes = [10.0, 9.0, 8.0, 9.0, 10.0, 11.0, 10.0, 9.0, 8.0, 7.0]
    payload = {"provider": "finnhub", "data": {"s": "ok", "t": [1_700_000_000 + 3600 * i for i in range(10)], "c": closes}}
    path = tmp_path / "ts.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    paths = run_from_payload(
        path,
        provider="alphavantage",
        symbol="ABC",
        output_dir=tmp_path,
        ind_cfg=IndicatorConfig(sma_fast=2, sma_slow=4),
        bt_cfg=BacktestConfig(symbol="ABC", starting_cash=1000.0),
    )
    summary = json.loads(paths["summary"].read_text(encoding="utf-8"))
    assert summary["total_trades"] == 2
    assert summary["portfolio_value"] == pytest.approx(950.0594995)


def test_unparsable_price_does_not_silence_the_rest_of_the_series(scenario_prices):
    from sma_bt.data_provider import standardize_prices

    raw = pd.Series(list(scenario_prices) * 3, index=pd.date_range("2024-01-01", periods=30, freq="D"), dtype=object)
    raw.iloc[1] = "n/a"
    prices = standardize_prices(raw)
    assert prices.isna().sum() == 1

    result = run_backtest(
        prices,
        ind_cfg=IndicatorConfig(sma_fast=2, sma_slow=4),
        bt_cfg=BacktestConfig(symbol="GAP", starting_cash=1000.0),
    )
    assert result.signals
    assert all(s.index >= 5 for s in result.signals)
    assert result.summary.total_trades >= 1
    assert len(result.equity_curve) == 30
