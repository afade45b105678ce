"""Configuration objects.

Style rules:
- keep signatures stable (no alias chaos)
- prefer explicit field names
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class IndicatorConfig:
    """Moving-average windows (in number of price points)."""

    sma_fast: int = 5
    sma_slow: int = 20

    def __post_init__(self) -> None:
        if self.sma_fast < 1 or self.sma_slow < 1:
            raise ValueError("SMA windows must be >= 1")
        if self.sma_fast >= self.sma_slow:
            raise ValueError(f"sma_fast ({self.sma_fast}) must be < sma_slow ({self.sma_slow})")

    @classmethod
    def from_params_dict(cls, d: dict) -> "IndicatorConfig":
        """Create IndicatorConfig from an optimizer-style params dict.

        Keys may be PascalCase (e.g., FastWindow). Unknown keys are ignored.
        """
        mapping = {
            "FastWindow": "sma_fast",
            "SlowWindow": "sma_slow",
            "sma_fast": "sma_fast",
            "sma_slow": "sma_slow",
        }
        kwargs = {}
        for k, v in (d or {}).items():
            if k in mapping:
                kwargs[mapping[k]] = int(v)
        return cls(**kwargs)


@dataclass(frozen=True)
class CostConfig:
    """Execution costs and position sizing."""

    # Fraction added to the quote on buys and removed on sells.
    slippage_rate: float = 0.001

    # Flat fee per fill, as a fraction of the executed price.
    fee_rate: float = 0.0005

    # Share of current cash committed by each buy.
    buy_cash_fraction: float = 0.5

    @classmethod
    def from_params_dict(cls, d: dict) -> "CostConfig":
        mapping = {
            "SlippagePct": "slippage_rate",
            "FeePct": "fee_rate",
            "BuyCashFraction": "buy_cash_fraction",
            "slippage_rate": "slippage_rate",
            "fee_rate": "fee_rate",
            "buy_cash_fraction": "buy_cash_fraction",
        }
        kwargs = {}
        for k, v in (d or {}).items():
            if k in mapping:
                kwargs[mapping[k]] = float(v)
        return cls(**kwargs)


@dataclass(frozen=True)
class BacktestConfig:
    """Backtest run configuration.

    Notes:
    - periods are treated as trading-day equivalents regardless of the bar
      interval, so CAGR/Sharpe annualize with `periods_per_year`.
    """

    symbol: str = "AAPL"
    starting_cash: float = 100_000.0
    risk_free_rate: float = 0.0
    periods_per_year: int = 252


@dataclass(frozen=True)
class ProviderConfig:
    """Where prices come from and how responses are cached."""

    primary_provider: str = "yfinance"
    redis_url: Optional[str] = None
    cache_ttl_seconds: int = 60

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ProviderConfig":
        """Read PRIMARY_DATA_PROVIDER, REDIS_URL and CACHE_TTL_SECONDS."""
        env = os.environ if env is None else env
        ttl = env.get("CACHE_TTL_SECONDS")
        return cls(
            primary_provider=(env.get("PRIMARY_DATA_PROVIDER") or "yfinance").lower(),
            redis_url=env.get("REDIS_URL") or None,
            cache_ttl_seconds=int(ttl) if ttl else 60,
        )
