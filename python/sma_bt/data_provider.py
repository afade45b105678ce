"""Data providers (yfinance / CSV / saved provider JSON) and a standardized price schema.

Every provider hands the core the same shape: a float Series named
``Close``, indexed by timestamp, ascending, one value per timestamp.
Upstream JSON layouts are only ever handled by `normalize_timeseries`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from .cache import Cache, get_or_set

logger = logging.getLogger(__name__)

ALPHAVANTAGE_MAX_POINTS = 200


class PriceDataError(ValueError):
    """Upstream price data is missing or malformed."""


@dataclass(frozen=True)
class PriceFrame:
    """Standard price series wrapper."""

    prices: pd.Series  # float closes; index: timestamps (ascending, unique)
    symbol: str


def standardize_prices(prices: pd.Series) -> pd.Series:
    """Float, de-duplicated (keep last) and sorted ascending."""
    out = pd.to_numeric(prices, errors="coerce").astype(float)
    out = out[~out.index.duplicated(keep="last")].sort_index()
    out.name = "Close"
    n_missing = int(out.isna().sum())
    if n_missing:
        logger.warning("%d of %d prices are missing or unparsable", n_missing, len(out))
    return out


def _pick_close_column(df: pd.DataFrame) -> pd.Series:
    # yfinance can return MultiIndex columns depending on options/version.
    if isinstance(df.columns, pd.MultiIndex):
        tickers = list(dict.fromkeys(df.columns.get_level_values(-1)))
        if len(tickers) == 1:
            # single ticker → drop ticker level
            df = df.copy()
            df.columns = df.columns.get_level_values(0)
        else:
            # multiple tickers → keep only the first ticker's fields
            df = df.xs(tickers[0], axis=1, level=-1, drop_level=True)

    cols = {str(c).strip().lower(): c for c in df.columns}
    for cand in ("close", "adj close", "adjclose", "price"):
        if cand in cols:
            return df[cols[cand]]
    raise PriceDataError(f"No close/price column among {list(df.columns)}")


def normalize_timeseries(provider: str, payload: Any) -> pd.Series:
    """Turn an upstream time-series JSON payload into the standard Series.

    Supported shapes:
    - finnhub:      {"t": [epoch seconds...], "c": [closes...]}
    - twelvedata:   {"values": [{"datetime": ..., "close": ...}, ...]}
    - alphavantage: {"Time Series (60min)": {ts: {"4. close": ...}, ...}}
    """
    name = (provider or "").lower()
    if not isinstance(payload, dict):
        raise PriceDataError(f"{name} payload must be a JSON object")

    if name == "finnhub":
        t, c = payload.get("t"), payload.get("c")
        if not t or not c or len(t) != len(c):
            raise PriceDataError(f"finnhub payload has no candle data (s={payload.get('s')!r})")
        s = pd.Series(list(c), index=pd.to_datetime(list(t), unit="s", utc=True))

    elif name == "twelvedata":
        values = payload.get("values")
        if not values:
            raise PriceDataError(f"twelvedata payload has no values ({payload.get('message', '')})")
        s = pd.Series(
            [v["close"] for v in values],
            index=pd.to_datetime([v["datetime"] for v in values]),
        )

    elif name == "alphavantage":
        key = next(
            (k for k in payload if "time series" in k.lower().replace("_", " ")),
            None,
        )
        if key is None or not payload[key]:
            raise PriceDataError("alphavantage payload has no time series block")
        items = payload[key]
        s = pd.Series(
            [row["4. close"] for row in items.values()],
            index=pd.to_datetime(list(items.keys())),
        )
        s = standardize_prices(s).iloc[-ALPHAVANTAGE_MAX_POINTS:]

    else:
        raise PriceDataError(f"unknown provider: {provider!r}")

    out = standardize_prices(s)
    logger.debug("normalized %d %s points", len(out), name)
    return out


class YfinanceProvider:
    """Fetch closes from yfinance.

    Notes:
    - intraday (interval < 1d) has a limited lookback; default is daily.
    - pass a cache to reuse responses across runs (keyed by all arguments).
    """

    def __init__(self, cache: Optional[Cache] = None, ttl: int = 60):
        self.cache = cache
        self.ttl = ttl

    def fetch(
        self,
        symbol: str,
        start: str,
        end: str,
        interval: str = "1d",
        auto_adjust: bool = False,
    ) -> PriceFrame:
        key = f"yfinance:timeseries:{symbol}:{start}:{end}:{interval}:{int(auto_adjust)}"

        def _download() -> dict:
            import yfinance as yf  # local import to keep dependency optional in some environments

            df = yf.download(
                tickers=symbol,
                start=start,
                end=end,
                interval=interval,
                auto_adjust=auto_adjust,
                progress=False,
            )
            if df is None or len(df) == 0:
                raise RuntimeError(f"yfinance returned empty data for symbol={symbol}")
            close = _pick_close_column(df)
            return {"t": [ts.isoformat() for ts in pd.DatetimeIndex(close.index)], "c": [float(v) for v in close]}

        raw = get_or_set(self.cache, key, self.ttl, _download)
        prices = standardize_prices(pd.Series(raw["c"], index=pd.to_datetime(raw["t"])))
        return PriceFrame(prices=prices, symbol=symbol)


class CsvProvider:
    """Load a price series from a CSV file."""

    def fetch(
        self,
        csv_path: str | Path,
        symbol: str,
        datetime_col: str = "Date",
        price_col: Optional[str] = None,
    ) -> PriceFrame:
        path = Path(csv_path)
        if not path.exists():
            raise FileNotFoundError(str(path))

        df = pd.read_csv(path)
        if datetime_col not in df.columns:
            # try common alternatives
            for cand in ["Datetime", "datetime", "date", "timestamp", "Time", "time"]:
                if cand in df.columns:
                    datetime_col = cand
                    break

        if datetime_col not in df.columns:
            raise PriceDataError(f"CSV must contain a datetime column. Tried '{datetime_col}' and common aliases.")

        df[datetime_col] = pd.to_datetime(df[datetime_col])
        df = df.set_index(datetime_col)

        close = df[price_col] if price_col else _pick_close_column(df)
        return PriceFrame(prices=standardize_prices(close), symbol=symbol)


class JsonPayloadProvider:
    """Load a saved upstream payload (finnhub / twelvedata / alphavantage)."""

    def fetch(self, path: str | Path, provider: str, symbol: str) -> PriceFrame:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(str(path))
        with path.open(encoding="utf-8") as fh:
            payload = json.load(fh)
        # Saved proxy responses wrap the raw payload: {"provider": ..., "data": {...}}
        if isinstance(payload, dict) and "data" in payload and isinstance(payload["data"], dict):
            provider = payload.get("provider") or provider
            payload = payload["data"]
        return PriceFrame(prices=normalize_timeseries(provider, payload), symbol=symbol)
