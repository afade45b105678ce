import pytest

from sma_bt.config import BacktestConfig, CostConfig, IndicatorConfig, ProviderConfig


def test_defaults():
    assert IndicatorConfig() == IndicatorConfig(sma_fast=5, sma_slow=20)
    cost = CostConfig()
    assert cost.slippage_rate == 0.001
    assert cost.fee_rate == 0.0005
    assert cost.buy_cash_fraction == 0.5
    assert BacktestConfig().starting_cash == 100_000.0
    assert BacktestConfig().periods_per_year == 252


@pytest.mark.parametrize("fast,slow", [(5, 5), (10, 3), (0, 4)])
def test_indicator_config_rejects_bad_windows(fast, slow):
    with pytest.raises(ValueError):
        IndicatorConfig(sma_fast=fast, sma_slow=slow)


def test_from_params_dict_ignores_unknown_keys():
    ind = IndicatorConfig.from_params_dict({"FastWindow": "3", "SlowWindow": 12, "Other": 1})
    assert (ind.sma_fast, ind.sma_slow) == (3, 12)
    cost = CostConfig.from_params_dict({"FeePct": "0.001", "Junk": True})
    assert cost.fee_rate == 0.001
    assert cost.slippage_rate == 0.001


def test_provider_config_from_env():
    cfg = ProviderConfig.from_env(
        {"PRIMARY_DATA_PROVIDER": "FinnHub", "REDIS_URL": "redis://r:6379/1", "CACHE_TTL_SECONDS": "15"}
    )
    assert cfg.primary_provider == "finnhub"
    assert cfg.redis_url == "redis://r:6379/1"
    assert cfg.cache_ttl_seconds == 15


def test_provider_config_from_empty_env():
    assert ProviderConfig.from_env({}) == ProviderConfig()
