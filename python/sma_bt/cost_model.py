"""Slippage + proportional fee cost model."""

from __future__ import annotations

from dataclasses import dataclass

from .config import CostConfig
from .types import BUY, SELL


@dataclass(frozen=True)
class Execution:
    price: float
    fee: float


class SlippageFeeModel:
    """Costs:
    - slippage: buys fill above the quote, sells below it
    - fee: one flat charge per fill, proportional to the executed price
    """

    def __init__(self, cfg: CostConfig):
        self.cfg = cfg

    def execution(self, side: str, quote: float) -> Execution:
        """Return the executed price and fee for a fill at `quote`."""
        side_u = side.upper()
        if side_u == BUY:
            price = float(quote) * (1.0 + float(self.cfg.slippage_rate))
        elif side_u == SELL:
            price = float(quote) * (1.0 - float(self.cfg.slippage_rate))
        else:
            raise ValueError(f"unknown side: {side!r}")
        return Execution(price=price, fee=price * float(self.cfg.fee_rate))
