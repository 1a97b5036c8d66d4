# src/perp_orders/core/risk/balances.py
from __future__ import annotations

from typing import Protocol

from perp_orders.core.utils.fixed_point import LOT_SCALE


class BalanceSource(Protocol):
    """
    Authoritative balance lookup (ledger / account service).

    Returns available balance in lots for an asset symbol ("USDC", "ETH").
    """
    def available(self, asset: str) -> int: ...


def required_quote_lots(amount: int, price: int) -> int:
    """
    Quote needed for a buy: amount * price / 10^6, rounded up.

    1.5 ETH @ 3245.67 -> 1_500_000 * 3_245_670_000 / 10^6 = 4_868_505_000 lots
    """
    num = int(amount) * int(price)
    return -(-num // LOT_SCALE)
