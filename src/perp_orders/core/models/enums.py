from __future__ import annotations
from enum import Enum


class OrderStatus(str, Enum):
    # server renders its enum with Debug formatting -> "Pending"
    PENDING = "Pending"
    MATCHED = "Matched"
    SETTLED = "Settled"
    FILLED = "Filled"
    CANCELED = "Canceled"

    @classmethod
    def parse(cls, value: object) -> "OrderStatus":
        s = str(value or "").strip().lower()
        for st in cls:
            if st.value.lower() == s:
                return st
        raise ValueError(f"unknown order status: {value!r}")


FINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.FILLED, OrderStatus.CANCELED, OrderStatus.SETTLED}
)


class OrderType(str, Enum):
    MARKET = "market"
    LIMIT = "limit"


class MarketPriceMode(str, Enum):
    """
    Which price a market order signs.

    REFERENCE: displayed reference price (observed client behavior)
    ZERO:      price = 0
    OMIT:      no price field in message and body
    """
    REFERENCE = "reference"
    ZERO = "zero"
    OMIT = "omit"
