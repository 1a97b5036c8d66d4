# src/perp_orders/core/models/order.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from perp_orders.core.errors import ValidationError
from perp_orders.core.models.enums import FINAL_STATUSES, OrderStatus, OrderType
from perp_orders.core.utils.fixed_point import accepts_input, is_valid_lots


def parse_pair_id(pair_id: str) -> tuple[str, str]:
    """"ETH/USDC" -> ("ETH", "USDC")"""
    parts = str(pair_id or "").split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValidationError(f"pair must look like BASE/QUOTE, got {pair_id!r}")
    return parts[0], parts[1]


# ----------------------------------------------------------------------
# Order (server-authoritative)
# ----------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Order:
    """
    Order as returned by the matching service.

    Immutable on the client: status / filled_amount are only ever replaced
    wholesale by a newer server copy.
    """

    id: str
    user_id: str
    pair_id: str
    amount: int
    filled_amount: int
    price: int
    side: bool
    status: OrderStatus
    created_at: int
    updated_at: int

    def __post_init__(self) -> None:
        for attr in ("amount", "filled_amount", "price"):
            if not is_valid_lots(getattr(self, attr)):
                raise ValidationError(f"{attr} must be lots, got {getattr(self, attr)!r}")
        if self.filled_amount > self.amount:
            raise ValidationError(
                f"filled_amount {self.filled_amount} exceeds amount {self.amount}"
            )

    @property
    def remaining_amount(self) -> int:
        return self.amount - self.filled_amount

    @property
    def is_filled(self) -> bool:
        return self.filled_amount >= self.amount

    @property
    def is_final(self) -> bool:
        return self.status in FINAL_STATUSES

    @property
    def fill_ratio(self) -> float:
        if not self.amount:
            return 0.0
        return self.filled_amount / self.amount

    def owned_by(self, address: str | None) -> bool:
        if not address:
            return False
        return self.user_id.lower() == str(address).lower()

    def __repr__(self) -> str:
        return (
            f"Order({self.id} {self.pair_id} "
            f"{'BUY' if self.side else 'SELL'} "
            f"amount={self.amount} filled={self.filled_amount} "
            f"price={self.price} status={self.status.value})"
        )


# ----------------------------------------------------------------------
# OrderDraft (mutable UI input)
# ----------------------------------------------------------------------
@dataclass(slots=True)
class OrderDraft:
    pair_id: str
    amount: str = ""
    price: str = ""
    side: bool = True                      # True = buy
    order_type: OrderType = OrderType.LIMIT
    reference_price: str = ""              # displayed market price

    def set_amount(self, text: str) -> bool:
        if not accepts_input(text):
            return False
        self.amount = text
        return True

    def set_price(self, text: str) -> bool:
        if not accepts_input(text):
            return False
        self.price = text
        return True

    def clear(self) -> None:
        self.amount = ""
        self.price = ""


# ----------------------------------------------------------------------
# signable message
# ----------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class OrderMessage:
    pair_id: str
    amount: int
    price: Optional[int]
    side: bool

    def to_dict(self) -> dict[str, Any]:
        # key order is part of the signed bytes
        d: dict[str, Any] = {"pair_id": self.pair_id, "amount": self.amount}
        if self.price is not None:
            d["price"] = self.price
        d["side"] = self.side
        return d

    def canonical(self) -> str:
        """
        Exact string handed to the wallet.

        Compact JSON, fixed key order, integer numbers, JSON booleans:
          {"pair_id":"ETH/USDC","amount":1500000,"price":3245670000,"side":true}
        """
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class SignedOrderRequest:
    """
    Immutable once built: body fields are read from the embedded message,
    so the transmitted values are exactly the signed ones.
    """

    user_id: str
    message: OrderMessage
    signature: str
    canonical: str = field(default="")

    def __post_init__(self) -> None:
        expected = self.message.canonical()
        if not self.canonical:
            object.__setattr__(self, "canonical", expected)
        elif self.canonical != expected:
            raise ValidationError("signed string does not match the order message")

    @property
    def pair_id(self) -> str:
        return self.message.pair_id

    @property
    def amount(self) -> int:
        return self.message.amount

    @property
    def price(self) -> Optional[int]:
        return self.message.price

    @property
    def side(self) -> bool:
        return self.message.side

    def to_payload(self) -> dict[str, Any]:
        """Body for POST /api/orders."""
        body: dict[str, Any] = {
            "user_id": self.user_id,
            "pair_id": self.message.pair_id,
            "amount": self.message.amount,
        }
        if self.message.price is not None:
            body["price"] = self.message.price
        body["side"] = self.message.side
        body["signature"] = self.signature
        return body
