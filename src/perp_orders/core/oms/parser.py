# src/perp_orders/core/oms/parser.py
from __future__ import annotations

from typing import Any

from perp_orders.core.errors import ProtocolError, ValidationError
from perp_orders.core.models.enums import OrderStatus
from perp_orders.core.models.order import Order


# ------------------------------------------------------------
# helpers
# ------------------------------------------------------------
def _lots(raw: dict, key: str, default: int | None = None) -> int:
    v = raw.get(key, default)
    # JSON numbers only; 1.0 / "100" / true are not lots
    if isinstance(v, bool) or not isinstance(v, int):
        raise ProtocolError(f"order field {key!r} is not an integer: {v!r}")
    return v


def _ts(raw: dict, key: str) -> int:
    v = raw.get(key)
    if v is None:
        return 0
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ProtocolError(f"order field {key!r} is not a timestamp: {v!r}")
    return int(v)


def _str(raw: dict, key: str) -> str:
    v = raw.get(key)
    if not isinstance(v, str) or not v:
        raise ProtocolError(f"order field {key!r} missing")
    return v


# ------------------------------------------------------------
# main parser
# ------------------------------------------------------------
def parse_order(raw: Any) -> Order:
    """
    Parse one server order JSON object:

      {"id", "user_id", "pair_id", "amount", "filled_amount", "price",
       "side", "status", "created_at", "updated_at"}
    """
    if not isinstance(raw, dict):
        raise ProtocolError(f"order must be a JSON object, got {type(raw).__name__}")

    side = raw.get("side")
    if not isinstance(side, bool):
        raise ProtocolError(f"order field 'side' is not a boolean: {side!r}")

    try:
        status = OrderStatus.parse(raw.get("status"))
    except ValueError as e:
        raise ProtocolError(str(e)) from e

    try:
        return Order(
            id=_str(raw, "id"),
            user_id=_str(raw, "user_id"),
            pair_id=_str(raw, "pair_id"),
            amount=_lots(raw, "amount"),
            filled_amount=_lots(raw, "filled_amount", 0),
            price=_lots(raw, "price", 0),
            side=side,
            status=status,
            created_at=_ts(raw, "created_at"),
            updated_at=_ts(raw, "updated_at"),
        )
    except ValidationError as e:
        # lots out of range / filled > amount: the server sent something invalid
        raise ProtocolError(f"invalid order {raw.get('id')!r}: {e}") from e


def parse_orders_response(payload: Any) -> list[Order]:
    """GET /api/orders -> {"orders": [...]}"""
    if not isinstance(payload, dict):
        raise ProtocolError("orders response must be a JSON object")

    rows = payload.get("orders")
    if not isinstance(rows, list):
        raise ProtocolError("orders response has no 'orders' list")

    return [parse_order(r) for r in rows]
