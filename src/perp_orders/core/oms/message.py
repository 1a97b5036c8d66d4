# src/perp_orders/core/oms/message.py
from __future__ import annotations

from perp_orders.core.errors import ValidationError
from perp_orders.core.models.enums import MarketPriceMode, OrderType
from perp_orders.core.models.order import OrderDraft, OrderMessage, parse_pair_id
from perp_orders.core.utils.fixed_point import decimal_to_lots


def _market_price(draft: OrderDraft, mode: MarketPriceMode) -> int | None:
    if mode == MarketPriceMode.OMIT:
        return None
    if mode == MarketPriceMode.ZERO:
        return 0

    # REFERENCE: sign what the user is looking at
    ref = draft.reference_price or draft.price
    price = decimal_to_lots(ref)
    if price <= 0:
        raise ValidationError("market reference price is not available")
    return price


def build(
    draft: OrderDraft,
    *,
    market_price_mode: MarketPriceMode = MarketPriceMode.REFERENCE,
) -> OrderMessage:
    """
    OrderDraft -> OrderMessage.

    Quantization happens in the codec; nothing here rounds. Raises
    ValidationError before any signer / network call.
    """
    parse_pair_id(draft.pair_id)

    if not isinstance(draft.side, bool):
        raise ValidationError(f"side must be a boolean, got {draft.side!r}")

    amount = decimal_to_lots(draft.amount)
    if amount <= 0:
        raise ValidationError("amount must be greater than zero")

    order_type = OrderType(draft.order_type)
    if order_type == OrderType.LIMIT:
        price: int | None = decimal_to_lots(draft.price)
        if price <= 0:
            raise ValidationError("price must be greater than zero")
    else:
        price = _market_price(draft, MarketPriceMode(market_price_mode))

    return OrderMessage(
        pair_id=draft.pair_id,
        amount=amount,
        price=price,
        side=draft.side,
    )


def canonical_message(draft: OrderDraft, **kwargs) -> str:
    return build(draft, **kwargs).canonical()
