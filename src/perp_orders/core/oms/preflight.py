# src/perp_orders/core/oms/preflight.py
from __future__ import annotations

import logging
from typing import Optional

from perp_orders.core.errors import InsufficientBalanceError
from perp_orders.core.models.enums import MarketPriceMode
from perp_orders.core.models.order import OrderDraft, OrderMessage, parse_pair_id
from perp_orders.core.oms.message import build
from perp_orders.core.risk.balances import BalanceSource, required_quote_lots
from perp_orders.core.utils.fixed_point import lots_to_decimal

log = logging.getLogger(__name__)


def check_balance(message: OrderMessage, balances: BalanceSource) -> None:
    """
    buy  -> quote >= amount * price
    sell -> base  >= amount

    Buys without a signed price (market, omit/zero mode) skip the quote check.
    """
    base, quote = parse_pair_id(message.pair_id)

    if message.side:
        if not message.price:
            return
        need = required_quote_lots(message.amount, message.price)
        asset = quote
    else:
        need = message.amount
        asset = base

    have = int(balances.available(asset))
    if have < need:
        raise InsufficientBalanceError(
            f"Insufficient {asset}: need {lots_to_decimal(need)}, "
            f"available {lots_to_decimal(max(have, 0))}"
        )


def preflight_draft(
    draft: OrderDraft,
    *,
    market_price_mode: MarketPriceMode = MarketPriceMode.REFERENCE,
    balances: Optional[BalanceSource] = None,
) -> OrderMessage:
    """
    Build the signable message and run local checks.

    Synchronous; raises ValidationError (or subclass) before anything is
    signed or sent.
    """
    message = build(draft, market_price_mode=market_price_mode)

    if balances is not None:
        check_balance(message, balances)
    else:
        log.debug("[OMS][PREFLIGHT] no balance source configured -> skip balance check")

    return message
