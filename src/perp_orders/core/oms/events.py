# src/perp_orders/core/oms/events.py
from __future__ import annotations

import logging
from typing import Callable

from perp_orders.core.models.order import Order

log = logging.getLogger(__name__)

OrderCallback = Callable[[Order], None]


class OrderBus:
    """
    Explicit pub/sub channel for freshly created orders.

    The submitter publishes, the registry (and any view) subscribes.
    Handlers run synchronously in subscription order; a failing handler is
    logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._handlers: list[OrderCallback] = []

    def subscribe(self, handler: OrderCallback) -> Callable[[], None]:
        self._handlers.append(handler)

        def _unsubscribe() -> None:
            try:
                self._handlers.remove(handler)
            except ValueError:
                pass

        return _unsubscribe

    def publish(self, order: Order) -> None:
        for handler in list(self._handlers):
            try:
                handler(order)
            except Exception:
                log.exception("[OMS][BUS] handler failed order_id=%s", order.id)

    def __len__(self) -> int:
        return len(self._handlers)
