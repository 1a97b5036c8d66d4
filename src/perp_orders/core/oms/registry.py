# src/perp_orders/core/oms/registry.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from perp_orders.core.errors import NotFoundError, OrderPipelineError
from perp_orders.core.models.order import Order
from perp_orders.core.oms.events import OrderBus
from perp_orders.core.oms.parser import parse_orders_response
from perp_orders.exchanges.matching.rest import OrderServiceREST

SnapshotListener = Callable[[tuple[Order, ...]], None]


@dataclass(slots=True)
class _OptimisticEntry:
    order: Order
    # latest issued fetch sequence when the order was inserted;
    # responses issued up to this point cannot know about it yet
    issued_seq: int


def _most_recent_first(orders: Iterable[Order]) -> tuple[Order, ...]:
    return tuple(sorted(orders, key=lambda o: (o.created_at, o.id), reverse=True))


class OrderRegistry:
    """
    Client-side source of truth for the signed-in user's orders.

    Rules:
      - every fetch gets an issuance sequence; a response is applied only if
        its sequence is higher than the last applied one (stale responses are
        dropped on arrival, whatever their arrival order)
      - server copies replace local ones by id (server wins)
      - optimistic inserts survive only responses issued before the insert
      - fetch failures are logged and degrade to an empty result; state is kept
      - consumers only get immutable tuples
    """

    def __init__(
        self,
        *,
        rest: OrderServiceREST,
        owner: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.rest = rest
        self.logger = logger or logging.getLogger(__name__)

        self._owner: str | None = owner
        self._orders: tuple[Order, ...] = ()
        self._optimistic: dict[str, _OptimisticEntry] = {}

        self._issued_seq = 0
        self._applied_seq = 0

        self._listeners: list[SnapshotListener] = []

    # ------------------------------------------------------------------
    # owner / lifecycle
    # ------------------------------------------------------------------
    @property
    def owner(self) -> str | None:
        return self._owner

    def bind_owner(self, address: str | None) -> None:
        """Sign-in / account switch. A different owner starts from empty."""
        current = (self._owner or "").lower()
        if (address or "").lower() == current:
            return
        # fences in-flight fetches of the previous owner as well
        self.clear()
        self._owner = address or None

    def clear(self) -> None:
        """Logout / unmount: drop the view; in-flight responses become stale."""
        self._owner = None
        self._optimistic.clear()
        self._applied_seq = self._issued_seq
        self._set_orders(())

    def attach(self, bus: OrderBus) -> Callable[[], None]:
        return bus.subscribe(self.insert_optimistic)

    # ------------------------------------------------------------------
    # read side
    # ------------------------------------------------------------------
    def snapshot(self) -> tuple[Order, ...]:
        return self._orders

    def get(self, order_id: str) -> Optional[Order]:
        for o in self._orders:
            if o.id == order_id:
                return o
        return None

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return _unsubscribe

    def _set_orders(self, orders: tuple[Order, ...]) -> None:
        self._orders = orders
        for listener in list(self._listeners):
            try:
                listener(orders)
            except Exception:
                self.logger.exception("[OMS][REGISTRY] listener failed")

    # ------------------------------------------------------------------
    # optimistic insert
    # ------------------------------------------------------------------
    def insert_optimistic(self, order: Order) -> None:
        """Prepend a just-accepted order before any fetch confirms it."""
        if self._owner and not order.owned_by(self._owner):
            self.logger.warning(
                "[OMS][REGISTRY] skip optimistic insert: order_id=%s owner=%s bound=%s",
                order.id, order.user_id, self._owner,
            )
            return

        self._optimistic[order.id] = _OptimisticEntry(order=order, issued_seq=self._issued_seq)
        rest = tuple(o for o in self._orders if o.id != order.id)
        self._set_orders((order,) + rest)

        self.logger.debug("[OMS][REGISTRY] optimistic insert order_id=%s", order.id)

    # ------------------------------------------------------------------
    # fetch
    # ------------------------------------------------------------------
    async def fetch_all(self, owner: str | None = None) -> tuple[Order, ...]:
        """
        Fetch the full collection and keep the owner's orders, most recent first.

        Returns the registry view after this response (which is the newer
        view if this response turned out stale), or () on failure.
        """
        if owner:
            self.bind_owner(owner)
        owner = self._owner
        if not owner:
            self.logger.debug("[OMS][REGISTRY] fetch skipped: no owner bound")
            return ()

        self._issued_seq += 1
        seq = self._issued_seq

        try:
            payload = await asyncio.to_thread(self.rest.list_orders)
            orders = parse_orders_response(payload)
        except OrderPipelineError as e:
            self.logger.warning("[OMS][REGISTRY] fetch seq=%d failed: %s", seq, e)
            return ()

        if seq <= self._applied_seq:
            self.logger.debug(
                "[OMS][REGISTRY] stale response seq=%d (applied=%d) discarded",
                seq, self._applied_seq,
            )
            return self._orders

        if (self._owner or "").lower() != owner.lower():
            self.logger.debug("[OMS][REGISTRY] response seq=%d for previous owner discarded", seq)
            return self._orders

        mine = [o for o in orders if o.owned_by(owner)]
        self._apply(seq, mine)
        return self._orders

    def _apply(self, seq: int, server_orders: list[Order]) -> None:
        self._applied_seq = seq
        server_ids = {o.id for o in server_orders}

        kept: list[Order] = []
        for oid, entry in list(self._optimistic.items()):
            if oid in server_ids:
                # confirmed: server copy replaces it
                del self._optimistic[oid]
            elif seq <= entry.issued_seq:
                kept.append(entry.order)
            else:
                # response issued after the insert and the server does not list it
                del self._optimistic[oid]

        self._set_orders(_most_recent_first(list(server_orders) + kept))

        self.logger.debug(
            "[OMS][REGISTRY] applied seq=%d orders=%d optimistic=%d",
            seq, len(server_orders), len(kept),
        )

    async def refresh_one(self, order_id: str) -> Order:
        """
        No get-by-id endpoint: refetch everything and select by id.
        Missing id -> NotFoundError (non-fatal for the caller).
        """
        orders = await self.fetch_all()
        for o in orders:
            if o.id == order_id:
                return o
        raise NotFoundError(f"Order {order_id} not found")
