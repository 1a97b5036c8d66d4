# src/perp_orders/pipeline.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from perp_orders.config import Settings
from perp_orders.core.models.order import Order, OrderDraft
from perp_orders.core.oms.events import OrderBus
from perp_orders.core.oms.registry import OrderRegistry
from perp_orders.core.oms.submitter import OrderSubmitter, SubmissionResult
from perp_orders.core.risk.balances import BalanceSource
from perp_orders.exchanges.base.signer import WalletSigner
from perp_orders.exchanges.matching.rest import OrderServiceREST

log = logging.getLogger(__name__)


@dataclass(slots=True)
class OrderPipeline:
    """
    Wiring for one signed-in session: REST client, bus, registry, submitter.

    The registry is subscribed to the bus, so an accepted order shows up
    in the registry without any shared global callback.
    """

    rest: OrderServiceREST
    signer: WalletSigner
    bus: OrderBus
    registry: OrderRegistry
    submitter: OrderSubmitter
    _unsubscribe: Callable[[], None] | None = field(default=None, repr=False)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        signer: WalletSigner,
        balances: BalanceSource | None = None,
        rest: OrderServiceREST | None = None,
    ) -> "OrderPipeline":
        rest = rest or OrderServiceREST(base_url=settings.api_url, timeout=settings.http_timeout)
        bus = OrderBus()
        registry = OrderRegistry(rest=rest)
        submitter = OrderSubmitter(
            rest=rest,
            signer=signer,
            bus=bus,
            market_price_mode=settings.market_price_mode,
            balances=balances,
            submit_timeout=settings.submit_timeout,
        )
        p = cls(rest=rest, signer=signer, bus=bus, registry=registry, submitter=submitter)
        p._unsubscribe = registry.attach(bus)

        log.info(
            "[PIPELINE] ready api=%s submit_timeout=%.0fs market_price=%s",
            settings.api_url, settings.submit_timeout, settings.market_price_mode.value,
        )
        return p

    # ------------------------------------------------------------------
    def _sync_owner(self) -> str | None:
        conn = self.signer.connection()
        address = conn.address if conn.usable else None
        self.registry.bind_owner(address)
        return address

    async def load_orders(self) -> tuple[Order, ...]:
        if not self._sync_owner():
            return ()
        return await self.registry.fetch_all()

    async def place(self, draft: OrderDraft) -> SubmissionResult:
        self._sync_owner()
        return await self.submitter.submit(draft)

    def clear_draft(self, draft: OrderDraft) -> bool:
        """Clear the form; a signature still pending for it is discarded on arrival."""
        draft.clear()
        return self.submitter.abandon()

    async def refresh(self, order_id: str) -> Order:
        self._sync_owner()
        return await self.registry.refresh_one(order_id)

    def close(self) -> None:
        """Unmount / logout."""
        self.submitter.abandon()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.registry.clear()
        self.rest.close()
