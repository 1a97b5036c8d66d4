# src/perp_orders/core/oms/submitter.py
from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Optional

from perp_orders.core.errors import (
    OrderPipelineError,
    SignerError,
    SignerUnavailableError,
    SubmissionAbandonedError,
    TimedOutError,
    ValidationError,
)
from perp_orders.core.models.enums import MarketPriceMode
from perp_orders.core.models.order import Order, OrderDraft, SignedOrderRequest
from perp_orders.core.oms.events import OrderBus
from perp_orders.core.oms.parser import parse_order
from perp_orders.core.oms.preflight import preflight_draft
from perp_orders.core.oms.state_machine import SubmissionAttempt, SubmissionState
from perp_orders.core.risk.balances import BalanceSource
from perp_orders.exchanges.base.signer import WalletSigner
from perp_orders.exchanges.matching.rest import OrderServiceREST

DEFAULT_SUBMIT_TIMEOUT_SEC = 30.0


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    attempt_id: int
    state: SubmissionState
    order: Optional[Order] = None
    error: Optional[OrderPipelineError] = None

    @property
    def ok(self) -> bool:
        return self.state == SubmissionState.SUCCEEDED and self.order is not None

    @property
    def message(self) -> str:
        """Text for the order form."""
        if self.ok:
            return f"Order {self.order.id} placed"
        if self.error is not None:
            return self.error.user_message()
        return "Order was not placed"


class OrderSubmitter:
    """
    Draft -> sign -> POST -> publish.

    Responsibilities:
      ✔ build the canonical message once per attempt (sync, before any await)
      ✔ obtain exactly one signature for that exact string
      ✔ send the signed fields unchanged, bounded by submit_timeout
      ✔ turn every documented failure into a SubmissionResult
      ✔ publish the created Order on the OrderBus

    ❌ no automatic retry (would re-sign and risk a duplicate order)
    """

    def __init__(
        self,
        *,
        rest: OrderServiceREST,
        signer: WalletSigner,
        bus: OrderBus,
        market_price_mode: MarketPriceMode = MarketPriceMode.REFERENCE,
        balances: BalanceSource | None = None,
        submit_timeout: float = DEFAULT_SUBMIT_TIMEOUT_SEC,
        logger: logging.Logger | None = None,
    ) -> None:
        self.rest = rest
        self.signer = signer
        self.bus = bus
        self.market_price_mode = MarketPriceMode(market_price_mode)
        self.balances = balances
        self.submit_timeout = float(submit_timeout)
        self.logger = logger or logging.getLogger(__name__)

        self._ids = itertools.count(1)
        self._current: SubmissionAttempt | None = None

    # ------------------------------------------------------------------
    # attempt tracking
    # ------------------------------------------------------------------
    @property
    def current(self) -> SubmissionAttempt | None:
        return self._current

    def abandon(self) -> bool:
        """
        Called when the draft is cleared or the view goes away.

        Only an attempt that has not reached Submitting can be abandoned; a
        signature arriving afterwards is dropped.
        """
        a = self._current
        if a is None or a.state not in (SubmissionState.IDLE, SubmissionState.SIGNING):
            return False
        a.abandon()
        self.logger.info("[OMS][SUBMIT] attempt=%d abandoned in %s", a.attempt_id, a.state.value)
        return True

    def _finish(self, attempt: SubmissionAttempt) -> SubmissionResult:
        return SubmissionResult(
            attempt_id=attempt.attempt_id,
            state=attempt.state,
            order=attempt.order,
            error=attempt.error,
        )

    def _fail(self, attempt: SubmissionAttempt, error: OrderPipelineError) -> SubmissionResult:
        attempt.fail(error)
        self.logger.warning(
            "[OMS][SUBMIT] attempt=%d failed: %s: %s",
            attempt.attempt_id, type(error).__name__, error.user_message(),
        )
        return self._finish(attempt)

    # ------------------------------------------------------------------
    # submit
    # ------------------------------------------------------------------
    async def submit(self, draft: OrderDraft) -> SubmissionResult:
        # a newer submit supersedes a signature still pending
        self.abandon()

        attempt = SubmissionAttempt(attempt_id=next(self._ids))
        self._current = attempt

        # 1) preflight: codec + builder + balance (sync, nothing signed yet)
        try:
            message = preflight_draft(
                draft,
                market_price_mode=self.market_price_mode,
                balances=self.balances,
            )
        except ValidationError as e:
            return self._fail(attempt, e)

        attempt.message = message
        attempt.canonical = message.canonical()

        conn = self.signer.connection()
        if not conn.usable:
            return self._fail(attempt, SignerUnavailableError())
        owner = str(conn.address)

        # 2) signing
        attempt.advance(SubmissionState.SIGNING)
        self.logger.info("[OMS][SUBMIT] attempt=%d signing %s", attempt.attempt_id, attempt.canonical)

        try:
            signature = await self.signer.sign_message(attempt.canonical)
        except SignerError as e:
            return self._fail(attempt, e)
        except Exception as e:
            self.logger.exception("[OMS][SUBMIT] attempt=%d signer raised", attempt.attempt_id)
            return self._fail(attempt, SignerError(f"wallet error: {e}"))

        if attempt.abandoned:
            return self._fail(attempt, SubmissionAbandonedError())

        if not signature:
            return self._fail(attempt, SignerError("wallet returned an empty signature"))

        after = self.signer.connection()
        if not after.usable or str(after.address).lower() != owner.lower():
            return self._fail(attempt, SignerError("wallet account changed while signing"))

        request = SignedOrderRequest(
            user_id=owner,
            message=message,
            signature=signature,
            canonical=attempt.canonical,
        )
        attempt.signature = signature

        # 3) submitting
        attempt.advance(SubmissionState.SUBMITTING)
        self.logger.info(
            "[OMS][SUBMIT] attempt=%d POST pair=%s amount=%d price=%s side=%s sig=%s...",
            attempt.attempt_id, request.pair_id, request.amount, request.price,
            request.side, signature[:10],
        )

        try:
            raw = await asyncio.wait_for(
                asyncio.to_thread(self.rest.place_order, request),
                timeout=self.submit_timeout,
            )
            order = parse_order(raw)
        except asyncio.TimeoutError:
            return self._fail(
                attempt,
                TimedOutError(f"no response within {self.submit_timeout:.0f}s"),
            )
        except OrderPipelineError as e:
            return self._fail(attempt, e)

        # 4) success -> registry (via bus)
        attempt.succeed(order)
        self.logger.info("[OMS][SUBMIT] attempt=%d accepted order_id=%s", attempt.attempt_id, order.id)
        self.bus.publish(order)

        return self._finish(attempt)
