# src/perp_orders/core/oms/state_machine.py
from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from perp_orders.core.errors import OrderPipelineError
from perp_orders.core.models.order import Order, OrderMessage


class SubmissionState(str, Enum):
    IDLE = "IDLE"
    SIGNING = "SIGNING"
    SUBMITTING = "SUBMITTING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


TERMINAL: set[SubmissionState] = {SubmissionState.SUCCEEDED, SubmissionState.FAILED}

_ALLOWED: dict[SubmissionState, set[SubmissionState]] = {
    SubmissionState.IDLE: {SubmissionState.SIGNING, SubmissionState.FAILED},
    SubmissionState.SIGNING: {SubmissionState.SUBMITTING, SubmissionState.FAILED},
    SubmissionState.SUBMITTING: {SubmissionState.SUCCEEDED, SubmissionState.FAILED},
    SubmissionState.SUCCEEDED: set(),
    SubmissionState.FAILED: set(),
}


@dataclass(frozen=True)
class Decision:
    allow: bool
    reason: str = ""


def should_apply(current: SubmissionState, incoming: SubmissionState) -> Decision:
    """
    Only forward transitions along Idle -> Signing -> Submitting -> {Succeeded, Failed}.
    - terminal states never move
    - Signing always precedes Submitting
    """
    if current in TERMINAL:
        return Decision(False, f"terminal state: {current.value} -> {incoming.value}")

    if incoming not in _ALLOWED[current]:
        return Decision(False, f"illegal transition: {current.value} -> {incoming.value}")

    return Decision(True, "ok")


class IllegalTransition(RuntimeError):
    pass


@dataclass(slots=True)
class SubmissionAttempt:
    """
    One submit attempt. A retry is a new attempt with a freshly built message.
    """

    attempt_id: int
    state: SubmissionState = SubmissionState.IDLE
    message: Optional[OrderMessage] = None
    canonical: str = ""
    signature: str | None = None
    order: Optional[Order] = None
    error: Optional[OrderPipelineError] = None
    abandoned: bool = False
    history: list[SubmissionState] = field(default_factory=lambda: [SubmissionState.IDLE])
    created_ts: float = field(default_factory=time.time)

    def advance(self, incoming: SubmissionState) -> None:
        d = should_apply(self.state, incoming)
        if not d.allow:
            raise IllegalTransition(d.reason)
        self.state = incoming
        self.history.append(incoming)

    def fail(self, error: OrderPipelineError) -> None:
        self.error = error
        self.advance(SubmissionState.FAILED)

    def succeed(self, order: Order) -> None:
        self.order = order
        self.advance(SubmissionState.SUCCEEDED)

    def abandon(self) -> None:
        """Draft cleared / view left: any late signature is discarded."""
        self.abandoned = True

    @property
    def is_final(self) -> bool:
        return self.state in TERMINAL
