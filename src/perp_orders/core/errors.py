# src/perp_orders/core/errors.py
from __future__ import annotations


class OrderPipelineError(Exception):
    """
    Base error for everything the order pipeline surfaces.

    Every failure is scoped to a single pending action (one submit, one fetch);
    none of them is process-fatal.
    """

    default_message = "Order action failed"

    def user_message(self) -> str:
        text = str(self).strip()
        return text or self.default_message


# ----------------------------------------------------------------------
# input
# ----------------------------------------------------------------------
class ValidationError(OrderPipelineError, ValueError):
    default_message = "Invalid order input"


class OutOfRangeError(ValidationError):
    default_message = "Value out of range"


class InsufficientBalanceError(ValidationError):
    default_message = "Insufficient balance"


# ----------------------------------------------------------------------
# wallet
# ----------------------------------------------------------------------
class SignerError(OrderPipelineError):
    default_message = "Wallet signature failed"


class UserRejectedError(SignerError):
    default_message = "Signature request rejected in wallet"


class SignerUnavailableError(SignerError):
    default_message = "Wallet not connected"


# ----------------------------------------------------------------------
# network
# ----------------------------------------------------------------------
class TransportError(OrderPipelineError):
    """
    Network failure or non-2xx response.

    detail keeps the server-provided text verbatim (for display).
    """

    default_message = "Order service unreachable"

    def __init__(self, message: str = "", *, status_code: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

    def user_message(self) -> str:
        if self.detail:
            return self.detail
        return super().user_message()


class TimedOutError(TransportError):
    default_message = "Order service did not respond in time"


class ProtocolError(OrderPipelineError):
    """2xx response with an empty or malformed body."""

    default_message = "Unexpected response from order service"


class NotFoundError(OrderPipelineError):
    default_message = "Order not found"


class SubmissionAbandonedError(OrderPipelineError):
    """The draft was cleared (or the view left) before the signature arrived."""

    default_message = "Order submission abandoned"
