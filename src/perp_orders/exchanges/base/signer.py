# src/perp_orders/exchanges/base/signer.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True, slots=True)
class WalletConnection:
    address: Optional[str] = None
    is_connected: bool = False

    @property
    def usable(self) -> bool:
        return bool(self.is_connected and self.address)


class WalletSigner(Protocol):
    """
    Wallet capability consumed by the submitter.

    sign_message may wait indefinitely for user approval in an external app.
    Failures:
      UserRejectedError      - user declined
      SignerUnavailableError - no connected account
    """

    def connection(self) -> WalletConnection: ...

    async def sign_message(self, message: str) -> str: ...
