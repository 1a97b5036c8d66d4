# src/perp_orders/exchanges/wallet/local_signer.py
from __future__ import annotations

import logging

from eth_account import Account
from eth_account.messages import encode_defunct

from perp_orders.core.errors import SignerError, SignerUnavailableError
from perp_orders.exchanges.base.signer import WalletConnection

log = logging.getLogger(__name__)


def _hex(sig: bytes) -> str:
    h = sig.hex()
    return h if h.startswith("0x") else "0x" + h


def recover_signer(message: str, signature: str) -> str:
    """Address that produced an EIP-191 personal_sign signature over message."""
    return Account.recover_message(encode_defunct(text=message), signature=signature)


class LocalAccountSigner:
    """
    Private-key signer with the same contract as a browser wallet.

    Produces EIP-191 (personal_sign) signatures over the UTF-8 message, as
    0x-prefixed hex.
    """

    def __init__(self, private_key: str | None = None):
        if private_key:
            try:
                self.account = Account.from_key(private_key)
            except Exception as e:
                raise SignerUnavailableError(f"invalid private key: {type(e).__name__}") from e
            self.address: str | None = self.account.address
        else:
            self.account = None
            self.address = None

    def connection(self) -> WalletConnection:
        return WalletConnection(address=self.address, is_connected=self.account is not None)

    def disconnect(self) -> None:
        self.account = None
        self.address = None

    async def sign_message(self, message: str) -> str:
        if self.account is None:
            raise SignerUnavailableError()

        try:
            signed = self.account.sign_message(encode_defunct(text=message))
        except Exception as e:
            raise SignerError(f"signing failed: {e}") from e

        sig = _hex(signed.signature)
        log.debug("[WALLET] signed %d bytes sig=%s...", len(message), sig[:10])
        return sig
