from __future__ import annotations

from typing import Any
from unittest.mock import Mock

import pytest

from perp_orders.core.errors import SignerUnavailableError
from perp_orders.exchanges.base.signer import WalletConnection
from perp_orders.exchanges.matching.rest import OrderServiceREST

OWNER = "0xAbC0000000000000000000000000000000000001"
OTHER = "0x9990000000000000000000000000000000000002"


def order_json(**overrides: Any) -> dict[str, Any]:
    row = {
        "id": "order_1",
        "user_id": OWNER,
        "pair_id": "ETH/USDC",
        "amount": 1_500_000,
        "filled_amount": 0,
        "price": 3_245_670_000,
        "side": True,
        "status": "Pending",
        "created_at": 1_700_000_000,
        "updated_at": 1_700_000_000,
    }
    row.update(overrides)
    return row


class FakeSigner:
    """In-memory wallet: records every message it is asked to sign."""

    def __init__(self, address: str | None = OWNER, signature: str = "0x" + "ab" * 65):
        self.address = address
        self.signature = signature
        self.signed: list[str] = []
        self.error: Exception | None = None

    def connection(self) -> WalletConnection:
        return WalletConnection(address=self.address, is_connected=self.address is not None)

    async def sign_message(self, message: str) -> str:
        if self.address is None:
            raise SignerUnavailableError()
        if self.error is not None:
            raise self.error
        self.signed.append(message)
        return self.signature


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def rest() -> Mock:
    m = Mock(spec=OrderServiceREST)
    m.place_order.return_value = order_json()
    m.list_orders.return_value = {"orders": [order_json()]}
    return m
