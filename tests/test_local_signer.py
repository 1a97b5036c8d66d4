import pytest

from perp_orders.core.errors import SignerUnavailableError
from perp_orders.exchanges.wallet.local_signer import LocalAccountSigner, recover_signer

# well-known throwaway test key (hardhat account #0)
TEST_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

CANONICAL = '{"pair_id":"ETH/USDC","amount":1500000,"price":3245670000,"side":true}'


def test_connection_reports_address():
    s = LocalAccountSigner(TEST_KEY)
    conn = s.connection()
    assert conn.is_connected
    assert conn.address == TEST_ADDRESS


@pytest.mark.asyncio
async def test_signature_recovers_to_owner_over_exact_string():
    s = LocalAccountSigner(TEST_KEY)
    sig = await s.sign_message(CANONICAL)

    assert sig.startswith("0x")
    assert len(sig) == 2 + 65 * 2
    assert recover_signer(CANONICAL, sig) == TEST_ADDRESS
    # any byte change in the message breaks verification
    assert recover_signer(CANONICAL.replace(":true", ": true"), sig) != TEST_ADDRESS


@pytest.mark.asyncio
async def test_signing_is_deterministic():
    s = LocalAccountSigner(TEST_KEY)
    assert await s.sign_message(CANONICAL) == await s.sign_message(CANONICAL)


@pytest.mark.asyncio
async def test_disconnected_signer_raises_unavailable():
    s = LocalAccountSigner()
    assert not s.connection().usable
    with pytest.raises(SignerUnavailableError):
        await s.sign_message(CANONICAL)


def test_invalid_key():
    with pytest.raises(SignerUnavailableError):
        LocalAccountSigner("0x1234")
