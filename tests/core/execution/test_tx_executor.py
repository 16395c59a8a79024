"""
Tests for transaction signing, submission and confirmation.
"""

from unittest.mock import AsyncMock

import pytest
from eth_account import Account
from eth_utils import keccak, to_hex

from tradebot.core.execution.models import TransactionStatus
from tradebot.core.execution.nonce_manager import NonceManager
from tradebot.core.execution.tx_builder import TransactionBuilder
from tradebot.core.recovery.errors import (
    DeadlineExpiredError,
    InsufficientFundsError,
    LikelyRevertError,
    PendingTimeoutError,
)
from tradebot.providers.rpc import RpcError


RECIPIENT = "0x1111111111111111111111111111111111111111"


def _transfer(signer, chain_id, amount=10**17):
    return TransactionBuilder.build_native_transfer(
        chain_id=chain_id,
        from_address=signer.address,
        to_address=RECIPIENT,
        amount_wei=amount,
    )


@pytest.mark.asyncio
async def test_estimate_applies_gas_margin(tx_executor, signer, monad):
    estimate = await tx_executor.estimate_gas(_transfer(signer, monad.chain_id))

    assert estimate.raw_estimate == 100_000
    assert estimate.gas_limit == 120_000
    assert estimate.gas_price_wei == 50_000_000_000
    assert estimate.estimated_cost_wei == 120_000 * 50_000_000_000


@pytest.mark.asyncio
async def test_estimate_failure_is_typed(tx_executor, fake_rpc, signer, monad):
    fake_rpc.estimate_gas.side_effect = RpcError(-32000, "insufficient funds for gas * price + value")

    with pytest.raises(InsufficientFundsError):
        await tx_executor.estimate_gas(_transfer(signer, monad.chain_id))


@pytest.mark.asyncio
async def test_submit_signs_for_the_configured_chain(tx_executor, fake_rpc, signer, monad):
    tx = _transfer(signer, monad.chain_id)

    tx_hash = await tx_executor.submit(tx, signer)

    assert tx_hash.startswith("0x")
    assert tx.nonce == 0
    assert Account.recover_transaction(fake_rpc.sent[0]) == signer.address


@pytest.mark.asyncio
async def test_consecutive_submits_use_consecutive_nonces(tx_executor, signer, monad):
    first = _transfer(signer, monad.chain_id)
    second = _transfer(signer, monad.chain_id)

    await tx_executor.submit(first, signer)
    await tx_executor.submit(second, signer)

    assert (first.nonce, second.nonce) == (0, 1)


@pytest.mark.asyncio
async def test_broadcast_failure_releases_nonce(tx_executor, fake_rpc, signer, monad):
    fake_rpc.send_raw_transaction = AsyncMock(side_effect=RpcError(-32000, "nonce too low"))
    tx = _transfer(signer, monad.chain_id)

    with pytest.raises(LikelyRevertError):
        await tx_executor.submit(tx, signer)

    state = tx_executor.nonce_manager.get_state(signer.address, monad.chain_id)
    assert state.reserved_nonces == set()
    assert state.pending_nonce == 0


@pytest.mark.asyncio
async def test_mined_revert_maps_reason_and_keeps_hash(tx_executor, fake_rpc, signer, monad):
    fake_rpc.receipt_status = 0
    fake_rpc.revert_data = fake_rpc.error_string("UniswapV2Router: EXPIRED")

    with pytest.raises(DeadlineExpiredError) as exc_info:
        await tx_executor.execute(_transfer(signer, monad.chain_id), signer)

    assert exc_info.value.tx_hash
    assert exc_info.value.reason == "UniswapV2Router: EXPIRED"
    state = tx_executor.nonce_manager.get_state(signer.address, monad.chain_id)
    assert state.confirmed_nonce == 1


@pytest.mark.asyncio
async def test_confirmed_receipt_is_recorded(tx_executor, fake_rpc, signer, monad):
    result = await tx_executor.execute(_transfer(signer, monad.chain_id), signer)

    assert result.status == TransactionStatus.CONFIRMED
    assert result.is_success
    assert result.block_number == fake_rpc.current_block + 1
    assert result.gas_used == 90_000


@pytest.mark.asyncio
async def test_unmined_transaction_times_out_with_hash(tx_executor, fake_rpc, signer, monad):
    fake_rpc.pending = True

    with pytest.raises(PendingTimeoutError) as exc_info:
        await tx_executor.execute(_transfer(signer, monad.chain_id), signer)

    assert exc_info.value.tx_hash == to_hex(keccak(hexstr=fake_rpc.sent[0]))


@pytest.mark.asyncio
async def test_nonce_release_rolls_back_only_the_top(fake_rpc, monad):
    manager = NonceManager(fake_rpc)
    address = "0x" + "33" * 20

    assert [await manager.get_next_nonce(address, monad.chain_id) for _ in range(3)] == [0, 1, 2]

    await manager.release_nonce(address, monad.chain_id, 1)
    assert manager.get_state(address, monad.chain_id).pending_nonce == 3

    await manager.release_nonce(address, monad.chain_id, 2)
    assert manager.get_state(address, monad.chain_id).pending_nonce == 1
    assert await manager.get_next_nonce(address, monad.chain_id) == 1
