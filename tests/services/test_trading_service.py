"""
Tests for the trading service facade: wallet-scoped swaps and transfers.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from tradebot.core.recovery.errors import WalletNotFoundError
from tradebot.core.swap.models import SwapRequest
from tradebot.core.wallet import InMemoryWalletStore, KeyCipher, WalletManager
from tradebot.services.trading import TradingService


class RecordingIntegration:
    """Integration double that records overlapping sends."""

    def __init__(self, log, network, signer):
        self.log = log
        self.network = network
        self.signer = signer

    async def send_asset(self, asset, to_address, amount):
        self.log.append(("start", amount))
        await asyncio.sleep(0.01)
        self.log.append(("end", amount))
        return {"amount": amount, "from": self.signer.address}

    async def stream_swap(self, request):
        self.log.append(("stream", request.from_token))
        yield "PREPARING"
        yield "CONFIRMED"


@pytest.fixture
def wallets():
    return WalletManager(store=InMemoryWalletStore(), cipher=KeyCipher("service-test-secret"))


@pytest.fixture
def calls():
    return []


@pytest.fixture
def service(wallets, calls):
    def factory(network=None, signer=None):
        return RecordingIntegration(calls, network, signer)

    return TradingService(wallets=wallets, integration_factory=factory)


@pytest.mark.asyncio
async def test_sends_from_one_wallet_are_serialized(service, calls, private_key):
    await service.import_wallet("user-1", private_key)

    await asyncio.gather(
        service.send_asset("user-1", "MON", "0x" + "11" * 20, "1"),
        service.send_asset("user-1", "MON", "0x" + "11" * 20, "2"),
    )

    assert [event for event, _ in calls] == ["start", "end", "start", "end"]


@pytest.mark.asyncio
async def test_wallet_locks_are_dropped_once_released(service, calls, private_key):
    await service.import_wallet("user-1", private_key)
    request = SwapRequest(from_token="MON", to_token="USDC", amount_in="1", network="MONAD")

    await asyncio.gather(
        service.send_asset("user-1", "MON", "0x" + "11" * 20, "1"),
        service.send_asset("user-1", "MON", "0x" + "11" * 20, "2"),
    )
    assert service._locks == {}

    [event async for event in service.stream_swap("user-1", request)]
    assert service._locks == {}
    assert service._lock_users == {}


@pytest.mark.asyncio
async def test_send_uses_the_owners_key(service, private_key, signer):
    await service.import_wallet("user-1", private_key)

    result = await service.send_asset("user-1", "MON", "0x" + "11" * 20, "1")

    assert result["from"] == signer.address


@pytest.mark.asyncio
async def test_send_without_wallet_fails(service, calls):
    with pytest.raises(WalletNotFoundError):
        await service.send_asset("nobody", "MON", "0x" + "11" * 20, "1")
    assert calls == []


@pytest.mark.asyncio
async def test_stream_swap_yields_integration_events(service, calls, private_key):
    await service.import_wallet("user-1", private_key)
    request = SwapRequest(from_token="MON", to_token="USDC", amount_in="1", network="MONAD")

    events = [event async for event in service.stream_swap("user-1", request)]

    assert events == ["PREPARING", "CONFIRMED"]
    assert calls == [("stream", "MON")]


@pytest.mark.asyncio
async def test_execute_swap_builds_integration_for_request_network(wallets, private_key, signer):
    integration = MagicMock()
    integration.swap_exact_in = AsyncMock(return_value="receipt")
    factory = MagicMock(return_value=integration)
    service = TradingService(wallets=wallets, integration_factory=factory)
    await service.import_wallet("user-1", private_key)
    request = SwapRequest(from_token="MON", to_token="USDC", amount_in="1", network="MONAD")

    assert await service.execute_swap("user-1", request) == "receipt"

    network, used_signer = factory.call_args.args
    assert network == "MONAD"
    assert used_signer.address == signer.address
    integration.swap_exact_in.assert_awaited_once_with(request)


@pytest.mark.asyncio
async def test_reads_need_no_wallet(wallets):
    integration = MagicMock()
    integration.quote = AsyncMock(return_value="quote")
    integration.scan_all_tokens = AsyncMock(return_value=[])
    factory = MagicMock(return_value=integration)
    service = TradingService(wallets=wallets, integration_factory=factory)

    assert await service.quote("MON", "USDC", "1", "MONAD") == "quote"
    assert await service.scan_all_tokens("0x" + "22" * 20, "MONAD", include_zero_balances=True) == []

    factory.assert_called_with("MONAD")
    integration.scan_all_tokens.assert_awaited_once_with("0x" + "22" * 20, True)


def test_resolve_token_uses_network_table(service):
    resolution = service.resolve_token("usdc", "MONAD")
    assert resolution.verified is True
    assert resolution.decimals == 6


@pytest.mark.asyncio
async def test_wallet_lifecycle(service):
    created = await service.generate_wallet("user-1", "Main")
    handles = await service.list_wallets("user-1")

    assert [h.wallet_id for h in handles] == [created.handle.wallet_id]
    assert await service.get_wallet_details("user-1") == created.handle
    assert await service.delete_wallet("user-1", created.handle.wallet_id) is True
    assert await service.list_wallets("user-1") == []
