"""
Tests for the JSON-RPC client using httpx's mock transport.
"""

import httpx
import pytest

from tradebot.config import settings
from tradebot.core.recovery.errors import ProviderUnavailableError
from tradebot.core.recovery.strategies import ExponentialBackoffStrategy
from tradebot.providers.rpc import RpcClient, RpcError


def _client(handler, attempts=3):
    transport = httpx.MockTransport(handler)
    return RpcClient(
        "http://rpc.test",
        client=httpx.AsyncClient(transport=transport),
        retry=ExponentialBackoffStrategy(max_attempts=attempts, initial_delay=0.001, max_delay=0.002),
    )


@pytest.mark.asyncio
async def test_result_is_decoded():
    def handler(request):
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x3e8"})

    rpc = _client(handler)
    assert await rpc.block_number() == 1000
    await rpc.close()


@pytest.mark.asyncio
async def test_node_error_raises_rpc_error_without_retry():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(
            200,
            json={"jsonrpc": "2.0", "id": 1, "error": {"code": 3, "message": "execution reverted", "data": "0x"}},
        )

    rpc = _client(handler)
    with pytest.raises(RpcError) as exc_info:
        await rpc.eth_call("0x" + "11" * 20, "0x313ce567")
    assert exc_info.value.code == 3
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_transport_failure_retried_then_provider_unavailable():
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    rpc = _client(handler, attempts=3)
    with pytest.raises(ProviderUnavailableError):
        await rpc.get_balance("0x" + "11" * 20)
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_transient_failure_recovers():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(503)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 2, "result": "0x2"})

    rpc = _client(handler)
    assert await rpc.gas_price() == 2
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_send_raw_transaction_is_never_retried():
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ReadTimeout("timed out", request=request)

    rpc = _client(handler, attempts=3)
    with pytest.raises(ProviderUnavailableError):
        await rpc.send_raw_transaction("0x01")
    assert len(calls) == 1


def test_default_retry_is_exponential_backoff(monkeypatch):
    monkeypatch.setattr(settings, "rpc_max_retries", 5)

    client = RpcClient("http://rpc.test", client=httpx.AsyncClient(transport=httpx.MockTransport(lambda request: None)))

    assert isinstance(client._retry, ExponentialBackoffStrategy)
    assert client._retry.config.max_attempts == 5
    assert client._retry.config.jitter is True
