"""
JSON-RPC client for EVM networks.

One ``RpcClient`` per network, shared by the scanner, the quote engine and
the swap executor. Read-only methods go through a retry strategy for
transport failures; ``send_raw_transaction`` never does.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..core.recovery.errors import ProviderUnavailableError, decode_rpc_error
from ..core.recovery.strategies import ExponentialBackoffStrategy, RetryStrategy


logger = logging.getLogger(__name__)


class RpcError(Exception):
    """JSON-RPC error object returned by the node."""

    def __init__(self, code: Optional[int], message: str, data: Any = None):
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data

    @property
    def payload(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "data": self.data}

    def to_trade_error(self, **kwargs: Any):
        return decode_rpc_error(self.payload, **kwargs)


def _to_hex(value: int) -> str:
    return hex(int(value))


def _from_hex(value: Optional[str]) -> int:
    if value in (None, "", "0x"):
        return 0
    return int(value, 16)


class RpcClient:
    """
    Async JSON-RPC client over httpx.

    Responsibilities:
    - Build and post JSON-RPC payloads
    - Raise ``RpcError`` for node errors and ``ProviderUnavailableError`` for
      transport failures
    - Retry read-only calls on transport failures
    """

    def __init__(
        self,
        rpc_url: str,
        client: Optional[httpx.AsyncClient] = None,
        retry: Optional[RetryStrategy] = None,
        timeout: Optional[float] = None,
    ):
        self.rpc_url = rpc_url
        self._client = client or httpx.AsyncClient(timeout=timeout or settings.request_timeout_seconds)
        self._retry = retry or ExponentialBackoffStrategy(
            max_attempts=settings.rpc_max_retries,
            logger=logger,
        )
        self._request_id = 0

    async def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Make a single RPC call (no retry)."""
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": self._request_id,
        }

        try:
            response = await self._client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            result = response.json()
        except (httpx.TransportError, httpx.HTTPStatusError) as e:
            raise ProviderUnavailableError(
                f"RPC endpoint unreachable: {self.rpc_url}",
                reason=str(e),
                details={"method": method},
            ) from e
        except ValueError as e:
            raise ProviderUnavailableError(
                "RPC endpoint returned a non-JSON response",
                reason=str(e),
                details={"method": method},
            ) from e

        if "error" in result and result["error"]:
            error = result["error"]
            raise RpcError(error.get("code"), str(error.get("message", "")), error.get("data"))

        return result.get("result")

    async def read(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Read-only call, retried on provider outages."""
        return await self._retry.execute(lambda: self.call(method, params), operation_name=method)

    async def chain_id(self) -> int:
        return _from_hex(await self.read("eth_chainId"))

    async def block_number(self) -> int:
        return _from_hex(await self.read("eth_blockNumber"))

    async def gas_price(self) -> int:
        return _from_hex(await self.read("eth_gasPrice"))

    async def get_balance(self, address: str, block: str = "latest") -> int:
        return _from_hex(await self.read("eth_getBalance", [address, block]))

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        return _from_hex(await self.read("eth_getTransactionCount", [address, block]))

    async def eth_call(self, to: str, data: str, from_address: Optional[str] = None) -> str:
        call_obj: Dict[str, Any] = {"to": to, "data": data}
        if from_address:
            call_obj["from"] = from_address
        return await self.read("eth_call", [call_obj, "latest"])

    async def estimate_gas(
        self,
        from_address: str,
        to: str,
        data: str = "0x",
        value: int = 0,
    ) -> int:
        call_obj: Dict[str, Any] = {"from": from_address, "to": to, "data": data}
        if value > 0:
            call_obj["value"] = _to_hex(value)
        return _from_hex(await self.read("eth_estimateGas", [call_obj]))

    async def get_logs(
        self,
        from_block: int,
        to_block: int,
        topics: List[Any],
        address: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        flt: Dict[str, Any] = {
            "fromBlock": _to_hex(from_block),
            "toBlock": _to_hex(to_block),
            "topics": topics,
        }
        if address:
            flt["address"] = address
        return await self.read("eth_getLogs", [flt]) or []

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return await self.read("eth_getTransactionReceipt", [tx_hash])

    async def send_raw_transaction(self, raw_tx: str) -> str:
        """Broadcast a signed transaction. Never retried."""
        tx_hash = await self.call("eth_sendRawTransaction", [raw_tx])
        logger.info(f"Transaction submitted: {tx_hash}")
        return tx_hash

    async def close(self) -> None:
        """Close HTTP client."""
        await self._client.aclose()


_clients: Dict[str, RpcClient] = {}


def get_rpc_client(rpc_url: str) -> RpcClient:
    """Shared client per RPC endpoint."""
    client = _clients.get(rpc_url)
    if client is None:
        client = RpcClient(rpc_url)
        _clients[rpc_url] = client
    return client


async def close_rpc_clients() -> None:
    for client in list(_clients.values()):
        await client.close()
    _clients.clear()


__all__ = [
    "RpcClient",
    "RpcError",
    "get_rpc_client",
    "close_rpc_clients",
]
