"""
Shared fixtures: an in-memory JSON-RPC double and a real signing key.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from unittest.mock import AsyncMock

import pytest
from eth_abi import encode
from eth_account import Account
from eth_utils import keccak, to_hex

from tradebot.core.chains.registry import get_network
from tradebot.core.execution import abi
from tradebot.core.execution.executor import TransactionExecutor
from tradebot.core.execution.nonce_manager import NonceManager
from tradebot.providers.rpc import RpcError


TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


class FakeRpc:
    """
    In-memory stand-in for ``RpcClient``.

    Contracts are maps of selector -> response (hex string, callable taking the
    calldata, or an exception to raise). Unregistered calls revert.
    """

    def __init__(self, rpc_url: str = "http://fake-rpc.test"):
        self.rpc_url = rpc_url
        self.contracts: Dict[str, Dict[str, Any]] = {}
        self.native_balances: Dict[str, int] = {}
        self.current_block = 1_000
        self.logs: List[Dict[str, Any]] = []
        self.log_queries: List[Sequence[Optional[str]]] = []
        self.eth_calls: List[Tuple[str, str]] = []
        self.sent: List[str] = []
        self.receipt_status = 1
        self.receipt_logs: List[Dict[str, Any]] = []
        self.pending = False
        self.revert_data: Optional[str] = None

        self.estimate_gas = AsyncMock(return_value=100_000)
        self.gas_price = AsyncMock(return_value=50_000_000_000)
        self.get_transaction_count = AsyncMock(return_value=0)

    # Encoding helpers

    @staticmethod
    def uint(value: int) -> str:
        return "0x" + encode(["uint256"], [value]).hex()

    @staticmethod
    def uint_array(values: Sequence[int]) -> str:
        return "0x" + encode(["uint256[]"], [list(values)]).hex()

    @staticmethod
    def string(value: str) -> str:
        return "0x" + encode(["string"], [value]).hex()

    @staticmethod
    def error_string(reason: str) -> str:
        return "0x08c379a0" + encode(["string"], [reason]).hex()

    # Registration

    def add_token(
        self,
        address: str,
        symbol: str,
        decimals: int,
        balances: Optional[Dict[str, int]] = None,
        name: Optional[str] = None,
        allowance: int = 0,
    ) -> Dict[str, Any]:
        holdings = {owner.lower(): amount for owner, amount in (balances or {}).items()}

        def balance_of(data: str) -> str:
            owner = "0x" + data[-40:]
            return self.uint(holdings.get(owner.lower(), 0))

        handlers = {
            abi.DECIMALS_SELECTOR: self.uint(decimals),
            abi.SYMBOL_SELECTOR: self.string(symbol),
            abi.NAME_SELECTOR: self.string(name or symbol),
            abi.BALANCE_OF_SELECTOR: balance_of,
            abi.ALLOWANCE_SELECTOR: self.uint(allowance),
        }
        self.contracts[address.lower()] = handlers
        return handlers

    def add_router(self, address: str, quote: Callable[[str], str]) -> None:
        self.contracts.setdefault(address.lower(), {})[abi.GET_AMOUNTS_OUT_SELECTOR] = quote

    # RpcClient surface

    async def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        if method == "eth_call" and self.revert_data:
            raise RpcError(3, "execution reverted", self.revert_data)
        return "0x"

    async def read(self, method: str, params: Optional[List[Any]] = None) -> Any:
        return await self.call(method, params)

    async def chain_id(self) -> int:
        return 10143

    async def block_number(self) -> int:
        return self.current_block

    async def get_balance(self, address: str, block: str = "latest") -> int:
        return self.native_balances.get(address.lower(), 0)

    async def eth_call(self, to: str, data: str, from_address: Optional[str] = None) -> str:
        self.eth_calls.append((to.lower(), data[:10]))
        handler = self.contracts.get(to.lower(), {}).get(data[:10].lower())
        if handler is None:
            raise RpcError(3, "execution reverted")
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(data)
        return handler

    async def get_logs(
        self,
        from_block: int,
        to_block: int,
        topics: Sequence[Optional[str]],
        address: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        self.log_queries.append(list(topics))

        def matches(log: Dict[str, Any]) -> bool:
            log_topics = [t.lower() for t in log.get("topics", [])]
            for i, topic in enumerate(topics):
                if topic is None:
                    continue
                if i >= len(log_topics) or log_topics[i] != topic.lower():
                    return False
            return True

        return [log for log in self.logs if matches(log)]

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        if self.pending:
            return None
        return {
            "transactionHash": tx_hash,
            "blockNumber": hex(self.current_block + 1),
            "blockHash": "0x" + "ab" * 32,
            "gasUsed": hex(90_000),
            "effectiveGasPrice": hex(50_000_000_000),
            "status": hex(self.receipt_status),
            "logs": list(self.receipt_logs),
        }

    async def send_raw_transaction(self, raw_tx: str) -> str:
        self.sent.append(raw_tx)
        return to_hex(keccak(hexstr=raw_tx))

    async def close(self) -> None:
        pass

    # Inspection

    def estimated_selectors(self) -> List[str]:
        """Selector of every transaction passed to gas estimation, in order."""
        return [call.args[2][:10] for call in self.estimate_gas.call_args_list]


@pytest.fixture
def fake_rpc() -> FakeRpc:
    return FakeRpc()


@pytest.fixture
def monad():
    return get_network("MONAD")


@pytest.fixture
def megaeth():
    return get_network("MEGAETH")


@pytest.fixture
def private_key() -> str:
    return TEST_PRIVATE_KEY


@pytest.fixture
def signer(private_key):
    return Account.from_key(private_key)


@pytest.fixture
def tx_executor(fake_rpc, monad) -> TransactionExecutor:
    return TransactionExecutor(
        fake_rpc,
        monad.chain_id,
        nonce_manager=NonceManager(fake_rpc),
        confirmation_timeout=0.2,
        poll_interval=0.01,
    )
