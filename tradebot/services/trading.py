"""
Trading service: the operations exposed to chat and HTTP callers.

Wires the wallet manager to per-network chain integrations. Swaps and
transfers from the same wallet are serialized so two submissions never race
for a nonce.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, List, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..core.chains.integration import ChainIntegration, get_chain_integration
from ..core.execution.models import TransferReceipt
from ..core.swap.models import SwapEvent, SwapQuote, SwapReceipt, SwapRequest
from ..core.wallet import GeneratedWallet, WalletHandle, WalletManager
from ..types.portfolio import TokenBalance
from .token_resolution import Resolution
from .token_resolution import resolve_token as _resolve_token


logger = logging.getLogger(__name__)

IntegrationFactory = Callable[..., ChainIntegration]


class TradingService:
    def __init__(
        self,
        wallets: Optional[WalletManager] = None,
        integration_factory: Optional[IntegrationFactory] = None,
    ):
        self._wallets = wallets
        self._integration_factory = integration_factory or get_chain_integration
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @property
    def wallets(self) -> WalletManager:
        # Built lazily so read-only use works without an encryption secret
        if self._wallets is None:
            self._wallets = WalletManager()
        return self._wallets

    @asynccontextmanager
    async def _wallet_lock(self, address: str):
        """Serialize sends per wallet; the lock is dropped once nobody holds or awaits it."""
        key = address.lower()
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if self._lock_users[key] == 0:
                del self._lock_users[key]
                del self._locks[key]

    async def _signer(self, owner_id: str, wallet_id: Optional[str]) -> LocalAccount:
        handle = await self.wallets.get_wallet_details(owner_id, wallet_id)
        return Account.from_key(await self.wallets.reveal(handle.wallet_id))

    # Reads

    def resolve_token(self, symbol_or_address: str, network: Optional[str] = None) -> Resolution:
        return _resolve_token(symbol_or_address, network)

    async def scan_all_tokens(
        self,
        wallet_address: str,
        network: Optional[str] = None,
        include_zero_balances: bool = False,
    ) -> List[TokenBalance]:
        integration = self._integration_factory(network)
        return await integration.scan_all_tokens(wallet_address, include_zero_balances)

    async def get_token_balance(
        self,
        token_address: str,
        wallet_address: str,
        network: Optional[str] = None,
    ) -> TokenBalance:
        integration = self._integration_factory(network)
        return await integration.get_token_balance(token_address, wallet_address)

    async def quote(
        self,
        from_token: str,
        to_token: str,
        amount: str,
        network: Optional[str] = None,
    ) -> SwapQuote:
        integration = self._integration_factory(network)
        return await integration.quote(from_token, to_token, amount)

    # Swaps and transfers

    async def execute_swap(
        self,
        owner_id: str,
        request: SwapRequest,
        wallet_id: Optional[str] = None,
    ) -> SwapReceipt:
        signer = await self._signer(owner_id, wallet_id)
        integration = self._integration_factory(request.network, signer)
        async with self._wallet_lock(signer.address):
            return await integration.swap_exact_in(request)

    async def stream_swap(
        self,
        owner_id: str,
        request: SwapRequest,
        wallet_id: Optional[str] = None,
    ) -> AsyncIterator[SwapEvent]:
        signer = await self._signer(owner_id, wallet_id)
        integration = self._integration_factory(request.network, signer)
        async with self._wallet_lock(signer.address):
            events = integration.stream_swap(request)
            try:
                async for event in events:
                    yield event
            finally:
                await events.aclose()

    async def send_asset(
        self,
        owner_id: str,
        asset: str,
        to_address: str,
        amount: str,
        network: Optional[str] = None,
        wallet_id: Optional[str] = None,
    ) -> TransferReceipt:
        signer = await self._signer(owner_id, wallet_id)
        integration = self._integration_factory(network, signer)
        async with self._wallet_lock(signer.address):
            return await integration.send_asset(asset, to_address, amount)

    # Wallets

    async def generate_wallet(self, owner_id: str, name: str = "Default Wallet") -> GeneratedWallet:
        return await self.wallets.generate(owner_id, name)

    async def import_wallet(self, owner_id: str, private_key: str, name: str = "Imported Wallet") -> WalletHandle:
        return await self.wallets.import_wallet(owner_id, private_key, name)

    async def get_wallet_details(self, owner_id: str, wallet_id: Optional[str] = None) -> WalletHandle:
        return await self.wallets.get_wallet_details(owner_id, wallet_id)

    async def list_wallets(self, owner_id: str) -> List[WalletHandle]:
        return await self.wallets.list(owner_id)

    async def delete_wallet(self, owner_id: str, wallet_id: str) -> bool:
        return await self.wallets.delete(owner_id, wallet_id)


# Singleton instance
_trading_service: Optional[TradingService] = None


def get_trading_service() -> TradingService:
    global _trading_service
    if _trading_service is None:
        _trading_service = TradingService()
    return _trading_service


__all__ = [
    "TradingService",
    "get_trading_service",
]
