"""
Nonce management for transactions sent from managed wallets.

Reserves nonces under a per-address lock so an approval and the swap that
follows it never collide, and releases a nonce when a transaction fails
before broadcast.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Set

from ...providers.rpc import RpcClient


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class NonceState:
    """Tracks nonce state for an address on a chain."""
    address: str
    chain_id: int
    confirmed_nonce: int                        # Last confirmed on-chain
    pending_nonce: int                          # Next available for use
    reserved_nonces: Set[int] = field(default_factory=set)
    last_updated: datetime = field(default_factory=_utcnow)


class NonceManager:
    """
    Manages nonces for one RPC endpoint.

    Features:
    - Tracks pending nonces to avoid conflicts
    - Syncs with the node's pending transaction count
    - Handles releases after failed broadcasts
    """

    def __init__(self, rpc: RpcClient):
        self.rpc = rpc
        self._states: Dict[str, NonceState] = {}  # key: "{chain_id}:{address}"
        self._locks: Dict[str, asyncio.Lock] = {}

    def _get_key(self, chain_id: int, address: str) -> str:
        return f"{chain_id}:{address.lower()}"

    def _get_lock(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    async def get_next_nonce(
        self,
        address: str,
        chain_id: int,
        sync: bool = True,
    ) -> int:
        """
        Get the next available nonce for an address.

        Args:
            address: The wallet address
            chain_id: The chain ID
            sync: Whether to sync with on-chain state first

        Returns:
            The next available nonce (already reserved)
        """
        key = self._get_key(chain_id, address)

        async with self._get_lock(key):
            if key not in self._states or sync:
                on_chain_nonce = await self.rpc.get_transaction_count(address, "pending")

                if key not in self._states:
                    self._states[key] = NonceState(
                        address=address.lower(),
                        chain_id=chain_id,
                        confirmed_nonce=on_chain_nonce,
                        pending_nonce=on_chain_nonce,
                    )
                else:
                    # Update confirmed nonce, but don't decrease pending
                    state = self._states[key]
                    state.confirmed_nonce = on_chain_nonce
                    if on_chain_nonce > state.pending_nonce:
                        state.pending_nonce = on_chain_nonce
                    state.reserved_nonces = {n for n in state.reserved_nonces if n >= on_chain_nonce}
                    state.last_updated = _utcnow()

            state = self._states[key]

            nonce = state.pending_nonce
            while nonce in state.reserved_nonces:
                nonce += 1

            state.reserved_nonces.add(nonce)
            state.pending_nonce = nonce + 1
            return nonce

    async def release_nonce(self, address: str, chain_id: int, nonce: int) -> None:
        """Release a reserved nonce (transaction failed before broadcast)."""
        key = self._get_key(chain_id, address)

        async with self._get_lock(key):
            state = self._states.get(key)
            if state is None:
                return
            state.reserved_nonces.discard(nonce)

            # If we released the highest nonce, we can reduce pending
            if nonce == state.pending_nonce - 1:
                while state.pending_nonce > state.confirmed_nonce:
                    if state.pending_nonce - 1 not in state.reserved_nonces:
                        state.pending_nonce -= 1
                    else:
                        break

    async def confirm_nonce(self, address: str, chain_id: int, nonce: int) -> None:
        """Mark a nonce as confirmed (transaction included in block)."""
        key = self._get_key(chain_id, address)

        async with self._get_lock(key):
            state = self._states.get(key)
            if state is None:
                return
            state.reserved_nonces.discard(nonce)
            if nonce >= state.confirmed_nonce:
                state.confirmed_nonce = nonce + 1

    def get_state(self, address: str, chain_id: int) -> Optional[NonceState]:
        return self._states.get(self._get_key(chain_id, address))


_nonce_managers: Dict[str, NonceManager] = {}


def get_nonce_manager(rpc: RpcClient) -> NonceManager:
    """Shared nonce manager per RPC endpoint."""
    manager = _nonce_managers.get(rpc.rpc_url)
    if manager is None or manager.rpc is not rpc:
        manager = NonceManager(rpc)
        _nonce_managers[rpc.rpc_url] = manager
    return manager
