"""
Wallet storage interface and the in-memory implementation.

The manager depends only on ``WalletStore``; swap in a database-backed store
by implementing the same five methods.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .models import WalletRecord


class WalletStore(ABC):
    """Keyed storage for encrypted wallet records."""

    @abstractmethod
    async def get(self, wallet_id: str) -> Optional[WalletRecord]:
        pass

    @abstractmethod
    async def set(self, record: WalletRecord) -> None:
        pass

    @abstractmethod
    async def delete(self, wallet_id: str) -> bool:
        pass

    @abstractmethod
    async def list_for_owner(self, owner_id: str) -> List[WalletRecord]:
        """Records in creation order."""
        pass

    @abstractmethod
    async def find_by_address(self, address: str) -> Optional[WalletRecord]:
        pass


class InMemoryWalletStore(WalletStore):
    """Process-local store. Contents are lost on restart."""

    def __init__(self):
        self._records: Dict[str, WalletRecord] = {}
        self._owner_ids: Dict[str, List[str]] = {}

    async def get(self, wallet_id: str) -> Optional[WalletRecord]:
        return self._records.get(wallet_id)

    async def set(self, record: WalletRecord) -> None:
        self._records[record.wallet_id] = record
        ids = self._owner_ids.setdefault(record.owner_id, [])
        if record.wallet_id not in ids:
            ids.append(record.wallet_id)

    async def delete(self, wallet_id: str) -> bool:
        record = self._records.pop(wallet_id, None)
        if record is None:
            return False
        ids = self._owner_ids.get(record.owner_id, [])
        if wallet_id in ids:
            ids.remove(wallet_id)
        return True

    async def list_for_owner(self, owner_id: str) -> List[WalletRecord]:
        return [self._records[i] for i in self._owner_ids.get(owner_id, []) if i in self._records]

    async def find_by_address(self, address: str) -> Optional[WalletRecord]:
        wanted = address.lower()
        for record in self._records.values():
            if record.address.lower() == wanted:
                return record
        return None
