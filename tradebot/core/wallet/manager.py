"""
Wallet manager: generate, import and reveal signing keys.

Keys are encrypted before they reach the store. ``reveal`` hands back the
plaintext only so the caller can build a signer; it is never logged.
"""

import logging
from typing import List, Optional

from eth_account import Account
from eth_utils import to_hex

from ..chains.registry import get_network
from ...services.address import is_private_key_hex
from ..recovery.errors import InvalidKeyError, WalletNotFoundError
from .crypto import KeyCipher
from .models import GeneratedWallet, WalletHandle, WalletRecord
from .store import InMemoryWalletStore, WalletStore


logger = logging.getLogger(__name__)


class WalletManager:
    """
    Manages wallets for users. A user may own several wallets; each wallet
    belongs to exactly one user.
    """

    def __init__(
        self,
        store: Optional[WalletStore] = None,
        cipher: Optional[KeyCipher] = None,
    ):
        self.store = store or InMemoryWalletStore()
        self.cipher = cipher or KeyCipher()

    async def _save(self, owner_id: str, address: str, private_key: str, name: str) -> WalletRecord:
        record = WalletRecord(
            wallet_id=WalletRecord.generate_wallet_id(),
            owner_id=owner_id,
            address=address,
            encrypted_private_key=self.cipher.encrypt(private_key),
            name=name,
        )
        await self.store.set(record)
        logger.info(f"Wallet {record.wallet_id} ({address}) stored for owner {owner_id}")
        return record

    async def generate(self, owner_id: str, name: str = "Default Wallet") -> GeneratedWallet:
        """Create a new random wallet. The mnemonic is returned once and not stored."""
        Account.enable_unaudited_hdwallet_features()
        account, mnemonic = Account.create_with_mnemonic()
        record = await self._save(owner_id, account.address, to_hex(account.key), name)
        return GeneratedWallet(handle=record.handle(), mnemonic=mnemonic)

    async def import_wallet(self, owner_id: str, private_key: str, name: str = "Imported Wallet") -> WalletHandle:
        """
        Import an existing key after checking it builds a valid signer.

        Raises:
            InvalidKeyError: wrong length, not hex, or outside the curve order.
                Nothing is stored.
        """
        key = (private_key or "").strip()
        if not is_private_key_hex(key):
            raise InvalidKeyError("Private key must be 32 bytes of hex")
        if not key.startswith("0x"):
            key = f"0x{key}"

        try:
            account = Account.from_key(key)
        except Exception as e:
            # Keep the key material out of the message
            raise InvalidKeyError(reason=type(e).__name__) from None

        record = await self._save(owner_id, account.address, key, name)
        return record.handle()

    async def _record_for(self, owner_id: str, wallet_id: Optional[str] = None) -> WalletRecord:
        records = await self.store.list_for_owner(owner_id)
        if not records:
            raise WalletNotFoundError()
        if wallet_id is None:
            return records[0]
        for record in records:
            if record.wallet_id == wallet_id:
                return record
        raise WalletNotFoundError("Wallet not found.", details={"walletId": wallet_id})

    async def reveal(self, wallet_id: str) -> str:
        """Decrypt a wallet's private key for signer construction."""
        record = await self.store.get(wallet_id)
        if record is None:
            raise WalletNotFoundError("Wallet not found.", details={"walletId": wallet_id})
        return self.cipher.decrypt(record.encrypted_private_key)

    async def list(self, owner_id: str) -> List[WalletHandle]:
        return [record.handle() for record in await self.store.list_for_owner(owner_id)]

    async def get_wallet_details(self, owner_id: str, wallet_id: Optional[str] = None) -> WalletHandle:
        """The requested wallet, or the owner's first wallet."""
        return (await self._record_for(owner_id, wallet_id)).handle()

    async def has_wallet(self, owner_id: str) -> bool:
        return bool(await self.store.list_for_owner(owner_id))

    async def get_wallet_owner(self, address: str) -> Optional[str]:
        record = await self.store.find_by_address(address)
        return record.owner_id if record else None

    async def delete(self, owner_id: str, wallet_id: str) -> bool:
        """Delete a wallet the owner holds. False when it is not theirs or missing."""
        record = await self.store.get(wallet_id)
        if record is None or record.owner_id != owner_id:
            return False
        deleted = await self.store.delete(wallet_id)
        if deleted:
            logger.info(f"Wallet {wallet_id} deleted for owner {owner_id}")
        return deleted

    @staticmethod
    def address_explorer_url(address: str, network: Optional[str] = None) -> str:
        return get_network(network).address_explorer_url(address)
