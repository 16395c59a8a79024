"""
Wallet Custody Module

Generates and imports EVM signing keys and keeps them encrypted at rest:
- WalletManager: generate, import, list, reveal and delete wallets
- KeyCipher: AES-GCM encryption of private keys
- WalletStore: storage interface (in-memory implementation included)

Usage:
    from tradebot.core.wallet import WalletManager

    manager = WalletManager()
    created = await manager.generate(owner_id="user-1")
    key = await manager.reveal(created.handle.wallet_id)
"""

from .crypto import KeyCipher, KeyCipherError
from .manager import WalletManager
from .models import GeneratedWallet, WalletHandle, WalletRecord
from .store import InMemoryWalletStore, WalletStore

__all__ = [
    "GeneratedWallet",
    "InMemoryWalletStore",
    "KeyCipher",
    "KeyCipherError",
    "WalletHandle",
    "WalletManager",
    "WalletRecord",
    "WalletStore",
]
