"""
Wallet custody models.

``WalletRecord`` is what the store keeps (key material encrypted);
``WalletHandle`` is the public view handed to callers.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import uuid


@dataclass(frozen=True)
class WalletHandle:
    """Public view of a wallet. Never carries key material."""
    wallet_id: str
    owner_id: str
    address: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "walletId": self.wallet_id,
            "address": self.address,
            "name": self.name,
        }


@dataclass(frozen=True)
class WalletRecord:
    """Stored wallet. Never mutated after creation."""
    wallet_id: str
    owner_id: str
    address: str
    encrypted_private_key: str                  # nonce_hex:ciphertext_hex
    name: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def generate_wallet_id() -> str:
        return str(uuid.uuid4())

    def handle(self) -> WalletHandle:
        return WalletHandle(
            wallet_id=self.wallet_id,
            owner_id=self.owner_id,
            address=self.address,
            name=self.name,
        )


@dataclass(frozen=True)
class GeneratedWallet:
    """Result of ``generate``. The mnemonic is returned once and never stored."""
    handle: WalletHandle
    mnemonic: Optional[str]
