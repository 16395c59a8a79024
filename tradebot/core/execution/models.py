"""
Transaction execution models and types.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from eth_utils import to_checksum_address


class TransactionType(str, Enum):
    """Types of transactions."""
    SWAP = "swap"
    TRANSFER = "transfer"
    APPROVE = "approve"


class TransactionStatus(str, Enum):
    """Transaction lifecycle status."""
    PENDING = "pending"          # Created, not yet submitted
    SUBMITTED = "submitted"      # Broadcast to network
    CONFIRMED = "confirmed"      # Mined with status 1
    FAILED = "failed"            # Submission failed
    REVERTED = "reverted"        # Mined with status 0
    TIMEOUT = "timeout"          # Not mined within the wait window


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class GasEstimate:
    """Gas estimation for a transaction."""
    gas_limit: int                              # Estimate with safety margin applied
    gas_price_wei: int
    raw_estimate: int = 0                       # Node estimate before the margin
    estimated_cost_wei: int = 0

    def __post_init__(self):
        if self.estimated_cost_wei == 0:
            self.estimated_cost_wei = self.gas_limit * self.gas_price_wei


@dataclass
class PreparedTransaction:
    """A transaction ready to be signed and broadcast."""
    tx_id: str                                  # Internal tracking ID
    tx_type: TransactionType
    chain_id: int
    from_address: str
    to_address: str
    data: str                                   # Encoded calldata (hex)
    value: int = 0                              # Wei to send
    gas_estimate: Optional[GasEstimate] = None
    nonce: Optional[int] = None

    # Metadata
    description: str = ""
    created_at: datetime = field(default_factory=_utcnow)

    def to_call(self) -> Dict[str, Any]:
        """JSON-RPC call object (eth_call / eth_estimateGas)."""
        call = {
            "from": self.from_address,
            "to": self.to_address,
            "data": self.data,
        }
        if self.value > 0:
            call["value"] = hex(self.value)
        return call

    def to_signable(self) -> Dict[str, Any]:
        """Legacy (gasPrice) transaction dict accepted by ``eth_account``."""
        if self.nonce is None or self.gas_estimate is None:
            raise ValueError(f"Transaction {self.tx_id} needs a nonce and gas estimate before signing")
        return {
            "nonce": self.nonce,
            "gasPrice": self.gas_estimate.gas_price_wei,
            "gas": self.gas_estimate.gas_limit,
            "to": to_checksum_address(self.to_address),
            "value": self.value,
            "data": self.data,
            "chainId": self.chain_id,
        }


@dataclass
class TransactionResult:
    """Result of a transaction execution."""
    tx_id: str
    tx_hash: Optional[str] = None
    status: TransactionStatus = TransactionStatus.PENDING
    chain_id: int = 0

    # Confirmation details
    block_number: Optional[int] = None
    block_hash: Optional[str] = None
    gas_used: Optional[int] = None
    effective_gas_price: Optional[int] = None
    logs: list = field(default_factory=list)

    # Timing
    submitted_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None

    # Error info
    error: Optional[str] = None
    revert_reason: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == TransactionStatus.CONFIRMED


@dataclass(frozen=True)
class TransferReceipt:
    """Normalized result of a native or ERC-20 transfer."""
    tx_hash: str
    status: str                                 # SUCCESS | FAILED
    asset: str                                  # Native symbol or token address
    symbol: str
    to: str
    amount: str                                 # Human units
    amount_raw: int
    gas_used: Optional[int] = None
    gas_price: Optional[int] = None
    block_number: Optional[int] = None
    explorer_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "txHash": self.tx_hash,
            "status": self.status,
            "asset": self.asset,
            "symbol": self.symbol,
            "to": self.to,
            "amount": self.amount,
            "amountRaw": str(self.amount_raw),
            "gasUsed": self.gas_used,
            "gasPrice": self.gas_price,
            "blockNumber": self.block_number,
            "explorerUrl": self.explorer_url,
        }
