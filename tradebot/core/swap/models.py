"""Typed models used by the swap subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ...config import settings
from ...services.amounts import format_units
from ..recovery.errors import TradeError

MIN_SLIPPAGE_BPS = 10
MAX_SLIPPAGE_BPS = 5000


class SwapStage(str, Enum):
    """Swap state machine. APPROVED only appears for token inputs."""

    INIT = "INIT"
    AMOUNT_VALIDATED = "AMOUNT_VALIDATED"
    BALANCE_CHECKED = "BALANCE_CHECKED"
    APPROVED = "APPROVED"
    QUOTED = "QUOTED"
    GAS_ESTIMATED = "GAS_ESTIMATED"
    SUBMITTED = "SUBMITTED"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"


class SwapKind(str, Enum):
    NATIVE_TO_TOKEN = "native_to_token"
    TOKEN_TO_NATIVE = "token_to_native"
    TOKEN_TO_TOKEN = "token_to_token"


@dataclass(frozen=True)
class SwapRequest:
    """Caller-constructed swap parameters. ``amount_in`` is a human decimal string."""

    from_token: str
    to_token: str
    amount_in: str
    slippage_bps: int = field(default_factory=lambda: settings.default_slippage_bps)
    network: Optional[str] = None


@dataclass(frozen=True)
class SwapQuote:
    """Router quote with slippage and the rough price-impact signal applied."""

    path: Tuple[str, ...]
    amount_in: int
    amount_out: int
    amount_out_min: int
    price_impact_pct: Decimal
    rate: str
    slippage_bps: int
    from_symbol: str = ""
    to_symbol: str = ""
    from_decimals: int = 18
    to_decimals: int = 18
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": list(self.path),
            "amountIn": {"raw": str(self.amount_in), "formatted": format_units(self.amount_in, self.from_decimals)},
            "amountOut": {"raw": str(self.amount_out), "formatted": format_units(self.amount_out, self.to_decimals)},
            "amountOutMin": {
                "raw": str(self.amount_out_min),
                "formatted": format_units(self.amount_out_min, self.to_decimals),
            },
            "priceImpactPct": str(self.price_impact_pct),
            "rate": self.rate,
            "slippageBps": self.slippage_bps,
            "fromSymbol": self.from_symbol,
            "toSymbol": self.to_symbol,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class SwapReceipt:
    """Normalized result, produced once per submitted swap."""

    tx_hash: str
    status: str                                 # SUCCESS | FAILED
    amount_in: str                              # Human units
    amount_out: str                             # Human units (actual when decodable, else quoted)
    price_impact_pct: Decimal
    gas_used: Optional[int]
    gas_price: Optional[int]
    explorer_url: str
    block_number: Optional[int] = None
    from_token: str = ""
    to_token: str = ""
    from_symbol: str = ""
    to_symbol: str = ""
    amount_out_min: str = ""
    approval_tx_hash: Optional[str] = None
    revert_reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "SUCCESS"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "txHash": self.tx_hash,
            "status": self.status,
            "amountIn": self.amount_in,
            "amountOut": self.amount_out,
            "amountOutMin": self.amount_out_min,
            "priceImpactPct": str(self.price_impact_pct),
            "gasUsed": self.gas_used,
            "gasPrice": self.gas_price,
            "explorerUrl": self.explorer_url,
            "blockNumber": self.block_number,
            "fromToken": self.from_token,
            "toToken": self.to_token,
            "fromSymbol": self.from_symbol,
            "toSymbol": self.to_symbol,
            "approvalTxHash": self.approval_tx_hash,
            "revertReason": self.revert_reason,
        }


@dataclass(frozen=True)
class SwapEvent:
    """One stage transition emitted by ``SwapExecutor.stream``."""

    stage: SwapStage
    detail: str
    data: Dict[str, Any] = field(default_factory=dict)
    receipt: Optional[SwapReceipt] = None
    error: Optional[TradeError] = None

    @property
    def is_terminal(self) -> bool:
        return self.stage in (SwapStage.CONFIRMED, SwapStage.FAILED)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"stage": self.stage.value, "detail": self.detail, "data": self.data}
        if self.receipt is not None:
            payload["receipt"] = self.receipt.to_dict()
        if self.error is not None:
            payload["error"] = self.error.to_dict()
        return payload

