"""
Error Classification

Typed errors raised by the swap pipeline, the token scanner and the wallet
store. Every error carries a kind, a short message, the underlying reason and,
once known, the transaction hash so callers can render both a human message
and a diagnostic detail.

Raw node/provider failures are mapped onto these types by ``decode_rpc_error``,
which matches on JSON-RPC error codes and decoded revert reasons rather than
free-form message text.
"""

from enum import Enum
from typing import Any, Dict, Optional, Type

from eth_abi import decode as abi_decode


class ErrorKind(str, Enum):
    """Kinds of failure surfaced to callers."""

    INVALID_AMOUNT = "InvalidAmount"
    INVALID_ADDRESS = "InvalidAddress"
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    NO_LIQUIDITY = "NoLiquidity"
    LIKELY_REVERT = "LikelyRevert"             # Pre-flight gas estimation failed
    DEADLINE_EXPIRED = "DeadlineExpired"       # Safe to retry with a fresh deadline
    PENDING_TIMEOUT = "PendingTimeout"         # Unknown final state, never auto-retry
    PROVIDER_UNAVAILABLE = "ProviderUnavailable"
    INVALID_KEY = "InvalidKey"
    TRANSFER_FAILED = "TransferFailed"         # Token-level transfer restriction
    TRANSACTION_FAILED = "TransactionFailed"   # Mined with status 0
    WALLET_NOT_FOUND = "WalletNotFound"


class TradeError(Exception):
    """Base class for every typed failure in the trading core."""

    kind: ErrorKind = ErrorKind.LIKELY_REVERT
    retryable: bool = False
    default_message: str = "Operation failed"
    suggested_action: Optional[str] = None

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        reason: Optional[str] = None,
        tx_hash: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.reason = reason
        self.tx_hash = tx_hash
        self.details: Dict[str, Any] = dict(details or {})

    def with_tx_hash(self, tx_hash: Optional[str]) -> "TradeError":
        if tx_hash and not self.tx_hash:
            self.tx_hash = tx_hash
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "reason": self.reason,
            "txHash": self.tx_hash,
            "retryable": self.retryable,
            "suggestedAction": self.suggested_action,
            "details": self.details,
        }


class InvalidAmountError(TradeError):
    kind = ErrorKind.INVALID_AMOUNT
    default_message = "Invalid amount"
    suggested_action = "Enter a positive number with no more decimals than the token supports"


class InvalidAddressError(TradeError):
    kind = ErrorKind.INVALID_ADDRESS
    default_message = "Invalid address"
    suggested_action = "Check the address is a 0x-prefixed 20-byte hex value"


class InsufficientFundsError(TradeError):
    """Wallet has insufficient funds."""

    kind = ErrorKind.INSUFFICIENT_FUNDS
    default_message = "Insufficient funds"
    suggested_action = "Add funds to wallet or reduce transaction amount"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        required: Optional[str] = None,
        available: Optional[str] = None,
        token: Optional[str] = None,
        reason: Optional[str] = None,
        tx_hash: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message,
            reason=reason,
            tx_hash=tx_hash,
            details={**(details or {}), "required": required, "available": available, "token": token},
        )
        self.required = required
        self.available = available
        self.token = token


class NoLiquidityError(TradeError):
    kind = ErrorKind.NO_LIQUIDITY
    default_message = "No liquidity for this pair"
    suggested_action = "Try a different trading pair or a smaller amount"


class LikelyRevertError(TradeError):
    kind = ErrorKind.LIKELY_REVERT
    default_message = "Transaction is likely to fail"
    suggested_action = "Review amount and slippage; nothing was submitted"


class DeadlineExpiredError(TradeError):
    kind = ErrorKind.DEADLINE_EXPIRED
    retryable = True
    default_message = "Transaction deadline expired"
    suggested_action = "Retry with a fresh deadline"


class PendingTimeoutError(TradeError):
    """Submitted but not mined within the wait window. Final state unknown."""

    kind = ErrorKind.PENDING_TIMEOUT
    default_message = "Transaction still pending"
    suggested_action = "Check the explorer before retrying; resubmitting may reuse the nonce"


class ProviderUnavailableError(TradeError):
    kind = ErrorKind.PROVIDER_UNAVAILABLE
    retryable = True
    default_message = "RPC provider unavailable"
    suggested_action = "Check network connectivity and retry"


class InvalidKeyError(TradeError):
    kind = ErrorKind.INVALID_KEY
    default_message = "Invalid private key"
    suggested_action = "Provide a 32-byte hex private key"


class TransferFailedError(TradeError):
    kind = ErrorKind.TRANSFER_FAILED
    default_message = "Token transfer failed"
    suggested_action = "The token may restrict transfers (fee-on-transfer, blacklist)"


class TransactionFailedError(TradeError):
    kind = ErrorKind.TRANSACTION_FAILED
    default_message = "Transaction reverted on-chain"
    suggested_action = "Review transaction parameters"


class WalletNotFoundError(TradeError):
    kind = ErrorKind.WALLET_NOT_FOUND
    default_message = "No wallet found. Generate or import a wallet first."


ERROR_STRING_SELECTOR = "0x08c379a0"  # Error(string)
PANIC_SELECTOR = "0x4e487b71"         # Panic(uint256)

# JSON-RPC error codes
RPC_EXECUTION_REVERTED = 3
RPC_SERVER_ERROR = -32000
RPC_INVALID_INPUT = -32602
RPC_LIMIT_EXCEEDED = -32005

# Router / pair / helper reason codes (the part after the "Contract: " prefix)
REVERT_REASON_KINDS: Dict[str, Type[TradeError]] = {
    "EXPIRED": DeadlineExpiredError,
    "INSUFFICIENT_LIQUIDITY": NoLiquidityError,
    "INSUFFICIENT_INPUT_AMOUNT": NoLiquidityError,
    "INVALID_PATH": NoLiquidityError,
    "K": NoLiquidityError,
    "INSUFFICIENT_OUTPUT_AMOUNT": LikelyRevertError,
    "EXCESSIVE_INPUT_AMOUNT": LikelyRevertError,
    "TRANSFER_FAILED": TransferFailedError,
    "TRANSFER_FROM_FAILED": TransferFailedError,
    "ETH_TRANSFER_FAILED": TransferFailedError,
    "transfer amount exceeds balance": InsufficientFundsError,
    "transfer amount exceeds allowance": TransferFailedError,
    "transfer from the zero address": InvalidAddressError,
    "transfer to the zero address": InvalidAddressError,
}

# Canonical geth/erigon error constants returned under -32000
NODE_ERROR_KINDS: Dict[str, Type[TradeError]] = {
    "insufficient funds for gas * price + value": InsufficientFundsError,
    "insufficient funds for transfer": InsufficientFundsError,
    "nonce too low": LikelyRevertError,
    "replacement transaction underpriced": LikelyRevertError,
    "intrinsic gas too low": LikelyRevertError,
    "execution reverted": LikelyRevertError,
}


def decode_revert_reason(data: Any) -> Optional[str]:
    """Decode ``Error(string)`` / ``Panic(uint256)`` revert payloads."""
    if isinstance(data, dict):
        data = data.get("data")
    if not isinstance(data, str) or not data.startswith("0x"):
        return None

    selector, payload = data[:10].lower(), data[10:]
    try:
        if selector == ERROR_STRING_SELECTOR:
            (reason,) = abi_decode(["string"], bytes.fromhex(payload))
            return reason
        if selector == PANIC_SELECTOR:
            (code,) = abi_decode(["uint256"], bytes.fromhex(payload))
            return f"panic 0x{code:02x}"
    except (ValueError, TypeError):
        return None
    return None


def reason_code(reason: str) -> str:
    """``"UniswapV2Router: EXPIRED"`` -> ``"EXPIRED"``."""
    return reason.rsplit(":", 1)[-1].strip()


def error_for_reason(reason: Optional[str]) -> Optional[Type[TradeError]]:
    if not reason:
        return None
    return REVERT_REASON_KINDS.get(reason_code(reason))


def decode_rpc_error(
    error: Dict[str, Any],
    *,
    default: Type[TradeError] = LikelyRevertError,
    message: Optional[str] = None,
) -> TradeError:
    """
    Map a JSON-RPC ``error`` object onto a typed ``TradeError``.

    Reverts (code 3, or -32000 with revert data) are classified by their decoded
    reason code; plain node errors by the node's canonical error constant.
    """
    code = error.get("code")
    node_message = str(error.get("message") or "")
    reason = decode_revert_reason(error.get("data"))

    error_cls: Optional[Type[TradeError]] = None
    if reason is not None:
        error_cls = error_for_reason(reason)
    if error_cls is None and code == RPC_SERVER_ERROR:
        error_cls = NODE_ERROR_KINDS.get(node_message.split(":", 1)[0].strip())
    if error_cls is None and code == RPC_INVALID_INPUT:
        error_cls = InvalidAddressError
    if error_cls is None and code == RPC_LIMIT_EXCEEDED:
        error_cls = ProviderUnavailableError
    error_cls = error_cls or default

    details: Dict[str, Any] = {"rpcCode": code}
    if reason is not None:
        details["revertReason"] = reason
    return error_cls(
        message or error_cls.default_message,
        reason=reason or node_message or None,
        details=details,
    )
