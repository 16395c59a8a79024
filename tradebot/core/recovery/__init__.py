"""
Error Recovery Module

Typed error taxonomy, provider-error decoding and retry handling for
read-only chain calls.
"""

from .errors import (
    ErrorKind,
    TradeError,
    InvalidAmountError,
    InvalidAddressError,
    InsufficientFundsError,
    NoLiquidityError,
    LikelyRevertError,
    DeadlineExpiredError,
    PendingTimeoutError,
    ProviderUnavailableError,
    InvalidKeyError,
    TransferFailedError,
    TransactionFailedError,
    WalletNotFoundError,
    decode_revert_reason,
    decode_rpc_error,
    error_for_reason,
)
from .strategies import RetryConfig, RetryStrategy, ExponentialBackoffStrategy

__all__ = [
    # Errors
    "ErrorKind",
    "TradeError",
    "InvalidAmountError",
    "InvalidAddressError",
    "InsufficientFundsError",
    "NoLiquidityError",
    "LikelyRevertError",
    "DeadlineExpiredError",
    "PendingTimeoutError",
    "ProviderUnavailableError",
    "InvalidKeyError",
    "TransferFailedError",
    "TransactionFailedError",
    "WalletNotFoundError",
    "decode_revert_reason",
    "decode_rpc_error",
    "error_for_reason",
    # Strategies
    "RetryConfig",
    "RetryStrategy",
    "ExponentialBackoffStrategy",
]
