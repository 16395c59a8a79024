"""
Tests for structural classification of node and contract errors.
"""

import pytest
from eth_abi import encode

from tradebot.core.recovery.errors import (
    DeadlineExpiredError,
    InsufficientFundsError,
    InvalidAddressError,
    LikelyRevertError,
    NoLiquidityError,
    PendingTimeoutError,
    ProviderUnavailableError,
    TransferFailedError,
    decode_revert_reason,
    decode_rpc_error,
)


def _error_string(reason):
    return "0x08c379a0" + encode(["string"], [reason]).hex()


def test_decode_error_string_payload():
    assert decode_revert_reason(_error_string("UniswapV2Router: EXPIRED")) == "UniswapV2Router: EXPIRED"


def test_decode_panic_payload():
    data = "0x4e487b71" + encode(["uint256"], [0x11]).hex()
    assert decode_revert_reason(data) == "panic 0x11"


@pytest.mark.parametrize("data", [None, "", "0x", "0xdeadbeef", {"data": "nothex"}, 42])
def test_undecodable_payloads_return_none(data):
    assert decode_revert_reason(data) is None


@pytest.mark.parametrize(
    "reason,expected",
    [
        ("UniswapV2Router: EXPIRED", DeadlineExpiredError),
        ("UniswapV2Library: INSUFFICIENT_LIQUIDITY", NoLiquidityError),
        ("UniswapV2Router: INSUFFICIENT_OUTPUT_AMOUNT", LikelyRevertError),
        ("TransferHelper: TRANSFER_FROM_FAILED", TransferFailedError),
        ("ERC20: transfer amount exceeds balance", InsufficientFundsError),
        ("ERC20: transfer to the zero address", InvalidAddressError),
    ],
)
def test_revert_reasons_map_by_exact_code(reason, expected):
    error = decode_rpc_error({"code": 3, "message": "execution reverted", "data": _error_string(reason)})
    assert type(error) is expected
    assert error.reason == reason
    assert error.details["revertReason"] == reason


def test_reason_code_is_not_a_substring_match():
    # Contains "EXPIRED" but the code after the prefix differs
    error = decode_rpc_error({"code": 3, "message": "execution reverted", "data": _error_string("Pool: NOT_EXPIRED_YET")})
    assert type(error) is LikelyRevertError


def test_node_error_constants():
    error = decode_rpc_error({"code": -32000, "message": "insufficient funds for gas * price + value: balance 0"})
    assert isinstance(error, InsufficientFundsError)
    assert "revertReason" not in error.details


def test_unknown_errors_fall_back_to_default():
    error = decode_rpc_error({"code": -32603, "message": "internal"}, default=ProviderUnavailableError)
    assert isinstance(error, ProviderUnavailableError)


def test_to_dict_carries_kind_reason_and_hash():
    error = PendingTimeoutError("still pending", tx_hash="0xabc")
    payload = error.to_dict()
    assert payload["kind"] == "PendingTimeout"
    assert payload["txHash"] == "0xabc"
    assert payload["retryable"] is False


def test_with_tx_hash_keeps_first_hash():
    error = LikelyRevertError(tx_hash="0x1")
    error.with_tx_hash("0x2")
    assert error.tx_hash == "0x1"


def test_rate_limit_code_is_provider_unavailable():
    error = decode_rpc_error({"code": -32005, "message": "limit exceeded"})
    assert isinstance(error, ProviderUnavailableError)
    assert error.retryable is True
    assert error.details["rpcCode"] == -32005
