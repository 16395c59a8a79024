"""
Minimal ABI subset for the router and ERC-20 contracts.

Selectors are fixed wire constants; arguments and return data go through
``eth_abi``.
"""

from typing import Any, List, Optional, Sequence

from eth_abi import decode, encode

# Uniswap-V2-style router
GET_AMOUNTS_OUT_SELECTOR = "0xd06ca61f"              # getAmountsOut(uint256,address[])
SWAP_EXACT_ETH_FOR_TOKENS_SELECTOR = "0x7ff36ab5"    # swapExactETHForTokens(uint256,address[],address,uint256)
SWAP_EXACT_TOKENS_FOR_ETH_SELECTOR = "0x18cbafe5"    # swapExactTokensForETH(uint256,uint256,address[],address,uint256)
SWAP_EXACT_TOKENS_FOR_TOKENS_SELECTOR = "0x38ed1739"  # swapExactTokensForTokens(uint256,uint256,address[],address,uint256)

# ERC-20
BALANCE_OF_SELECTOR = "0x70a08231"   # balanceOf(address)
DECIMALS_SELECTOR = "0x313ce567"     # decimals()
SYMBOL_SELECTOR = "0x95d89b41"       # symbol()
NAME_SELECTOR = "0x06fdde03"         # name()
APPROVE_SELECTOR = "0x095ea7b3"      # approve(address,uint256)
ALLOWANCE_SELECTOR = "0xdd62ed3e"    # allowance(address,address)
TRANSFER_SELECTOR = "0xa9059cbb"     # transfer(address,uint256)

# Transfer(address,address,uint256)
TRANSFER_EVENT_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"


class AbiDecodeError(ValueError):
    """Return data could not be decoded as the expected type."""


def _normalize(abi_type: str, value: Any) -> Any:
    # eth_abi rejects mixed-case addresses with a bad checksum; lowercase is always accepted
    if abi_type == "address":
        return value.lower()
    if abi_type == "address[]":
        return [item.lower() for item in value]
    return value


def encode_call(selector: str, types: Sequence[str] = (), args: Sequence[Any] = ()) -> str:
    """Selector followed by the ABI-encoded arguments, as 0x-hex."""
    if not types:
        return selector
    values = [_normalize(t, v) for t, v in zip(types, args)]
    return selector + encode(list(types), values).hex()


def _payload(data: Optional[str]) -> bytes:
    if not data or data == "0x":
        raise AbiDecodeError("empty return data")
    text = data[2:] if data.startswith("0x") else data
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise AbiDecodeError(f"malformed return data: {data[:20]}") from e


def decode_result(types: Sequence[str], data: Optional[str]) -> tuple:
    try:
        return tuple(decode(list(types), _payload(data)))
    except AbiDecodeError:
        raise
    except Exception as e:
        raise AbiDecodeError(str(e)) from e


def decode_uint(data: Optional[str]) -> int:
    (value,) = decode_result(["uint256"], data)
    return value


def decode_uint_array(data: Optional[str]) -> List[int]:
    (values,) = decode_result(["uint256[]"], data)
    return list(values)


def decode_text(data: Optional[str]) -> str:
    """Decode a ``string`` return, falling back to the legacy ``bytes32`` form (MKR-style tokens)."""
    try:
        (value,) = decode_result(["string"], data)
        return value
    except AbiDecodeError:
        (raw,) = decode_result(["bytes32"], data)
        return raw.rstrip(b"\x00").decode("utf-8", errors="ignore")


# Call data builders

def balance_of_call(owner: str) -> str:
    return encode_call(BALANCE_OF_SELECTOR, ["address"], [owner])


def allowance_call(owner: str, spender: str) -> str:
    return encode_call(ALLOWANCE_SELECTOR, ["address", "address"], [owner, spender])


def approve_call(spender: str, amount: int) -> str:
    return encode_call(APPROVE_SELECTOR, ["address", "uint256"], [spender, amount])


def transfer_call(to: str, amount: int) -> str:
    return encode_call(TRANSFER_SELECTOR, ["address", "uint256"], [to, amount])


def get_amounts_out_call(amount_in: int, path: Sequence[str]) -> str:
    return encode_call(GET_AMOUNTS_OUT_SELECTOR, ["uint256", "address[]"], [amount_in, list(path)])


def swap_exact_eth_for_tokens_call(amount_out_min: int, path: Sequence[str], to: str, deadline: int) -> str:
    return encode_call(
        SWAP_EXACT_ETH_FOR_TOKENS_SELECTOR,
        ["uint256", "address[]", "address", "uint256"],
        [amount_out_min, list(path), to, deadline],
    )


def swap_exact_tokens_for_eth_call(
    amount_in: int, amount_out_min: int, path: Sequence[str], to: str, deadline: int
) -> str:
    return encode_call(
        SWAP_EXACT_TOKENS_FOR_ETH_SELECTOR,
        ["uint256", "uint256", "address[]", "address", "uint256"],
        [amount_in, amount_out_min, list(path), to, deadline],
    )


def swap_exact_tokens_for_tokens_call(
    amount_in: int, amount_out_min: int, path: Sequence[str], to: str, deadline: int
) -> str:
    return encode_call(
        SWAP_EXACT_TOKENS_FOR_TOKENS_SELECTOR,
        ["uint256", "uint256", "address[]", "address", "uint256"],
        [amount_in, amount_out_min, list(path), to, deadline],
    )


def address_topic(address: str) -> str:
    """Left-pad an address to a 32-byte log topic."""
    return "0x" + address.lower().replace("0x", "").zfill(64)
