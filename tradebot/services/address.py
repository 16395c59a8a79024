"""Helpers for normalizing network identifiers and validating EVM addresses."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional

from eth_utils import to_checksum_address

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_PRIVATE_KEY_RE = re.compile(r"^(0x)?[a-fA-F0-9]{64}$")

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

_NETWORK_ALIASES = {
    "monad": "MONAD",
    "mon": "MONAD",
    "monad-testnet": "MONAD",
    "megaeth": "MEGAETH",
    "mega": "MEGAETH",
    "megaeth-testnet": "MEGAETH",
}


def normalize_network(network: str | None, default: str = "MONAD") -> str:
    """Collapse user-provided network identifiers into canonical keys."""

    if not network:
        return default
    cleaned = network.strip()
    return _NETWORK_ALIASES.get(cleaned.lower(), cleaned.upper())


def is_evm_address(value: Optional[str]) -> bool:
    """True for a 0x-prefixed 20-byte hex string (checksum not enforced)."""
    if not value:
        return False
    return bool(_EVM_ADDRESS_RE.fullmatch(value.strip()))


def is_zero_address(value: Optional[str]) -> bool:
    return bool(value) and value.lower() == ZERO_ADDRESS


@lru_cache(maxsize=1024)
def checksum(address: str) -> str:
    return to_checksum_address(address.strip())


def same_address(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return a.strip().lower() == b.strip().lower()


def is_private_key_hex(value: Optional[str]) -> bool:
    if not value:
        return False
    return bool(_PRIVATE_KEY_RE.fullmatch(value.strip()))


__all__ = [
    "ZERO_ADDRESS",
    "normalize_network",
    "is_evm_address",
    "is_zero_address",
    "checksum",
    "same_address",
    "is_private_key_hex",
]
