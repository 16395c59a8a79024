"""
Token resolution: symbol or address string -> on-chain address.

Resolution never raises. An input that is neither an address nor a known
symbol comes back unchanged and flagged unverified; the first on-chain call
that uses it (``decimals()``, ``balanceOf``) is where it fails.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..core.chains.registry import get_network
from ..types.network import NetworkConfig
from .address import is_evm_address


class ResolutionSource(str, Enum):
    """How a token reference was resolved."""

    EXACT_ADDRESS = "exact_address"
    NATIVE = "native"
    REGISTRY = "registry"
    UNVERIFIED = "unverified"


@dataclass(frozen=True)
class Resolution:
    """A resolved token reference."""

    address: str
    verified: bool
    is_native: bool = False
    source: ResolutionSource = ResolutionSource.REGISTRY
    symbol: Optional[str] = None
    decimals: Optional[int] = None


def _network(network: Union[str, NetworkConfig, None]) -> NetworkConfig:
    if isinstance(network, NetworkConfig):
        return network
    return get_network(network)


def resolve_token(symbol_or_address: str, network: Union[str, NetworkConfig, None] = None) -> Resolution:
    """
    Resolve ``symbol_or_address`` against the network's token table.

    Order: address format (returned as given), native symbol (wrapped-native
    address, since routers trade the wrapped form), configured symbol
    (case-insensitive), otherwise unchanged and unverified.
    """
    config = _network(network)
    value = (symbol_or_address or "").strip()

    if is_evm_address(value):
        known = config.token_by_address(value)
        return Resolution(
            address=value,
            verified=known is not None,
            is_native=False,
            source=ResolutionSource.EXACT_ADDRESS,
            symbol=known.symbol if known else None,
            decimals=known.decimals if known else None,
        )

    if config.is_native_symbol(value):
        return Resolution(
            address=config.wrapped_native_address,
            verified=True,
            is_native=True,
            source=ResolutionSource.NATIVE,
            symbol=config.native_currency,
            decimals=18,
        )

    token = config.token_by_symbol(value)
    if token is not None:
        return Resolution(
            address=token.address,
            verified=True,
            source=ResolutionSource.REGISTRY,
            symbol=token.symbol,
            decimals=token.decimals,
        )

    return Resolution(address=value, verified=False, source=ResolutionSource.UNVERIFIED)


def resolve_token_address(symbol_or_address: str, network: Union[str, NetworkConfig, None] = None) -> str:
    return resolve_token(symbol_or_address, network).address


__all__ = [
    "Resolution",
    "ResolutionSource",
    "resolve_token",
    "resolve_token_address",
]
