"""Loads immutable ``NetworkConfig`` objects from the built-in metadata."""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, List, Optional

from ...config import settings
from ...services.address import normalize_network
from ...types.network import NetworkConfig, TokenInfo
from .constants import NETWORK_METADATA, POPULAR_TOKENS


class UnknownNetworkError(KeyError):
    """Raised for a network key with no configuration."""


def _build_network(key: str, rpc_override: Optional[str]) -> NetworkConfig:
    meta = dict(NETWORK_METADATA[key])
    tokens = {
        symbol: TokenInfo(**entry)
        for symbol, entry in meta.pop('tokens').items()
    }
    if rpc_override:
        meta['rpc_url'] = rpc_override
    return NetworkConfig(
        key=key,
        tokens=tokens,
        popular_tokens=list(POPULAR_TOKENS.get(key, [])),
        **meta,
    )


@lru_cache(maxsize=None)
def _cached_network(key: str, rpc_override: Optional[str]) -> NetworkConfig:
    return _build_network(key, rpc_override)


def get_network(network: Optional[str] = None) -> NetworkConfig:
    """Return the configuration for ``network`` (default: settings.default_network)."""
    key = normalize_network(network, default=settings.default_network.upper())
    if key not in NETWORK_METADATA:
        raise UnknownNetworkError(f"Unknown network: {network}")
    return _cached_network(key, settings.rpc_override_for(key))


def supported_networks() -> List[str]:
    return list(NETWORK_METADATA.keys())


def all_networks() -> Dict[str, NetworkConfig]:
    return {key: get_network(key) for key in supported_networks()}


__all__ = [
    'UnknownNetworkError',
    'get_network',
    'supported_networks',
    'all_networks',
]
